"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class TellerConfig(BaseSettings):
    """Teller ledger configuration"""

    # Storage configuration
    data_dir: str = "."  # Directory holding info records, logs and exports
    storage_backend: str = "file"  # file or memory
    info_file_prefix: str = "account_"
    transaction_file_prefix: str = "transactions_"
    history_export_prefix: str = "transaction_history_"
    summary_file: str = "account_summary.txt"

    # Transaction log narrative: "result" uses the withdraw outcome,
    # "precheck" compares the balance read before the withdraw
    narrative_source: str = "result"

    # API configuration
    api_host: str = "127.0.0.1"
    api_port: int = 8090

    # Logging configuration
    log_level: str = "WARNING"
    log_format: str = "json"  # json or text
    log_file: Optional[str] = None  # If None, logs to stderr

    class Config:
        env_prefix = "TELLER_"
        env_file = ".env"
        case_sensitive = False


# Global configuration instance
config = TellerConfig()


def get_config() -> TellerConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> TellerConfig:
    """Reload configuration from environment"""
    global config
    config = TellerConfig()
    return config
