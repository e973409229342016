"""
Transaction Log Module

Per-account append-only text logs. Each line is prefixed with a local
timestamp (YYYY-MM-DD HH:MM:SS). The logger never takes an account's lock,
so lines for one account land in the order their writers finished, which
need not match the order of the underlying balance changes.
"""

from datetime import datetime
from typing import Callable, List, Optional

from .storage import LogStorageInterface
from .logging_config import get_logger, log_action


TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def transaction_log_name(account_id: str, prefix: str = "transactions_") -> str:
    """Name of the per-account transaction log"""
    return f"{prefix}{account_id}.txt"


class TransactionLogger:
    """Appends timestamped lines to account-scoped logs"""

    def __init__(self, storage: LogStorageInterface, prefix: str = "transactions_",
                 clock: Callable[[], datetime] = datetime.now):
        self.storage = storage
        self.prefix = prefix
        self._clock = clock
        self.logger = get_logger("teller.transaction_log")

    def log_name(self, account_id: str) -> str:
        return transaction_log_name(account_id, self.prefix)

    def write(self, account_id: str, message: str) -> Optional[OSError]:
        """
        Append one line to the account's log

        Returns:
            None if the line was written, otherwise the OSError that stopped
            it. Failures are reported through the logger and never raised,
            since the caller's balance change has already happened.
        """
        line = f"{self._clock().strftime(TIMESTAMP_FORMAT)} - {message}"
        try:
            self.storage.append_line(self.log_name(account_id), line)
        except OSError as e:
            log_action(
                self.logger, "error", f"Error logging transaction: {e}",
                account_id=account_id, action="transaction_logged"
            )
            return e
        return None

    def append(self, account_id: str, message: str) -> bool:
        """Append one line; False if the write failed"""
        return self.write(account_id, message) is None

    def read(self, account_id: str) -> Optional[List[str]]:
        """
        Read the account's log

        Returns:
            None if the log was never created, otherwise its lines (possibly
            empty)
        """
        return self.storage.read_lines(self.log_name(account_id))

    def exists(self, account_id: str) -> bool:
        return self.storage.exists(self.log_name(account_id))
