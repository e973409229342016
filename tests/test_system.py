"""
Integration tests for the banking system facade

End-to-end scenarios over file storage: open, transact, view, export and
shut down.
"""

import pytest
import threading
import time
from decimal import Decimal

from teller.config import TellerConfig
from teller.storage import InMemoryStorage
from teller.system import BankingSystem, AccountNotFoundError
from teller.transactions import NarrativeSource


class SlowStorage(InMemoryStorage):
    """Storage whose whole-file writes take a while"""

    def write_lines(self, name, lines):
        time.sleep(0.05)
        super().write_lines(name, lines)


class FailingWriteStorage(InMemoryStorage):
    """Storage that can append but never rewrite a file"""

    def write_lines(self, name, lines):
        raise OSError("disk full")


@pytest.fixture
def system(tmp_path):
    """Banking system writing into a temporary data directory"""
    return BankingSystem(TellerConfig(data_dir=str(tmp_path)))


class TestBankingSystem:
    """Test the composed ledger"""

    def test_deposit_scenario(self, system, tmp_path):
        """Test A1 at 100.0 plus 50.0"""
        system.open_account("A1", "Alice", "100.0")
        outcome = system.deposit("A1", "50.0")

        assert outcome.succeeded
        assert system.balance("A1") == Decimal('150.0')
        log = (tmp_path / "transactions_A1.txt").read_text()
        assert "DepositThread-A1: Deposited 50.0. New balance: 150.0" in log

    def test_insufficient_funds_scenario(self, system, tmp_path):
        """Test withdrawing 200.0 from A1 at 150.0"""
        system.open_account("A1", "Alice", "150.0")
        outcome = system.withdraw("A1", "200.0")

        assert not outcome.succeeded
        assert system.balance("A1") == Decimal('150.0')
        log = (tmp_path / "transactions_A1.txt").read_text()
        assert "WithdrawThread-A1: Withdrawal of 200.0 failed due to insufficient funds." in log

    def test_unknown_account_changes_nothing(self, system, tmp_path):
        """Test not-found lookups write no log and touch no balance"""
        system.open_account("A1", "Alice", "10")

        with pytest.raises(AccountNotFoundError):
            system.deposit("ZZ", "5")
        with pytest.raises(AccountNotFoundError):
            system.withdraw("ZZ", "5")

        assert system.balance("A1") == Decimal('10')
        assert not list(tmp_path.glob("transactions_*.txt"))

    def test_not_found_is_value_error(self, system):
        with pytest.raises(ValueError, match="Account ZZ not found"):
            system.balance("ZZ")

    def test_invalid_amount_rejected_before_dispatch(self, system, tmp_path):
        """Test invalid amounts never reach the account or its log"""
        system.open_account("A1", "Alice", "10")

        with pytest.raises(ValueError):
            system.deposit("A1", "-3")
        with pytest.raises(ValueError):
            system.withdraw("A1", "abc")

        assert system.balance("A1") == Decimal('10')
        assert not (tmp_path / "transactions_A1.txt").exists()

    def test_duplicate_account_rejected(self, system):
        system.open_account("A1", "Alice", "10")
        with pytest.raises(ValueError, match="already exists"):
            system.open_account("A1", "Another", "20")

    def test_overlapping_duplicate_open_keeps_winner_record(self):
        """Test a losing duplicate open never rewrites the creation record"""
        storage = SlowStorage()
        system = BankingSystem(TellerConfig(), storage=storage)
        barrier = threading.Barrier(2)
        errors = []

        def opener(holder_name):
            barrier.wait()
            try:
                system.open_account("A1", holder_name, "10")
            except ValueError as e:
                errors.append(e)

        openers = [threading.Thread(target=opener, args=(name,)) for name in ("Alice", "Mallory")]
        for thread in openers:
            thread.start()
        for thread in openers:
            thread.join()

        assert len(errors) == 1
        assert "already exists" in str(errors[0])
        holder = system.get_account("A1").holder_name
        assert storage.read_lines("account_A1_info.txt")[1] == f"Holder Name: {holder}"

    def test_creation_record(self, system, tmp_path):
        system.open_account("A1", "Alice", "100")
        content = (tmp_path / "account_A1_info.txt").read_text().splitlines()

        assert content[:3] == ["Account ID: A1", "Holder Name: Alice", "Initial Balance: 100.0"]
        assert content[3].startswith("Account Created: ")

    def test_shutdown_writes_summary_once(self, system, tmp_path):
        """Test the shutdown hook runs once with current balances"""
        system.open_account("A1", "Alice", "100.0")
        system.open_account("B2", "Bob", "5")
        system.deposit("A1", "50.0")

        assert system.shutdown() is True
        assert system.is_shut_down
        summary = (tmp_path / "account_summary.txt").read_text().splitlines()
        assert summary.count("----------------------------") == 2
        assert summary[0] == "Account ID: A1"
        assert summary[2] == "Final Balance: 150.0"
        assert summary[4] == "Account ID: B2"

        assert system.shutdown() is False

    def test_shutdown_write_failure_raises_cause(self):
        system = BankingSystem(TellerConfig(), storage=FailingWriteStorage())

        with pytest.raises(OSError, match="disk full"):
            system.shutdown()
        assert system.is_shut_down

    def test_history_export(self, system, tmp_path):
        system.open_account("A1", "Alice", "100")
        system.deposit("A1", "1")
        system.withdraw("A1", "1000")

        location = system.reporting_engine.export_history("A1")

        exported = (tmp_path / "transaction_history_A1.txt").read_text()
        assert location.endswith("transaction_history_A1.txt")
        assert exported == (tmp_path / "transactions_A1.txt").read_text()
        assert len(exported.splitlines()) == 2


class TestConfiguration:
    """Test configuration-driven wiring"""

    def test_memory_backend(self):
        system = BankingSystem(TellerConfig(storage_backend="memory"))
        assert isinstance(system.storage, InMemoryStorage)

    def test_explicit_storage_wins(self):
        storage = InMemoryStorage()
        system = BankingSystem(TellerConfig(), storage=storage)
        assert system.storage is storage

    def test_narrative_source(self):
        system = BankingSystem(TellerConfig(storage_backend="memory", narrative_source="precheck"))
        assert system.narrative_source == NarrativeSource.PRECHECK

    def test_unknown_narrative_source(self):
        with pytest.raises(ValueError):
            BankingSystem(TellerConfig(storage_backend="memory", narrative_source="guess"))

    def test_custom_file_names(self, tmp_path):
        config = TellerConfig(
            data_dir=str(tmp_path),
            transaction_file_prefix="log_",
            info_file_prefix="info_",
            summary_file="summary.txt"
        )
        system = BankingSystem(config)
        system.open_account("A1", "Alice", "1")
        system.deposit("A1", "1")
        system.shutdown()

        assert (tmp_path / "info_A1_info.txt").exists()
        assert (tmp_path / "log_A1.txt").exists()
        assert (tmp_path / "summary.txt").exists()

    def test_env_prefix(self, monkeypatch, tmp_path):
        monkeypatch.setenv("TELLER_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("TELLER_NARRATIVE_SOURCE", "precheck")
        config = TellerConfig()

        assert config.data_dir == str(tmp_path)
        assert config.narrative_source == "precheck"
