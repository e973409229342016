"""
Test suite for accounts module

Tests balance arithmetic, insufficient-funds rejection, lock discipline under
concurrent withdrawals, and the account creation record.
"""

import pytest
import threading
from decimal import Decimal

from teller.storage import InMemoryStorage, FileStorage
from teller.accounts import Account, create_account, info_record_name


class FailingStorage(InMemoryStorage):
    """Storage whose writes always fail"""

    def append_line(self, name, line):
        raise OSError("disk full")

    def write_lines(self, name, lines):
        raise OSError("disk full")


class TestAccount:
    """Test Account balance operations"""

    def setup_method(self):
        """Set up test fixtures"""
        self.account = Account("A1", "Alice", Decimal('100.0'))

    def test_identity(self):
        """Test identity fields are exposed read-only"""
        assert self.account.account_id == "A1"
        assert self.account.holder_name == "Alice"
        with pytest.raises(AttributeError):
            self.account.account_id = "B2"

    def test_empty_account_id_rejected(self):
        """Test an account needs an id"""
        with pytest.raises(ValueError, match="Account ID is required"):
            Account("", "Nobody", Decimal('0'))

    def test_deposit_increases_balance(self):
        """Test deposit adds the amount"""
        assert self.account.deposit(Decimal('50.0')) == Decimal('150.0')
        assert self.account.get_balance() == Decimal('150.0')

    def test_withdraw_with_sufficient_funds(self):
        """Test withdrawal within the balance"""
        assert self.account.withdraw(Decimal('30.0')) is True
        assert self.account.get_balance() == Decimal('70.0')

    def test_withdraw_entire_balance(self):
        """Test withdrawing exactly the balance is allowed"""
        assert self.account.withdraw(Decimal('100.0')) is True
        assert self.account.get_balance() == Decimal('0')

    def test_withdraw_with_insufficient_funds(self):
        """Test withdrawal beyond the balance leaves it unchanged"""
        assert self.account.withdraw(Decimal('200.0')) is False
        assert self.account.get_balance() == Decimal('100.0')

    def test_repeated_reads_are_stable(self):
        """Test balance reads without mutation agree"""
        assert self.account.get_balance() == self.account.get_balance()


class TestAccountConcurrency:
    """Test the per-account lock"""

    def test_concurrent_withdrawals_never_overdraw(self):
        """Test many withdrawals whose sum exceeds the balance"""
        account = Account("A1", "Alice", Decimal('100'))
        results = []
        barrier = threading.Barrier(20)

        def worker():
            barrier.wait()
            results.append(account.withdraw(Decimal('15')))

        threads = [threading.Thread(target=worker) for _ in range(20)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results.count(True) == 6
        assert account.get_balance() == Decimal('10')
        assert account.get_balance() >= Decimal('0')

    def test_concurrent_deposits_are_not_lost(self):
        """Test concurrent deposits all land"""
        account = Account("A1", "Alice", Decimal('0'))

        def worker():
            for _ in range(100):
                account.deposit(Decimal('1'))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert account.get_balance() == Decimal('800')

    def test_distinct_accounts_do_not_block(self):
        """Test one account's lock does not hold up another account"""
        first = Account("A1", "Alice", Decimal('10'))
        second = Account("B2", "Bob", Decimal('10'))

        with first._lock:
            second.deposit(Decimal('5'))
            assert second.get_balance() == Decimal('15')


class TestCreateAccount:
    """Test account creation and its info record"""

    def test_creation_record_written(self):
        """Test the four-line creation snapshot"""
        storage = InMemoryStorage()
        account = create_account("A1", "Alice", "100.0", storage)

        assert account.info_recorded
        assert account.get_balance() == Decimal('100.0')

        lines = storage.read_lines(info_record_name("A1"))
        assert lines[0] == "Account ID: A1"
        assert lines[1] == "Holder Name: Alice"
        assert lines[2] == "Initial Balance: 100.0"
        assert lines[3].startswith("Account Created: ")
        assert len(lines[3]) == len("Account Created: ") + len("YYYY-MM-DD HH:MM:SS")

    def test_creation_record_file_name(self, tmp_path):
        """Test the record lands in account_<id>_info.txt"""
        storage = FileStorage(str(tmp_path))
        create_account("A1", "Alice", Decimal('25'), storage)

        content = (tmp_path / "account_A1_info.txt").read_text()
        assert "Initial Balance: 25.0" in content

    def test_creation_record_failure_keeps_account_usable(self):
        """Test a failed record write does not block the account"""
        account = create_account("A1", "Alice", "100", FailingStorage())

        assert not account.info_recorded
        account.deposit(Decimal('1'))
        assert account.get_balance() == Decimal('101')

    def test_negative_initial_balance_rejected(self):
        """Test opening balances cannot be negative"""
        with pytest.raises(ValueError, match="cannot be negative"):
            create_account("A1", "Alice", "-5", InMemoryStorage())

    def test_zero_initial_balance_allowed(self):
        """Test an account can open empty"""
        account = create_account("A1", "Alice", "0", InMemoryStorage())
        assert account.get_balance() == Decimal('0')
