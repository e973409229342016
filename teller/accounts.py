"""
Account Management Module

Accounts hold an in-memory balance guarded by a per-account lock. Deposit,
withdraw and balance reads on the same account are mutually exclusive;
operations on different accounts never block each other.
"""

from decimal import Decimal
from datetime import datetime
from typing import Optional
import threading

from .currency import AmountLike, format_amount, parse_balance
from .storage import LogStorageInterface
from .logging_config import get_logger, log_action


TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

logger = get_logger("teller.accounts")


def info_record_name(account_id: str, prefix: str = "account_") -> str:
    """Name of the per-account creation record"""
    return f"{prefix}{account_id}_info.txt"


class Account:
    """
    Bank account with a synchronized balance

    Identity fields are fixed at construction. The balance is only reachable
    through deposit, withdraw and get_balance, each of which holds the
    account lock for the read-modify-write.
    """

    def __init__(self, account_id: str, holder_name: str, initial_balance: Decimal,
                 created_at: Optional[datetime] = None):
        if not account_id:
            raise ValueError("Account ID is required")
        self._account_id = account_id
        self._holder_name = holder_name
        self._balance = initial_balance
        self._created_at = created_at or datetime.now()
        self._lock = threading.Lock()
        self.info_recorded = False

    @property
    def account_id(self) -> str:
        return self._account_id

    @property
    def holder_name(self) -> str:
        return self._holder_name

    @property
    def created_at(self) -> datetime:
        return self._created_at

    def deposit(self, amount: Decimal) -> Decimal:
        """Add amount to the balance and return the balance it produced"""
        with self._lock:
            thread = threading.current_thread().name
            logger.debug(f"{thread}: Depositing {amount}")
            self._balance += amount
            logger.debug(f"{thread}: Deposit complete. New balance = {self._balance}")
            return self._balance

    def withdraw(self, amount: Decimal) -> bool:
        """
        Subtract amount if the balance covers it

        Returns:
            True if the withdrawal was applied, False on insufficient funds
            (balance left unchanged)
        """
        with self._lock:
            thread = threading.current_thread().name
            logger.debug(f"{thread}: Withdrawing {amount}")
            if amount <= self._balance:
                self._balance -= amount
                logger.debug(f"{thread}: Withdrawal complete. New balance = {self._balance}")
                return True
            logger.debug(f"{thread}: Withdrawal failed. Insufficient funds.")
            return False

    def get_balance(self) -> Decimal:
        """Current balance"""
        with self._lock:
            return self._balance

    def __repr__(self) -> str:
        return f"Account(account_id={self._account_id!r}, holder_name={self._holder_name!r})"


def write_info_record(account: Account, initial_balance: Decimal,
                      storage: LogStorageInterface, prefix: str = "account_") -> bool:
    """
    Write the creation snapshot for an account

    Returns:
        True if the record was written, False if the write failed (reported
        through the logger)
    """
    name = info_record_name(account.account_id, prefix)
    lines = [
        f"Account ID: {account.account_id}",
        f"Holder Name: {account.holder_name}",
        f"Initial Balance: {format_amount(initial_balance)}",
        f"Account Created: {account.created_at.strftime(TIMESTAMP_FORMAT)}",
    ]
    try:
        storage.write_lines(name, lines)
    except OSError as e:
        log_action(
            logger, "error", f"Error writing account info: {e}",
            account_id=account.account_id, action="account_created"
        )
        return False
    return True


def create_account(account_id: str, holder_name: str, initial_balance: AmountLike,
                   storage: LogStorageInterface, prefix: str = "account_") -> Account:
    """
    Create an account and record its creation snapshot

    A failed snapshot write is reported but the account is still returned
    and usable; check ``account.info_recorded`` to see whether it landed.

    Raises:
        ValueError: If the id is empty or the initial balance is invalid
    """
    balance = parse_balance(initial_balance)
    account = Account(account_id, holder_name, balance)
    account.info_recorded = write_info_record(account, balance, storage, prefix)

    log_action(
        logger, "info", f"Account {account_id} created for {holder_name}",
        account_id=account_id, action="account_created",
        extra={"initial_balance": str(balance)}
    )
    return account
