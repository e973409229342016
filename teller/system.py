"""
Banking system composition root

Wires storage, the transaction logger, the ledger, the dispatcher and
reporting from configuration, and exposes the operations the menu and the
HTTP front end call.
"""

from decimal import Decimal
from typing import Optional
import threading

from .config import TellerConfig, get_config
from .storage import LogStorageInterface, InMemoryStorage, FileStorage
from .accounts import Account, create_account
from .currency import AmountLike, parse_amount
from .ledger import Ledger
from .transaction_log import TransactionLogger
from .transactions import (
    TransactionExecutor, TransactionDispatcher, TransactionOutcome,
    TransactionType, NarrativeSource
)
from .reporting import ReportingEngine
from .logging_config import get_logger, log_action


class AccountNotFoundError(ValueError):
    """Raised when an account id is not in the ledger"""

    def __init__(self, account_id: str):
        super().__init__(f"Account {account_id} not found")
        self.account_id = account_id


class BankingSystem:
    """Ledger with all components initialized"""

    def __init__(self, config: Optional[TellerConfig] = None,
                 storage: Optional[LogStorageInterface] = None):
        self.config = config or get_config()
        self.logger = get_logger("teller.system")

        # Initialize storage
        if storage is not None:
            self.storage = storage
        elif self.config.storage_backend == "memory":
            self.storage = InMemoryStorage()
        else:
            self.storage = FileStorage(self.config.data_dir)

        # Initialize core components
        self.narrative_source = NarrativeSource(self.config.narrative_source)
        self.transaction_logger = TransactionLogger(
            self.storage, prefix=self.config.transaction_file_prefix
        )
        self.ledger = Ledger()
        self.dispatcher = TransactionDispatcher()
        self.reporting_engine = ReportingEngine(
            self.storage, self.transaction_logger,
            history_export_prefix=self.config.history_export_prefix,
            summary_file=self.config.summary_file
        )

        self._shutdown_lock = threading.Lock()
        self._shut_down = False

    def open_account(self, account_id: str, holder_name: str,
                     initial_balance: AmountLike) -> Account:
        """
        Create and register an account

        The id is reserved before the creation record is written, so an
        overlapping open for the same id is rejected without touching the
        winner's record.

        Raises:
            ValueError: On a duplicate id or invalid initial balance
        """
        return self.ledger.register(
            account_id,
            lambda: create_account(
                account_id, holder_name, initial_balance, self.storage,
                prefix=self.config.info_file_prefix
            )
        )

    def get_account(self, account_id: str) -> Account:
        """
        Look up an account

        Raises:
            AccountNotFoundError: If the id is unknown
        """
        account = self.ledger.get_account(account_id)
        if account is None:
            log_action(
                self.logger, "info", f"Account {account_id} not found",
                account_id=account_id, action="lookup"
            )
            raise AccountNotFoundError(account_id)
        return account

    def deposit(self, account_id: str, amount: AmountLike) -> Optional[TransactionOutcome]:
        """Deposit into an account; None if the wait was interrupted"""
        return self._execute(account_id, amount, TransactionType.DEPOSIT)

    def withdraw(self, account_id: str, amount: AmountLike) -> Optional[TransactionOutcome]:
        """Withdraw from an account; None if the wait was interrupted"""
        return self._execute(account_id, amount, TransactionType.WITHDRAWAL)

    def balance(self, account_id: str) -> Decimal:
        return self.get_account(account_id).get_balance()

    def _execute(self, account_id: str, amount: AmountLike,
                 transaction_type: TransactionType) -> Optional[TransactionOutcome]:
        account = self.get_account(account_id)
        executor = TransactionExecutor(
            account, parse_amount(amount), transaction_type,
            self.transaction_logger, self.narrative_source
        )
        return self.dispatcher.dispatch(executor)

    @property
    def is_shut_down(self) -> bool:
        return self._shut_down

    def shutdown(self) -> bool:
        """
        Write the end-of-session summary once

        Returns:
            True if the summary was written by this call, False if an
            earlier call already wrote it

        Raises:
            OSError: If the summary write fails
        """
        with self._shutdown_lock:
            if self._shut_down:
                return False
            self._shut_down = True
        log_action(self.logger, "info", "Saving account summaries", action="shutdown")
        return self.reporting_engine.write_summary(self.ledger)
