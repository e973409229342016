"""
Reporting Module

History view and export for a single account, and the end-of-session
summary across the ledger. All of these only read account state and logs.
"""

from dataclasses import dataclass, field
from typing import List, Optional
from enum import Enum

from .currency import format_amount
from .ledger import Ledger
from .storage import LogStorageInterface
from .transaction_log import TransactionLogger
from .logging_config import get_logger, log_action


SUMMARY_SEPARATOR = "-" * 28


class HistoryStatus(Enum):
    """Outcome of reading an account's transaction log"""
    NO_LOG = "no_log"  # Log was never created
    EMPTY = "empty"    # Log exists but has no lines
    OK = "ok"


@dataclass
class HistoryView:
    """Transaction history for one account"""
    account_id: str
    status: HistoryStatus
    lines: List[str] = field(default_factory=list)

    @property
    def message(self) -> Optional[str]:
        """Operator message for the empty outcomes"""
        if self.status == HistoryStatus.NO_LOG:
            return "No transactions found for this account."
        if self.status == HistoryStatus.EMPTY:
            return "No transactions yet."
        return None


class ReportingEngine:
    """History views, history exports and the ledger summary"""

    def __init__(
        self,
        storage: LogStorageInterface,
        transaction_logger: TransactionLogger,
        history_export_prefix: str = "transaction_history_",
        summary_file: str = "account_summary.txt"
    ):
        self.storage = storage
        self.transaction_logger = transaction_logger
        self.history_export_prefix = history_export_prefix
        self.summary_file = summary_file
        self.logger = get_logger("teller.reporting")

    def history_export_name(self, account_id: str) -> str:
        return f"{self.history_export_prefix}{account_id}.txt"

    def view_history(self, account_id: str) -> HistoryView:
        """
        Read an account's transaction log

        Raises:
            OSError: If the log exists but cannot be read
        """
        lines = self.transaction_logger.read(account_id)
        if lines is None:
            return HistoryView(account_id, HistoryStatus.NO_LOG)
        if not lines:
            return HistoryView(account_id, HistoryStatus.EMPTY)
        return HistoryView(account_id, HistoryStatus.OK, lines)

    def export_history(self, account_id: str) -> Optional[str]:
        """
        Copy an account's transaction log verbatim to its export resource

        Returns:
            Location of the export, or None when the account has no log

        Raises:
            OSError: If the copy failed (also reported through the logger)
        """
        try:
            lines = self.transaction_logger.read(account_id)
            if lines is None:
                log_action(
                    self.logger, "info",
                    f"No transaction history found for account: {account_id}",
                    account_id=account_id, action="history_export"
                )
                return None
            name = self.history_export_name(account_id)
            self.storage.write_lines(name, lines)
        except OSError as e:
            log_action(
                self.logger, "error", f"Error saving transaction history: {e}",
                account_id=account_id, action="history_export"
            )
            raise

        location = self.storage.describe(name)
        log_action(
            self.logger, "info",
            f"Transaction history for account {account_id} saved to {location}",
            account_id=account_id, action="history_export",
            extra={"lines": len(lines)}
        )
        return location

    def summary_lines(self, ledger: Ledger) -> List[str]:
        """Summary block per account, in creation order"""
        lines = []
        for account in ledger.accounts():
            lines.append(f"Account ID: {account.account_id}")
            lines.append(f"Holder Name: {account.holder_name}")
            lines.append(f"Final Balance: {format_amount(account.get_balance())}")
            lines.append(SUMMARY_SEPARATOR)
        return lines

    def write_summary(self, ledger: Ledger) -> bool:
        """
        Write the summary resource

        Raises:
            OSError: If the write failed (also reported through the logger)
        """
        try:
            self.storage.write_lines(self.summary_file, self.summary_lines(ledger))
        except OSError as e:
            log_action(
                self.logger, "error", f"Error writing account summary: {e}",
                action="summary"
            )
            raise
        log_action(
            self.logger, "info", f"Summary written for {len(ledger)} accounts",
            action="summary"
        )
        return True
