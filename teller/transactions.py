"""
Transaction Processing Module

A TransactionExecutor is the unit of work for one deposit or withdrawal:
it performs the balance change on the account, then records the outcome in
the account's transaction log. The two steps are sequential but not jointly
atomic; the log write happens outside the account lock.

The TransactionDispatcher runs each executor on its own named worker thread
and waits for it, so the locking discipline holds when independent callers
drive the same account concurrently.
"""

from decimal import Decimal
from dataclasses import dataclass
from typing import Optional
from enum import Enum
import threading

from .accounts import Account
from .currency import format_amount
from .transaction_log import TransactionLogger
from .logging_config import get_logger, log_action


class TransactionType(Enum):
    """Types of ledger transactions"""
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


class NarrativeSource(Enum):
    """Where the logged success/failure branch of a withdrawal comes from"""
    RESULT = "result"      # The value returned by Account.withdraw
    PRECHECK = "precheck"  # Balance read before the withdraw compared to the amount


@dataclass(frozen=True)
class TransactionOutcome:
    """
    Result of one executed transaction

    For deposits ``balance_before`` is the balance the deposit itself
    started from. For withdrawals it is the snapshot read just before the
    withdraw call, which a concurrent caller can overtake. ``balance_after``
    is the balance re-read after the change, as shown in the log line.
    """
    account_id: str
    transaction_type: TransactionType
    amount: Decimal
    succeeded: bool
    balance_before: Decimal
    balance_after: Decimal
    message: str
    actor: str
    logged: bool
    log_error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "account_id": self.account_id,
            "transaction_type": self.transaction_type.value,
            "amount": str(self.amount),
            "succeeded": self.succeeded,
            "balance_before": str(self.balance_before),
            "balance_after": str(self.balance_after),
            "message": self.message,
            "actor": self.actor,
            "logged": self.logged,
            "log_error": self.log_error,
        }


class TransactionExecutor:
    """
    Performs one deposit or withdrawal and logs the outcome

    With ``NarrativeSource.PRECHECK`` the withdrawal narrative is chosen from
    a balance snapshot taken before the withdraw call. Another withdrawal can
    land between the snapshot and the call, in which case the log reports a
    success that the account rejected. ``TransactionOutcome.succeeded``
    always carries the real result.
    """

    def __init__(
        self,
        account: Account,
        amount: Decimal,
        transaction_type: TransactionType,
        transaction_logger: TransactionLogger,
        narrative_source: NarrativeSource = NarrativeSource.RESULT
    ):
        if amount <= Decimal('0'):
            raise ValueError("Transaction amount must be positive")
        self.account = account
        self.amount = amount
        self.transaction_type = transaction_type
        self.transaction_logger = transaction_logger
        self.narrative_source = narrative_source
        self.logger = get_logger("teller.transactions")

    @property
    def thread_name(self) -> str:
        """Name for the worker thread, used as the log line's actor"""
        if self.transaction_type == TransactionType.DEPOSIT:
            return f"DepositThread-{self.account.account_id}"
        return f"WithdrawThread-{self.account.account_id}"

    def run(self) -> TransactionOutcome:
        """Apply the transaction and append its log line"""
        if self.transaction_type == TransactionType.DEPOSIT:
            return self._run_deposit()
        return self._run_withdrawal()

    def _run_deposit(self) -> TransactionOutcome:
        before = self.account.deposit(self.amount) - self.amount
        after = self.account.get_balance()
        message = (
            f"Deposited {format_amount(self.amount)}. "
            f"New balance: {format_amount(after)}"
        )
        return self._record(True, before, after, message)

    def _run_withdrawal(self) -> TransactionOutcome:
        before = self.account.get_balance()
        applied = self.account.withdraw(self.amount)

        if self.narrative_source == NarrativeSource.PRECHECK:
            narrate_success = before >= self.amount
        else:
            narrate_success = applied

        after = self.account.get_balance()
        if narrate_success:
            message = (
                f"Withdrew {format_amount(self.amount)}. "
                f"New balance: {format_amount(after)}"
            )
        else:
            message = (
                f"Withdrawal of {format_amount(self.amount)} "
                f"failed due to insufficient funds."
            )

        if narrate_success != applied:
            log_action(
                self.logger, "warning",
                f"Logged narrative disagrees with withdrawal result (applied={applied})",
                account_id=self.account.account_id, action="withdrawal"
            )
        return self._record(applied, before, after, message)

    def _record(self, succeeded: bool, before: Decimal, after: Decimal,
                message: str) -> TransactionOutcome:
        actor = threading.current_thread().name
        log_error = self.transaction_logger.write(
            self.account.account_id, f"{actor}: {message}"
        )
        log_action(
            self.logger, "info", message,
            account_id=self.account.account_id,
            action=self.transaction_type.value,
            extra={"succeeded": succeeded, "amount": str(self.amount)}
        )
        return TransactionOutcome(
            account_id=self.account.account_id,
            transaction_type=self.transaction_type,
            amount=self.amount,
            succeeded=succeeded,
            balance_before=before,
            balance_after=after,
            message=message,
            actor=actor,
            logged=log_error is None,
            log_error=str(log_error) if log_error is not None else None
        )


class TransactionDispatcher:
    """Runs each executor on its own worker thread and joins it"""

    def __init__(self):
        self.logger = get_logger("teller.transactions")

    def dispatch(self, executor: TransactionExecutor) -> Optional[TransactionOutcome]:
        """
        Run an executor to completion on a worker thread

        Returns:
            The outcome, or None if the wait was interrupted. An interrupted
            wait does not cancel the worker; it keeps running to completion.
        """
        result = {}

        def work():
            try:
                result["outcome"] = executor.run()
            except Exception as e:
                result["error"] = e

        worker = threading.Thread(target=work, name=executor.thread_name)
        worker.start()
        try:
            worker.join()
        except KeyboardInterrupt:
            log_action(
                self.logger, "warning",
                f"Interrupted while waiting for {worker.name}; continuing",
                account_id=executor.account.account_id,
                action=executor.transaction_type.value
            )
            return None

        if "error" in result:
            raise result["error"]
        return result["outcome"]
