"""
Ledger Module

The account directory: an insertion-ordered mapping from account id to
Account. It is populated at startup and then only read, so lookups take no
lock; registration is serialized for callers that add accounts later.
"""

from typing import Callable, Dict, Iterator, List, Optional
import threading

from .accounts import Account


class Ledger:
    """Account directory keyed by account id, in creation order"""

    def __init__(self):
        self._accounts: Dict[str, Account] = {}
        self._register_lock = threading.Lock()

    def register(self, account_id: str, factory: Callable[[], Account]) -> Account:
        """
        Reserve an id and build its account under the registration lock

        The factory runs only when the id is free, so a losing duplicate
        never gets to write anything for the account.

        Raises:
            ValueError: If the id is already registered or the factory built
                an account with a different id
        """
        with self._register_lock:
            if account_id in self._accounts:
                raise ValueError(f"Account {account_id} already exists")
            account = factory()
            if account.account_id != account_id:
                raise ValueError(
                    f"Factory built account {account.account_id}, expected {account_id}"
                )
            self._accounts[account_id] = account
        return account

    def add_account(self, account: Account) -> Account:
        """
        Register an existing account

        Raises:
            ValueError: If an account with the same id is already registered
        """
        return self.register(account.account_id, lambda: account)

    def get_account(self, account_id: str) -> Optional[Account]:
        """Get account by ID, None if unknown"""
        return self._accounts.get(account_id)

    def accounts(self) -> List[Account]:
        """All accounts in creation order"""
        return list(self._accounts.values())

    def __contains__(self, account_id: object) -> bool:
        return account_id in self._accounts

    def __iter__(self) -> Iterator[Account]:
        return iter(self.accounts())

    def __len__(self) -> int:
        return len(self._accounts)
