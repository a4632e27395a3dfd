"""
Account Store Module

Provides the abstract account store interface and the in-memory implementation.
The store owns the id -> Account mapping; every mutation is a whole-record
replace, so readers never observe a partially updated account.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Set, Any, TYPE_CHECKING
from datetime import datetime
import threading
from dataclasses import dataclass
from contextlib import contextmanager

if TYPE_CHECKING:
    from .accounts import Account


@dataclass(frozen=True)
class StorageRecord:
    """Base class for all stored records"""
    id: str
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging and events"""
        result = {
            'id': self.id,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat(),
        }
        return result


class AccountStore(ABC):
    """
    Abstract interface for account stores

    The engine resolves accounts only through get(); a missing account is a
    None result. The transaction hooks default to no-ops, so atomic() gives no
    rollback unless a store overrides begin_transaction, commit and rollback
    (InMemoryAccountStore does).
    """

    @abstractmethod
    def insert(self, account: 'Account') -> None:
        """Add a new account; the id must not already be stored"""
        pass

    @abstractmethod
    def get(self, account_id: str) -> Optional['Account']:
        """Look up an account, None if unknown"""
        pass

    @abstractmethod
    def replace(self, account_id: str, account: 'Account') -> None:
        """Swap the stored record for account_id"""
        pass

    @abstractmethod
    def all(self) -> List['Account']:
        """All accounts in insertion order"""
        pass

    @abstractmethod
    def names(self) -> Set[str]:
        """Names of all registered accounts"""
        pass

    def begin_transaction(self) -> None:
        """Start a transaction (default no-op)"""
        pass

    def commit(self) -> None:
        """Commit current transaction (default no-op)"""
        pass

    def rollback(self) -> None:
        """Rollback current transaction (default no-op; override to restore state)"""
        pass

    @contextmanager
    def atomic(self):
        """Context manager for atomic operations"""
        self.begin_transaction()
        try:
            yield
            self.commit()
        except Exception:
            self.rollback()
            raise


class InMemoryAccountStore(AccountStore):
    """In-memory account store"""

    def __init__(self):
        self._accounts: Dict[str, 'Account'] = {}
        self._names: Set[str] = set()
        self._lock = threading.RLock()
        self._snapshots: List[tuple] = []

    def insert(self, account: 'Account') -> None:
        """Add a new account"""
        with self._lock:
            if account.id in self._accounts:
                raise ValueError(f"Account {account.id} already stored")
            self._accounts[account.id] = account
            self._names.add(account.name)

    def get(self, account_id: str) -> Optional['Account']:
        """Look up an account by id"""
        with self._lock:
            return self._accounts.get(account_id)

    def replace(self, account_id: str, account: 'Account') -> None:
        """Atomically swap the record for account_id"""
        with self._lock:
            if account_id not in self._accounts:
                raise KeyError(account_id)
            if account.id != account_id:
                raise ValueError(f"Cannot store account {account.id} under id {account_id}")
            self._accounts[account_id] = account

    def all(self) -> List['Account']:
        with self._lock:
            return list(self._accounts.values())

    def names(self) -> Set[str]:
        with self._lock:
            return set(self._names)

    def __len__(self) -> int:
        with self._lock:
            return len(self._accounts)

    def __contains__(self, account_id: object) -> bool:
        with self._lock:
            return account_id in self._accounts

    # Records are immutable, so a shallow copy of the mapping is a full snapshot
    def begin_transaction(self) -> None:
        self._lock.acquire()
        self._snapshots.append((dict(self._accounts), set(self._names)))

    def commit(self) -> None:
        self._snapshots.pop()
        self._lock.release()

    def rollback(self) -> None:
        self._accounts, self._names = self._snapshots.pop()
        self._lock.release()
