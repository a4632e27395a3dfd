"""
Account Module

The Account record. Accounts are immutable: every balance or policy change
builds a new record that the store swaps in whole.
"""

from datetime import datetime, timezone
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from .storage import StorageRecord
from .limits import LimitPolicy


@dataclass(frozen=True)
class Account(StorageRecord):
    """
    Ledger participant. Created only by LedgerEngine.register
    """
    name: str
    balance: Any  # int, float or Decimal
    limit_policy: Optional[LimitPolicy] = None

    @property
    def has_limit_policy(self) -> bool:
        """Check if debits are gated by a limit policy"""
        return self.limit_policy is not None

    def with_balance(self, balance) -> 'Account':
        """Copy of this account with a new balance"""
        return replace(self, balance=balance, updated_at=datetime.now(timezone.utc))

    def with_limit_policy(self, limit_policy: Optional[LimitPolicy]) -> 'Account':
        """Copy of this account with a new limit policy"""
        return replace(self, limit_policy=limit_policy, updated_at=datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        """Convert Account to dictionary (policy is reported, not serialized)"""
        result = super().to_dict()
        result['name'] = self.name
        result['balance'] = str(self.balance)
        result['has_limit_policy'] = self.has_limit_policy
        return result
