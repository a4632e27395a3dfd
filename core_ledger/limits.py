"""
Limit Policy Module

A limit policy is a per-account strategy that can veto a debit before it is
applied. Policies are validated once at registration (see
``validation.validate_limit_policy``) and are not re-validated per use.
"""

from abc import ABC, abstractmethod
from typing import Callable, TYPE_CHECKING

if TYPE_CHECKING:
    from .accounts import Account


class LimitPolicy(ABC):
    """Decides whether a debit may proceed"""

    @abstractmethod
    def approve(self, amount, balance_before, balance_after) -> bool:
        """Return True to allow the debit"""
        pass


class CallableLimitPolicy(LimitPolicy):
    """Adapts a plain ``(amount, before, after) -> bool`` function"""

    def __init__(self, func: Callable):
        self.func = func

    def approve(self, amount, balance_before, balance_after) -> bool:
        return self.func(amount, balance_before, balance_after)

    def __repr__(self) -> str:
        return f"CallableLimitPolicy({getattr(self.func, '__name__', repr(self.func))})"


class MaxDebitPolicy(LimitPolicy):
    """Rejects any single debit larger than ``max_amount``"""

    def __init__(self, max_amount):
        self.max_amount = max_amount

    def approve(self, amount, balance_before, balance_after) -> bool:
        return amount <= self.max_amount

    def __repr__(self) -> str:
        return f"MaxDebitPolicy(max_amount={self.max_amount})"


class LimitPolicyEvaluator:
    """
    Consults an account's limit policy before a debit.

    Accounts without a policy are always approved. Exceptions raised by the
    policy propagate to the caller; the evaluator runs before any mutation.
    """

    def approve(self, account: 'Account', amount, balance_before, balance_after) -> bool:
        policy = account.limit_policy
        if policy is None:
            return True
        return bool(policy.approve(amount, balance_before, balance_after))
