"""
Input Validation Module

Side-effect-free checks for ledger inputs. Registration checks raise fatal
errors; runtime checks raise recoverable errors that the engine routes through
the ErrorReporter.
"""

import math
from decimal import Decimal
from typing import Any, Callable, Iterable, Optional, Tuple, Union

from .errors import (
    InvalidAccountError, DuplicateAccountError, NonPositiveBalanceError,
    InvalidLimitPolicyError, InvalidAmountError, InvalidCallbackError
)
from .limits import LimitPolicy, CallableLimitPolicy

DEFAULT_LIMIT_PROBE = (100, 200, 100)


def is_number(value: Any) -> bool:
    """True for finite int, float or Decimal values (bool excluded)"""
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return False
    if isinstance(value, Decimal):
        return value.is_finite()
    return math.isfinite(value)


def validate_new_account(
    name: Any,
    balance: Any,
    limit_policy: Optional[Any] = None,
    require_limit_policy: bool = False
) -> None:
    """
    Check the shape of a registration request.

    Raises:
        InvalidAccountError: name is empty or not a string, balance not numeric
        InvalidLimitPolicyError: policy required but absent, or not callable
    """
    if not name or not isinstance(name, str):
        raise InvalidAccountError("name does not exist or contains not a valid data type")

    if not is_number(balance):
        raise InvalidAccountError("balance does not exist or contains not a valid data type")

    if limit_policy is None:
        if require_limit_policy:
            raise InvalidLimitPolicyError("limit does not exist or contains not a valid data type")
    elif not _is_policy_like(limit_policy):
        raise InvalidLimitPolicyError("limit does not exist or contains not a valid data type")


def check_name_unique(name: str, existing_names: Iterable[str]) -> None:
    """Raise DuplicateAccountError if name is already registered"""
    if name in existing_names:
        raise DuplicateAccountError(f"Account already exists. Account name: {name}", name=name)


def check_balance_positive(balance) -> None:
    """Raise NonPositiveBalanceError for an opening balance <= 0"""
    if balance <= 0:
        raise NonPositiveBalanceError(
            "Unable to add account with negative or zero balance", balance=balance
        )


def validate_amount(amount: Any, account_id: Optional[str] = None):
    """Return amount unchanged if it is a positive number"""
    if not is_number(amount) or amount <= 0:
        raise InvalidAmountError(
            "Amount must be a positive number",
            account_id=account_id, amount=amount
        )
    return amount


def validate_callback(cb: Any, account_id: Optional[str] = None) -> Callable:
    """Return cb unchanged if it is callable"""
    if not callable(cb):
        raise InvalidCallbackError("cb is not a function", account_id=account_id)
    return cb


def validate_limit_policy(
    policy: Union[LimitPolicy, Callable],
    probe: Tuple = DEFAULT_LIMIT_PROBE
) -> LimitPolicy:
    """
    Normalize a policy and check it with a probe call.

    Plain functions are wrapped in CallableLimitPolicy. The probe must return
    a real bool; a non-bool result or a raising probe is a fatal configuration
    error.
    """
    if not _is_policy_like(policy):
        raise InvalidLimitPolicyError("limit policy is not callable")

    if not isinstance(policy, LimitPolicy):
        policy = CallableLimitPolicy(policy)

    try:
        result = policy.approve(*probe)
    except Exception as e:
        raise InvalidLimitPolicyError(f"limit policy raised on probe call: {e}") from e

    if not isinstance(result, bool):
        raise InvalidLimitPolicyError(
            "limit callback must return boolean", result_type=type(result).__name__
        )

    return policy


def _is_policy_like(value: Any) -> bool:
    return isinstance(value, LimitPolicy) or callable(value)
