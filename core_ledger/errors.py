"""
Ledger Error Taxonomy

Two tiers of failure:

- Fatal errors are configuration or invariant violations (bad account shape,
  duplicate name, non-positive opening balance, malformed limit policy). They
  are raised straight to the caller and the call has no side effect.
- Recoverable errors are runtime validation or business-rule failures (unknown
  account, invalid amount, non-callable sink, over limit, insufficient funds).
  They are routed through the ErrorReporter and the operation becomes a no-op.

Every error carries a ``kind`` so subscribers can tell a missing account from a
bad argument, and an over-limit debit from an underfunded one.
"""

from enum import Enum
from typing import Any, Dict, Optional


class Severity(Enum):
    """How a failure must be handled"""
    FATAL = "fatal"
    RECOVERABLE = "recoverable"


class ErrorKind(Enum):
    """Distinguishable failure kinds"""
    # Fatal (registration / configuration)
    INVALID_ACCOUNT = "invalid_account"
    DUPLICATE_ACCOUNT = "duplicate_account"
    NON_POSITIVE_BALANCE = "non_positive_balance"
    INVALID_LIMIT_POLICY = "invalid_limit_policy"

    # Recoverable (runtime)
    NOT_FOUND = "not_found"
    INVALID_TYPE = "invalid_type"
    OVER_LIMIT = "over_limit"
    INSUFFICIENT_FUNDS = "insufficient_funds"

    # Anything that is not a LedgerError
    UNEXPECTED = "unexpected"


class LedgerError(Exception):
    """Base class for all ledger errors"""
    kind: ErrorKind = ErrorKind.UNEXPECTED
    severity: Severity = Severity.FATAL

    def __init__(self, message: str, account_id: Optional[str] = None, **details: Any):
        super().__init__(message)
        self.message = message
        self.account_id = account_id
        self.details: Dict[str, Any] = details

    @property
    def is_fatal(self) -> bool:
        return self.severity == Severity.FATAL

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging"""
        result = {
            "kind": self.kind.value,
            "severity": self.severity.value,
            "message": self.message,
        }
        if self.account_id:
            result["account_id"] = self.account_id
        if self.details:
            result["details"] = {k: str(v) for k, v in self.details.items()}
        return result


class FatalLedgerError(LedgerError):
    """Configuration or invariant violation; aborts the call"""
    severity = Severity.FATAL


class RecoverableLedgerError(LedgerError):
    """Validation or business-rule failure; the operation becomes a no-op"""
    severity = Severity.RECOVERABLE


class InvalidAccountError(FatalLedgerError, TypeError):
    """Account name or opening balance has the wrong shape"""
    kind = ErrorKind.INVALID_ACCOUNT


class DuplicateAccountError(FatalLedgerError, ValueError):
    """An account with the same name is already registered"""
    kind = ErrorKind.DUPLICATE_ACCOUNT


class NonPositiveBalanceError(FatalLedgerError, ValueError):
    """Opening balance is zero or negative"""
    kind = ErrorKind.NON_POSITIVE_BALANCE


class InvalidLimitPolicyError(FatalLedgerError, TypeError):
    """Limit policy is missing, not callable, or failed the probe call"""
    kind = ErrorKind.INVALID_LIMIT_POLICY


class AccountNotFoundError(RecoverableLedgerError, LookupError):
    """No account with the given id"""
    kind = ErrorKind.NOT_FOUND


class InvalidAmountError(RecoverableLedgerError, TypeError):
    """Amount is not a number or is not strictly positive"""
    kind = ErrorKind.INVALID_TYPE


class InvalidCallbackError(RecoverableLedgerError, TypeError):
    """Result sink or policy argument is not callable"""
    kind = ErrorKind.INVALID_TYPE


class OverLimitError(RecoverableLedgerError, ValueError):
    """The account's limit policy rejected the debit"""
    kind = ErrorKind.OVER_LIMIT


class InsufficientFundsError(RecoverableLedgerError, ValueError):
    """The debit would leave the balance negative"""
    kind = ErrorKind.INSUFFICIENT_FUNDS
