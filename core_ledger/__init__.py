"""
Core Ledger

An in-memory ledger of named accounts with validated deposits, withdrawals,
transfers and balance queries, optional per-account limit policies, and a
two-tier (fatal / recoverable) error channel.
"""

__version__ = "1.0.0"

from .errors import (
    ErrorKind, Severity, LedgerError, FatalLedgerError, RecoverableLedgerError,
    InvalidAccountError, DuplicateAccountError, NonPositiveBalanceError,
    InvalidLimitPolicyError, AccountNotFoundError, InvalidAmountError,
    InvalidCallbackError, OverLimitError, InsufficientFundsError
)
from .error_reporter import ErrorReporter, ErrorSignal, reraise_kinds
from .limits import LimitPolicy, CallableLimitPolicy, MaxDebitPolicy
from .ledger import LedgerEngine, LedgerCommand

__all__ = [
    "LedgerEngine", "LedgerCommand",
    "ErrorReporter", "ErrorSignal", "reraise_kinds",
    "LimitPolicy", "CallableLimitPolicy", "MaxDebitPolicy",
    "ErrorKind", "Severity", "LedgerError", "FatalLedgerError", "RecoverableLedgerError",
    "InvalidAccountError", "DuplicateAccountError", "NonPositiveBalanceError",
    "InvalidLimitPolicyError", "AccountNotFoundError", "InvalidAmountError",
    "InvalidCallbackError", "OverLimitError", "InsufficientFundsError",
]
