"""
Error Reporter Module

The error channel. Failures are classified as fatal or recoverable and
delivered to subscribers as ErrorSignal objects. Without subscribers, fatal
signals are raised back to the caller and recoverable ones are logged and
absorbed.
"""

from dataclasses import dataclass
from threading import RLock
from typing import Callable, List

from .errors import LedgerError, ErrorKind, Severity
from .logging_config import get_logger, log_action


@dataclass(frozen=True)
class ErrorSignal:
    """Structured failure delivered to error subscribers"""
    kind: ErrorKind
    severity: Severity
    message: str
    error: BaseException

    @property
    def is_fatal(self) -> bool:
        return self.severity == Severity.FATAL


def classify(error: BaseException) -> Severity:
    """Decide whether an error is fatal or recoverable"""
    if isinstance(error, LedgerError):
        return error.severity
    if isinstance(error, (TypeError, ValueError, LookupError)):
        return Severity.RECOVERABLE
    return Severity.FATAL


def to_signal(error: BaseException) -> ErrorSignal:
    """Wrap an exception in an ErrorSignal"""
    kind = error.kind if isinstance(error, LedgerError) else ErrorKind.UNEXPECTED
    return ErrorSignal(kind=kind, severity=classify(error), message=str(error), error=error)


class ErrorReporter:
    """Routes failures to subscribers"""

    def __init__(self, log_recoverable: bool = True):
        self._handlers: List[Callable[[ErrorSignal], None]] = []
        self._lock = RLock()
        self.log_recoverable = log_recoverable
        self.logger = get_logger("ledger.errors")

    def subscribe(self, handler: Callable[[ErrorSignal], None]) -> None:
        """Receive every reported ErrorSignal"""
        with self._lock:
            self._handlers.append(handler)

    def unsubscribe(self, handler: Callable[[ErrorSignal], None]) -> None:
        with self._lock:
            try:
                self._handlers.remove(handler)
            except ValueError:
                self.logger.warning(f"Error handler {getattr(handler, '__name__', repr(handler))} was not subscribed")

    @property
    def has_subscribers(self) -> bool:
        with self._lock:
            return bool(self._handlers)

    def report(self, error: BaseException) -> ErrorSignal:
        """
        Classify and deliver an error.

        Handlers may raise; their exception propagates to the caller of the
        operation that reported the error.

        Raises:
            The original error if it is fatal and nobody is subscribed
        """
        signal = to_signal(error)
        self._log(signal)

        with self._lock:
            handlers = list(self._handlers)

        if not handlers:
            if signal.is_fatal:
                raise error
            return signal

        for handler in handlers:
            handler(signal)
        return signal

    def _log(self, signal: ErrorSignal) -> None:
        extra = signal.error.to_dict() if isinstance(signal.error, LedgerError) else {
            "kind": signal.kind.value, "severity": signal.severity.value
        }
        if signal.is_fatal:
            log_action(
                self.logger, "error", f"Received {type(signal.error).__name__} with a message: '{signal.message}'",
                action="report_error", resource=f"error:{signal.kind.value}", extra=extra
            )
        elif self.log_recoverable:
            log_action(
                self.logger, "warning", f"Received {type(signal.error).__name__} with a message: '{signal.message}'",
                action="report_error", resource=f"error:{signal.kind.value}", extra=extra
            )


def reraise_kinds(*kinds: ErrorKind) -> Callable[[ErrorSignal], None]:
    """
    Build a subscriber that re-raises signals of the given kinds.

    Example: ``reporter.subscribe(reraise_kinds(ErrorKind.NOT_FOUND))`` turns
    unknown-account lookups into exceptions at the call site.
    """
    wanted = frozenset(kinds)

    def handler(signal: ErrorSignal) -> None:
        if signal.kind in wanted:
            raise signal.error

    handler.__name__ = "reraise_" + "_".join(sorted(kind.value for kind in wanted))
    return handler
