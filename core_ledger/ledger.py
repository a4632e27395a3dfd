"""
Ledger Engine Module

Runs every account operation: register, deposit, query, withdraw, transfer
and change_limit. Each operation resolves the account(s) through the store,
validates its arguments, consults the limit policy for debits, replaces the
account record and reports the outcome.

Registration failures are fatal and raised to the caller. Runtime failures
are recoverable: they go to the ErrorReporter and the operation returns False
with state unchanged.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from functools import partial
from threading import RLock
from typing import Any, Callable, Dict, List, Optional

from .accounts import Account
from .config import LedgerConfig, get_config
from .error_reporter import ErrorReporter
from .errors import (
    FatalLedgerError, RecoverableLedgerError, AccountNotFoundError,
    OverLimitError, InsufficientFundsError
)
from .events import EventDispatcher, DomainEvent, EventPayload, create_account_event
from .identifiers import generate_account_id
from .limits import LimitPolicy, LimitPolicyEvaluator
from .logging_config import get_logger, log_action
from .storage import AccountStore, InMemoryAccountStore
from .validation import (
    validate_new_account, check_name_unique, check_balance_positive,
    validate_amount, validate_callback, validate_limit_policy
)


class LedgerCommand(str, Enum):
    """Named commands accepted by LedgerEngine.dispatch"""
    ADD = "add"                    # (account_id, amount)
    GET = "get"                    # (account_id, result_sink)
    SEND = "send"                  # (source_id, dest_id, amount)
    WITHDRAW = "withdraw"          # (account_id, amount)
    CHANGE_LIMIT = "changeLimit"   # (account_id, limit_policy)


def _align(balance, amount):
    """Make Decimal and float operands compatible"""
    if isinstance(balance, Decimal) and isinstance(amount, float):
        return balance, Decimal(str(amount))
    if isinstance(amount, Decimal) and isinstance(balance, float):
        return Decimal(str(balance)), amount
    return balance, amount


class LedgerEngine:
    """
    In-memory ledger of named accounts
    """

    def __init__(
        self,
        store: Optional[AccountStore] = None,
        config: Optional[LedgerConfig] = None,
        error_reporter: Optional[ErrorReporter] = None,
        event_dispatcher: Optional[EventDispatcher] = None,
        id_factory: Optional[Callable[[], str]] = None,
        limit_evaluator: Optional[LimitPolicyEvaluator] = None
    ):
        self.config = config if config is not None else get_config()
        self.store = store if store is not None else InMemoryAccountStore()
        self.error_reporter = error_reporter if error_reporter is not None else ErrorReporter(
            log_recoverable=self.config.log_recoverable_errors
        )
        self.limit_evaluator = limit_evaluator if limit_evaluator is not None else LimitPolicyEvaluator()
        self._id_factory = id_factory or partial(generate_account_id, self.config.account_id_bytes)
        self._event_dispatcher = event_dispatcher
        self._lock = RLock()
        self.logger = get_logger("ledger.engine")

        self._commands: Dict[LedgerCommand, Callable[..., bool]] = {
            LedgerCommand.ADD: self.deposit,
            LedgerCommand.GET: self.query,
            LedgerCommand.SEND: self.transfer,
            LedgerCommand.WITHDRAW: self.withdraw,
            LedgerCommand.CHANGE_LIMIT: self.change_limit,
        }

    def register(self, name: str, balance, limit_policy: Optional[Any] = None) -> str:
        """
        Register a new account

        Args:
            name: Unique, non-empty account name
            balance: Opening balance, must be > 0
            limit_policy: LimitPolicy or ``(amount, before, after) -> bool``
                function; required when config.require_limit_policy is set

        Returns:
            The new account id

        Raises:
            FatalLedgerError: on any validation failure; no account is created
        """
        with self._lock:
            try:
                validate_new_account(name, balance, limit_policy, self.config.require_limit_policy)
                check_name_unique(name, self.store.names())
                check_balance_positive(balance)
                policy = None
                if limit_policy is not None:
                    policy = validate_limit_policy(limit_policy, self.config.limit_probe)
            except FatalLedgerError as e:
                log_action(
                    self.logger, "error", f"Registration rejected: {e.message}",
                    action="register", extra=e.to_dict()
                )
                raise

            now = datetime.now(timezone.utc)
            account = Account(
                id=self._id_factory(),
                created_at=now,
                updated_at=now,
                name=name,
                balance=balance,
                limit_policy=policy
            )
            self.store.insert(account)

        self._committed(DomainEvent.ACCOUNT_REGISTERED, "register", account)
        return account.id

    def deposit(self, account_id: str, amount) -> bool:
        """Credit amount to an account"""
        with self._lock:
            try:
                account = self._resolve(account_id)
                amount = validate_amount(amount, account_id)
            except RecoverableLedgerError as e:
                return self._reject("deposit", e)

            updated = self._credit(account, amount)

        self._committed(DomainEvent.ACCOUNT_DEPOSITED, "deposit", updated, amount=amount)
        return True

    def query(self, account_id: str, result_sink: Callable[[Any], Any]) -> bool:
        """Invoke result_sink with the account's current balance"""
        with self._lock:
            try:
                account = self._resolve(account_id)
                result_sink = validate_callback(result_sink, account_id)
            except RecoverableLedgerError as e:
                return self._reject("query", e)

            balance = account.balance

        result_sink(balance)
        return True

    def withdraw(self, account_id: str, amount) -> bool:
        """
        Debit amount from an account.

        The limit policy is checked before funds. Returns False, with the
        balance unchanged, when either check fails.
        """
        with self._lock:
            try:
                account = self._resolve(account_id)
                amount = validate_amount(amount, account_id)
                updated = self._debit(account, amount)
            except RecoverableLedgerError as e:
                return self._reject("withdraw", e)

        self._committed(DomainEvent.ACCOUNT_WITHDRAWN, "withdraw", updated, amount=amount)
        return True

    def transfer(self, source_id: str, dest_id: str, amount) -> bool:
        """
        Move amount from source to destination.

        The destination is credited only if the source debit succeeds; no
        partial transfer is ever visible.
        """
        with self._lock:
            missing = [i for i in dict.fromkeys((source_id, dest_id)) if self.store.get(i) is None]
            if missing:
                for account_id in missing:
                    self._reject("transfer", self._not_found(account_id))
                return False

            try:
                amount = validate_amount(amount, source_id)
                with self.store.atomic():
                    debited = self._debit(self.store.get(source_id), amount)
                    # Read after the debit so a self-transfer sees the debited balance
                    credited = self._credit(self.store.get(dest_id), amount)
            except RecoverableLedgerError as e:
                return self._reject("transfer", e)

        log_action(
            self.logger, "info", "Transfer committed",
            action="transfer", resource=f"account:{source_id}",
            extra={
                "source_id": source_id,
                "dest_id": dest_id,
                "amount": str(amount),
                "source_balance": str(debited.balance),
                "dest_balance": str(credited.balance)
            }
        )
        self._publish_event(create_account_event(
            DomainEvent.ACCOUNT_TRANSFERRED, debited, dest_id=dest_id, amount=amount
        ))
        return True

    def change_limit(self, account_id: str, limit_policy) -> bool:
        """
        Replace an account's limit policy.

        An unknown account or a non-callable policy is recoverable; a policy
        that fails the probe call is fatal and raised to the caller.
        """
        with self._lock:
            try:
                account = self._resolve(account_id)
                if not isinstance(limit_policy, LimitPolicy):
                    validate_callback(limit_policy, account_id)
            except RecoverableLedgerError as e:
                return self._reject("change_limit", e)

            policy = validate_limit_policy(limit_policy, self.config.limit_probe)
            updated = account.with_limit_policy(policy)
            self.store.replace(account_id, updated)

        self._committed(DomainEvent.ACCOUNT_LIMIT_CHANGED, "change_limit", updated)
        return True

    def dispatch(self, command, *args) -> bool:
        """
        Run a named command, e.g. ``dispatch("send", a_id, b_id, 50)``

        Raises:
            ValueError: unknown command name
        """
        try:
            command = LedgerCommand(command)
        except ValueError:
            raise ValueError(f"Unknown ledger command: {command!r}") from None
        return self._commands[command](*args)

    def get_account(self, account_id: str) -> Optional[Account]:
        """Direct lookup; None if unknown (nothing is reported)"""
        return self.store.get(account_id)

    def accounts(self) -> List[Account]:
        return self.store.all()

    def total_balance(self) -> Decimal:
        """Sum of all balances"""
        with self._lock:
            return sum((Decimal(str(a.balance)) for a in self.store.all()), Decimal('0'))

    def _resolve(self, account_id: str) -> Account:
        account = self.store.get(account_id)
        if account is None:
            raise self._not_found(account_id)
        return account

    @staticmethod
    def _not_found(account_id: str) -> AccountNotFoundError:
        return AccountNotFoundError(f"No such account with id: {account_id}", account_id=account_id)

    def _credit(self, account: Account, amount) -> Account:
        balance, amount = _align(account.balance, amount)
        updated = account.with_balance(balance + amount)
        self.store.replace(account.id, updated)
        return updated

    def _debit(self, account: Account, amount) -> Account:
        before, amount = _align(account.balance, amount)
        after = before - amount

        if not self.limit_evaluator.approve(account, amount, before, after):
            raise OverLimitError(
                f"Account over limit: {account.id}",
                account_id=account.id, amount=amount, balance=before
            )

        if after < 0:
            raise InsufficientFundsError(
                f"Unable to remove the amount from account: {account.id}",
                account_id=account.id, amount=amount, balance=before
            )

        updated = account.with_balance(after)
        self.store.replace(account.id, updated)
        return updated

    def _reject(self, operation: str, error: RecoverableLedgerError) -> bool:
        """Publish the rejection, then hand the error to the reporter"""
        self._publish_event(EventPayload(
            event_type=DomainEvent.OPERATION_REJECTED,
            entity_type="account",
            entity_id=error.account_id or "",
            data={"operation": operation, **error.to_dict()}
        ))
        self.error_reporter.report(error)
        return False

    def _committed(self, event_type: DomainEvent, action: str, account: Account, **data: Any) -> None:
        extra = account.to_dict()
        extra.update({k: str(v) for k, v in data.items()})
        log_action(
            self.logger, "info", f"{action} committed",
            action=action, resource=f"account:{account.id}", extra=extra
        )
        self._publish_event(create_account_event(event_type, account, **data))

    def _publish_event(self, event: EventPayload) -> None:
        """Publish a domain event if event dispatcher is available"""
        if self._event_dispatcher and self.config.enable_domain_events:
            try:
                self._event_dispatcher.publish(event)
            except Exception as e:
                self.logger.error(f"Error publishing event {event.event_type.value}: {e}")
