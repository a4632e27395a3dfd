"""
Tests for the account store and account records
"""

import pytest
from dataclasses import FrozenInstanceError
from datetime import datetime, timezone

from core_ledger.accounts import Account
from core_ledger.limits import MaxDebitPolicy
from core_ledger.storage import InMemoryAccountStore, AccountStore


def make_account(account_id="acc-1", name="Alice", balance=100, limit_policy=None):
    now = datetime.now(timezone.utc)
    return Account(
        id=account_id,
        created_at=now,
        updated_at=now,
        name=name,
        balance=balance,
        limit_policy=limit_policy
    )


class TestAccount:
    """Test the Account record"""

    def test_account_is_immutable(self):
        """Test that accounts cannot be mutated in place"""
        account = make_account()
        with pytest.raises(FrozenInstanceError):
            account.balance = 0

    def test_with_balance_returns_copy(self):
        """Test that with_balance leaves the original untouched"""
        account = make_account()
        updated = account.with_balance(250)

        assert account.balance == 100
        assert updated.balance == 250
        assert updated.id == account.id
        assert updated.name == account.name
        assert updated.created_at == account.created_at
        assert updated.updated_at >= account.updated_at

    def test_with_limit_policy(self):
        """Test replacing the limit policy"""
        policy = MaxDebitPolicy(10)
        account = make_account()

        updated = account.with_limit_policy(policy)

        assert not account.has_limit_policy
        assert updated.has_limit_policy
        assert updated.limit_policy is policy

    def test_to_dict(self):
        """Test account serialization"""
        account = make_account(limit_policy=MaxDebitPolicy(10))
        data = account.to_dict()

        assert data["id"] == "acc-1"
        assert data["name"] == "Alice"
        assert data["balance"] == "100"
        assert data["has_limit_policy"] is True
        assert "limit_policy" not in data
        datetime.fromisoformat(data["created_at"])


class TestInMemoryAccountStore:
    """Test the in-memory store"""

    def setup_method(self):
        """Set up test fixtures"""
        self.store = InMemoryAccountStore()

    def test_is_account_store(self):
        assert isinstance(self.store, AccountStore)

    def test_insert_and_get(self):
        """Test basic insert and lookup"""
        account = make_account()
        self.store.insert(account)

        assert self.store.get("acc-1") is account
        assert "acc-1" in self.store
        assert len(self.store) == 1
        assert self.store.names() == {"Alice"}

    def test_get_unknown_returns_none(self):
        """Test that lookup failure is not raised"""
        assert self.store.get("missing") is None
        assert "missing" not in self.store

    def test_insert_duplicate_id(self):
        """Test that an id cannot be inserted twice"""
        self.store.insert(make_account())
        with pytest.raises(ValueError, match="already stored"):
            self.store.insert(make_account(name="Other"))

    def test_replace(self):
        """Test swapping a record"""
        account = make_account()
        self.store.insert(account)

        updated = account.with_balance(5)
        self.store.replace("acc-1", updated)

        assert self.store.get("acc-1") is updated
        assert len(self.store) == 1

    def test_replace_unknown(self):
        """Test that replace requires an existing record"""
        with pytest.raises(KeyError):
            self.store.replace("missing", make_account(account_id="missing"))

    def test_replace_mismatched_id(self):
        """Test that a record cannot be stored under another id"""
        self.store.insert(make_account())
        with pytest.raises(ValueError):
            self.store.replace("acc-1", make_account(account_id="acc-2"))

    def test_all_keeps_insertion_order(self):
        """Test listing accounts"""
        self.store.insert(make_account("a", "Alice"))
        self.store.insert(make_account("b", "Bob"))

        assert [a.id for a in self.store.all()] == ["a", "b"]

    def test_names_is_a_copy(self):
        """Test that callers cannot alter the name index"""
        self.store.insert(make_account())
        self.store.names().add("Mallory")
        assert self.store.names() == {"Alice"}

    def test_atomic_commit(self):
        """Test that changes inside atomic() are kept"""
        account = make_account()
        self.store.insert(account)

        with self.store.atomic():
            self.store.replace("acc-1", account.with_balance(1))

        assert self.store.get("acc-1").balance == 1

    def test_atomic_rollback(self):
        """Test that a failing atomic block restores the previous state"""
        account = make_account()
        self.store.insert(account)

        with pytest.raises(RuntimeError):
            with self.store.atomic():
                self.store.replace("acc-1", account.with_balance(1))
                self.store.insert(make_account("acc-2", "Bob"))
                raise RuntimeError("abort")

        assert self.store.get("acc-1") is account
        assert self.store.get("acc-2") is None
        assert self.store.names() == {"Alice"}


class PlainStore(AccountStore):
    """Store implementing only the abstract interface"""

    def __init__(self):
        self.accounts = {}

    def insert(self, account):
        self.accounts[account.id] = account

    def get(self, account_id):
        return self.accounts.get(account_id)

    def replace(self, account_id, account):
        self.accounts[account_id] = account

    def all(self):
        return list(self.accounts.values())

    def names(self):
        return {a.name for a in self.accounts.values()}


class RecordingStore(PlainStore):
    """Store that records transaction hook calls"""

    def __init__(self):
        super().__init__()
        self.calls = []

    def begin_transaction(self):
        self.calls.append("begin")

    def commit(self):
        self.calls.append("commit")

    def rollback(self):
        self.calls.append("rollback")


class TestAccountStoreHooks:
    """Test the atomic() contract of the abstract store"""

    def test_atomic_calls_commit(self):
        store = RecordingStore()
        with store.atomic():
            store.insert(make_account())

        assert store.calls == ["begin", "commit"]

    def test_atomic_calls_rollback_and_reraises(self):
        store = RecordingStore()
        with pytest.raises(RuntimeError):
            with store.atomic():
                raise RuntimeError("abort")

        assert store.calls == ["begin", "rollback"]

    def test_default_hooks_keep_writes(self):
        """Test that without overridden hooks a failed block is not undone"""
        store = PlainStore()
        with pytest.raises(RuntimeError):
            with store.atomic():
                store.insert(make_account())
                raise RuntimeError("abort")

        assert store.get("acc-1") is not None
