"""
tests/test_task_policy.py -- Unit tests for tasks/policy.py (resource access policy).

The policy is the only place ownership is decided, so it is tested directly
against a real store rather than only through HTTP.
"""

from __future__ import annotations

import pytest

from auth.models import Identity, Role, User
from core.errors import InputValidationError, NotFoundError
from tasks import policy


@pytest.fixture
def alice(user_store) -> Identity:
    uid = user_store.create_user(User(email="alice@x.test", name="Alice", hashed_password="h"))
    return Identity(subject_id=uid, role=Role.USER)


@pytest.fixture
def bob(user_store) -> Identity:
    uid = user_store.create_user(User(email="bob@x.test", name="Bob", hashed_password="h"))
    return Identity(subject_id=uid, role=Role.USER)


class TestCreate:
    def test_owner_is_caller(self, task_store, alice) -> None:
        task = policy.create_task(task_store, alice, "buy milk")
        assert task.owner_id == alice.subject_id
        assert task.completed is False

    def test_title_is_trimmed(self, task_store, alice) -> None:
        assert policy.create_task(task_store, alice, "  buy milk \n").title == "buy milk"

    @pytest.mark.parametrize("title", ["", "   ", "\t\n"])
    def test_blank_title_rejected(self, task_store, alice, title) -> None:
        with pytest.raises(InputValidationError):
            policy.create_task(task_store, alice, title)

    def test_overlong_title_rejected(self, task_store, alice) -> None:
        with pytest.raises(InputValidationError):
            policy.create_task(task_store, alice, "x" * (policy.MAX_TITLE_LENGTH + 1))


class TestOwnership:
    def test_other_user_gets_not_found(self, task_store, alice, bob) -> None:
        task = policy.create_task(task_store, alice, "secret")
        with pytest.raises(NotFoundError):
            policy.get_task(task_store, bob, task.id)
        with pytest.raises(NotFoundError):
            policy.update_task(task_store, bob, task.id, completed=True)
        with pytest.raises(NotFoundError):
            policy.delete_task(task_store, bob, task.id)
        # untouched for the owner
        assert policy.get_task(task_store, alice, task.id).completed is False

    def test_not_owned_and_missing_look_the_same(self, task_store, alice, bob) -> None:
        task = policy.create_task(task_store, alice, "secret")
        with pytest.raises(NotFoundError) as not_owned:
            policy.get_task(task_store, bob, task.id)
        with pytest.raises(NotFoundError) as missing:
            policy.get_task(task_store, bob, 99999)
        assert not_owned.value.message == missing.value.message
        assert not_owned.value.status_code == missing.value.status_code == 404

    def test_list_only_returns_own_tasks(self, task_store, alice, bob) -> None:
        policy.create_task(task_store, alice, "a1")
        policy.create_task(task_store, bob, "b1")
        assert [t.title for t in policy.list_tasks(task_store, alice)] == ["a1"]


class TestUpdate:
    def test_requires_at_least_one_field(self, task_store, alice) -> None:
        task = policy.create_task(task_store, alice, "x")
        with pytest.raises(InputValidationError):
            policy.update_task(task_store, alice, task.id)

    def test_whitespace_title_rejected(self, task_store, alice) -> None:
        task = policy.create_task(task_store, alice, "x")
        with pytest.raises(InputValidationError):
            policy.update_task(task_store, alice, task.id, title="   ")

    def test_partial_updates(self, task_store, alice) -> None:
        task = policy.create_task(task_store, alice, "x")
        done = policy.update_task(task_store, alice, task.id, completed=True)
        assert done.completed is True and done.title == "x"
        renamed = policy.update_task(task_store, alice, task.id, title=" y ")
        assert renamed.title == "y" and renamed.completed is True

    def test_validation_happens_before_ownership_lookup(self, task_store, bob) -> None:
        with pytest.raises(InputValidationError):
            policy.update_task(task_store, bob, 99999)
