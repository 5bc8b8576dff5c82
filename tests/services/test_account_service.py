"""Tests for AccountService: login and account administration."""

import pytest

from access_review_kernel.domain.accounts import UserAccount, hash_password
from access_review_kernel.domain.submission import ActorIdentity
from access_review_kernel.exceptions import (
    AuthenticationError,
    UnauthorizedActorError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from access_review_kernel.services.account_service import DEFAULT_USERS, AccountService
from access_review_kernel.stores.memory import InMemoryUserStore


@pytest.fixture
def accounts(user_store):
    return AccountService(user_store, admin_roles={"SuperAdmin"})


@pytest.fixture
def users():
    return InMemoryUserStore()


@pytest.fixture
def memory_accounts(users):
    return AccountService(users, admin_roles={"SuperAdmin"})


class TestSeeding:
    def test_seeds_empty_store_once(self, accounts):
        assert accounts.seed_defaults() == len(DEFAULT_USERS)
        assert accounts.seed_defaults() == 0
        assert {u.username for u in accounts.list_users()} == {u for u, _, _ in DEFAULT_USERS}

    def test_default_logins(self, memory_accounts):
        memory_accounts.seed_defaults()
        assert memory_accounts.authenticate("admin", "admin") == ActorIdentity("admin", "Admin")
        assert memory_accounts.authenticate("user", "pass").role == "Normal"

    def test_passwords_not_stored_in_clear(self, memory_accounts):
        memory_accounts.seed_defaults()
        for user in memory_accounts.list_users():
            assert user.password_hash.startswith("pbkdf2_sha256$")


class TestAuthenticate:
    def test_wrong_password(self, memory_accounts, captured_logs):
        memory_accounts.seed_defaults()
        with pytest.raises(AuthenticationError):
            memory_accounts.authenticate("admin", "wrong")
        events = [r for r in captured_logs() if r["message"] == "authentication_failed"]
        assert events[0]["username"] == "admin"

    def test_unknown_user(self, memory_accounts):
        with pytest.raises(AuthenticationError):
            memory_accounts.authenticate("ghost", "x")


class TestAdministration:
    def test_create_update_delete(self, accounts, superadmin):
        created = accounts.create_user(superadmin, "Siva", "pw", "Normal", department="Finance")
        assert created.department == "Finance"
        assert accounts.authenticate("Siva", "pw") == ActorIdentity("Siva", "Normal")

        updated = accounts.update_user(superadmin, "Siva", role="Admin")
        assert updated.role == "Admin"
        assert updated.department == "Finance"
        assert accounts.authenticate("Siva", "pw").role == "Admin"

        accounts.delete_user(superadmin, "Siva")
        with pytest.raises(UserNotFoundError):
            accounts.delete_user(superadmin, "Siva")

    def test_duplicate_username(self, accounts, superadmin):
        accounts.create_user(superadmin, "HOD", "pw", "Normal")
        with pytest.raises(UserAlreadyExistsError):
            accounts.create_user(superadmin, "HOD", "pw2", "Normal")

    def test_reset_password(self, accounts, superadmin):
        accounts.create_user(superadmin, "HOD", "old", "Normal")
        accounts.reset_password(superadmin, "HOD", "new")
        assert accounts.authenticate("HOD", "new").username == "HOD"
        with pytest.raises(AuthenticationError):
            accounts.authenticate("HOD", "old")

    def test_update_unknown(self, memory_accounts, superadmin):
        with pytest.raises(UserNotFoundError):
            memory_accounts.update_user(superadmin, "ghost", role="Admin")

    @pytest.mark.parametrize("role", ["Normal", "Admin", "Master"])
    def test_non_admins_refused(self, memory_accounts, users, role, captured_logs):
        users.upsert(UserAccount("victim", "Normal", hash_password("pw", iterations=1000)))
        actor = ActorIdentity("someone", role)
        with pytest.raises(UnauthorizedActorError) as exc_info:
            memory_accounts.create_user(actor, "x", "pw", "Normal")
        assert exc_info.value.field == "user_accounts"
        with pytest.raises(UnauthorizedActorError):
            memory_accounts.reset_password(actor, "victim", "owned")
        with pytest.raises(UnauthorizedActorError):
            memory_accounts.delete_user(actor, "victim")
        assert memory_accounts.authenticate("victim", "pw").username == "victim"
        assert any(r["message"] == "account_change_refused" for r in captured_logs())
