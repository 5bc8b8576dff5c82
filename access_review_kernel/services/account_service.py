"""
access_review_kernel.services.account_service -- Login accounts.

Responsibility:
    Turns a username/password into an ``ActorIdentity`` and lets an account
    administrator create, edit, remove and reset accounts.

Architecture position:
    Kernel > Services.  May import from domain/, stores/.

Invariants enforced:
    - Passwords are stored only as salted PBKDF2 hashes.
    - Every mutation requires an acting identity whose role is an account
      administration role.

Failure modes:
    - AuthenticationError on unknown user or wrong password.
    - UnauthorizedActorError if the actor may not administer accounts.
    - UserAlreadyExistsError / UserNotFoundError.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable

from access_review_kernel.domain.accounts import UserAccount, hash_password, verify_password
from access_review_kernel.domain.submission import ActorIdentity
from access_review_kernel.exceptions import (
    AuthenticationError,
    UnauthorizedActorError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from access_review_kernel.logging_config import get_logger
from access_review_kernel.stores.base import UserStore

logger = get_logger("services.account")

# (username, password, role) seeded into an empty store.
DEFAULT_USERS: tuple[tuple[str, str, str], ...] = (
    ("user", "pass", "Normal"),
    ("admin", "admin", "Admin"),
    ("master", "master", "Master"),
    ("superadmin", "superadmin", "SuperAdmin"),
)

_ACCOUNTS_FIELD = "user_accounts"


class AccountService:
    """Authentication and account administration over a user store."""

    def __init__(self, store: UserStore, admin_roles: Iterable[str]) -> None:
        self._store = store
        self._admin_roles = frozenset(admin_roles)

    def _require_admin(self, actor: ActorIdentity) -> None:
        if actor.role not in self._admin_roles:
            logger.warning(
                "account_change_refused",
                extra={"actor": actor.username, "role": actor.role},
            )
            raise UnauthorizedActorError(actor.username, actor.role, _ACCOUNTS_FIELD)

    def _require_user(self, username: str) -> UserAccount:
        user = self._store.get_by_id(username)
        if user is None:
            raise UserNotFoundError(username)
        return user

    def seed_defaults(self, users: Iterable[tuple[str, str, str]] = DEFAULT_USERS) -> int:
        """Create the default accounts if the store is empty; return how many."""
        if self._store.list_all():
            return 0
        count = 0
        for username, password, role in users:
            self._store.upsert(UserAccount(username, role, hash_password(password)))
            count += 1
        logger.info("default_users_seeded", extra={"count": count})
        return count

    def authenticate(self, username: str, password: str) -> ActorIdentity:
        user = self._store.get_by_id(username)
        if user is None or not verify_password(password, user.password_hash):
            logger.warning("authentication_failed", extra={"username": username})
            raise AuthenticationError(username)
        return user.identity()

    def list_users(self) -> list[UserAccount]:
        return self._store.list_all()

    def create_user(
        self,
        actor: ActorIdentity,
        username: str,
        password: str,
        role: str,
        department: str = "",
    ) -> UserAccount:
        self._require_admin(actor)
        if self._store.get_by_id(username) is not None:
            raise UserAlreadyExistsError(username)
        user = UserAccount(
            username=username,
            role=role,
            password_hash=hash_password(password),
            department=department,
        )
        self._store.upsert(user)
        logger.info("user_created", extra={"username": username, "role": role})
        return user

    def update_user(
        self,
        actor: ActorIdentity,
        username: str,
        role: str | None = None,
        department: str | None = None,
    ) -> UserAccount:
        """Change role and/or department; None leaves a value as is."""
        self._require_admin(actor)
        user = self._require_user(username)
        if role is not None:
            user = replace(user, role=role)
        if department is not None:
            user = replace(user, department=department)
        self._store.upsert(user)
        logger.info("user_updated", extra={"username": username, "role": user.role})
        return user

    def delete_user(self, actor: ActorIdentity, username: str) -> None:
        self._require_admin(actor)
        if not self._store.delete(username):
            raise UserNotFoundError(username)
        logger.info("user_deleted", extra={"username": username})

    def reset_password(self, actor: ActorIdentity, username: str, new_password: str) -> None:
        self._require_admin(actor)
        user = self._require_user(username)
        self._store.upsert(replace(user, password_hash=hash_password(new_password)))
        logger.info("password_reset", extra={"username": username})
