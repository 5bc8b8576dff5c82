"""
User account values (``access_review_kernel.domain.accounts``).

Accounts exist only to turn a login into an ``ActorIdentity``.  Passwords
are kept as salted PBKDF2-SHA256 strings of the form
``pbkdf2_sha256$<iterations>$<salt hex>$<hash hex>``.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets
from dataclasses import dataclass

from access_review_kernel.domain.submission import ActorIdentity

_ALGORITHM = "pbkdf2_sha256"
_ITERATIONS = 120_000


@dataclass(frozen=True)
class UserAccount:
    username: str
    role: str
    password_hash: str
    department: str = ""

    def identity(self) -> ActorIdentity:
        return ActorIdentity(username=self.username, role=self.role)


def hash_password(password: str, salt: bytes | None = None, iterations: int = _ITERATIONS) -> str:
    """Hash a password for storage."""
    salt = salt if salt is not None else secrets.token_bytes(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return f"{_ALGORITHM}${iterations}${salt.hex()}${digest.hex()}"


def verify_password(password: str, stored: str) -> bool:
    """Constant-time check of ``password`` against a stored hash."""
    try:
        algorithm, iterations, salt_hex, digest_hex = stored.split("$")
    except ValueError:
        return False
    if algorithm != _ALGORITHM:
        return False
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), bytes.fromhex(salt_hex), int(iterations),
    )
    return hmac.compare_digest(digest.hex(), digest_hex)
