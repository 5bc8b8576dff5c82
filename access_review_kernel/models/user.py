"""
Module: access_review_kernel.models.user
Responsibility: ORM persistence for login accounts.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - username is the primary key.
    - Only the PBKDF2 hash is stored, never the password.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from access_review_kernel.db.base import Base

if TYPE_CHECKING:
    from access_review_kernel.domain.accounts import UserAccount


class UserModel(Base):
    """One login account."""

    __tablename__ = "access_review_users"

    username: Mapped[str] = mapped_column(String(150), primary_key=True)
    role: Mapped[str] = mapped_column(String(50), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    department: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    def __repr__(self) -> str:
        return f"<UserModel {self.username} ({self.role})>"

    def to_dto(self) -> UserAccount:
        """Convert ORM model to frozen domain DTO."""
        from access_review_kernel.domain.accounts import UserAccount

        return UserAccount(
            username=self.username,
            role=self.role,
            password_hash=self.password_hash,
            department=self.department,
        )

    @classmethod
    def from_dto(cls, dto: UserAccount) -> UserModel:
        """Create ORM model from domain DTO."""
        return cls(
            username=dto.username,
            role=dto.role,
            password_hash=dto.password_hash,
            department=dto.department,
        )
