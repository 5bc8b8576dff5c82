"""
Module: access_review_kernel.models.summary
Responsibility: ORM persistence for the derived per-user summary table.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - position is the primary key and keeps the table in insertion order.
      Imported tables may repeat a user_id, so user_id is indexed, not unique.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from access_review_kernel.db.base import Base

if TYPE_CHECKING:
    from access_review_kernel.domain.summary import SummaryRow


class SummaryRowModel(Base):
    """One summary row at a fixed position in the table."""

    __tablename__ = "access_review_summary_rows"

    position: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    user_id: Mapped[str] = mapped_column(String(150), nullable=False, index=True)
    company_list: Mapped[str] = mapped_column(Text, nullable=False, default="")
    security_group: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    def __repr__(self) -> str:
        return f"<SummaryRowModel {self.position}:{self.user_id}>"

    def to_dto(self) -> SummaryRow:
        """Convert ORM model to frozen domain DTO."""
        from access_review_kernel.domain.summary import SummaryRow

        return SummaryRow(
            user_id=self.user_id,
            company_list=self.company_list,
            security_group=self.security_group,
        )

    @classmethod
    def from_dto(cls, dto: SummaryRow, position: int) -> SummaryRowModel:
        """Create ORM model from domain DTO."""
        return cls(
            position=position,
            user_id=dto.user_id,
            company_list=dto.company_list,
            security_group=dto.security_group,
        )
