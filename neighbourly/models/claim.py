# File: neighbourly/models/claim.py
from __future__ import annotations
from datetime import datetime
from sqlalchemy import String, DateTime, Index, func, text
from sqlalchemy.orm import Mapped, mapped_column
from neighbourly.db.base import Base

ACTIVE = "deleted_at IS NULL"
MAX_SLUG_LENGTH = 64
MAX_CLAIMER_LENGTH = 255

class Claim(Base):
    __tablename__ = "claims"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    mesh_block_slug: Mapped[str] = mapped_column(String(MAX_SLUG_LENGTH), index=True, nullable=False)
    claimer: Mapped[str] = mapped_column("mesh_block_claimer", String(MAX_CLAIMER_LENGTH), index=True, nullable=False)
    claim_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # released claims keep their row for reporting; active means deleted_at is null
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index(
            "uq_claims_active_slug",
            "mesh_block_slug",
            unique=True,
            postgresql_where=text(ACTIVE),
            sqlite_where=text(ACTIVE),
        ),
    )

    @property
    def is_active(self) -> bool:
        return self.deleted_at is None
