"""
Indexer checkpoint model.
"""

from datetime import datetime

from sqlalchemy import String, BigInteger, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import BaseModel


class IndexerState(BaseModel):
    """Named watermark: last block whose events are fully processed."""

    __tablename__ = "indexer_state"

    key: Mapped[str] = mapped_column(
        String(100),
        primary_key=True
    )

    last_block: Mapped[int] = mapped_column(
        BigInteger,
        comment="Inclusive, already processed"
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<IndexerState(key={self.key}, last_block={self.last_block})>"
