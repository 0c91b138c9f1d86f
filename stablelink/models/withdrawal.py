"""
Withdrawal model - append-only log of completed withdrawals.
"""

from sqlalchemy import String, Index
from sqlalchemy.orm import Mapped, mapped_column

from .base import BaseModel, TimestampMixin, generate_uuid


class Withdrawal(BaseModel, TimestampMixin):
    """One withdrawal of a token balance to a wallet."""

    __tablename__ = "withdrawals"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=generate_uuid
    )

    wallet: Mapped[str] = mapped_column(
        String(42),
        comment="Lower-cased receiving wallet"
    )

    token: Mapped[str] = mapped_column(String(42))

    amount_raw: Mapped[str] = mapped_column(
        String(78),
        comment="Amount in token base units as a decimal string"
    )

    tx_hash: Mapped[str] = mapped_column(String(66))

    __table_args__ = (
        Index("idx_withdrawal_wallet_created", "wallet", "created_at"),
        Index("idx_withdrawal_unique", "wallet", "token", "amount_raw", "tx_hash", unique=True),
    )
