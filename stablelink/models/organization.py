"""
Organization and API key models - tenants of the invoicing API.
"""

from typing import Optional

from sqlalchemy import String, Integer, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from .base import BaseModel, TimestampMixin, generate_uuid


class Organization(BaseModel, TimestampMixin):
    """Organization owning invoices, webhooks and API keys."""

    __tablename__ = "organizations"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=generate_uuid
    )

    name: Mapped[str] = mapped_column(
        String(200),
        comment="Display name"
    )

    primary_wallet: Mapped[str] = mapped_column(
        String(42),
        comment="Default creator wallet for new invoices"
    )

    default_platform_fee: Mapped[int] = mapped_column(
        Integer,
        default=300,
        comment="Platform fee in basis points"
    )

    def __repr__(self) -> str:
        return f"<Organization(id={self.id}, name={self.name})>"


class ApiKey(BaseModel, TimestampMixin):
    """API key pair for one organization."""

    __tablename__ = "api_keys"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=generate_uuid
    )

    organization_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("organizations.id", ondelete="CASCADE")
    )

    test_key: Mapped[Optional[str]] = mapped_column(
        String(128),
        unique=True,
        comment="Key accepted in test mode"
    )

    live_key: Mapped[Optional[str]] = mapped_column(
        String(128),
        unique=True,
        comment="Key accepted in live mode"
    )

    __table_args__ = (
        Index("idx_api_key_organization", "organization_id"),
    )
