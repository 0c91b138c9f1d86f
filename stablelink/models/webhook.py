"""
Webhook subscription model.
"""

from typing import List

from sqlalchemy import String, Text, JSON, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from .base import BaseModel, TimestampMixin, generate_uuid


class Webhook(BaseModel, TimestampMixin):
    """Third-party endpoint subscribed to a set of event labels."""

    __tablename__ = "webhooks"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=generate_uuid
    )

    organization_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("organizations.id", ondelete="CASCADE")
    )

    url: Mapped[str] = mapped_column(
        Text,
        comment="Delivery URL"
    )

    subscribed_events: Mapped[List[str]] = mapped_column(
        JSON,
        default=list,
        comment="Event labels, e.g. invoice.paid"
    )

    __table_args__ = (
        Index("idx_webhook_organization", "organization_id"),
    )

    def __repr__(self) -> str:
        return f"<Webhook(id={self.id}, url={self.url})>"

    def is_subscribed_to(self, event: str) -> bool:
        return event in (self.subscribed_events or [])
