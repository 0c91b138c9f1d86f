"""
Database models for StableLink backend.

Contains SQLAlchemy models for invoices, their owners and subscribers,
and the indexer checkpoint.
"""

from .base import Base, BaseModel, TimestampMixin
from .organization import Organization, ApiKey
from .invoice import Invoice, InvoiceStatus, NO_ONCHAIN_ID, OPEN_STATUSES
from .webhook import Webhook
from .withdrawal import Withdrawal
from .indexer_state import IndexerState

__all__ = [
    "Base",
    "BaseModel",
    "TimestampMixin",
    "Organization",
    "ApiKey",
    "Invoice",
    "InvoiceStatus",
    "NO_ONCHAIN_ID",
    "OPEN_STATUSES",
    "Webhook",
    "Withdrawal",
    "IndexerState",
]
