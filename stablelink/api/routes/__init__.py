"""API routes package."""

from . import invoices, public_invoices, organization, webhooks, withdrawals, indexer

__all__ = ["invoices", "public_invoices", "organization", "webhooks", "withdrawals", "indexer"]
