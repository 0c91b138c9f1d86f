"""
Event handlers for the indexer.
"""

from .invoice_handlers import InvoiceHandlers
from .withdrawal_handlers import WithdrawalHandlers
from .reconciler import EventReconciler

__all__ = [
    "InvoiceHandlers",
    "WithdrawalHandlers",
    "EventReconciler",
]
