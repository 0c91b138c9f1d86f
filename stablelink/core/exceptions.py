"""
Custom exception classes for the application.
Provides structured error handling across all modules.
"""

from typing import Any, Optional, Dict


class StablelinkException(Exception):
    """Base exception class for StableLink backend."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(StablelinkException):
    """Raised when there's a configuration error."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "CONFIGURATION_ERROR", details)


class DatabaseError(StablelinkException):
    """Raised when there's a database error."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "DATABASE_ERROR", details)


class LedgerError(StablelinkException):
    """Raised when the EVM RPC endpoint fails outside of a log query."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "LEDGER_ERROR", details)


class IndexerError(StablelinkException):
    """Raised when there's an event indexer error."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        code: str = "INDEXER_ERROR"
    ):
        super().__init__(message, code, details)


class RateLimitedError(IndexerError):
    """Raised when the RPC endpoint signals a rate limit. Transient."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details, "RATE_LIMITED")


class FetchFailedError(IndexerError):
    """Raised when a block range could not be fetched. Terminal for the pass."""

    def __init__(self, event_name: str, from_block: int, to_block: int, reason: str):
        super().__init__(
            f"Failed to fetch {event_name} logs for blocks {from_block}-{to_block}: {reason}",
            {
                "event_name": event_name,
                "from_block": from_block,
                "to_block": to_block,
                "reason": reason,
            },
            "FETCH_FAILED"
        )


class ReconcileFailedError(IndexerError):
    """Raised when a decoded event could not be applied to local state."""

    def __init__(self, event_name: str, transaction_hash: str, reason: str):
        super().__init__(
            f"Failed to reconcile {event_name} from {transaction_hash}: {reason}",
            {
                "event_name": event_name,
                "transaction_hash": transaction_hash,
                "reason": reason,
            },
            "RECONCILE_FAILED"
        )


class DeliveryFailedError(StablelinkException):
    """Raised when a webhook delivery fails. Logged, never escalated."""

    def __init__(self, url: str, event: str, reason: str):
        super().__init__(
            f"Webhook delivery of {event} to {url} failed: {reason}",
            "DELIVERY_FAILED",
            {"url": url, "event": event, "reason": reason}
        )


class ValidationError(StablelinkException):
    """Raised when data validation fails."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "VALIDATION_ERROR", details)


class NotFoundError(StablelinkException):
    """Raised when a requested resource is not found."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "NOT_FOUND", details)


class AuthenticationError(StablelinkException):
    """Raised when authentication fails."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "AUTHENTICATION_ERROR", details)


class InvoiceNotFoundError(NotFoundError):
    """Raised when an invoice is not found for the organization."""

    def __init__(self, invoice_id: str):
        super().__init__(
            f"Invoice not found: {invoice_id}",
            {"invoice_id": invoice_id}
        )


class OrganizationNotFoundError(NotFoundError):
    """Raised when the organization behind an API key no longer exists."""

    def __init__(self, organization_id: str):
        super().__init__(
            f"Organization not found: {organization_id}",
            {"organization_id": organization_id}
        )
