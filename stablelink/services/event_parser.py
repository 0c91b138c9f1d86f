"""
Event parser for InvoicePayments contract logs.
Turns decoded web3 event logs into typed ChainEvent records.
"""

from typing import Any, Dict, Mapping, Union
from dataclasses import dataclass
from enum import Enum

import structlog
from web3 import Web3

from stablelink.core.config import LedgerConfig
from stablelink.core.exceptions import ValidationError


logger = structlog.get_logger(__name__)


class EventKind(Enum):
    """Contract events the indexer follows, valued by their ABI name."""
    CREATED = "InvoiceCreated"
    PAID = "InvoicePaid"
    CANCELLED = "InvoiceCancelled"
    WITHDRAWAL_COMPLETED = "Withdrawal"

    @property
    def label(self) -> str:
        """Webhook event label, e.g. ``invoice.paid``."""
        return LedgerConfig.EVENT_LABELS[self.value]


# Order in which a pass fetches, reconciles and notifies.
FETCH_ORDER = (
    EventKind.CREATED,
    EventKind.PAID,
    EventKind.CANCELLED,
    EventKind.WITHDRAWAL_COMPLETED,
)


@dataclass(frozen=True)
class InvoiceCreatedData:
    """InvoiceCreated event data."""
    invoice_id: int
    creator: str
    token: str
    amount: int

    def to_webhook(self, event: "ChainEvent") -> Dict[str, Any]:
        return {
            "invoiceId": self.invoice_id,
            "creator": self.creator,
            "token": self.token,
            "amount": str(self.amount),
        }


@dataclass(frozen=True)
class InvoicePaidData:
    """InvoicePaid event data."""
    invoice_id: int
    payer: str
    amount: int

    def to_webhook(self, event: "ChainEvent") -> Dict[str, Any]:
        return {
            "invoiceId": self.invoice_id,
            "payer": self.payer,
            "amount": str(self.amount),
            "txHash": event.transaction_hash,
        }


@dataclass(frozen=True)
class InvoiceCancelledData:
    """InvoiceCancelled event data."""
    invoice_id: int

    def to_webhook(self, event: "ChainEvent") -> Dict[str, Any]:
        return {"invoiceId": self.invoice_id}


@dataclass(frozen=True)
class WithdrawalCompletedData:
    """Withdrawal event data."""
    user: str
    token: str
    amount: int

    def to_webhook(self, event: "ChainEvent") -> Dict[str, Any]:
        return {
            "user": self.user,
            "token": self.token,
            "amount": str(self.amount),
        }


EventData = Union[InvoiceCreatedData, InvoicePaidData, InvoiceCancelledData, WithdrawalCompletedData]


@dataclass(frozen=True)
class ChainEvent:
    """One decoded contract log. Identity is its position in the chain."""
    kind: EventKind
    block_number: int
    transaction_hash: str
    log_index: int
    data: EventData

    @property
    def label(self) -> str:
        return self.kind.label

    @property
    def sort_key(self) -> tuple:
        return (self.block_number, self.log_index)

    def webhook_payload(self) -> Dict[str, Any]:
        """Kind-specific webhook fields, without the ``event`` label."""
        return self.data.to_webhook(self)


def _to_hex(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return Web3.to_hex(value)
    return str(value)


def _decode_data(kind: EventKind, args: Mapping[str, Any]) -> EventData:
    if kind is EventKind.CREATED:
        return InvoiceCreatedData(
            invoice_id=int(args["invoiceId"]),
            creator=args["creator"],
            token=args["token"],
            amount=int(args["amount"]),
        )
    if kind is EventKind.PAID:
        return InvoicePaidData(
            invoice_id=int(args["invoiceId"]),
            payer=args["payer"],
            amount=int(args["amount"]),
        )
    if kind is EventKind.CANCELLED:
        return InvoiceCancelledData(invoice_id=int(args["invoiceId"]))
    return WithdrawalCompletedData(
        user=args["user"],
        token=args["token"],
        amount=int(args["amount"]),
    )


def parse_event_log(kind: EventKind, log: Mapping[str, Any]) -> ChainEvent:
    """
    Build a ChainEvent from a web3 event log.

    Args:
        kind: Event the log was queried for
        log: Decoded log (``args``, ``blockNumber``, ``transactionHash``, ``logIndex``)

    Raises:
        ValidationError: If the log lacks a required field
    """
    try:
        return ChainEvent(
            kind=kind,
            block_number=int(log["blockNumber"]),
            transaction_hash=_to_hex(log["transactionHash"]),
            log_index=int(log.get("logIndex") or 0),
            data=_decode_data(kind, log["args"]),
        )
    except (KeyError, TypeError, ValueError) as e:
        logger.error("Malformed event log", event_name=kind.value, error=str(e))
        raise ValidationError(
            f"Malformed {kind.value} log: {e}",
            {"event_name": kind.value}
        ) from e
