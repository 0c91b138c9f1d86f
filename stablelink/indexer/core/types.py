"""
Core types for event indexing.
"""

from datetime import datetime
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional


class IndexerStatus(Enum):
    """Status of the event indexer."""
    STOPPED = "stopped"
    READY = "ready"
    ERROR = "error"


@dataclass
class ProcessingStats:
    """Statistics for event processing."""
    events_processed: int = 0
    invoices_created: int = 0
    invoices_paid: int = 0
    invoices_cancelled: int = 0
    withdrawals_completed: int = 0
    invoices_updated: int = 0
    notifications_queued: int = 0
    errors: int = 0
    last_processed_block: Optional[int] = None
    start_time: Optional[datetime] = None


@dataclass
class PassResult:
    """Outcome of one indexing pass over ``(from_block, to_block]``."""
    from_block: int
    to_block: int
    events: Dict[str, int] = field(default_factory=dict)
    invoices_updated: int = 0
    notifications: int = 0
    advanced: bool = False

    @property
    def total_events(self) -> int:
        return sum(self.events.values())
