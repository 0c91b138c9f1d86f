"""
Core indexer components.
"""

from .types import IndexerStatus, ProcessingStats, PassResult
from .event_indexer import EventIndexer, create_event_indexer

__all__ = [
    "IndexerStatus",
    "ProcessingStats",
    "PassResult",
    "EventIndexer",
    "create_event_indexer",
]
