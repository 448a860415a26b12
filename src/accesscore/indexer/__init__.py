"""Client for the access-control event indexer.

Provides:
- ``IndexerClient``: availability check, pending transfers, grants, history, role discovery.
- ``map_event_type`` / ``classify_event``: event taxonomy.
- ``build_history_query``: filtered, cursor-paginated history query.
"""

from .client import IndexerClient, grant_key
from .events import (
    CHANGE_TYPE_TO_EVENT_TYPES,
    EVENT_TYPE_TO_CHANGE_TYPE,
    EventFamily,
    classify_event,
    map_event_type,
)
from .queries import FilterClause, build_history_query

__all__ = [
    "IndexerClient",
    "grant_key",
    "EVENT_TYPE_TO_CHANGE_TYPE",
    "CHANGE_TYPE_TO_EVENT_TYPES",
    "EventFamily",
    "classify_event",
    "map_event_type",
    "FilterClause",
    "build_history_query",
]
