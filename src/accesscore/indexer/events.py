"""Event taxonomy of the access-control indexer.

The indexer stores every event in one flat record shape shared by three
unrelated families. Each event is classified once into its family, and
both the role and the account of a history entry are derived from that
classification.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Mapping

from ..constants import DEFAULT_ADMIN_ROLE, DEFAULT_ADMIN_ROLE_LABEL, OWNER_LABEL, resolve_role_label
from ..models import HistoryChangeType, RoleIdentifier

EVENT_TYPE_TO_CHANGE_TYPE: dict[str, HistoryChangeType] = {
    "ROLE_GRANTED": HistoryChangeType.GRANTED,
    "ROLE_REVOKED": HistoryChangeType.REVOKED,
    "ROLE_ADMIN_CHANGED": HistoryChangeType.ROLE_ADMIN_CHANGED,
    "OWNERSHIP_TRANSFER_STARTED": HistoryChangeType.OWNERSHIP_TRANSFER_STARTED,
    "OWNERSHIP_TRANSFER_COMPLETED": HistoryChangeType.OWNERSHIP_TRANSFER_COMPLETED,
    "OWNERSHIP_RENOUNCED": HistoryChangeType.OWNERSHIP_RENOUNCED,
    "ADMIN_TRANSFER_INITIATED": HistoryChangeType.ADMIN_TRANSFER_INITIATED,
    "ADMIN_TRANSFER_COMPLETED": HistoryChangeType.ADMIN_TRANSFER_COMPLETED,
    "ADMIN_RENOUNCED": HistoryChangeType.ADMIN_RENOUNCED,
    # AccessControlDefaultAdminRules variants
    "DEFAULT_ADMIN_TRANSFER_SCHEDULED": HistoryChangeType.ADMIN_TRANSFER_INITIATED,
    "DEFAULT_ADMIN_TRANSFER_CANCELED": HistoryChangeType.ADMIN_TRANSFER_CANCELED,
    "DEFAULT_ADMIN_DELAY_CHANGE_SCHEDULED": HistoryChangeType.ADMIN_DELAY_CHANGE_SCHEDULED,
    "DEFAULT_ADMIN_DELAY_CHANGE_CANCELED": HistoryChangeType.ADMIN_DELAY_CHANGE_CANCELED,
}


def _invert(mapping: Mapping[str, HistoryChangeType]) -> dict[HistoryChangeType, tuple[str, ...]]:
    inverted: dict[HistoryChangeType, list[str]] = {}
    for event_type, change_type in mapping.items():
        inverted.setdefault(change_type, []).append(event_type)
    return {change_type: tuple(events) for change_type, events in inverted.items()}


# Change type → literal indexer event types, used to build filters
CHANGE_TYPE_TO_EVENT_TYPES: dict[HistoryChangeType, tuple[str, ...]] = _invert(EVENT_TYPE_TO_CHANGE_TYPE)


def map_event_type(event_type: str) -> HistoryChangeType:
    """Map an indexer event type to its change type; unrecognized types map to UNKNOWN."""
    return EVENT_TYPE_TO_CHANGE_TYPE.get(event_type, HistoryChangeType.UNKNOWN)


class EventFamily(str, Enum):
    ROLE = "role"
    OWNERSHIP = "ownership"
    ADMIN = "admin"


def classify_event(event_type: str) -> EventFamily:
    """Classify an indexer event type into its family.

    Unrecognized events are treated as role events and keep their own
    ``role``/``account`` fields.
    """
    if event_type.startswith("OWNERSHIP_"):
        return EventFamily.OWNERSHIP
    if event_type.startswith(("ADMIN_", "DEFAULT_ADMIN_")):
        return EventFamily.ADMIN
    return EventFamily.ROLE


def role_for_event(family: EventFamily, node: Mapping[str, Any]) -> RoleIdentifier:
    if family is EventFamily.OWNERSHIP:
        return RoleIdentifier(id=DEFAULT_ADMIN_ROLE, label=OWNER_LABEL)
    if family is EventFamily.ADMIN:
        return RoleIdentifier(id=DEFAULT_ADMIN_ROLE, label=DEFAULT_ADMIN_ROLE_LABEL)
    role_id = (node.get("role") or DEFAULT_ADMIN_ROLE).lower()
    return RoleIdentifier(id=role_id, label=resolve_role_label(role_id))


def account_for_event(family: EventFamily, node: Mapping[str, Any]) -> str:
    if family is EventFamily.OWNERSHIP:
        return node.get("newOwner") or ""
    if family is EventFamily.ADMIN:
        return node.get("newAdmin") or ""
    return node.get("account") or ""


__all__ = [
    "EVENT_TYPE_TO_CHANGE_TYPE",
    "CHANGE_TYPE_TO_EVENT_TYPES",
    "EventFamily",
    "map_event_type",
    "classify_event",
    "role_for_event",
    "account_for_event",
]
