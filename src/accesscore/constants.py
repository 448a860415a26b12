"""Sentinel values and well-known role identifiers.

Provides:
- ``ZERO_ADDRESS``: the "no address" sentinel (renounced owner/admin).
- ``DEFAULT_ADMIN_ROLE``: the all-zero bytes32 root-admin role.
- ``WELL_KNOWN_ROLES``: role hash → display label for common OpenZeppelin roles.
- ``resolve_role_label()``: label lookup with a per-contract override map.
"""

from __future__ import annotations

from typing import Mapping, Optional

from eth_utils import keccak

ZERO_ADDRESS = "0x" + "0" * 40
DEFAULT_ADMIN_ROLE = "0x" + "0" * 64

DEFAULT_ADMIN_ROLE_LABEL = "DEFAULT_ADMIN_ROLE"
# Ownership events carry no role; history entries use the zero role with this label.
OWNER_LABEL = "OWNER"


def role_hash(name: str) -> str:
    """Return ``keccak256(name)`` as a lowercase 0x-prefixed bytes32 hex string."""
    return "0x" + bytes(keccak(text=name)).hex()


# ── Well-known roles ────────────────────────────────────

_WELL_KNOWN_ROLE_NAMES = (
    "MINTER_ROLE",
    "PAUSER_ROLE",
    "BURNER_ROLE",
    "UPGRADER_ROLE",
    "OPERATOR_ROLE",
)

WELL_KNOWN_ROLES: dict[str, str] = {
    DEFAULT_ADMIN_ROLE: DEFAULT_ADMIN_ROLE_LABEL,
    **{role_hash(name): name for name in _WELL_KNOWN_ROLE_NAMES},
}


def is_zero_address(value: Optional[str]) -> bool:
    return value is None or value.lower() == ZERO_ADDRESS


def resolve_role_label(role_id: str, label_map: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """Resolve a display label for a role id.

    The per-contract ``label_map`` wins over the well-known dictionary.
    Unknown roles resolve to None.
    """
    key = role_id.lower()
    if label_map:
        label = label_map.get(key)
        if label:
            return label
    return WELL_KNOWN_ROLES.get(key)


__all__ = [
    "ZERO_ADDRESS",
    "DEFAULT_ADMIN_ROLE",
    "DEFAULT_ADMIN_ROLE_LABEL",
    "OWNER_LABEL",
    "WELL_KNOWN_ROLES",
    "role_hash",
    "is_zero_address",
    "resolve_role_label",
]
