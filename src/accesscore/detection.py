"""Access-control feature detection.

Maps a contract's function interface to the OpenZeppelin patterns it
implements. Pure and deterministic: no I/O.

A pattern is present only when every required function exists with the
exact parameter-type sequence. Name-only matches are rejected so that an
unrelated ``owner(uint256)`` does not make a contract look Ownable.
"""

from __future__ import annotations

import logging

from .models import AccessControlCapabilities, ContractSchema

logger = logging.getLogger(__name__)

Signature = tuple[str, tuple[str, ...]]

# ── Required signatures per tier ────────────────────────

OWNABLE_FUNCTIONS: tuple[Signature, ...] = (
    ("owner", ()),
    ("transferOwnership", ("address",)),
)

TWO_STEP_OWNABLE_FUNCTIONS: tuple[Signature, ...] = (
    ("pendingOwner", ()),
    ("acceptOwnership", ()),
)

ACCESS_CONTROL_FUNCTIONS: tuple[Signature, ...] = (
    ("hasRole", ("bytes32", "address")),
    ("grantRole", ("bytes32", "address")),
    ("revokeRole", ("bytes32", "address")),
    ("getRoleAdmin", ("bytes32",)),
)

ENUMERABLE_FUNCTIONS: tuple[Signature, ...] = (
    ("getRoleMemberCount", ("bytes32",)),
    ("getRoleMember", ("bytes32", "uint256")),
)

DEFAULT_ADMIN_RULES_FUNCTIONS: tuple[Signature, ...] = (
    ("defaultAdmin", ()),
    ("pendingDefaultAdmin", ()),
    ("defaultAdminDelay", ()),
    ("beginDefaultAdminTransfer", ("address",)),
    ("acceptDefaultAdminTransfer", ()),
    ("cancelDefaultAdminTransfer", ()),
)

ADMIN_DELAY_FUNCTIONS: tuple[Signature, ...] = (
    ("changeDefaultAdminDelay", ("uint48",)),
    ("rollbackDefaultAdminDelay", ()),
)


def _build_signature_index(schema: ContractSchema) -> dict[str, list[tuple[str, ...]]]:
    """Map function name → parameter-type sequences of all its overloads."""
    index: dict[str, list[tuple[str, ...]]] = {}
    for fn in schema.functions:
        index.setdefault(fn.name, []).append(fn.input_types)
    return index


def _has_all(index: dict[str, list[tuple[str, ...]]], required: tuple[Signature, ...]) -> bool:
    return all(types in index.get(name, ()) for name, types in required)


def detect_access_control_capabilities(
    schema: ContractSchema,
    indexer_available: bool = False,
) -> AccessControlCapabilities:
    """Detect which access-control patterns a contract implements.

    Each tier requires the tier before it: two-step ownership requires
    Ownable, enumeration and default-admin rules require AccessControl.

    Args:
        schema: Parsed contract interface
        indexer_available: Whether a history indexer is configured. Passed
            through as ``supports_history``; not checked here.

    Returns:
        Immutable capability flags with ordered human-readable notes.
    """
    index = _build_signature_index(schema)

    has_ownable = _has_all(index, OWNABLE_FUNCTIONS)
    has_two_step_ownable = has_ownable and _has_all(index, TWO_STEP_OWNABLE_FUNCTIONS)
    has_access_control = _has_all(index, ACCESS_CONTROL_FUNCTIONS)
    has_enumerable_roles = has_access_control and _has_all(index, ENUMERABLE_FUNCTIONS)
    has_two_step_admin = has_access_control and _has_all(index, DEFAULT_ADMIN_RULES_FUNCTIONS)
    has_admin_delay_management = has_two_step_admin and _has_all(index, ADMIN_DELAY_FUNCTIONS)

    notes: list[str] = []
    if has_two_step_ownable:
        notes.append("OpenZeppelin Ownable2Step interface detected (with pendingOwner + acceptOwnership)")
    elif has_ownable:
        notes.append("OpenZeppelin Ownable interface detected")

    if has_two_step_admin:
        notes.append("OpenZeppelin AccessControlDefaultAdminRules interface detected")
    elif has_access_control:
        notes.append("OpenZeppelin AccessControl interface detected")

    if has_enumerable_roles:
        notes.append("Role enumeration supported (getRoleMemberCount, getRoleMember)")
    elif has_access_control:
        notes.append("Role enumeration not available: requires known role IDs or indexer discovery")

    if not indexer_available and (has_ownable or has_access_control):
        notes.append("History queries unavailable without indexer configuration")

    if not has_ownable and not has_access_control:
        notes.append("No OpenZeppelin access control interfaces detected")

    capabilities = AccessControlCapabilities(
        has_ownable=has_ownable,
        has_two_step_ownable=has_two_step_ownable,
        has_access_control=has_access_control,
        has_two_step_admin=has_two_step_admin,
        has_admin_delay_management=has_admin_delay_management,
        has_enumerable_roles=has_enumerable_roles,
        supports_history=indexer_available,
        verified=has_ownable or has_access_control,
        notes=tuple(notes),
    )
    logger.debug("Detected capabilities for %s: %s", schema.name or "contract", capabilities)
    return capabilities


def validate_access_control_support(capabilities: AccessControlCapabilities) -> bool:
    """Return True when the contract exposes at least one supported pattern."""
    return capabilities.has_ownable or capabilities.has_access_control


__all__ = [
    "detect_access_control_capabilities",
    "validate_access_control_support",
]
