"""Single-function ABI fragments for the access-control surface.

One fragment per operation, in standard JSON ABI shape, so that each
read or write descriptor carries only the function it calls.
"""

from __future__ import annotations

from typing import Any

AbiFragment = list[dict[str, Any]]


def _param(name: str, type_: str) -> dict[str, str]:
    return {"name": name, "type": type_}


def _function(
    name: str,
    inputs: list[dict[str, str]] | None = None,
    outputs: list[dict[str, str]] | None = None,
    mutability: str = "nonpayable",
) -> AbiFragment:
    return [
        {
            "type": "function",
            "name": name,
            "inputs": inputs or [],
            "outputs": outputs or [],
            "stateMutability": mutability,
        }
    ]


# ── Ownable ─────────────────────────────────────────────

OWNER_ABI = _function("owner", outputs=[_param("", "address")], mutability="view")
TRANSFER_OWNERSHIP_ABI = _function("transferOwnership", [_param("newOwner", "address")])
RENOUNCE_OWNERSHIP_ABI = _function("renounceOwnership")

# ── Ownable2Step ────────────────────────────────────────

PENDING_OWNER_ABI = _function("pendingOwner", outputs=[_param("", "address")], mutability="view")
ACCEPT_OWNERSHIP_ABI = _function("acceptOwnership")

# ── AccessControl ───────────────────────────────────────

HAS_ROLE_ABI = _function(
    "hasRole",
    [_param("role", "bytes32"), _param("account", "address")],
    [_param("", "bool")],
    mutability="view",
)
GET_ROLE_ADMIN_ABI = _function(
    "getRoleAdmin", [_param("role", "bytes32")], [_param("", "bytes32")], mutability="view"
)
GRANT_ROLE_ABI = _function("grantRole", [_param("role", "bytes32"), _param("account", "address")])
REVOKE_ROLE_ABI = _function("revokeRole", [_param("role", "bytes32"), _param("account", "address")])
RENOUNCE_ROLE_ABI = _function(
    "renounceRole", [_param("role", "bytes32"), _param("callerConfirmation", "address")]
)

# ── AccessControlEnumerable ─────────────────────────────

GET_ROLE_MEMBER_COUNT_ABI = _function(
    "getRoleMemberCount", [_param("role", "bytes32")], [_param("", "uint256")], mutability="view"
)
GET_ROLE_MEMBER_ABI = _function(
    "getRoleMember",
    [_param("role", "bytes32"), _param("index", "uint256")],
    [_param("", "address")],
    mutability="view",
)

# ── AccessControlDefaultAdminRules ──────────────────────

DEFAULT_ADMIN_ABI = _function("defaultAdmin", outputs=[_param("", "address")], mutability="view")
PENDING_DEFAULT_ADMIN_ABI = _function(
    "pendingDefaultAdmin",
    outputs=[_param("newAdmin", "address"), _param("schedule", "uint48")],
    mutability="view",
)
DEFAULT_ADMIN_DELAY_ABI = _function("defaultAdminDelay", outputs=[_param("", "uint48")], mutability="view")
BEGIN_DEFAULT_ADMIN_TRANSFER_ABI = _function("beginDefaultAdminTransfer", [_param("newAdmin", "address")])
ACCEPT_DEFAULT_ADMIN_TRANSFER_ABI = _function("acceptDefaultAdminTransfer")
CANCEL_DEFAULT_ADMIN_TRANSFER_ABI = _function("cancelDefaultAdminTransfer")
CHANGE_DEFAULT_ADMIN_DELAY_ABI = _function("changeDefaultAdminDelay", [_param("newDelay", "uint48")])
ROLLBACK_DEFAULT_ADMIN_DELAY_ABI = _function("rollbackDefaultAdminDelay")


def function_entry(fragment: AbiFragment) -> dict[str, Any]:
    """Return the single function entry of a one-function fragment."""
    return fragment[0]


def input_types(fragment: AbiFragment) -> list[str]:
    return [p["type"] for p in function_entry(fragment)["inputs"]]


def output_types(fragment: AbiFragment) -> list[str]:
    return [p["type"] for p in function_entry(fragment)["outputs"]]


def function_signature(fragment: AbiFragment) -> str:
    """Canonical signature, e.g. ``hasRole(bytes32,address)``."""
    entry = function_entry(fragment)
    return f"{entry['name']}({','.join(input_types(fragment))})"


__all__ = [
    "AbiFragment",
    "OWNER_ABI",
    "TRANSFER_OWNERSHIP_ABI",
    "RENOUNCE_OWNERSHIP_ABI",
    "PENDING_OWNER_ABI",
    "ACCEPT_OWNERSHIP_ABI",
    "HAS_ROLE_ABI",
    "GET_ROLE_ADMIN_ABI",
    "GRANT_ROLE_ABI",
    "REVOKE_ROLE_ABI",
    "RENOUNCE_ROLE_ABI",
    "GET_ROLE_MEMBER_COUNT_ABI",
    "GET_ROLE_MEMBER_ABI",
    "DEFAULT_ADMIN_ABI",
    "PENDING_DEFAULT_ADMIN_ABI",
    "DEFAULT_ADMIN_DELAY_ABI",
    "BEGIN_DEFAULT_ADMIN_TRANSFER_ABI",
    "ACCEPT_DEFAULT_ADMIN_TRANSFER_ABI",
    "CANCEL_DEFAULT_ADMIN_TRANSFER_ABI",
    "CHANGE_DEFAULT_ADMIN_DELAY_ABI",
    "ROLLBACK_DEFAULT_ADMIN_DELAY_ABI",
    "function_entry",
    "input_types",
    "output_types",
    "function_signature",
]
