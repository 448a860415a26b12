"""Write-descriptor builders, one per permission-changing operation.

Builders are pure: they assemble ``WriteDescriptor`` values and never
validate or perform I/O. Callers validate inputs first.
"""

from __future__ import annotations

from . import abis
from .models import WriteDescriptor


def _descriptor(contract_address: str, fragment: abis.AbiFragment, *args: object) -> WriteDescriptor:
    return WriteDescriptor(
        address=contract_address,
        abi=fragment,
        function_name=abis.function_entry(fragment)["name"],
        args=tuple(args),
    )


# ── Ownership ───────────────────────────────────────────


def assemble_transfer_ownership_action(contract_address: str, new_owner: str) -> WriteDescriptor:
    return _descriptor(contract_address, abis.TRANSFER_OWNERSHIP_ABI, new_owner)


def assemble_accept_ownership_action(contract_address: str) -> WriteDescriptor:
    return _descriptor(contract_address, abis.ACCEPT_OWNERSHIP_ABI)


def assemble_renounce_ownership_action(contract_address: str) -> WriteDescriptor:
    return _descriptor(contract_address, abis.RENOUNCE_OWNERSHIP_ABI)


# ── Default admin ───────────────────────────────────────


def assemble_begin_admin_transfer_action(contract_address: str, new_admin: str) -> WriteDescriptor:
    return _descriptor(contract_address, abis.BEGIN_DEFAULT_ADMIN_TRANSFER_ABI, new_admin)


def assemble_accept_admin_transfer_action(contract_address: str) -> WriteDescriptor:
    return _descriptor(contract_address, abis.ACCEPT_DEFAULT_ADMIN_TRANSFER_ABI)


def assemble_cancel_admin_transfer_action(contract_address: str) -> WriteDescriptor:
    return _descriptor(contract_address, abis.CANCEL_DEFAULT_ADMIN_TRANSFER_ABI)


def assemble_change_admin_delay_action(contract_address: str, new_delay: int) -> WriteDescriptor:
    """Schedule a change of the default-admin delay (seconds, uint48)."""
    return _descriptor(contract_address, abis.CHANGE_DEFAULT_ADMIN_DELAY_ABI, new_delay)


def assemble_rollback_admin_delay_action(contract_address: str) -> WriteDescriptor:
    return _descriptor(contract_address, abis.ROLLBACK_DEFAULT_ADMIN_DELAY_ABI)


# ── Roles ───────────────────────────────────────────────


def assemble_grant_role_action(contract_address: str, role_id: str, account: str) -> WriteDescriptor:
    return _descriptor(contract_address, abis.GRANT_ROLE_ABI, role_id, account)


def assemble_revoke_role_action(contract_address: str, role_id: str, account: str) -> WriteDescriptor:
    return _descriptor(contract_address, abis.REVOKE_ROLE_ABI, role_id, account)


def assemble_renounce_role_action(contract_address: str, role_id: str, account: str) -> WriteDescriptor:
    """``account`` is the caller confirmation and must equal the sender."""
    return _descriptor(contract_address, abis.RENOUNCE_ROLE_ABI, role_id, account)


__all__ = [
    "assemble_transfer_ownership_action",
    "assemble_accept_ownership_action",
    "assemble_renounce_ownership_action",
    "assemble_begin_admin_transfer_action",
    "assemble_accept_admin_transfer_action",
    "assemble_cancel_admin_transfer_action",
    "assemble_change_admin_delay_action",
    "assemble_rollback_admin_delay_action",
    "assemble_grant_role_action",
    "assemble_revoke_role_action",
    "assemble_renounce_role_action",
]
