"""On-chain reads of ownership, default-admin and role state.

Stateless functions over an ``RpcClient``. Required reads (owner,
default admin, member count, block number) raise OperationFailed with
the contract and operation name; optional reads (pending owner, pending
admin, admin delay, per-index members, hasRole checks) log and degrade.
All-zero addresses are normalized to None.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Mapping, Optional, Sequence

from . import abis
from .constants import is_zero_address, resolve_role_label
from .exceptions import AccessCoreError, OperationFailed
from .models import AdminReadResult, OwnershipReadResult, RoleAssignment, RoleIdentifier
from .rpc import RpcClient

logger = logging.getLogger(__name__)


def _address_or_none(value: Optional[str]) -> Optional[str]:
    return None if is_zero_address(value) else value


async def read_ownership(rpc: RpcClient, contract_address: str) -> OwnershipReadResult:
    """Read ``owner()`` and, if supported, ``pendingOwner()``.

    Raises:
        OperationFailed: when ``owner()`` cannot be read.
    """
    logger.info("Reading ownership for %s", contract_address)
    try:
        (owner,) = await rpc.call_function(contract_address, abis.OWNER_ABI)
    except AccessCoreError as exc:
        raise OperationFailed(
            f"Failed to read ownership: {exc.message}",
            contract_address=contract_address,
            operation="read_ownership",
            cause=exc,
        ) from exc

    pending_owner: Optional[str] = None
    try:
        (pending,) = await rpc.call_function(contract_address, abis.PENDING_OWNER_ABI)
        pending_owner = _address_or_none(pending)
    except AccessCoreError as exc:
        # Plain Ownable has no pendingOwner()
        logger.debug("pendingOwner() not available on %s: %s", contract_address, exc.message)

    return OwnershipReadResult(owner=_address_or_none(owner), pending_owner=pending_owner)


async def get_admin(rpc: RpcClient, contract_address: str) -> AdminReadResult:
    """Read default-admin state of an AccessControlDefaultAdminRules contract.

    ``accept_schedule`` is the UNIX timestamp (seconds) from
    ``pendingDefaultAdmin()``, carried through unconverted.

    Raises:
        OperationFailed: when ``defaultAdmin()`` cannot be read.
    """
    logger.info("Reading default admin for %s", contract_address)
    try:
        (default_admin,) = await rpc.call_function(contract_address, abis.DEFAULT_ADMIN_ABI)
    except AccessCoreError as exc:
        raise OperationFailed(
            f"Failed to read default admin: {exc.message}",
            contract_address=contract_address,
            operation="get_admin",
            cause=exc,
        ) from exc

    pending_admin: Optional[str] = None
    accept_schedule: Optional[int] = None
    try:
        new_admin, schedule = await rpc.call_function(contract_address, abis.PENDING_DEFAULT_ADMIN_ABI)
        if not is_zero_address(new_admin):
            pending_admin = new_admin
            accept_schedule = int(schedule)
    except AccessCoreError as exc:
        logger.warning("Failed to read pendingDefaultAdmin() on %s: %s", contract_address, exc.message)

    delay: Optional[int] = None
    try:
        (raw_delay,) = await rpc.call_function(contract_address, abis.DEFAULT_ADMIN_DELAY_ABI)
        delay = int(raw_delay)
    except AccessCoreError as exc:
        logger.warning("Failed to read defaultAdminDelay() on %s: %s", contract_address, exc.message)

    return AdminReadResult(
        default_admin=_address_or_none(default_admin),
        pending_default_admin=pending_admin,
        accept_schedule=accept_schedule,
        default_admin_delay=delay,
    )


async def has_role(rpc: RpcClient, contract_address: str, role_id: str, account: str) -> bool:
    """Call ``hasRole``; any failure reads as False."""
    try:
        (result,) = await rpc.call_function(contract_address, abis.HAS_ROLE_ABI, [role_id, account])
        return bool(result)
    except AccessCoreError as exc:
        logger.warning("hasRole(%s, %s) failed on %s: %s", role_id, account, contract_address, exc.message)
        return False


async def get_role_admin(rpc: RpcClient, contract_address: str, role_id: str) -> Optional[str]:
    """Return the admin role of ``role_id``, or None when it cannot be read."""
    try:
        (admin_role,) = await rpc.call_function(contract_address, abis.GET_ROLE_ADMIN_ABI, [role_id])
        return admin_role.lower()
    except AccessCoreError as exc:
        logger.warning("getRoleAdmin(%s) failed on %s: %s", role_id, contract_address, exc.message)
        return None


async def enumerate_role_members(rpc: RpcClient, contract_address: str, role_id: str) -> list[str]:
    """List members of a role via AccessControlEnumerable.

    A failed count read means enumeration is unsupported and raises.
    Individual member reads that fail are logged and skipped.

    Raises:
        OperationFailed: when ``getRoleMemberCount`` cannot be read.
    """
    try:
        (count,) = await rpc.call_function(contract_address, abis.GET_ROLE_MEMBER_COUNT_ABI, [role_id])
    except AccessCoreError as exc:
        raise OperationFailed(
            f"Failed to enumerate role members: {exc.message}",
            contract_address=contract_address,
            operation="enumerate_role_members",
            cause=exc,
            role_id=role_id,
        ) from exc

    members: list[str] = []
    for index in range(int(count)):
        try:
            (member,) = await rpc.call_function(contract_address, abis.GET_ROLE_MEMBER_ABI, [role_id, index])
            members.append(member)
        except AccessCoreError as exc:
            logger.warning("getRoleMember(%s, %d) failed on %s: %s", role_id, index, contract_address, exc.message)

    logger.debug("Role %s: %d of %d members retrieved", role_id, len(members), count)
    return members


async def read_current_roles(
    rpc: RpcClient,
    contract_address: str,
    role_ids: Sequence[str],
    enumerable: bool,
    label_map: Optional[Mapping[str, str]] = None,
) -> list[RoleAssignment]:
    """Read role assignments for the given role ids.

    Without enumeration each role comes back with no members; membership
    must then be established by ``has_role`` or the indexer.
    """
    logger.info(
        "Reading %d role(s) for %s (enumerable: %s)",
        len(role_ids),
        contract_address,
        enumerable,
    )
    if not role_ids:
        return []

    async def read_one(role_id: str) -> RoleAssignment:
        role = RoleIdentifier(id=role_id, label=resolve_role_label(role_id, label_map))
        if not enumerable:
            return RoleAssignment(role=role, members=[])
        try:
            members = await enumerate_role_members(rpc, contract_address, role_id)
        except OperationFailed as exc:
            logger.warning("Failed to enumerate role %s on %s: %s", role_id, contract_address, exc.message)
            members = []
        return RoleAssignment(role=role, members=members)

    assignments = list(await asyncio.gather(*(read_one(role_id) for role_id in role_ids)))
    logger.info(
        "Completed reading %d role(s) with %d total members",
        len(assignments),
        sum(len(a.members) for a in assignments),
    )
    return assignments


async def get_current_block(rpc: RpcClient) -> int:
    """Return the latest block number.

    Raises:
        OperationFailed: when the block number cannot be read.
    """
    try:
        return await rpc.block_number()
    except AccessCoreError as exc:
        raise OperationFailed(
            f"Failed to read current block: {exc.message}",
            operation="get_current_block",
            cause=exc,
        ) from exc


__all__ = [
    "read_ownership",
    "get_admin",
    "has_role",
    "get_role_admin",
    "enumerate_role_members",
    "read_current_roles",
    "get_current_block",
]
