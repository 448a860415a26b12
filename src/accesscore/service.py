"""Access-control service for EVM contracts.

``AccessControlService`` holds one ``ContractContext`` per registered
contract and composes the feature detector, on-chain reader, indexer
client and action assembler into ownership, admin and role views.

Policies:
- On-chain state is authoritative. The indexer only adds provenance
  (when/where a transfer or grant happened) and never changes a
  classification derived from chain reads.
- Indexer failures degrade silently (logged); required on-chain reads
  raise OperationFailed; bad input or an unregistered contract raises
  ConfigurationInvalid.
- Writes are validated, assembled into a ``WriteDescriptor`` and handed
  to the injected executor, whose result is returned unchanged.

Concurrency: contexts for different contracts are independent. Concurrent
mutations of the same context are not serialized; the last writer wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from . import actions, onchain
from .config import NetworkConfig
from .detection import detect_access_control_capabilities
from .discovery import discover_role_labels
from .exceptions import AccessCoreError, ConfigurationInvalid, UnsupportedContractFeatures
from .indexer.client import IndexerClient, grant_key
from .interfaces import StatusCallback, TransactionExecutor
from .logging import get_contract_logger
from .models import (
    AccessControlCapabilities,
    AccessSnapshot,
    AdminInfo,
    AdminPendingTransfer,
    AdminState,
    ContractSchema,
    EnrichedRoleAssignment,
    EnrichedRoleMember,
    ExecutionConfig,
    HistoryQueryOptions,
    OperationResult,
    OwnershipInfo,
    OwnershipPendingTransfer,
    OwnershipState,
    PaginatedHistoryResult,
    RoleAssignment,
    WriteDescriptor,
)
from .rpc import RpcClient
from .validation import validate_address, validate_role_id, validate_role_ids

logger = logging.getLogger(__name__)

MAX_UINT48 = 2**48 - 1


class CapabilityState(Enum):
    NOT_COMPUTED = "not_computed"
    COMPUTED = "computed"


@dataclass
class ContractContext:
    """Per-contract state owned by the service.

    Replaced wholesale on re-registration, dropped on dispose().
    """

    address: str
    schema: ContractSchema
    known_role_ids: list[str] = field(default_factory=list)
    discovered_role_ids: list[str] = field(default_factory=list)
    role_discovery_attempted: bool = False
    role_labels: dict[str, str] = field(default_factory=dict)
    role_labels_attempted: bool = False
    capability_state: CapabilityState = CapabilityState.NOT_COMPUTED
    capabilities: Optional[AccessControlCapabilities] = None

    @property
    def role_ids(self) -> list[str]:
        """Known ∪ discovered role ids, known first, without duplicates."""
        return list(dict.fromkeys([*self.known_role_ids, *self.discovered_role_ids]))


class AccessControlService:
    """Unified access-control view over on-chain reads and the event indexer.

    Args:
        network: Network configuration (RPC endpoint, optional indexer URL).
        executor: Callback that signs and broadcasts write descriptors.
        rpc: RPC client; created from ``network`` when omitted.
        indexer: Indexer client; created from ``network`` when omitted.

    Example::

        service = AccessControlService(config.network, executor)
        service.register_contract(address, ContractSchema.from_abi(abi))
        ownership = await service.get_ownership(address)
    """

    def __init__(
        self,
        network: NetworkConfig,
        executor: TransactionExecutor,
        rpc: Optional[RpcClient] = None,
        indexer: Optional[IndexerClient] = None,
    ) -> None:
        self.network = network
        self._executor = executor
        self._owns_rpc = rpc is None
        self._owns_indexer = indexer is None
        self._rpc = rpc or RpcClient(network.rpc_url, timeout=network.request_timeout)
        self._indexer = indexer or IndexerClient(
            network.id,
            network.access_control_indexer_url,
            timeout=network.request_timeout,
        )
        self._contexts: dict[str, ContractContext] = {}

    # ── Contract registry ─────────────────────────────────────────────

    def register_contract(
        self,
        contract_address: str,
        schema: ContractSchema,
        known_role_ids: Optional[list[str]] = None,
    ) -> None:
        """Register (or re-register) a contract.

        Re-registration replaces the previous context, including memoized
        capabilities and discovery state. DEFAULT_ADMIN_ROLE is not added
        implicitly.
        """
        validate_address(contract_address, "contractAddress")
        role_ids = validate_role_ids(known_role_ids or [], "knownRoleIds", contract_address)
        key = contract_address.lower()
        self._contexts[key] = ContractContext(address=key, schema=schema, known_role_ids=role_ids)
        logger.info("Registered contract %s with %d known role id(s)", key, len(role_ids))

    def add_known_role_ids(self, contract_address: str, role_ids: list[str]) -> list[str]:
        """Merge role ids into the known set and return the merged list."""
        context = self._get_context(contract_address)
        validated = validate_role_ids(role_ids, "roleIds", contract_address)
        context.known_role_ids = list(dict.fromkeys([*context.known_role_ids, *validated]))
        return list(context.known_role_ids)

    def _get_context(self, contract_address: str) -> ContractContext:
        validate_address(contract_address, "contractAddress")
        context = self._contexts.get(contract_address.lower())
        if context is None:
            raise ConfigurationInvalid(
                "Contract not registered. Call register_contract() first.",
                contract_address=contract_address,
                config_field="contractAddress",
                provided_value=contract_address,
            )
        return context

    # ── Capabilities ──────────────────────────────────────────────────

    async def get_capabilities(self, contract_address: str) -> AccessControlCapabilities:
        """Detect capabilities once per context and return the cached value afterwards.

        History support reflects whether an indexer URL is configured; the
        indexer is not contacted here.
        """
        context = self._get_context(contract_address)
        return self._capabilities_for(context)

    def _capabilities_for(self, context: ContractContext) -> AccessControlCapabilities:
        if context.capability_state is CapabilityState.COMPUTED and context.capabilities is not None:
            return context.capabilities
        capabilities = detect_access_control_capabilities(
            context.schema,
            indexer_available=bool(self.network.access_control_indexer_url),
        )
        context.capabilities = capabilities
        context.capability_state = CapabilityState.COMPUTED
        return capabilities

    def _require_two_step_admin(self, context: ContractContext, operation: str) -> None:
        if not self._capabilities_for(context).has_two_step_admin:
            raise UnsupportedContractFeatures(
                f"{operation} requires AccessControlDefaultAdminRules, which was not detected on this contract",
                contract_address=context.address,
                missing_features=["AccessControlDefaultAdminRules"],
                config_field="capabilities.has_two_step_admin",
                provided_value=False,
            )

    # ── Ownership / admin ─────────────────────────────────────────────

    async def get_ownership(self, contract_address: str) -> OwnershipInfo:
        """Current owner classified as owned, pending or renounced.

        Never returns ``expired``: Ownable2Step transfers do not expire.
        """
        context = self._get_context(contract_address)
        read = await onchain.read_ownership(self._rpc, context.address)

        if read.owner is None:
            return OwnershipInfo(owner=None, state=OwnershipState.RENOUNCED)
        if read.pending_owner is None:
            return OwnershipInfo(owner=read.owner, state=OwnershipState.OWNED)

        pending = OwnershipPendingTransfer(pending_owner=read.pending_owner)
        return OwnershipInfo(
            owner=read.owner,
            state=OwnershipState.PENDING,
            pending_transfer=await self._enrich_pending_ownership(context, pending),
        )

    async def _enrich_pending_ownership(
        self, context: ContractContext, pending: OwnershipPendingTransfer
    ) -> OwnershipPendingTransfer:
        log = get_contract_logger(__name__, context.address, operation="get_ownership")
        try:
            if not await self._indexer.is_available():
                return pending
            data = await self._indexer.query_pending_ownership_transfer(context.address)
        except Exception as exc:
            log.warning("Ownership transfer enrichment failed: %s", exc)
            return pending

        if data is None:
            return pending
        if data.pending_owner.lower() != pending.pending_owner.lower():
            log.debug("Indexer pending owner %s does not match on-chain %s", data.pending_owner, pending.pending_owner)
            return pending
        return pending.model_copy(
            update={
                "initiated_at": data.initiated_at,
                "initiated_tx_id": data.initiated_tx_id,
                "initiated_block": data.initiated_block,
            }
        )

    async def get_admin_info(self, contract_address: str) -> AdminInfo:
        """Default admin classified as active, pending or renounced.

        ``pending_transfer.expiration`` is the UNIX timestamp (seconds)
        after which the pending admin can accept.
        """
        context = self._get_context(contract_address)
        read = await onchain.get_admin(self._rpc, context.address)

        if read.default_admin is None:
            return AdminInfo(admin=None, state=AdminState.RENOUNCED, default_admin_delay=read.default_admin_delay)
        if read.pending_default_admin is None:
            return AdminInfo(
                admin=read.default_admin,
                state=AdminState.ACTIVE,
                default_admin_delay=read.default_admin_delay,
            )

        pending = AdminPendingTransfer(
            pending_admin=read.pending_default_admin,
            expiration=read.accept_schedule or 0,
        )
        return AdminInfo(
            admin=read.default_admin,
            state=AdminState.PENDING,
            pending_transfer=await self._enrich_pending_admin(context, pending),
            default_admin_delay=read.default_admin_delay,
        )

    async def _enrich_pending_admin(self, context: ContractContext, pending: AdminPendingTransfer) -> AdminPendingTransfer:
        log = get_contract_logger(__name__, context.address, operation="get_admin_info")
        try:
            if not await self._indexer.is_available():
                return pending
            data = await self._indexer.query_pending_admin_transfer(context.address)
        except Exception as exc:
            log.warning("Admin transfer enrichment failed: %s", exc)
            return pending

        if data is None:
            return pending
        if data.pending_admin.lower() != pending.pending_admin.lower():
            log.debug("Indexer pending admin %s does not match on-chain %s", data.pending_admin, pending.pending_admin)
            return pending
        return pending.model_copy(
            update={
                "initiated_at": data.initiated_at,
                "initiated_tx_id": data.initiated_tx_id,
                "initiated_block": data.initiated_block,
            }
        )

    # ── Roles ─────────────────────────────────────────────────────────

    async def _attempt_role_discovery(self, context: ContractContext) -> None:
        """Query the indexer for role ids once per context, whatever the outcome."""
        if context.role_discovery_attempted:
            return
        context.role_discovery_attempted = True
        log = get_contract_logger(__name__, context.address, operation="role_discovery")

        try:
            if not await self._indexer.is_available():
                log.info("Role discovery skipped: indexer unavailable")
                return
            discovered = await self._indexer.discover_role_ids(context.address)
        except Exception as exc:
            log.warning("Role discovery failed: %s", exc)
            return

        if discovered:
            context.discovered_role_ids = discovered
            log.info("Discovered %d role id(s) via indexer", len(discovered))
        else:
            log.info("Indexer returned no role ids")

    async def _role_labels_for(self, context: ContractContext) -> dict[str, str]:
        if not context.role_labels_attempted:
            context.role_labels_attempted = True
            context.role_labels = await discover_role_labels(self._rpc, context.address, context.schema)
        return context.role_labels

    async def get_current_roles(self, contract_address: str) -> list[RoleAssignment]:
        """Current role assignments.

        Role ids come from the known and discovered sets; when both are
        empty a one-shot indexer discovery is attempted. Members are only
        listed when the contract supports enumeration.
        """
        context = self._get_context(contract_address)
        capabilities = self._capabilities_for(context)

        role_ids = context.role_ids
        if not role_ids:
            await self._attempt_role_discovery(context)
            role_ids = context.role_ids
        if not role_ids:
            logger.info("No role ids known for %s", context.address)
            return []

        return await onchain.read_current_roles(
            self._rpc,
            context.address,
            role_ids,
            capabilities.has_enumerable_roles,
            await self._role_labels_for(context),
        )

    async def get_current_roles_enriched(self, contract_address: str) -> list[EnrichedRoleAssignment]:
        """``get_current_roles`` plus grant provenance from the indexer, keyed by role:account."""
        assignments = await self.get_current_roles(contract_address)
        if not assignments:
            return []

        context = self._get_context(contract_address)
        grants = {}
        try:
            if await self._indexer.is_available():
                grants = (
                    await self._indexer.query_latest_grants(context.address, [a.role.id for a in assignments])
                ) or {}
        except Exception as exc:
            get_contract_logger(__name__, context.address, operation="get_current_roles_enriched").warning(
                "Grant enrichment failed, returning on-chain data only: %s", exc
            )
            grants = {}

        enriched: list[EnrichedRoleAssignment] = []
        for assignment in assignments:
            members = []
            for member in assignment.members:
                grant = grants.get(grant_key(assignment.role.id, member))
                if grant is None:
                    members.append(EnrichedRoleMember(address=member))
                else:
                    members.append(
                        EnrichedRoleMember(
                            address=member,
                            granted_at=grant.granted_at,
                            granted_tx_id=grant.granted_tx_id,
                            granted_block=grant.granted_block,
                            granted_by=grant.granted_by,
                        )
                    )
            enriched.append(EnrichedRoleAssignment(role=assignment.role, members=members))
        return enriched

    async def has_role(self, contract_address: str, role_id: str, account: str) -> bool:
        context = self._get_context(contract_address)
        role = validate_role_id(role_id, "roleId", contract_address)
        validate_address(account, "account", contract_address)
        return await onchain.has_role(self._rpc, context.address, role, account)

    async def get_role_admin(self, contract_address: str, role_id: str) -> Optional[str]:
        context = self._get_context(contract_address)
        role = validate_role_id(role_id, "roleId", contract_address)
        return await onchain.get_role_admin(self._rpc, context.address, role)

    async def discover_known_role_ids(self, contract_address: str) -> list[str]:
        """Known role ids merged with a single-attempt indexer discovery."""
        context = self._get_context(contract_address)
        await self._attempt_role_discovery(context)
        return context.role_ids

    # ── History / snapshot ────────────────────────────────────────────

    async def get_history(
        self,
        contract_address: str,
        options: Optional[HistoryQueryOptions] = None,
    ) -> PaginatedHistoryResult:
        """One page of history from the indexer; an empty page when it is unavailable."""
        context = self._get_context(contract_address)
        if options is not None:
            updates = {}
            if options.role_id is not None:
                updates["role_id"] = validate_role_id(options.role_id, "roleId", contract_address)
            if options.account is not None:
                validate_address(options.account, "account", contract_address)
            if updates:
                options = options.model_copy(update=updates)

        log = get_contract_logger(__name__, context.address, operation="get_history")
        try:
            if not await self._indexer.is_available():
                log.warning("History requested but indexer is unavailable")
                return PaginatedHistoryResult()
            result = await self._indexer.query_history(context.address, options)
        except Exception as exc:
            log.warning("History query failed: %s", exc)
            return PaginatedHistoryResult()

        if result is None:
            log.warning("History query returned no result")
            return PaginatedHistoryResult()
        return result

    async def export_snapshot(self, contract_address: str) -> AccessSnapshot:
        """Roles plus ownership; either half may be missing without failing the snapshot."""
        context = self._get_context(contract_address)
        log = get_contract_logger(__name__, context.address, operation="export_snapshot")

        roles: list[RoleAssignment] = []
        try:
            roles = await self.get_current_roles(contract_address)
        except AccessCoreError as exc:
            log.warning("Snapshot without roles: %s", exc.message)

        ownership: Optional[OwnershipInfo] = None
        if self._capabilities_for(context).has_ownable:
            try:
                ownership = await self.get_ownership(contract_address)
            except AccessCoreError as exc:
                log.warning("Snapshot without ownership: %s", exc.message)

        return AccessSnapshot(roles=roles, ownership=ownership)

    async def get_current_block(self) -> int:
        return await onchain.get_current_block(self._rpc)

    # ── Writes ────────────────────────────────────────────────────────

    async def _execute(
        self,
        descriptor: WriteDescriptor,
        execution_config: ExecutionConfig,
        on_status_change: Optional[StatusCallback],
        runtime_api_key: Optional[str],
    ) -> OperationResult:
        logger.info("Executing %s on %s", descriptor.function_name, descriptor.address)
        return await self._executor(descriptor, execution_config, on_status_change, runtime_api_key)

    async def transfer_ownership(
        self,
        contract_address: str,
        new_owner: str,
        execution_config: ExecutionConfig,
        on_status_change: Optional[StatusCallback] = None,
        runtime_api_key: Optional[str] = None,
    ) -> OperationResult:
        context = self._get_context(contract_address)
        validate_address(new_owner, "newOwner", contract_address)
        descriptor = actions.assemble_transfer_ownership_action(context.address, new_owner)
        return await self._execute(descriptor, execution_config, on_status_change, runtime_api_key)

    async def accept_ownership(
        self,
        contract_address: str,
        execution_config: ExecutionConfig,
        on_status_change: Optional[StatusCallback] = None,
        runtime_api_key: Optional[str] = None,
    ) -> OperationResult:
        context = self._get_context(contract_address)
        descriptor = actions.assemble_accept_ownership_action(context.address)
        return await self._execute(descriptor, execution_config, on_status_change, runtime_api_key)

    async def renounce_ownership(
        self,
        contract_address: str,
        execution_config: ExecutionConfig,
        on_status_change: Optional[StatusCallback] = None,
        runtime_api_key: Optional[str] = None,
    ) -> OperationResult:
        context = self._get_context(contract_address)
        descriptor = actions.assemble_renounce_ownership_action(context.address)
        return await self._execute(descriptor, execution_config, on_status_change, runtime_api_key)

    async def transfer_admin_role(
        self,
        contract_address: str,
        new_admin: str,
        execution_config: ExecutionConfig,
        on_status_change: Optional[StatusCallback] = None,
        runtime_api_key: Optional[str] = None,
    ) -> OperationResult:
        """Begin a two-step default-admin transfer."""
        context = self._get_context(contract_address)
        validate_address(new_admin, "newAdmin", contract_address)
        self._require_two_step_admin(context, "transfer_admin_role")
        descriptor = actions.assemble_begin_admin_transfer_action(context.address, new_admin)
        return await self._execute(descriptor, execution_config, on_status_change, runtime_api_key)

    async def accept_admin_transfer(
        self,
        contract_address: str,
        execution_config: ExecutionConfig,
        on_status_change: Optional[StatusCallback] = None,
        runtime_api_key: Optional[str] = None,
    ) -> OperationResult:
        context = self._get_context(contract_address)
        self._require_two_step_admin(context, "accept_admin_transfer")
        descriptor = actions.assemble_accept_admin_transfer_action(context.address)
        return await self._execute(descriptor, execution_config, on_status_change, runtime_api_key)

    async def cancel_admin_transfer(
        self,
        contract_address: str,
        execution_config: ExecutionConfig,
        on_status_change: Optional[StatusCallback] = None,
        runtime_api_key: Optional[str] = None,
    ) -> OperationResult:
        context = self._get_context(contract_address)
        self._require_two_step_admin(context, "cancel_admin_transfer")
        descriptor = actions.assemble_cancel_admin_transfer_action(context.address)
        return await self._execute(descriptor, execution_config, on_status_change, runtime_api_key)

    async def change_admin_delay(
        self,
        contract_address: str,
        new_delay: int,
        execution_config: ExecutionConfig,
        on_status_change: Optional[StatusCallback] = None,
        runtime_api_key: Optional[str] = None,
    ) -> OperationResult:
        """Schedule a new default-admin delay, in seconds."""
        context = self._get_context(contract_address)
        if isinstance(new_delay, bool) or not isinstance(new_delay, int) or not 0 <= new_delay <= MAX_UINT48:
            raise ConfigurationInvalid(
                f"newDelay must be an integer between 0 and {MAX_UINT48}",
                contract_address=contract_address,
                config_field="newDelay",
                provided_value=new_delay,
            )
        self._require_two_step_admin(context, "change_admin_delay")
        descriptor = actions.assemble_change_admin_delay_action(context.address, new_delay)
        return await self._execute(descriptor, execution_config, on_status_change, runtime_api_key)

    async def rollback_admin_delay(
        self,
        contract_address: str,
        execution_config: ExecutionConfig,
        on_status_change: Optional[StatusCallback] = None,
        runtime_api_key: Optional[str] = None,
    ) -> OperationResult:
        context = self._get_context(contract_address)
        self._require_two_step_admin(context, "rollback_admin_delay")
        descriptor = actions.assemble_rollback_admin_delay_action(context.address)
        return await self._execute(descriptor, execution_config, on_status_change, runtime_api_key)

    async def grant_role(
        self,
        contract_address: str,
        role_id: str,
        account: str,
        execution_config: ExecutionConfig,
        on_status_change: Optional[StatusCallback] = None,
        runtime_api_key: Optional[str] = None,
    ) -> OperationResult:
        context = self._get_context(contract_address)
        role = validate_role_id(role_id, "roleId", contract_address)
        validate_address(account, "account", contract_address)
        descriptor = actions.assemble_grant_role_action(context.address, role, account)
        return await self._execute(descriptor, execution_config, on_status_change, runtime_api_key)

    async def revoke_role(
        self,
        contract_address: str,
        role_id: str,
        account: str,
        execution_config: ExecutionConfig,
        on_status_change: Optional[StatusCallback] = None,
        runtime_api_key: Optional[str] = None,
    ) -> OperationResult:
        context = self._get_context(contract_address)
        role = validate_role_id(role_id, "roleId", contract_address)
        validate_address(account, "account", contract_address)
        descriptor = actions.assemble_revoke_role_action(context.address, role, account)
        return await self._execute(descriptor, execution_config, on_status_change, runtime_api_key)

    async def renounce_role(
        self,
        contract_address: str,
        role_id: str,
        account: str,
        execution_config: ExecutionConfig,
        on_status_change: Optional[StatusCallback] = None,
        runtime_api_key: Optional[str] = None,
    ) -> OperationResult:
        """Renounce a role held by ``account`` (must be the sending account)."""
        context = self._get_context(contract_address)
        role = validate_role_id(role_id, "roleId", contract_address)
        validate_address(account, "account", contract_address)
        descriptor = actions.assemble_renounce_role_action(context.address, role, account)
        return await self._execute(descriptor, execution_config, on_status_change, runtime_api_key)

    # ── Lifecycle ─────────────────────────────────────────────────────

    def dispose(self) -> None:
        """Drop all registered contracts. Safe to call repeatedly."""
        self._contexts.clear()

    async def aclose(self) -> None:
        """Dispose contexts and close transports this service created."""
        self.dispose()
        if self._owns_rpc:
            await self._rpc.aclose()
        if self._owns_indexer:
            await self._indexer.aclose()


__all__ = [
    "AccessControlService",
    "CapabilityState",
    "ContractContext",
]
