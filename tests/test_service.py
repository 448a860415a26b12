"""
Tests for AccessControlService.
"""

from __future__ import annotations

from typing import Optional
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from eth_utils import to_checksum_address

from accesscore import (
    AccessControlService,
    AdminState,
    ConfigurationInvalid,
    ExecutionConfig,
    HistoryQueryOptions,
    IndexerClient,
    NetworkConfig,
    OperationFailed,
    OperationResult,
    OwnershipState,
    RpcClient,
    UnsupportedContractFeatures,
)
from accesscore.constants import DEFAULT_ADMIN_ROLE, ZERO_ADDRESS
from accesscore.detection import detect_access_control_capabilities
from accesscore.models import AdminReadResult

from fakes import (
    ACCESS_CONTROL_FUNCTIONS,
    CONTRACT,
    DEFAULT_ADMIN_RULES_FUNCTIONS,
    ENUMERABLE_FUNCTIONS,
    INDEXER_URL,
    MEMBER_1,
    MEMBER_2,
    MINTER_ROLE,
    OWNABLE_FUNCTIONS,
    OWNER,
    PAUSER_ROLE,
    PENDING,
    TWO_STEP_FUNCTIONS,
    FakeChain,
    FakeIndexer,
    make_indexer,
    role_member_responder,
    schema,
)

EXECUTION = ExecutionConfig(method="eoa")


@pytest.fixture
def executor() -> AsyncMock:
    return AsyncMock(return_value=OperationResult(id="0xtx"))


def make_service(
    rpc: RpcClient,
    executor: AsyncMock,
    indexer: Optional[IndexerClient] = None,
) -> AccessControlService:
    network = NetworkConfig(access_control_indexer_url=INDEXER_URL if indexer and indexer.endpoint_url else None)
    return AccessControlService(
        network,
        executor,
        rpc=rpc,
        indexer=indexer or make_indexer(FakeIndexer(), endpoint=None),
    )


@pytest.fixture
def service(rpc: RpcClient, executor: AsyncMock) -> AccessControlService:
    return make_service(rpc, executor)


@pytest.fixture
def indexed_service(rpc: RpcClient, executor: AsyncMock, indexer: IndexerClient) -> AccessControlService:
    return make_service(rpc, executor, indexer)


class TestRegistry:
    """Tests for contract registration."""

    def test_invalid_address_rejected(self, service: AccessControlService) -> None:
        """Test an invalid address is rejected."""
        with pytest.raises(ConfigurationInvalid, match="contractAddress"):
            service.register_contract("0x1234", schema(OWNABLE_FUNCTIONS))

    def test_invalid_known_role_rejected(self, service: AccessControlService) -> None:
        """Test an invalid known role is rejected."""
        with pytest.raises(ConfigurationInvalid) as exc_info:
            service.register_contract(CONTRACT, schema(OWNABLE_FUNCTIONS), ["0xbad"])
        assert exc_info.value.config_field == "knownRoleIds[0]"

    @pytest.mark.asyncio
    async def test_unregistered_contract(self, service: AccessControlService) -> None:
        """Test an unregistered contract is rejected."""
        with pytest.raises(ConfigurationInvalid, match="Contract not registered"):
            await service.get_capabilities(CONTRACT)

    def test_add_known_role_ids_merges(self, service: AccessControlService) -> None:
        """Test adding known role ids merges with the existing set."""
        service.register_contract(CONTRACT, schema(ACCESS_CONTROL_FUNCTIONS), [MINTER_ROLE])

        merged = service.add_known_role_ids(CONTRACT, [PAUSER_ROLE, MINTER_ROLE])

        assert merged == [MINTER_ROLE, PAUSER_ROLE]
        assert service.add_known_role_ids(CONTRACT, [PAUSER_ROLE]) == merged
        assert DEFAULT_ADMIN_ROLE not in merged

    @pytest.mark.asyncio
    async def test_dispose_forgets_contracts(self, service: AccessControlService) -> None:
        """Test dispose forgets registered contracts."""
        service.register_contract(CONTRACT, schema(OWNABLE_FUNCTIONS))
        service.dispose()
        service.dispose()

        with pytest.raises(ConfigurationInvalid):
            await service.get_capabilities(CONTRACT)


class TestCapabilities:
    """Tests for get_capabilities."""

    @pytest.mark.asyncio
    async def test_memoized(self, service: AccessControlService) -> None:
        """Test capabilities are memoized."""
        service.register_contract(CONTRACT, schema(OWNABLE_FUNCTIONS))

        with patch(
            "accesscore.service.detect_access_control_capabilities",
            wraps=detect_access_control_capabilities,
        ) as detect:
            first = await service.get_capabilities(CONTRACT)
            second = await service.get_capabilities(CONTRACT.upper().replace("0X", "0x"))

        assert first == second
        assert detect.call_count == 1

    @pytest.mark.asyncio
    async def test_reregistration_recomputes(self, service: AccessControlService) -> None:
        """Test re-registration recomputes capabilities."""
        service.register_contract(CONTRACT, schema(OWNABLE_FUNCTIONS))
        assert not (await service.get_capabilities(CONTRACT)).has_access_control

        service.register_contract(CONTRACT, schema(ACCESS_CONTROL_FUNCTIONS))

        assert (await service.get_capabilities(CONTRACT)).has_access_control

    @pytest.mark.asyncio
    async def test_history_support_follows_indexer_url(self, indexed_service: AccessControlService) -> None:
        """Test history support follows the indexer URL."""
        indexed_service.register_contract(CONTRACT, schema(OWNABLE_FUNCTIONS))

        assert (await indexed_service.get_capabilities(CONTRACT)).supports_history


class TestOwnership:
    """Tests for get_ownership."""

    @pytest.mark.asyncio
    async def test_owned(self, chain: FakeChain, service: AccessControlService) -> None:
        """Test an owned contract."""
        chain.returns("owner()", ["address"], OWNER)
        chain.returns("pendingOwner()", ["address"], ZERO_ADDRESS)
        service.register_contract(CONTRACT, schema(OWNABLE_FUNCTIONS, TWO_STEP_FUNCTIONS))

        info = await service.get_ownership(CONTRACT)

        assert info.state is OwnershipState.OWNED
        assert info.owner == to_checksum_address(OWNER)
        assert info.pending_transfer is None

    @pytest.mark.asyncio
    async def test_renounced(self, chain: FakeChain, service: AccessControlService) -> None:
        """Test a renounced contract."""
        chain.returns("owner()", ["address"], ZERO_ADDRESS)
        service.register_contract(CONTRACT, schema(OWNABLE_FUNCTIONS))

        info = await service.get_ownership(CONTRACT)

        assert info.state is OwnershipState.RENOUNCED
        assert info.owner is None

    @pytest.mark.asyncio
    async def test_pending_without_indexer(self, chain: FakeChain, service: AccessControlService) -> None:
        """Test a pending transfer without an indexer."""
        chain.returns("owner()", ["address"], OWNER)
        chain.returns("pendingOwner()", ["address"], PENDING)
        service.register_contract(CONTRACT, schema(OWNABLE_FUNCTIONS, TWO_STEP_FUNCTIONS))

        info = await service.get_ownership(CONTRACT)

        assert info.state is OwnershipState.PENDING
        assert info.pending_transfer.pending_owner == to_checksum_address(PENDING)
        assert info.pending_transfer.expiration is None
        assert info.pending_transfer.initiated_block is None

    @pytest.mark.asyncio
    async def test_pending_enriched_by_indexer(
        self, chain: FakeChain, fake_indexer: FakeIndexer, indexed_service: AccessControlService
    ) -> None:
        """Test a pending transfer enriched by the indexer."""
        chain.returns("owner()", ["address"], OWNER)
        chain.returns("pendingOwner()", ["address"], PENDING)
        fake_indexer.queue_data(
            {
                "accessControlEvents": {
                    "nodes": [
                        {
                            "eventType": "OWNERSHIP_TRANSFER_STARTED",
                            "newOwner": PENDING,
                            "timestamp": "2024-01-01T00:00:00",
                            "txHash": "0xstart",
                            "blockNumber": "42",
                        }
                    ]
                }
            }
        )
        indexed_service.register_contract(CONTRACT, schema(OWNABLE_FUNCTIONS, TWO_STEP_FUNCTIONS))

        info = await indexed_service.get_ownership(CONTRACT)

        assert info.state is OwnershipState.PENDING
        assert info.pending_transfer.initiated_tx_id == "0xstart"
        assert info.pending_transfer.initiated_block == 42

    @pytest.mark.asyncio
    async def test_stale_indexer_data_ignored(
        self, chain: FakeChain, fake_indexer: FakeIndexer, indexed_service: AccessControlService
    ) -> None:
        """Test stale indexer data is ignored."""
        chain.returns("owner()", ["address"], OWNER)
        chain.returns("pendingOwner()", ["address"], PENDING)
        fake_indexer.queue_data(
            {
                "accessControlEvents": {
                    "nodes": [
                        {
                            "eventType": "OWNERSHIP_TRANSFER_STARTED",
                            "newOwner": MEMBER_1,
                            "timestamp": "2023-01-01T00:00:00",
                            "txHash": "0xold",
                            "blockNumber": "7",
                        }
                    ]
                }
            }
        )
        indexed_service.register_contract(CONTRACT, schema(OWNABLE_FUNCTIONS, TWO_STEP_FUNCTIONS))

        info = await indexed_service.get_ownership(CONTRACT)

        assert info.state is OwnershipState.PENDING
        assert info.pending_transfer.initiated_tx_id is None

    @pytest.mark.asyncio
    async def test_indexer_outage_keeps_on_chain_state(self, chain: FakeChain, rpc: RpcClient, executor: AsyncMock) -> None:
        """Test an indexer outage keeps on-chain state."""
        chain.returns("owner()", ["address"], OWNER)
        chain.returns("pendingOwner()", ["address"], PENDING)
        service = make_service(rpc, executor, make_indexer(FakeIndexer(health=httpx.ConnectError("refused"))))
        service.register_contract(CONTRACT, schema(OWNABLE_FUNCTIONS, TWO_STEP_FUNCTIONS))

        info = await service.get_ownership(CONTRACT)

        assert info.state is OwnershipState.PENDING
        assert info.pending_transfer.pending_owner == to_checksum_address(PENDING)

    @pytest.mark.asyncio
    async def test_owner_read_failure_raises(self, service: AccessControlService) -> None:
        """Test an owner read failure raises."""
        service.register_contract(CONTRACT, schema(OWNABLE_FUNCTIONS))

        with pytest.raises(OperationFailed):
            await service.get_ownership(CONTRACT)


class TestAdminInfo:
    """Tests for get_admin_info."""

    @pytest.mark.asyncio
    async def test_pending_admin(self, service: AccessControlService) -> None:
        """Test a pending admin transfer."""
        service.register_contract(CONTRACT, schema(ACCESS_CONTROL_FUNCTIONS, DEFAULT_ADMIN_RULES_FUNCTIONS))
        read = AdminReadResult(
            default_admin="0xABC",
            pending_default_admin="0xDEF",
            accept_schedule=1700000000,
            default_admin_delay=86400,
        )

        with patch("accesscore.onchain.get_admin", AsyncMock(return_value=read)):
            info = await service.get_admin_info(CONTRACT)

        assert info.state is AdminState.PENDING
        assert info.admin == "0xABC"
        assert info.pending_transfer.pending_admin == "0xDEF"
        assert info.pending_transfer.expiration == 1700000000
        assert info.pending_transfer.accept_schedule == 1700000000
        assert info.default_admin_delay == 86400

    @pytest.mark.asyncio
    async def test_active_admin(self, chain: FakeChain, service: AccessControlService) -> None:
        """Test an active default admin is classified as active."""
        chain.returns("defaultAdmin()", ["address"], OWNER)
        chain.returns("pendingDefaultAdmin()", ["address", "uint48"], ZERO_ADDRESS, 0)
        chain.returns("defaultAdminDelay()", ["uint48"], 3600)
        service.register_contract(CONTRACT, schema(ACCESS_CONTROL_FUNCTIONS, DEFAULT_ADMIN_RULES_FUNCTIONS))

        info = await service.get_admin_info(CONTRACT)

        assert info.state is AdminState.ACTIVE
        assert info.pending_transfer is None
        assert info.default_admin_delay == 3600

    @pytest.mark.asyncio
    async def test_renounced_admin(self, chain: FakeChain, service: AccessControlService) -> None:
        """Test a renounced default admin."""
        chain.returns("defaultAdmin()", ["address"], ZERO_ADDRESS)
        service.register_contract(CONTRACT, schema(ACCESS_CONTROL_FUNCTIONS, DEFAULT_ADMIN_RULES_FUNCTIONS))

        info = await service.get_admin_info(CONTRACT)

        assert info.state is AdminState.RENOUNCED
        assert info.admin is None

    @pytest.mark.asyncio
    async def test_pending_admin_enriched(
        self, chain: FakeChain, fake_indexer: FakeIndexer, indexed_service: AccessControlService
    ) -> None:
        """Test a pending admin is enriched."""
        chain.returns("defaultAdmin()", ["address"], OWNER)
        chain.returns("pendingDefaultAdmin()", ["address", "uint48"], PENDING, 1700000000)
        chain.returns("defaultAdminDelay()", ["uint48"], 0)
        fake_indexer.queue_data(
            {
                "accessControlEvents": {
                    "nodes": [
                        {
                            "eventType": "DEFAULT_ADMIN_TRANSFER_SCHEDULED",
                            "newAdmin": PENDING,
                            "acceptSchedule": "1700000000",
                            "timestamp": "2024-01-01T00:00:00",
                            "txHash": "0xbegin",
                            "blockNumber": "99",
                        }
                    ]
                }
            }
        )
        indexed_service.register_contract(CONTRACT, schema(ACCESS_CONTROL_FUNCTIONS, DEFAULT_ADMIN_RULES_FUNCTIONS))

        info = await indexed_service.get_admin_info(CONTRACT)

        assert info.pending_transfer.expiration == 1700000000
        assert info.pending_transfer.initiated_tx_id == "0xbegin"
        assert info.pending_transfer.initiated_block == 99


class TestRoles:
    """Tests for role reads and discovery."""

    @pytest.mark.asyncio
    async def test_enumerated_roles(self, chain: FakeChain, service: AccessControlService) -> None:
        """Test roles read through enumeration."""
        chain.returns("getRoleMemberCount(bytes32)", ["uint256"], 2)
        chain.responds("getRoleMember(bytes32,uint256)", role_member_responder({MINTER_ROLE: [MEMBER_1, MEMBER_2]}))
        service.register_contract(CONTRACT, schema(ACCESS_CONTROL_FUNCTIONS, ENUMERABLE_FUNCTIONS), [MINTER_ROLE])

        roles = await service.get_current_roles(CONTRACT)

        assert len(roles) == 1
        assert roles[0].role.label == "MINTER_ROLE"
        assert [m.lower() for m in roles[0].members] == [MEMBER_1, MEMBER_2]

    @pytest.mark.asyncio
    async def test_no_roles_without_indexer(self, service: AccessControlService) -> None:
        """Test no roles without an indexer."""
        service.register_contract(CONTRACT, schema(ACCESS_CONTROL_FUNCTIONS))

        assert await service.get_current_roles(CONTRACT) == []

    @pytest.mark.asyncio
    async def test_discovery_attempted_once(
        self, fake_indexer: FakeIndexer, indexed_service: AccessControlService
    ) -> None:
        """Test discovery is attempted only once."""
        fake_indexer.queue_data({"accessControlEvents": {"nodes": []}})
        indexed_service.register_contract(CONTRACT, schema(ACCESS_CONTROL_FUNCTIONS))

        assert await indexed_service.get_current_roles(CONTRACT) == []
        assert await indexed_service.get_current_roles(CONTRACT) == []
        assert await indexed_service.discover_known_role_ids(CONTRACT) == []

        assert len(fake_indexer.queries) == 1

    @pytest.mark.asyncio
    async def test_discovered_roles_used(
        self, chain: FakeChain, fake_indexer: FakeIndexer, indexed_service: AccessControlService
    ) -> None:
        """Test discovered roles are used."""
        fake_indexer.queue_data({"accessControlEvents": {"nodes": [{"role": PAUSER_ROLE}]}})
        indexed_service.register_contract(CONTRACT, schema(ACCESS_CONTROL_FUNCTIONS))

        roles = await indexed_service.get_current_roles(CONTRACT)

        assert [r.role.id for r in roles] == [PAUSER_ROLE]
        assert roles[0].members == []

    @pytest.mark.asyncio
    async def test_known_roles_skip_discovery(
        self, fake_indexer: FakeIndexer, indexed_service: AccessControlService
    ) -> None:
        """Test known roles skip discovery."""
        indexed_service.register_contract(CONTRACT, schema(ACCESS_CONTROL_FUNCTIONS), [MINTER_ROLE])

        await indexed_service.get_current_roles(CONTRACT)

        assert fake_indexer.queries == []

    @pytest.mark.asyncio
    async def test_enriched_roles(
        self, chain: FakeChain, fake_indexer: FakeIndexer, indexed_service: AccessControlService
    ) -> None:
        """Test roles enriched with grant data."""
        chain.returns("getRoleMemberCount(bytes32)", ["uint256"], 2)
        chain.responds("getRoleMember(bytes32,uint256)", role_member_responder({MINTER_ROLE: [MEMBER_1, MEMBER_2]}))
        fake_indexer.queue_data(
            {
                "roleMemberships": {
                    "nodes": [
                        {
                            "role": MINTER_ROLE,
                            "account": MEMBER_1,
                            "grantedAt": "2024-01-01",
                            "txHash": "0xgrant",
                            "grantedBy": OWNER,
                            "blockNumber": "4242",
                        }
                    ]
                }
            }
        )
        indexed_service.register_contract(CONTRACT, schema(ACCESS_CONTROL_FUNCTIONS, ENUMERABLE_FUNCTIONS), [MINTER_ROLE])

        roles = await indexed_service.get_current_roles_enriched(CONTRACT)

        first, second = roles[0].members
        assert first.granted_tx_id == "0xgrant"
        assert first.granted_by == OWNER
        assert first.granted_block == 4242
        assert second.granted_tx_id is None
        assert second.granted_block is None

    @pytest.mark.asyncio
    async def test_enriched_roles_without_indexer(self, chain: FakeChain, service: AccessControlService) -> None:
        """Test enriched roles without an indexer."""
        chain.returns("getRoleMemberCount(bytes32)", ["uint256"], 1)
        chain.responds("getRoleMember(bytes32,uint256)", role_member_responder({MINTER_ROLE: [MEMBER_1]}))
        service.register_contract(CONTRACT, schema(ACCESS_CONTROL_FUNCTIONS, ENUMERABLE_FUNCTIONS), [MINTER_ROLE])

        roles = await service.get_current_roles_enriched(CONTRACT)

        assert roles[0].members[0].address.lower() == MEMBER_1
        assert roles[0].members[0].granted_at is None

    @pytest.mark.asyncio
    async def test_has_role_validates(self, service: AccessControlService) -> None:
        """Test has_role validates its arguments."""
        service.register_contract(CONTRACT, schema(ACCESS_CONTROL_FUNCTIONS))

        with pytest.raises(ConfigurationInvalid):
            await service.has_role(CONTRACT, "0x12", MEMBER_1)

    @pytest.mark.asyncio
    async def test_has_role(self, chain: FakeChain, service: AccessControlService) -> None:
        """Test reading hasRole."""
        chain.returns("hasRole(bytes32,address)", ["bool"], True)
        service.register_contract(CONTRACT, schema(ACCESS_CONTROL_FUNCTIONS))

        assert await service.has_role(CONTRACT, MINTER_ROLE, MEMBER_1)


class TestHistoryAndSnapshot:
    """Tests for get_history and export_snapshot."""

    @pytest.mark.asyncio
    async def test_history_without_indexer_is_empty(self, service: AccessControlService) -> None:
        """Test history without an indexer is empty."""
        service.register_contract(CONTRACT, schema(ACCESS_CONTROL_FUNCTIONS))

        page = await service.get_history(CONTRACT)

        assert page.items == []
        assert not page.page_info.has_next_page

    @pytest.mark.asyncio
    async def test_history_validates_filters(self, indexed_service: AccessControlService) -> None:
        """Test history filters are validated."""
        indexed_service.register_contract(CONTRACT, schema(ACCESS_CONTROL_FUNCTIONS))

        with pytest.raises(ConfigurationInvalid):
            await indexed_service.get_history(CONTRACT, HistoryQueryOptions(account="0xnope"))

    @pytest.mark.asyncio
    async def test_history_page(self, fake_indexer: FakeIndexer, indexed_service: AccessControlService) -> None:
        """Test fetching a history page."""
        fake_indexer.queue_data(
            {
                "accessControlEvents": {
                    "nodes": [
                        {
                            "eventType": "ROLE_REVOKED",
                            "role": MINTER_ROLE,
                            "account": MEMBER_1,
                            "timestamp": "2024-01-01T00:00:00",
                            "txHash": "0xrevoke",
                            "blockNumber": "10",
                        }
                    ],
                    "pageInfo": {"hasNextPage": False, "endCursor": None},
                }
            }
        )
        indexed_service.register_contract(CONTRACT, schema(ACCESS_CONTROL_FUNCTIONS))

        page = await indexed_service.get_history(
            CONTRACT, HistoryQueryOptions(role_id=MINTER_ROLE.upper().replace("0X", "0x"))
        )

        assert page.items[0].tx_id == "0xrevoke"
        assert fake_indexer.queries[0]["variables"]["role"] == MINTER_ROLE

    @pytest.mark.asyncio
    async def test_snapshot(self, chain: FakeChain, service: AccessControlService) -> None:
        """Test taking a snapshot."""
        chain.returns("owner()", ["address"], OWNER)
        chain.returns("getRoleMemberCount(bytes32)", ["uint256"], 1)
        chain.responds("getRoleMember(bytes32,uint256)", role_member_responder({MINTER_ROLE: [MEMBER_1]}))
        service.register_contract(
            CONTRACT, schema(OWNABLE_FUNCTIONS, ACCESS_CONTROL_FUNCTIONS, ENUMERABLE_FUNCTIONS), [MINTER_ROLE]
        )

        snapshot = await service.export_snapshot(CONTRACT)

        assert snapshot.ownership.state is OwnershipState.OWNED
        assert [m.lower() for m in snapshot.roles[0].members] == [MEMBER_1]

    @pytest.mark.asyncio
    async def test_snapshot_survives_ownership_failure(self, service: AccessControlService) -> None:
        """Test the snapshot survives an ownership failure."""
        service.register_contract(CONTRACT, schema(OWNABLE_FUNCTIONS, ACCESS_CONTROL_FUNCTIONS), [MINTER_ROLE])

        snapshot = await service.export_snapshot(CONTRACT)

        assert snapshot.ownership is None
        assert [r.role.id for r in snapshot.roles] == [MINTER_ROLE]

    @pytest.mark.asyncio
    async def test_snapshot_skips_ownership_when_not_ownable(self, chain: FakeChain, service: AccessControlService) -> None:
        """Test the snapshot skips ownership when not Ownable."""
        service.register_contract(CONTRACT, schema(ACCESS_CONTROL_FUNCTIONS))

        snapshot = await service.export_snapshot(CONTRACT)

        assert snapshot.ownership is None
        assert chain.calls_to("owner()") == 0

    @pytest.mark.asyncio
    async def test_current_block(self, chain: FakeChain, service: AccessControlService) -> None:
        """Test the service reports the current block."""
        chain.block_number = 77

        assert await service.get_current_block() == 77


class TestWrites:
    """Tests for write operations."""

    @pytest.mark.asyncio
    async def test_transfer_ownership(self, service: AccessControlService, executor: AsyncMock) -> None:
        """Test transfer_ownership hands the action to the executor."""
        service.register_contract(CONTRACT, schema(OWNABLE_FUNCTIONS))

        def callback(status, details) -> None:
            pass

        result = await service.transfer_ownership(CONTRACT, OWNER, EXECUTION, callback, "key")

        assert result.id == "0xtx"
        descriptor, config, on_status, api_key = executor.await_args.args
        assert descriptor.function_name == "transferOwnership"
        assert descriptor.args == (OWNER,)
        assert descriptor.address == CONTRACT
        assert config is EXECUTION
        assert on_status is callback
        assert api_key == "key"

    @pytest.mark.asyncio
    async def test_invalid_new_owner_not_executed(self, service: AccessControlService, executor: AsyncMock) -> None:
        """Test an invalid new owner is never executed."""
        service.register_contract(CONTRACT, schema(OWNABLE_FUNCTIONS))

        with pytest.raises(ConfigurationInvalid, match="newOwner"):
            await service.transfer_ownership(CONTRACT, "0xnope", EXECUTION)
        executor.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_role_writes_lowercase_role(self, service: AccessControlService, executor: AsyncMock) -> None:
        """Test role writes lowercase the role."""
        service.register_contract(CONTRACT, schema(ACCESS_CONTROL_FUNCTIONS))
        upper = MINTER_ROLE.upper().replace("0X", "0x")

        await service.grant_role(CONTRACT, upper, MEMBER_1, EXECUTION)
        await service.revoke_role(CONTRACT, upper, MEMBER_1, EXECUTION)
        await service.renounce_role(CONTRACT, upper, MEMBER_1, EXECUTION)

        calls = [c.args[0] for c in executor.await_args_list]
        assert [d.function_name for d in calls] == ["grantRole", "revokeRole", "renounceRole"]
        assert all(d.args == (MINTER_ROLE, MEMBER_1) for d in calls)

    @pytest.mark.asyncio
    async def test_ownership_writes(self, service: AccessControlService, executor: AsyncMock) -> None:
        """Test ownership writes build the expected transactions."""
        service.register_contract(CONTRACT, schema(OWNABLE_FUNCTIONS, TWO_STEP_FUNCTIONS))

        await service.accept_ownership(CONTRACT, EXECUTION)
        await service.renounce_ownership(CONTRACT, EXECUTION)

        assert [c.args[0].function_name for c in executor.await_args_list] == ["acceptOwnership", "renounceOwnership"]

    @pytest.mark.asyncio
    async def test_admin_writes(self, service: AccessControlService, executor: AsyncMock) -> None:
        """Test admin writes build the expected transactions."""
        service.register_contract(CONTRACT, schema(ACCESS_CONTROL_FUNCTIONS, DEFAULT_ADMIN_RULES_FUNCTIONS))

        await service.transfer_admin_role(CONTRACT, PENDING, EXECUTION)
        await service.accept_admin_transfer(CONTRACT, EXECUTION)
        await service.cancel_admin_transfer(CONTRACT, EXECUTION)
        await service.change_admin_delay(CONTRACT, 86400, EXECUTION)
        await service.rollback_admin_delay(CONTRACT, EXECUTION)

        assert [c.args[0].function_name for c in executor.await_args_list] == [
            "beginDefaultAdminTransfer",
            "acceptDefaultAdminTransfer",
            "cancelDefaultAdminTransfer",
            "changeDefaultAdminDelay",
            "rollbackDefaultAdminDelay",
        ]

    @pytest.mark.asyncio
    async def test_admin_writes_require_admin_rules(self, service: AccessControlService, executor: AsyncMock) -> None:
        """Test admin writes require admin rules."""
        service.register_contract(CONTRACT, schema(ACCESS_CONTROL_FUNCTIONS))

        with pytest.raises(ConfigurationInvalid, match="AccessControlDefaultAdminRules") as exc_info:
            await service.transfer_admin_role(CONTRACT, PENDING, EXECUTION)
        assert isinstance(exc_info.value, UnsupportedContractFeatures)
        assert exc_info.value.missing_features == ["AccessControlDefaultAdminRules"]
        assert exc_info.value.contract_address == CONTRACT
        with pytest.raises(UnsupportedContractFeatures):
            await service.accept_admin_transfer(CONTRACT, EXECUTION)
        executor.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("delay", [-1, 2**48, True, "86400"])
    async def test_change_admin_delay_bounds(
        self, service: AccessControlService, executor: AsyncMock, delay
    ) -> None:
        """Test change_admin_delay rejects out-of-range delays."""
        service.register_contract(CONTRACT, schema(ACCESS_CONTROL_FUNCTIONS, DEFAULT_ADMIN_RULES_FUNCTIONS))

        with pytest.raises(ConfigurationInvalid, match="newDelay"):
            await service.change_admin_delay(CONTRACT, delay, EXECUTION)
        executor.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_executor_error_propagates(self, service: AccessControlService, executor: AsyncMock) -> None:
        """Test executor errors propagate."""
        service.register_contract(CONTRACT, schema(OWNABLE_FUNCTIONS))
        executor.side_effect = RuntimeError("user rejected")

        with pytest.raises(RuntimeError, match="user rejected"):
            await service.renounce_ownership(CONTRACT, EXECUTION)


class TestLifecycle:
    """Tests for aclose."""

    @pytest.mark.asyncio
    async def test_injected_clients_not_closed(
        self, rpc: RpcClient, indexer: IndexerClient, executor: AsyncMock
    ) -> None:
        """Test injected clients are not closed."""
        service = make_service(rpc, executor, indexer)

        await service.aclose()

        assert not rpc._client.is_closed
        assert not indexer._client.is_closed
