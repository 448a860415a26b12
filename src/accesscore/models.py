"""Data models for the access-control view.

These are Pydantic models shared by the reader, the indexer client and the
service. Addresses are kept as the strings the source returned; role ids
are canonical lowercase 0x-prefixed bytes32 hex.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

# ── Contract schema ─────────────────────────────────────


class FunctionParameter(BaseModel):
    name: str = ""
    type: str


class ContractFunction(BaseModel):
    """One function of a contract's parsed interface."""

    name: str
    inputs: list[FunctionParameter] = Field(default_factory=list)
    outputs: list[FunctionParameter] = Field(default_factory=list)
    state_mutability: str = "nonpayable"

    @property
    def modifies_state(self) -> bool:
        return self.state_mutability not in ("view", "pure")

    @property
    def input_types(self) -> tuple[str, ...]:
        return tuple(p.type for p in self.inputs)


class ContractSchema(BaseModel):
    """Parsed function list of a contract, supplied by the schema loader."""

    name: str = ""
    address: Optional[str] = None
    functions: list[ContractFunction] = Field(default_factory=list)

    @classmethod
    def from_abi(cls, abi: list[dict[str, Any]], name: str = "", address: Optional[str] = None) -> ContractSchema:
        """Build a schema from a raw JSON ABI, keeping only function entries."""
        functions = []
        for entry in abi:
            if entry.get("type", "function") != "function":
                continue
            mutability = entry.get("stateMutability")
            if mutability is None:
                # Legacy ABIs only carry the `constant` flag
                mutability = "view" if entry.get("constant") else "nonpayable"
            functions.append(
                ContractFunction(
                    name=entry["name"],
                    inputs=[FunctionParameter(name=p.get("name", ""), type=p["type"]) for p in entry.get("inputs", [])],
                    outputs=[FunctionParameter(name=p.get("name", ""), type=p["type"]) for p in entry.get("outputs", [])],
                    state_mutability=mutability,
                )
            )
        return cls(name=name, address=address, functions=functions)


# ── Capabilities ────────────────────────────────────────


class AccessControlCapabilities(BaseModel):
    """Which access-control patterns a contract's interface exposes."""

    model_config = ConfigDict(frozen=True)

    has_ownable: bool = False
    has_two_step_ownable: bool = False
    has_access_control: bool = False
    has_two_step_admin: bool = False
    has_admin_delay_management: bool = False
    has_enumerable_roles: bool = False
    supports_history: bool = False
    verified: bool = False
    notes: tuple[str, ...] = ()


# ── Ownership / admin ───────────────────────────────────


class OwnershipState(str, Enum):
    OWNED = "owned"
    PENDING = "pending"
    EXPIRED = "expired"  # non-EVM families only; never produced here
    RENOUNCED = "renounced"


class OwnershipPendingTransfer(BaseModel):
    pending_owner: str
    # Ownable2Step transfers never expire on EVM
    expiration: None = None
    initiated_at: Optional[str] = None
    initiated_tx_id: Optional[str] = None
    initiated_block: Optional[int] = None


class OwnershipInfo(BaseModel):
    owner: Optional[str] = None
    state: OwnershipState
    pending_transfer: Optional[OwnershipPendingTransfer] = None


class AdminState(str, Enum):
    ACTIVE = "active"
    PENDING = "pending"
    EXPIRED = "expired"  # non-EVM families only; never produced here
    RENOUNCED = "renounced"


class AdminPendingTransfer(BaseModel):
    """Scheduled default-admin transfer.

    ``expiration`` is a UNIX timestamp in seconds (the on-chain accept
    schedule), not a block height.
    """

    pending_admin: str
    expiration: int = Field(description="UNIX seconds after which the transfer can be accepted")
    initiated_at: Optional[str] = None
    initiated_tx_id: Optional[str] = None
    initiated_block: Optional[int] = None

    @property
    def accept_schedule(self) -> int:
        return self.expiration


class AdminInfo(BaseModel):
    admin: Optional[str] = None
    state: AdminState
    pending_transfer: Optional[AdminPendingTransfer] = None
    default_admin_delay: Optional[int] = None


class OwnershipReadResult(BaseModel):
    """Raw on-chain ownership read, zero sentinels already mapped to None."""

    owner: Optional[str] = None
    pending_owner: Optional[str] = None


class AdminReadResult(BaseModel):
    """Raw on-chain default-admin read."""

    default_admin: Optional[str] = None
    pending_default_admin: Optional[str] = None
    accept_schedule: Optional[int] = None
    default_admin_delay: Optional[int] = None


# ── Roles ───────────────────────────────────────────────


class RoleIdentifier(BaseModel):
    id: str
    label: Optional[str] = None


class RoleAssignment(BaseModel):
    role: RoleIdentifier
    members: list[str] = Field(default_factory=list)


class EnrichedRoleMember(BaseModel):
    address: str
    granted_at: Optional[str] = None
    granted_tx_id: Optional[str] = None
    granted_block: Optional[int] = None
    granted_by: Optional[str] = None


class EnrichedRoleAssignment(BaseModel):
    role: RoleIdentifier
    members: list[EnrichedRoleMember] = Field(default_factory=list)


# ── Indexer results ─────────────────────────────────────


class PendingOwnershipTransferData(BaseModel):
    pending_owner: str
    initiated_at: str
    initiated_tx_id: str
    initiated_block: int


class PendingAdminTransferData(BaseModel):
    pending_admin: str
    accept_schedule: int = 0
    initiated_at: str
    initiated_tx_id: str
    initiated_block: int


class GrantInfo(BaseModel):
    """Most recent grant of a role to an account, from the indexer."""

    role: str
    account: str
    granted_at: Optional[str] = None
    granted_tx_id: Optional[str] = None
    granted_by: Optional[str] = None
    granted_block: Optional[int] = None


# ── History ─────────────────────────────────────────────


class HistoryChangeType(str, Enum):
    GRANTED = "GRANTED"
    REVOKED = "REVOKED"
    ROLE_ADMIN_CHANGED = "ROLE_ADMIN_CHANGED"
    OWNERSHIP_TRANSFER_STARTED = "OWNERSHIP_TRANSFER_STARTED"
    OWNERSHIP_TRANSFER_COMPLETED = "OWNERSHIP_TRANSFER_COMPLETED"
    OWNERSHIP_RENOUNCED = "OWNERSHIP_RENOUNCED"
    ADMIN_TRANSFER_INITIATED = "ADMIN_TRANSFER_INITIATED"
    ADMIN_TRANSFER_COMPLETED = "ADMIN_TRANSFER_COMPLETED"
    ADMIN_TRANSFER_CANCELED = "ADMIN_TRANSFER_CANCELED"
    ADMIN_RENOUNCED = "ADMIN_RENOUNCED"
    ADMIN_DELAY_CHANGE_SCHEDULED = "ADMIN_DELAY_CHANGE_SCHEDULED"
    ADMIN_DELAY_CHANGE_CANCELED = "ADMIN_DELAY_CHANGE_CANCELED"
    UNKNOWN = "UNKNOWN"


class HistoryEntry(BaseModel):
    role: RoleIdentifier
    account: str = ""
    change_type: HistoryChangeType
    tx_id: str
    timestamp: str
    block_number: int


class HistoryQueryOptions(BaseModel):
    """Filters for a history query; unset fields emit no filter clause."""

    role_id: Optional[str] = None
    account: Optional[str] = None
    change_type: Optional[HistoryChangeType] = None
    tx_id: Optional[str] = None
    timestamp_from: Optional[str] = None
    timestamp_to: Optional[str] = None
    block_number: Optional[int] = None
    limit: Optional[int] = Field(default=None, gt=0)
    cursor: Optional[str] = None


class PageInfo(BaseModel):
    has_next_page: bool = False
    end_cursor: Optional[str] = None


class PaginatedHistoryResult(BaseModel):
    items: list[HistoryEntry] = Field(default_factory=list)
    page_info: PageInfo = Field(default_factory=PageInfo)


# ── Snapshot ────────────────────────────────────────────


class AccessSnapshot(BaseModel):
    roles: list[RoleAssignment] = Field(default_factory=list)
    ownership: Optional[OwnershipInfo] = None


# ── Writes ──────────────────────────────────────────────


class WriteDescriptor(BaseModel):
    """Write intent handed to the transaction executor."""

    model_config = ConfigDict(frozen=True)

    address: str
    abi: list[dict[str, Any]]
    function_name: str
    args: tuple[Any, ...] = ()


class ExecutionConfig(BaseModel):
    """Opaque execution settings passed through to the executor (EOA, relayer, ...)."""

    method: str = "eoa"
    options: dict[str, Any] = Field(default_factory=dict)


class TransactionStatus(str, Enum):
    IDLE = "idle"
    PENDING_SIGNATURE = "pendingSignature"
    PENDING_CONFIRMATION = "pendingConfirmation"
    PENDING_RELAYER = "pendingRelayer"
    SUCCESS = "success"
    ERROR = "error"


class OperationResult(BaseModel):
    id: str


__all__ = [
    "FunctionParameter",
    "ContractFunction",
    "ContractSchema",
    "AccessControlCapabilities",
    "OwnershipState",
    "OwnershipPendingTransfer",
    "OwnershipInfo",
    "AdminState",
    "AdminPendingTransfer",
    "AdminInfo",
    "OwnershipReadResult",
    "AdminReadResult",
    "RoleIdentifier",
    "RoleAssignment",
    "EnrichedRoleMember",
    "EnrichedRoleAssignment",
    "PendingOwnershipTransferData",
    "PendingAdminTransferData",
    "GrantInfo",
    "HistoryChangeType",
    "HistoryEntry",
    "HistoryQueryOptions",
    "PageInfo",
    "PaginatedHistoryResult",
    "AccessSnapshot",
    "WriteDescriptor",
    "ExecutionConfig",
    "TransactionStatus",
    "OperationResult",
]
