from .config import AccessCoreConfig, LogLevel, NetworkConfig, load_config_from_env
from .constants import DEFAULT_ADMIN_ROLE, WELL_KNOWN_ROLES, ZERO_ADDRESS, resolve_role_label
from .detection import detect_access_control_capabilities, validate_access_control_support
from .exceptions import (
    AccessControlError,
    AccessCoreError,
    ConfigurationInvalid,
    OperationFailed,
    RpcError,
    UnsupportedContractFeatures,
)
from .indexer import IndexerClient
from .interfaces import StatusCallback, TransactionExecutor
from .logging import (
    AccessCoreFormatter,
    AccessCoreLoggerAdapter,
    get_contract_logger,
    redact_secrets,
    safe_log_value,
    safe_preview,
    setup_logging,
)
from .models import (
    AccessControlCapabilities,
    AccessSnapshot,
    AdminInfo,
    AdminPendingTransfer,
    AdminState,
    ContractFunction,
    ContractSchema,
    EnrichedRoleAssignment,
    EnrichedRoleMember,
    ExecutionConfig,
    FunctionParameter,
    HistoryChangeType,
    HistoryEntry,
    HistoryQueryOptions,
    OperationResult,
    OwnershipInfo,
    OwnershipPendingTransfer,
    OwnershipState,
    PageInfo,
    PaginatedHistoryResult,
    RoleAssignment,
    RoleIdentifier,
    TransactionStatus,
    WriteDescriptor,
)
from .rpc import RpcClient
from .service import AccessControlService
from .validation import is_valid_address, validate_address, validate_role_id, validate_role_ids

__all__ = [
    # Config
    "AccessCoreConfig",
    "NetworkConfig",
    "LogLevel",
    "load_config_from_env",
    # Constants
    "ZERO_ADDRESS",
    "DEFAULT_ADMIN_ROLE",
    "WELL_KNOWN_ROLES",
    "resolve_role_label",
    # Errors
    "AccessCoreError",
    "AccessControlError",
    "ConfigurationInvalid",
    "OperationFailed",
    "RpcError",
    "UnsupportedContractFeatures",
    # Logging
    "safe_preview",
    "redact_secrets",
    "safe_log_value",
    "AccessCoreFormatter",
    "AccessCoreLoggerAdapter",
    "setup_logging",
    "get_contract_logger",
    # Models
    "AccessControlCapabilities",
    "AccessSnapshot",
    "AdminInfo",
    "AdminPendingTransfer",
    "AdminState",
    "ContractFunction",
    "ContractSchema",
    "EnrichedRoleAssignment",
    "EnrichedRoleMember",
    "ExecutionConfig",
    "FunctionParameter",
    "HistoryChangeType",
    "HistoryEntry",
    "HistoryQueryOptions",
    "OperationResult",
    "OwnershipInfo",
    "OwnershipPendingTransfer",
    "OwnershipState",
    "PageInfo",
    "PaginatedHistoryResult",
    "RoleAssignment",
    "RoleIdentifier",
    "TransactionStatus",
    "WriteDescriptor",
    # Components
    "AccessControlService",
    "IndexerClient",
    "RpcClient",
    "StatusCallback",
    "TransactionExecutor",
    "detect_access_control_capabilities",
    "validate_access_control_support",
    # Validation
    "is_valid_address",
    "validate_address",
    "validate_role_id",
    "validate_role_ids",
]
