"""Unified exception hierarchy for accesscore.

All errors inherit from AccessCoreError. This module provides:
- Base exception hierarchy with stable error codes
- Access-control domain errors carrying the contract they concern
- ErrorRegistry for mapping codes back to error classes

Usage:
    from accesscore.exceptions import (
        ConfigurationInvalid,
        OperationFailed,
    )

Two failure channels coexist. Required on-chain reads raise OperationFailed
with the operation name and the underlying cause; optional reads (secondary
checks, indexer enrichment) never raise and degrade to None/False/empty.
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar, cast

__all__ = [
    # Base hierarchy
    "AccessCoreError",
    "RpcError",
    "AccessControlError",
    "ConfigurationInvalid",
    "UnsupportedContractFeatures",
    "OperationFailed",
    # Registry
    "ErrorRegistry",
    "error_registry",
    "register_error",
]


# ---- Exception Hierarchy ----------------------------------------------------


class AccessCoreError(Exception):
    """Base exception for accesscore.

    Attributes:
        code: Stable error code string (e.g. "OPERATION_FAILED").
        message: Human-readable error description.
        details: Additional context as keyword arguments.
    """

    code: str = "INTERNAL_ERROR"
    message: str = "An internal error occurred"

    def __init__(self, message: str | None = None, code: str | None = None, **kwargs: Any) -> None:
        self.message = message or self.message
        self.code = code or self.code
        self.details = kwargs
        super().__init__(self.message)


class RpcError(AccessCoreError):
    """JSON-RPC transport failure or error response."""

    code: str = "RPC_ERROR"

    def __init__(self, message: str | None = None, rpc_code: int | None = None, **kwargs: Any) -> None:
        super().__init__(message, rpc_code=rpc_code, **kwargs)
        self.rpc_code = rpc_code


class AccessControlError(AccessCoreError):
    """Base class for access-control errors tied to a contract."""

    code: str = "ACCESS_CONTROL_ERROR"

    def __init__(self, message: str | None = None, contract_address: str | None = None, **kwargs: Any) -> None:
        super().__init__(message, contract_address=contract_address, **kwargs)
        self.contract_address = contract_address


class ConfigurationInvalid(AccessControlError):
    """Invalid input or configuration (bad address, unregistered contract, missing capability)."""

    code: str = "CONFIGURATION_INVALID"

    def __init__(
        self,
        message: str | None = None,
        contract_address: str | None = None,
        config_field: str | None = None,
        provided_value: Any = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message,
            contract_address,
            config_field=config_field,
            provided_value=provided_value,
            **kwargs,
        )
        self.config_field = config_field
        self.provided_value = provided_value


class UnsupportedContractFeatures(ConfigurationInvalid):
    """Write targets an interface the contract was not detected to expose."""

    code: str = "UNSUPPORTED_FEATURES"

    def __init__(
        self,
        message: str | None = None,
        contract_address: str | None = None,
        missing_features: list[str] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, contract_address, missing_features=list(missing_features or []), **kwargs)
        self.missing_features = list(missing_features or [])


class OperationFailed(AccessControlError):
    """A required on-chain read failed."""

    code: str = "OPERATION_FAILED"

    def __init__(
        self,
        message: str | None = None,
        contract_address: str | None = None,
        operation: str | None = None,
        cause: BaseException | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, contract_address, operation=operation, cause=cause, **kwargs)
        self.operation = operation
        self.cause = cause


# ---- Error Registry ----------------------------------------------------------

_E = TypeVar("_E", bound=type[AccessCoreError])


class ErrorRegistry:
    """Registry for mapping stable error codes to error classes."""

    def __init__(self) -> None:
        self._errors: dict[str, type[AccessCoreError]] = {}

    def register(self, code: str, error_cls: type[AccessCoreError]) -> None:
        self._errors[code] = error_cls

    def get(self, code: str) -> type[AccessCoreError] | None:
        return self._errors.get(code)

    def all(self) -> dict[str, type[AccessCoreError]]:
        return dict(self._errors)


error_registry = ErrorRegistry()


def register_error(code: str) -> Callable[[_E], _E]:
    """Decorator to register a custom error type.

    Usage:
        @register_error("ROLE_LOCKED")
        class RoleLockedError(AccessControlError):
            code = "ROLE_LOCKED"
    """

    def decorator(cls: _E) -> _E:
        error_registry.register(code, cls)
        return cls

    return cast(Callable[[_E], _E], decorator)


# Register base errors
error_registry.register("INTERNAL_ERROR", AccessCoreError)
error_registry.register("RPC_ERROR", RpcError)
error_registry.register("ACCESS_CONTROL_ERROR", AccessControlError)
error_registry.register("CONFIGURATION_INVALID", ConfigurationInvalid)
error_registry.register("UNSUPPORTED_FEATURES", UnsupportedContractFeatures)
error_registry.register("OPERATION_FAILED", OperationFailed)
