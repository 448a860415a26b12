from __future__ import annotations

from typing import Any, Optional, Protocol

from .models import ExecutionConfig, OperationResult, TransactionStatus, WriteDescriptor


class StatusCallback(Protocol):
    """Receives transaction lifecycle updates from the executor."""

    def __call__(self, status: TransactionStatus, details: dict[str, Any]) -> None: ...


class TransactionExecutor(Protocol):
    """Signs and broadcasts a write descriptor.

    This is the only path by which on-chain state changes. The service
    returns the executor's result unchanged.
    """

    async def __call__(
        self,
        descriptor: WriteDescriptor,
        execution_config: ExecutionConfig,
        on_status_change: Optional[StatusCallback] = None,
        runtime_api_key: Optional[str] = None,
    ) -> OperationResult: ...


__all__ = ["StatusCallback", "TransactionExecutor"]
