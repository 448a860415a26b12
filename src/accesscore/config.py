"""Configuration contract for accesscore.

This module provides Pydantic-validated configuration models for the
network (RPC endpoint, optional access-control indexer) and for logging.

Direct os.environ/os.getenv usage is FORBIDDEN outside
load_config_from_env(); all other code receives a config object.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class LogLevel(str, Enum):
    """Standard log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class NetworkConfig(BaseModel):
    """EVM network the access-control view is built against.

    The indexer URL is optional. Without it, history, grant enrichment and
    role discovery are unavailable and every read falls back to on-chain data.

    Environment variables:
        NETWORK_ID: network identifier sent to the indexer
        CHAIN_ID: numeric EVM chain id
        RPC_URL: JSON-RPC endpoint for eth_call
        ACCESS_CONTROL_INDEXER_URL: GraphQL endpoint of the event index
        REQUEST_TIMEOUT: HTTP timeout in seconds
    """

    model_config = {"extra": "ignore"}

    id: str = Field(
        default="ethereum-mainnet",
        description="Network identifier, matches the indexer's `network` column",
    )
    chain_id: int = Field(
        default=1,
        description="EVM chain id",
    )
    rpc_url: str = Field(
        default="http://localhost:8545",
        description="JSON-RPC endpoint URL",
    )
    access_control_indexer_url: Optional[str] = Field(
        default=None,
        description="GraphQL access-control indexer endpoint (None = history unavailable)",
    )
    request_timeout: float = Field(
        default=30.0,
        description="HTTP timeout in seconds for RPC and indexer requests",
    )

    @field_validator("rpc_url")
    @classmethod
    def validate_rpc_url(cls, v: str) -> str:
        """Validate RPC URL scheme."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("RPC URL must start with http:// or https://")
        return v

    @field_validator("access_control_indexer_url", mode="before")
    @classmethod
    def validate_indexer_url(cls, v: Optional[str]) -> Optional[str]:
        """Treat empty strings as unset and validate the URL scheme."""
        if v is None or v == "":
            return None
        if not v.startswith(("http://", "https://")):
            raise ValueError("Indexer URL must start with http:// or https://")
        return v


class AccessCoreConfig(BaseModel):
    """Top-level configuration.

    RULE: All settings MUST come through this config chain.
    """

    # Logging
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level",
    )
    log_json: bool = Field(
        default=False,
        description="Use JSON log format (default: plain text)",
    )

    network: NetworkConfig = Field(
        default_factory=NetworkConfig,
        description="Network endpoints",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Convert string to LogLevel enum."""
        if isinstance(v, LogLevel):
            return v
        if isinstance(v, str):
            try:
                return LogLevel[v.upper()]
            except KeyError:
                raise ValueError(f"Invalid log level: {v}. Must be one of {[e.value for e in LogLevel]}")
        raise ValueError(f"Log level must be string or LogLevel enum, got {type(v)}")

    model_config = {
        "use_enum_values": True,
        "extra": "forbid",  # Prevent accidental extra fields
    }


def load_config_from_env() -> AccessCoreConfig:
    """Load configuration from environment variables.

    This is the ONLY place where os.getenv is allowed.

    Environment variables:
    - LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - LOG_JSON: Use JSON log format (true/false, default: false)
    - NETWORK_ID: Network identifier (default: ethereum-mainnet)
    - CHAIN_ID: EVM chain id (default: 1)
    - RPC_URL: JSON-RPC endpoint
    - ACCESS_CONTROL_INDEXER_URL: GraphQL indexer endpoint (optional)
    - REQUEST_TIMEOUT: HTTP timeout in seconds (default: 30)

    Returns:
        AccessCoreConfig instance with values from environment or defaults.
    """
    import os

    network = NetworkConfig(
        id=os.getenv("NETWORK_ID", "ethereum-mainnet"),
        chain_id=int(os.getenv("CHAIN_ID", "1")),
        rpc_url=os.getenv("RPC_URL", "http://localhost:8545"),
        access_control_indexer_url=os.getenv("ACCESS_CONTROL_INDEXER_URL"),
        request_timeout=float(os.getenv("REQUEST_TIMEOUT", "30")),
    )

    return AccessCoreConfig(
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_json=os.getenv("LOG_JSON", "false").lower() in ("true", "1", "yes"),
        network=network,
    )


__all__ = [
    "AccessCoreConfig",
    "NetworkConfig",
    "LogLevel",
    "load_config_from_env",
]
