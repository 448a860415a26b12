"""Centralized logging utilities for accesscore.

This module provides:
- Logging configuration from AccessCoreConfig
- Safe preview utilities for sensitive data
- Secret redaction (RPC/indexer URLs commonly embed provider API keys)
- Structured logging with contract_address / operation context
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

from .config import AccessCoreConfig, LogLevel

# Patterns for detecting secrets. Hex addresses, role ids and tx hashes
# must not match.
SECRET_PATTERNS = [
    r'(?i)(?:password|passwd|pwd|secret|token|api[_-]?key|apikey|auth[_-]?token)\s*[:=]\s*["\']?([^"\'\s&]+)',
    r'(?i)(?:bearer|basic)\s+([a-zA-Z0-9+/=._-]+)',
    r'(?i)(?:x-api-key|x-auth-token|x-access-token)\s*[:=]\s*["\']?([^"\'\s]+)',
    # Provider keys embedded in RPC paths, e.g. https://host/v3/<key> or /v2/<key>
    r'(?i)(?<=/v[0-9]/)[A-Za-z0-9_-]{20,}',
    r'(?i)(?:-----BEGIN\s+(?:RSA\s+)?(?:PRIVATE\s+)?KEY-----).*?(?:-----END\s+(?:RSA\s+)?(?:PRIVATE\s+)?KEY-----)',
]

_RESERVED_RECORD_KEYS = frozenset(
    {
        "name", "msg", "args", "created", "filename", "funcName",
        "levelname", "levelno", "lineno", "module", "msecs",
        "message", "pathname", "process", "processName", "relativeCreated",
        "thread", "threadName", "exc_info", "exc_text", "stack_info",
        "taskName", "contract_address", "operation",
    }
)


def safe_preview(value: Any, limit: int = 240) -> str:
    """Create a safe, length-bounded preview of a value for logging.

    Args:
        value: The value to preview (any type)
        limit: Maximum length of the preview (default: 240)

    Returns:
        A single-line, truncated string representation
    """
    if value is None:
        return ""

    if isinstance(value, str):
        s = value
    elif isinstance(value, (dict, list, tuple)):
        try:
            s = json.dumps(value, default=str, ensure_ascii=False)
        except (TypeError, ValueError):
            s = str(value)
    else:
        s = str(value)

    s = " ".join(s.split())

    if len(s) > limit:
        return s[: limit - 1] + "…"

    return s


def redact_secrets(text: str, replacement: str = "[REDACTED]") -> str:
    """Redact secret patterns from text.

    Args:
        text: The text to redact
        replacement: String to replace secrets with (default: "[REDACTED]")

    Returns:
        Text with secrets redacted
    """
    if not isinstance(text, str):
        return text

    result = text
    for pattern in SECRET_PATTERNS:
        result = re.sub(pattern, replacement, result, flags=re.IGNORECASE | re.DOTALL)

    return result


def safe_log_value(value: Any, limit: int = 240, redact: bool = True) -> str:
    """Combine safe_preview() and redact_secrets() for a single log value."""
    preview = safe_preview(value, limit=limit)
    if redact:
        preview = redact_secrets(preview)
    return preview


class AccessCoreFormatter(logging.Formatter):
    """Formatter that includes contract context and optional JSON output.

    This formatter:
    - Extracts contract_address / operation from log records (if available)
    - Formats logs as JSON or plain text
    - Redacts secrets automatically
    """

    def __init__(
        self,
        include_context: bool = True,
        json_format: bool = True,
        redact_secrets: bool = True,
        *args: Any,
        **kwargs: Any,
    ):
        super().__init__(*args, **kwargs)
        self.include_context = include_context
        self.json_format = json_format
        self.redact_secrets = redact_secrets

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record."""
        contract_address = getattr(record, "contract_address", None)
        operation = getattr(record, "operation", None)

        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_context:
            if contract_address:
                log_data["contract_address"] = contract_address
            if operation:
                log_data["operation"] = operation

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_KEYS:
                log_data[key] = safe_log_value(value, redact=self.redact_secrets)

        if self.redact_secrets:
            log_data["message"] = redact_secrets(log_data["message"])

        if self.json_format:
            return json.dumps(log_data, default=str, ensure_ascii=False)

        parts = [
            f"[{log_data['timestamp']}]",
            f"{log_data['level']}",
            f"{log_data['logger']}",
        ]
        if self.include_context and contract_address:
            parts.append(f"contract={contract_address}")
        if self.include_context and operation:
            parts.append(f"op={operation}")
        parts.append(f": {log_data['message']}")
        line = " ".join(parts)
        if "exception" in log_data:
            line = f"{line}\n{log_data['exception']}"
        return line


class AccessCoreLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds contract_address and operation to log records.

    Usage:
        logger = get_contract_logger(__name__, contract_address=addr)
        logger.warning("Enrichment failed", operation="get_ownership")
    """

    def __init__(
        self,
        logger: logging.Logger,
        contract_address: Optional[str] = None,
        operation: Optional[str] = None,
    ):
        super().__init__(logger, {})
        self.contract_address = contract_address
        self.operation = operation

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        """Move contract context kwargs into ``extra``."""
        contract_address = kwargs.pop("contract_address", self.contract_address)
        operation = kwargs.pop("operation", self.operation)

        extra = kwargs.get("extra", {})
        if contract_address:
            extra["contract_address"] = contract_address
        if operation:
            extra["operation"] = operation
        kwargs["extra"] = extra

        return msg, kwargs


def setup_logging(
    config: Optional[AccessCoreConfig] = None,
    json_format: Optional[bool] = None,
    redact_secrets: bool = True,
) -> None:
    """Configure root logging for an accesscore process.

    Args:
        config: AccessCoreConfig instance (if None, loads from environment)
        json_format: Override ``config.log_json`` when given
        redact_secrets: Whether to redact secrets (default: True)
    """
    if config is None:
        from .config import load_config_from_env

        config = load_config_from_env()

    level_map = {
        LogLevel.DEBUG: logging.DEBUG,
        LogLevel.INFO: logging.INFO,
        LogLevel.WARNING: logging.WARNING,
        LogLevel.ERROR: logging.ERROR,
        LogLevel.CRITICAL: logging.CRITICAL,
    }
    log_level = level_map.get(config.log_level, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(
        AccessCoreFormatter(
            include_context=True,
            json_format=config.log_json if json_format is None else json_format,
            redact_secrets=redact_secrets,
        )
    )
    root_logger.addHandler(console_handler)


def get_contract_logger(
    name: str,
    contract_address: Optional[str] = None,
    operation: Optional[str] = None,
) -> AccessCoreLoggerAdapter:
    """Get a logger adapter bound to a contract.

    Args:
        name: Logger name (typically __name__)
        contract_address: Optional contract address to include in all logs
        operation: Optional operation name to include in all logs

    Returns:
        AccessCoreLoggerAdapter instance

    Example:
        logger = get_contract_logger(__name__, contract_address=address)
        logger.info("Reading roles")
    """
    return AccessCoreLoggerAdapter(logging.getLogger(name), contract_address=contract_address, operation=operation)


__all__ = [
    "safe_preview",
    "redact_secrets",
    "safe_log_value",
    "AccessCoreFormatter",
    "AccessCoreLoggerAdapter",
    "setup_logging",
    "get_contract_logger",
]
