"""Input validation for contract addresses and role identifiers.

All failures raise ConfigurationInvalid naming the offending parameter.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from eth_utils import to_checksum_address

from .exceptions import ConfigurationInvalid

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")
_ROLE_ID_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")


def is_valid_address(address: Any) -> bool:
    """Return True for a 0x-prefixed 20-byte hex address.

    All-lowercase addresses are accepted as-is; mixed case must match the
    EIP-55 checksum exactly.
    """
    if not isinstance(address, str) or not _ADDRESS_RE.match(address):
        return False
    body = address[2:]
    if body == body.lower():
        return True
    return to_checksum_address(address) == address


def validate_address(address: Any, param_name: str = "address", contract_address: Optional[str] = None) -> str:
    if not isinstance(address, str) or not address.strip():
        raise ConfigurationInvalid(
            f"{param_name} is required",
            contract_address=contract_address,
            config_field=param_name,
            provided_value=address,
        )
    if not is_valid_address(address):
        raise ConfigurationInvalid(
            f"Invalid EVM address for {param_name}: {address}. "
            "Expected 0x-prefixed 40 hex characters with a valid checksum.",
            contract_address=contract_address,
            config_field=param_name,
            provided_value=address,
        )
    return address


def validate_role_id(role_id: Any, param_name: str = "roleId", contract_address: Optional[str] = None) -> str:
    """Validate a bytes32 role id and return it trimmed and lowercased."""
    if not isinstance(role_id, str) or not role_id.strip():
        raise ConfigurationInvalid(
            f"{param_name} is required",
            contract_address=contract_address,
            config_field=param_name,
            provided_value=role_id,
        )
    trimmed = role_id.strip()
    if not _ROLE_ID_RE.match(trimmed):
        raise ConfigurationInvalid(
            f"Invalid role ID for {param_name}: {role_id}. Expected 0x-prefixed 64 hex characters (bytes32).",
            contract_address=contract_address,
            config_field=param_name,
            provided_value=role_id,
        )
    return trimmed.lower()


def validate_role_ids(role_ids: Any, param_name: str = "roleIds", contract_address: Optional[str] = None) -> list[str]:
    """Validate a list of role ids, returning them canonicalized and deduplicated in order."""
    if not isinstance(role_ids, list):
        raise ConfigurationInvalid(
            f"{param_name} must be a list",
            contract_address=contract_address,
            config_field=param_name,
            provided_value=role_ids,
        )
    seen: dict[str, None] = {}
    for index, role_id in enumerate(role_ids):
        seen.setdefault(validate_role_id(role_id, f"{param_name}[{index}]", contract_address), None)
    return list(seen)


__all__ = [
    "is_valid_address",
    "validate_address",
    "validate_role_id",
    "validate_role_ids",
]
