"""Role-label discovery from a contract's public role constants.

Contracts usually expose their role ids as public constants
(``MINTER_ROLE()``, ``adminRole()``). Calling them yields a
hash → name map that lets unknown role hashes display with real labels.
"""

from __future__ import annotations

import logging

from .exceptions import AccessCoreError
from .models import ContractFunction, ContractSchema
from .rpc import RpcClient

logger = logging.getLogger(__name__)

_ROLE_NAME_SUFFIXES = ("_ROLE", "Role")


def find_role_constant_candidates(schema: ContractSchema) -> list[ContractFunction]:
    """Select no-arg view/pure functions returning a single bytes32 whose name ends in _ROLE or Role."""
    return [
        fn
        for fn in schema.functions
        if not fn.inputs
        and len(fn.outputs) == 1
        and fn.outputs[0].type == "bytes32"
        and fn.state_mutability in ("view", "pure")
        and fn.name.endswith(_ROLE_NAME_SUFFIXES)
    ]


async def discover_role_labels(rpc: RpcClient, contract_address: str, schema: ContractSchema) -> dict[str, str]:
    """Call each role-constant candidate and map its lowercased hash to the function name.

    Failed calls are skipped.
    """
    labels: dict[str, str] = {}
    for fn in find_role_constant_candidates(schema):
        fragment = [
            {
                "type": "function",
                "name": fn.name,
                "inputs": [],
                "outputs": [{"name": "", "type": "bytes32"}],
                "stateMutability": fn.state_mutability,
            }
        ]
        try:
            (role_hash,) = await rpc.call_function(contract_address, fragment)
        except AccessCoreError as exc:
            logger.debug("Role constant %s() not readable on %s: %s", fn.name, contract_address, exc.message)
            continue
        labels[role_hash.lower()] = fn.name

    if labels:
        logger.info("Discovered %d role label(s) for %s", len(labels), contract_address)
    return labels


__all__ = ["find_role_constant_candidates", "discover_role_labels"]
