"""GraphQL client for the access-control event indexer.

The indexer is best-effort historical data, decoupled from chain
finality; reorg handling is its responsibility. No method of
``IndexerClient`` raises: a missing endpoint, non-2xx status, transport
error, GraphQL ``errors`` list or malformed ``data`` all resolve to None
(logged as a warning), so callers always get a well-formed degraded result.
"""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Optional, Sequence

import httpx

from ..models import (
    GrantInfo,
    HistoryEntry,
    HistoryQueryOptions,
    PageInfo,
    PaginatedHistoryResult,
    PendingAdminTransferData,
    PendingOwnershipTransferData,
)
from .events import account_for_event, classify_event, map_event_type, role_for_event
from .queries import (
    DISCOVER_ROLES_QUERY,
    HEALTH_CHECK_QUERY,
    LATEST_GRANTS_QUERY,
    PENDING_ADMIN_TRANSFER_QUERY,
    PENDING_OWNERSHIP_TRANSFER_QUERY,
    build_history_query,
)

logger = logging.getLogger(__name__)


def grant_key(role_id: str, account: str) -> str:
    """Composite ``role:account`` key (both lowercased) for grant lookups."""
    return f"{role_id.lower()}:{account.lower()}"


class IndexerClient:
    """Client for historical access-control events.

    Availability is checked once with a trivial query and cached for the
    lifetime of the instance. A client without an endpoint is unavailable
    and never touches the network.

    Example::

        client = IndexerClient("ethereum-mainnet", "https://indexer.example/graphql")
        if await client.is_available():
            page = await client.query_history(contract, HistoryQueryOptions(limit=50))
    """

    def __init__(
        self,
        network_id: str,
        endpoint_url: Optional[str] = None,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.network_id = network_id
        self.endpoint_url = endpoint_url or None
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            headers={"Content-Type": "application/json"},
        )
        self._availability_checked = False
        self._available = False

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ── Availability ──────────────────────────────────────────────────

    async def is_available(self) -> bool:
        """Return whether the indexer is configured and answered the health check."""
        if self._availability_checked:
            return self._available

        if not self.endpoint_url:
            logger.info("No indexer configured for network %s", self.network_id)
            self._availability_checked = True
            self._available = False
            return False

        try:
            resp = await self._client.post(self.endpoint_url, json={"query": HEALTH_CHECK_QUERY})
            if resp.is_success:
                logger.info("Indexer available for network %s at %s", self.network_id, self.endpoint_url)
                self._available = True
            else:
                logger.warning("Indexer endpoint %s returned status %d", self.endpoint_url, resp.status_code)
                self._available = False
        except httpx.HTTPError as exc:
            logger.warning("Failed to connect to indexer at %s: %s", self.endpoint_url, exc)
            self._available = False

        self._availability_checked = True
        return self._available

    # ── Transport ─────────────────────────────────────────────────────

    async def _query(self, document: str, variables: dict[str, Any], purpose: str) -> Optional[dict[str, Any]]:
        """POST a query and return its ``data`` object, or None on any failure."""
        if not await self.is_available():
            return None

        try:
            resp = await self._client.post(self.endpoint_url, json={"query": document, "variables": variables})
        except httpx.HTTPError as exc:
            logger.warning("Indexer request failed for %s: %s", purpose, exc)
            return None

        if not resp.is_success:
            logger.warning("Indexer query failed with status %d for %s", resp.status_code, purpose)
            return None

        try:
            body = resp.json()
        except ValueError as exc:
            logger.warning("Indexer returned invalid JSON for %s: %s", purpose, exc)
            return None

        errors = body.get("errors") if isinstance(body, dict) else None
        if errors:
            if not isinstance(errors, list):
                errors = [errors]
            logger.warning(
                "Indexer query errors for %s: %s",
                purpose,
                "; ".join(str(e.get("message", e)) if isinstance(e, dict) else str(e) for e in errors),
            )
            return None

        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, dict):
            logger.warning("Indexer response for %s has no data", purpose)
            return None
        return data

    def _variables(self, contract_address: str, **extra: Any) -> dict[str, Any]:
        return {"network": self.network_id, "contract": contract_address, **extra}

    @staticmethod
    def _nodes(data: dict[str, Any], entity: str) -> list[dict[str, Any]]:
        entity_data = data.get(entity)
        if not isinstance(entity_data, dict):
            return []
        nodes = entity_data.get("nodes")
        if not isinstance(nodes, list):
            return []
        return [node for node in nodes if isinstance(node, dict)]

    # ── Pending transfers ─────────────────────────────────────────────

    async def query_pending_ownership_transfer(self, contract_address: str) -> Optional[PendingOwnershipTransferData]:
        """Latest OWNERSHIP_TRANSFER_STARTED event, or None."""
        logger.info("Querying pending ownership transfer for %s", contract_address)
        data = await self._query(
            PENDING_OWNERSHIP_TRANSFER_QUERY, self._variables(contract_address), "ownership transfer"
        )
        if data is None:
            return None

        try:
            nodes = self._nodes(data, "accessControlEvents")
            if not nodes:
                logger.debug("No pending ownership transfer found for %s", contract_address)
                return None

            event = nodes[0]
            if not event.get("newOwner"):
                logger.warning("OWNERSHIP_TRANSFER_STARTED event missing newOwner for %s", contract_address)
                return None

            return PendingOwnershipTransferData(
                pending_owner=event["newOwner"],
                initiated_at=event["timestamp"],
                initiated_tx_id=event["txHash"],
                initiated_block=int(event["blockNumber"]),
            )
        except Exception as exc:
            logger.warning("Malformed ownership transfer event for %s: %s", contract_address, exc)
            return None

    async def query_pending_admin_transfer(self, contract_address: str) -> Optional[PendingAdminTransferData]:
        """Latest scheduled/initiated default-admin transfer event, or None."""
        logger.info("Querying pending admin transfer for %s", contract_address)
        data = await self._query(PENDING_ADMIN_TRANSFER_QUERY, self._variables(contract_address), "admin transfer")
        if data is None:
            return None

        try:
            nodes = self._nodes(data, "accessControlEvents")
            if not nodes:
                logger.debug("No pending admin transfer found for %s", contract_address)
                return None

            event = nodes[0]
            if not event.get("newAdmin"):
                logger.warning("Admin transfer event missing newAdmin for %s", contract_address)
                return None

            return PendingAdminTransferData(
                pending_admin=event["newAdmin"],
                accept_schedule=int(event["acceptSchedule"]) if event.get("acceptSchedule") else 0,
                initiated_at=event["timestamp"],
                initiated_tx_id=event["txHash"],
                initiated_block=int(event["blockNumber"]),
            )
        except Exception as exc:
            logger.warning("Malformed admin transfer event for %s: %s", contract_address, exc)
            return None

    # ── Grants ────────────────────────────────────────────────────────

    async def query_latest_grants(
        self, contract_address: str, role_ids: Sequence[str]
    ) -> Optional[dict[str, GrantInfo]]:
        """Most recent grant per ``role:account`` for the given roles.

        The indexer returns memberships newest-first, so the first node for
        a key wins and later duplicates are dropped. A malformed node
        discards the whole result.
        """
        if not role_ids:
            return {}

        roles = [role_id.lower() for role_id in role_ids]
        data = await self._query(
            LATEST_GRANTS_QUERY, self._variables(contract_address, roles=roles), "latest grants"
        )
        if data is None:
            return None

        try:
            grants: dict[str, GrantInfo] = {}
            for node in self._nodes(data, "roleMemberships"):
                role, account = node.get("role"), node.get("account")
                if not role or not account:
                    continue
                key = grant_key(role, account)
                if key in grants:
                    continue
                block = node.get("blockNumber")
                grants[key] = GrantInfo(
                    role=role.lower(),
                    account=account,
                    granted_at=node.get("grantedAt"),
                    granted_tx_id=node.get("txHash"),
                    granted_by=node.get("grantedBy"),
                    granted_block=int(block) if block is not None else None,
                )
        except Exception as exc:
            logger.warning("Malformed grant records for %s: %s", contract_address, exc)
            return None

        logger.debug("Found %d grant record(s) for %s", len(grants), contract_address)
        return grants

    # ── History ───────────────────────────────────────────────────────

    async def query_history(
        self,
        contract_address: str,
        options: Optional[HistoryQueryOptions] = None,
    ) -> Optional[PaginatedHistoryResult]:
        """One page of access-control history, newest first.

        Individual malformed events are skipped; a malformed page envelope
        yields None.
        """
        document, variables = build_history_query(self.network_id, contract_address, options)
        data = await self._query(document, variables, "history")
        if data is None:
            return None

        try:
            items: list[HistoryEntry] = []
            for node in self._nodes(data, "accessControlEvents"):
                try:
                    items.append(self._to_history_entry(node))
                except (KeyError, TypeError, ValueError) as exc:
                    logger.warning("Skipping malformed history event %s: %s", node.get("id"), exc)

            events = data.get("accessControlEvents")
            page = (events.get("pageInfo") if isinstance(events, dict) else None) or {}
            return PaginatedHistoryResult(
                items=items,
                page_info=PageInfo(
                    has_next_page=bool(page.get("hasNextPage", False)),
                    end_cursor=page.get("endCursor"),
                ),
            )
        except Exception as exc:
            logger.warning("Malformed history page for %s: %s", contract_address, exc)
            return None

    @staticmethod
    def _to_history_entry(node: dict[str, Any]) -> HistoryEntry:
        event_type = node["eventType"]
        family = classify_event(event_type)
        return HistoryEntry(
            role=role_for_event(family, node),
            account=account_for_event(family, node),
            change_type=map_event_type(event_type),
            tx_id=node["txHash"],
            timestamp=node["timestamp"],
            block_number=int(node["blockNumber"]),
        )

    async def iterate_history(
        self,
        contract_address: str,
        options: Optional[HistoryQueryOptions] = None,
    ) -> AsyncIterator[HistoryEntry]:
        """Yield every history entry, following cursors until the last page.

        Stops quietly if a page cannot be fetched.
        """
        page_options = (options or HistoryQueryOptions()).model_copy()
        while True:
            page = await self.query_history(contract_address, page_options)
            if page is None:
                return
            for item in page.items:
                yield item
            if not page.page_info.has_next_page or not page.page_info.end_cursor:
                return
            page_options = page_options.model_copy(update={"cursor": page.page_info.end_cursor})

    # ── Role discovery ────────────────────────────────────────────────

    async def discover_role_ids(self, contract_address: str) -> Optional[list[str]]:
        """Distinct non-empty role ids seen in any event for the contract."""
        logger.info("Discovering role ids for %s via indexer", contract_address)
        data = await self._query(DISCOVER_ROLES_QUERY, self._variables(contract_address), "role discovery")
        if data is None:
            return None

        try:
            seen: dict[str, None] = {}
            for node in self._nodes(data, "accessControlEvents"):
                role = node.get("role")
                if role:
                    seen.setdefault(role.lower(), None)
        except Exception as exc:
            logger.warning("Malformed role discovery response for %s: %s", contract_address, exc)
            return None

        logger.debug("Discovered %d role id(s) for %s", len(seen), contract_address)
        return list(seen)


__all__ = ["IndexerClient", "grant_key"]
