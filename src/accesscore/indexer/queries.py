"""GraphQL documents for the access-control indexer.

Fixed queries are module constants. The history query is assembled from
``FilterClause`` entries: only clauses whose value is present are
emitted, then rendered into the filter object, the top-level arguments
and the variable declarations.
"""

from __future__ import annotations

from typing import Any, NamedTuple, Optional

from ..models import HistoryQueryOptions
from .events import CHANGE_TYPE_TO_EVENT_TYPES

HEALTH_CHECK_QUERY = "{ __typename }"

PENDING_OWNERSHIP_TRANSFER_QUERY = """
  query GetPendingOwnershipTransfer($network: String!, $contract: String!) {
    accessControlEvents(
      filter: {
        network: { equalTo: $network }
        contract: { equalTo: $contract }
        eventType: { equalTo: OWNERSHIP_TRANSFER_STARTED }
      }
      first: 1
      orderBy: TIMESTAMP_DESC
    ) {
      nodes {
        id
        eventType
        blockNumber
        timestamp
        txHash
        newOwner
      }
    }
  }
"""

PENDING_ADMIN_TRANSFER_QUERY = """
  query GetPendingAdminTransfer($network: String!, $contract: String!) {
    accessControlEvents(
      filter: {
        network: { equalTo: $network }
        contract: { equalTo: $contract }
        eventType: { in: [DEFAULT_ADMIN_TRANSFER_SCHEDULED, ADMIN_TRANSFER_INITIATED] }
      }
      first: 1
      orderBy: TIMESTAMP_DESC
    ) {
      nodes {
        id
        eventType
        blockNumber
        timestamp
        txHash
        newAdmin
        acceptSchedule
      }
    }
  }
"""

LATEST_GRANTS_QUERY = """
  query GetLatestGrants($network: String!, $contract: String!, $roles: [String!]!) {
    roleMemberships(
      filter: {
        network: { equalTo: $network }
        contract: { equalTo: $contract }
        role: { in: $roles }
      }
      orderBy: GRANTED_AT_DESC
    ) {
      nodes {
        role
        account
        grantedAt
        grantedBy
        txHash
        blockNumber
      }
    }
  }
"""

DISCOVER_ROLES_QUERY = """
  query DiscoverRoles($network: String!, $contract: String!) {
    accessControlEvents(
      filter: {
        network: { equalTo: $network }
        contract: { equalTo: $contract }
      }
    ) {
      nodes {
        role
      }
    }
  }
"""

HISTORY_NODE_FIELDS = (
    "id",
    "eventType",
    "blockNumber",
    "timestamp",
    "txHash",
    "role",
    "account",
    "newOwner",
    "newAdmin",
    "acceptSchedule",
)


class FilterClause(NamedTuple):
    """One optional piece of the history query.

    ``field`` names the filter field the condition applies to; None means
    the condition is a top-level argument (``first``, ``after``).
    ``declaration`` is the variable declaration, or None when the value
    is rendered inline.
    """

    field: Optional[str]
    condition: str
    declaration: Optional[str]
    value: Any

    @property
    def variable(self) -> Optional[str]:
        if self.declaration is None:
            return None
        return self.declaration.split(":", 1)[0].strip().lstrip("$")


def history_clauses(options: HistoryQueryOptions) -> list[FilterClause]:
    """All optional clauses for ``options``, present or not, in render order."""
    event_types = CHANGE_TYPE_TO_EVENT_TYPES.get(options.change_type) if options.change_type else None
    return [
        FilterClause("role", "equalTo: $role", "$role: String", options.role_id.lower() if options.role_id else None),
        FilterClause("account", "equalTo: $account", "$account: String", options.account),
        FilterClause(
            "eventType",
            f"in: [{', '.join(event_types)}]" if event_types else "",
            None,
            event_types,
        ),
        FilterClause("txHash", "equalTo: $txHash", "$txHash: String", options.tx_id),
        FilterClause(
            "timestamp", "greaterThanOrEqualTo: $timestampFrom", "$timestampFrom: Datetime", options.timestamp_from
        ),
        FilterClause("timestamp", "lessThanOrEqualTo: $timestampTo", "$timestampTo: Datetime", options.timestamp_to),
        FilterClause(
            "blockNumber",
            "equalTo: $blockNumber",
            "$blockNumber: BigFloat",
            str(options.block_number) if options.block_number is not None else None,
        ),
        FilterClause(None, "first: $limit", "$limit: Int", options.limit),
        FilterClause(None, "after: $cursor", "$cursor: Cursor", options.cursor),
    ]


def present_clauses(clauses: list[FilterClause]) -> list[FilterClause]:
    return [c for c in clauses if c.value is not None]


def build_history_query(
    network: str,
    contract: str,
    options: Optional[HistoryQueryOptions] = None,
) -> tuple[str, dict[str, Any]]:
    """Build the history query document and its variables.

    Results are always ordered newest-timestamp-first.

    Returns:
        ``(document, variables)`` ready to POST to the indexer.
    """
    clauses = present_clauses(history_clauses(options or HistoryQueryOptions()))

    declarations = ["$network: String!", "$contract: String!"]
    variables: dict[str, Any] = {"network": network, "contract": contract}
    for clause in clauses:
        if clause.declaration is not None:
            declarations.append(clause.declaration)
            variables[clause.variable] = clause.value

    # Group conditions per field; a timestamp range becomes one object.
    filter_fields: dict[str, list[str]] = {
        "network": ["equalTo: $network"],
        "contract": ["equalTo: $contract"],
    }
    arguments: list[str] = []
    for clause in clauses:
        if clause.field is None:
            arguments.append(clause.condition)
        else:
            filter_fields.setdefault(clause.field, []).append(clause.condition)

    filter_lines = "\n".join(
        f"        {field}: {{ {', '.join(conditions)} }}" for field, conditions in filter_fields.items()
    )
    argument_lines = "".join(f"\n      {argument}" for argument in arguments)
    node_lines = "\n".join(f"        {name}" for name in HISTORY_NODE_FIELDS)

    document = f"""
  query GetAccessControlHistory({', '.join(declarations)}) {{
    accessControlEvents(
      filter: {{
{filter_lines}
      }}
      orderBy: TIMESTAMP_DESC{argument_lines}
    ) {{
      nodes {{
{node_lines}
      }}
      pageInfo {{
        hasNextPage
        endCursor
      }}
    }}
  }}
"""
    return document, variables


__all__ = [
    "HEALTH_CHECK_QUERY",
    "PENDING_OWNERSHIP_TRANSFER_QUERY",
    "PENDING_ADMIN_TRANSFER_QUERY",
    "LATEST_GRANTS_QUERY",
    "DISCOVER_ROLES_QUERY",
    "FilterClause",
    "history_clauses",
    "present_clauses",
    "build_history_query",
]
