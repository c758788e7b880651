"""
Query builder for remote stores.

Provides a backend-agnostic way to express attribute filters, ordering and
a result limit. Store implementations translate these queries to their own
syntax (SQL, in-memory predicates, backend REST queries).
"""

from dataclasses import dataclass, field
from typing import Any, Literal

Operator = Literal["eq", "gt", "exists", "missing"]


@dataclass(frozen=True)
class Filter:
    """
    A single filter condition for a query.

    Attributes:
        field: Name of the record attribute to filter on
        operator: Comparison operator
        value: Value to compare against (None for exists/missing)

    Supported Operators:
        - eq: Equal
        - gt: Greater than (keyset cursors)
        - exists: Attribute is set (not None)
        - missing: Attribute is absent (None)

    Example:
        >>> Filter.missing("owner")
        Filter(field='owner', operator='missing', value=None)
        >>> str(Filter.gt("id", 5))
        'id > 5'
    """

    field: str
    operator: Operator
    value: Any = None

    @classmethod
    def eq(cls, field: str, value: Any) -> "Filter":
        """Create an equality filter (field = value)."""
        return cls(field=field, operator="eq", value=value)

    @classmethod
    def gt(cls, field: str, value: Any) -> "Filter":
        """Create a greater-than filter (field > value)."""
        return cls(field=field, operator="gt", value=value)

    @classmethod
    def exists(cls, field: str) -> "Filter":
        """
        Create an "attribute is set" filter.

        Example:
            >>> Filter.exists("owner")
            Filter(field='owner', operator='exists', value=None)
        """
        return cls(field=field, operator="exists")

    @classmethod
    def missing(cls, field: str) -> "Filter":
        """
        Create an "attribute does not exist" filter.

        This is the orphan predicate: ``Filter.missing("owner")`` selects
        records that were never assigned an owner.
        """
        return cls(field=field, operator="missing")

    def __str__(self) -> str:
        """Human-readable string representation."""
        if self.operator == "exists":
            return f"{self.field} EXISTS"
        if self.operator == "missing":
            return f"{self.field} MISSING"
        symbol = "=" if self.operator == "eq" else ">"
        return f"{self.field} {symbol} {self.value!r}"


@dataclass
class Query:
    """
    Query against a remote store.

    All filters are combined with AND logic.

    Attributes:
        filters: List of Filter conditions (combined with AND)
        order_by: Attribute to order results by
        order_direction: Sort direction ('asc' or 'desc')
        limit: Maximum number of records to return

    Example:
        >>> query = Query(
        ...     filters=[Filter.missing("owner")],
        ...     order_by="id",
        ...     limit=100,
        ... )
        >>> str(query)
        'WHERE owner MISSING ORDER BY id ASC LIMIT 100'
    """

    filters: list[Filter] = field(default_factory=list)
    order_by: str | None = None
    order_direction: Literal["asc", "desc"] = "asc"
    limit: int | None = None

    def __str__(self) -> str:
        """Human-readable string representation."""
        parts = []
        if self.filters:
            filter_strs = " AND ".join(str(f) for f in self.filters)
            parts.append(f"WHERE {filter_strs}")
        if self.order_by:
            parts.append(f"ORDER BY {self.order_by} {self.order_direction.upper()}")
        if self.limit is not None:
            parts.append(f"LIMIT {self.limit}")
        return " ".join(parts) if parts else "(all records)"
