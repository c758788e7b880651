"""
Standard span and metric attributes for ownership.

Attribute constants used across components for consistent span naming and
metric labelling. Database attributes follow OpenTelemetry semantic
conventions.

Example:
    >>> from ownership.observability.attributes import ATTR_RECORD_KIND
    >>>
    >>> with tracer.span(
    ...     "ownership.scanner.count_orphans",
    ...     {ATTR_RECORD_KIND: "Category"},
    ... ):
    ...     pass
"""

# =============================================================================
# Record Attributes
# =============================================================================

ATTR_RECORD_ID = "ownership.record.id"
"""Identifier of the record being read or written (UUID string)."""

ATTR_RECORD_KIND = "ownership.record.kind"
"""Kind of record (e.g., 'Category', 'Question')."""

ATTR_EXPECTED_VERSION = "ownership.expected_version"
"""Expected record version for optimistic concurrency (integer)."""

# =============================================================================
# Principal Attributes
# =============================================================================

ATTR_PRINCIPAL_ID = "ownership.principal.id"
"""Identifier of the principal that will own migrated records (string)."""

# =============================================================================
# Query Attributes
# =============================================================================

ATTR_QUERY_FILTER_COUNT = "ownership.query.filter_count"
"""Number of filter conditions in a query (integer)."""

ATTR_QUERY_LIMIT = "ownership.query.limit"
"""Page size limit for a query (-1 when unbounded)."""

ATTR_PAGE_SIZE = "ownership.page_size"
"""Configured page size for orphan scans (integer)."""

ATTR_BATCH_SIZE = "ownership.batch_size"
"""Number of records in a batch operation (integer)."""

# =============================================================================
# Reconciliation Attributes
# =============================================================================

ATTR_ACL_POLICY = "ownership.acl.policy"
"""Name of the ACL policy applied to migrated records."""

ATTR_WORKFLOW = "ownership.reconciliation.workflow"
"""Reconciliation workflow name ('full' or 'question_only')."""

ATTR_RECORDS_MIGRATED = "ownership.reconciliation.migrated"
"""Number of records successfully migrated (integer)."""

ATTR_RECORDS_TOTAL = "ownership.reconciliation.total"
"""Number of orphan records visited (integer)."""

ATTR_MIGRATION_NEEDED = "ownership.reconciliation.needed"
"""Whether any orphan records remain (boolean)."""

# =============================================================================
# Database Attributes (OTEL semantic conventions)
# =============================================================================

ATTR_DB_SYSTEM = "db.system"
"""Database system identifier (e.g., 'sqlite')."""

ATTR_DB_OPERATION = "db.operation"
"""Database operation name (e.g., 'SELECT', 'UPSERT')."""

ATTR_ERROR_TYPE = "error.type"
"""Exception class name for failed operations."""


__all__ = [
    "ATTR_RECORD_ID",
    "ATTR_RECORD_KIND",
    "ATTR_EXPECTED_VERSION",
    "ATTR_PRINCIPAL_ID",
    "ATTR_QUERY_FILTER_COUNT",
    "ATTR_QUERY_LIMIT",
    "ATTR_PAGE_SIZE",
    "ATTR_BATCH_SIZE",
    "ATTR_ACL_POLICY",
    "ATTR_WORKFLOW",
    "ATTR_RECORDS_MIGRATED",
    "ATTR_RECORDS_TOTAL",
    "ATTR_MIGRATION_NEEDED",
    "ATTR_DB_SYSTEM",
    "ATTR_DB_OPERATION",
    "ATTR_ERROR_TYPE",
]
