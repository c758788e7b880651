"""
Observability utilities for ownership.

Tracing and standard attribute definitions shared by every component.

Example:
    >>> from ownership.observability import create_tracer
    >>>
    >>> class MyScanner:
    ...     def __init__(self, enable_tracing: bool = True):
    ...         self._tracer = create_tracer(__name__, enable_tracing)
    ...
    ...     async def scan(self) -> None:
    ...         with self._tracer.span("my_scanner.scan"):
    ...             ...
"""

from ownership.observability.attributes import (
    ATTR_ACL_POLICY,
    ATTR_BATCH_SIZE,
    ATTR_DB_OPERATION,
    ATTR_DB_SYSTEM,
    ATTR_ERROR_TYPE,
    ATTR_EXPECTED_VERSION,
    ATTR_MIGRATION_NEEDED,
    ATTR_PAGE_SIZE,
    ATTR_PRINCIPAL_ID,
    ATTR_QUERY_FILTER_COUNT,
    ATTR_QUERY_LIMIT,
    ATTR_RECORD_ID,
    ATTR_RECORD_KIND,
    ATTR_RECORDS_MIGRATED,
    ATTR_RECORDS_TOTAL,
    ATTR_WORKFLOW,
)
from ownership.observability.tracer import (
    MockTracer,
    NullTracer,
    OpenTelemetryTracer,
    Tracer,
    create_tracer,
)

__all__ = [
    # Tracer (composition-based API)
    "Tracer",
    "NullTracer",
    "OpenTelemetryTracer",
    "MockTracer",
    "create_tracer",
    # Attributes - Record
    "ATTR_RECORD_ID",
    "ATTR_RECORD_KIND",
    "ATTR_EXPECTED_VERSION",
    # Attributes - Principal
    "ATTR_PRINCIPAL_ID",
    # Attributes - Query
    "ATTR_QUERY_FILTER_COUNT",
    "ATTR_QUERY_LIMIT",
    "ATTR_PAGE_SIZE",
    "ATTR_BATCH_SIZE",
    # Attributes - Reconciliation
    "ATTR_ACL_POLICY",
    "ATTR_WORKFLOW",
    "ATTR_RECORDS_MIGRATED",
    "ATTR_RECORDS_TOTAL",
    "ATTR_MIGRATION_NEEDED",
    # Attributes - Database
    "ATTR_DB_SYSTEM",
    "ATTR_DB_OPERATION",
    "ATTR_ERROR_TYPE",
]
