"""
Shared pytest fixtures for the ownership library tests.

This module provides:
- Principal fixtures (admin, other_principal)
- Store fixtures (in_memory_store, seeded_store, failing_store)
- SQLite fixtures (sqlite_connection, sqlite_store)
- OpenTelemetry fixtures (metric_reader, meter_provider, span_exporter)
- Principal context cleanup between tests
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Generator

import aiosqlite
import pytest
import pytest_asyncio
from opentelemetry import trace
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import InMemoryMetricReader
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from ownership.principals import Principal, clear_principal_context
from ownership.reconciliation.metrics import reset_meter
from ownership.stores import InMemoryRemoteStore, SQLiteRemoteStore
from tests.fixtures import FailingRemoteStore, make_principal, seed_records


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: fast tests with no external services")


@pytest.fixture(autouse=True)
def _clean_principal_context() -> Generator[None, None, None]:
    """Make sure no principal leaks between tests."""
    clear_principal_context()
    yield
    clear_principal_context()


# ============================================================================
# Principal Fixtures
# ============================================================================


@pytest.fixture
def admin() -> Principal:
    """The operator that migrations assign ownership to."""
    return make_principal("admin", display_name="Administrator")


@pytest.fixture
def other_principal() -> Principal:
    """A second, unrelated principal."""
    return make_principal("reviewer")


# ============================================================================
# Store Fixtures
# ============================================================================


@pytest.fixture
def in_memory_store() -> InMemoryRemoteStore:
    """Provide a fresh, empty in-memory store with tracing disabled."""
    return InMemoryRemoteStore(enable_tracing=False)


@pytest_asyncio.fixture
async def seeded_store(in_memory_store: InMemoryRemoteStore) -> InMemoryRemoteStore:
    """
    Provide a store with 3 categories (2 orphan) and 5 orphan questions.

    Returns:
        The seeded in-memory store
    """
    await seed_records(
        in_memory_store,
        orphan_categories=2,
        owned_categories=1,
        orphan_questions=5,
    )
    return in_memory_store


@pytest.fixture
def failing_store(in_memory_store: InMemoryRemoteStore) -> FailingRemoteStore:
    """Provide a failure-injecting wrapper around the in-memory store."""
    return FailingRemoteStore(in_memory_store)


# ============================================================================
# SQLite Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def sqlite_connection() -> AsyncGenerator[aiosqlite.Connection, None]:
    """
    Provide a raw aiosqlite connection to an in-memory database.

    The connection is closed after the test.
    """
    conn = await aiosqlite.connect(":memory:")
    yield conn
    await conn.close()


@pytest_asyncio.fixture
async def sqlite_store(sqlite_connection: aiosqlite.Connection) -> SQLiteRemoteStore:
    """Provide a SQLiteRemoteStore with its tables created."""
    store = SQLiteRemoteStore(sqlite_connection, enable_tracing=False)
    await store.create_tables()
    return store


# ============================================================================
# OpenTelemetry Tracing Fixtures
# ============================================================================

_test_tracer_provider: TracerProvider | None = None


@pytest.fixture(scope="session")
def tracer_provider() -> TracerProvider | None:
    """
    Install an SDK TracerProvider globally, once per session.

    The global provider can only be set once, so an already configured SDK
    provider is reused.
    """
    global _test_tracer_provider
    current = trace.get_tracer_provider()
    if isinstance(current, TracerProvider):
        _test_tracer_provider = current
    elif current.__class__.__name__ == "ProxyTracerProvider":
        _test_tracer_provider = TracerProvider()
        trace.set_tracer_provider(_test_tracer_provider)
    return _test_tracer_provider


@pytest.fixture
def span_exporter(
    tracer_provider: TracerProvider | None,
) -> Generator[InMemorySpanExporter, None, None]:
    """Capture the spans finished during one test."""
    exporter = InMemorySpanExporter()
    processor = SimpleSpanProcessor(exporter)
    if tracer_provider is not None:
        tracer_provider.add_span_processor(processor)
    yield exporter
    processor.shutdown()
    exporter.clear()


# ============================================================================
# OpenTelemetry Metrics Fixtures
# ============================================================================


@pytest.fixture
def metric_reader() -> InMemoryMetricReader:
    """Provide an InMemoryMetricReader for inspecting collected metrics."""
    return InMemoryMetricReader()


@pytest.fixture
def meter_provider(metric_reader: InMemoryMetricReader) -> Generator[MeterProvider, None, None]:
    """
    Provide a MeterProvider wired to metric_reader.

    The provider is passed to ReconciliationMetrics explicitly rather than
    installed globally, because the global provider can only be set once.
    """
    reset_meter()
    provider = MeterProvider(metric_readers=[metric_reader])
    yield provider
    provider.shutdown()
    reset_meter()

