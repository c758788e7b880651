"""
OpenTelemetry metrics for ownership reconciliation.

Metrics Exposed:
    - ownership.records.migrated (Counter): Records assigned an owner
    - ownership.records.failed (Counter): Records whose save failed
    - ownership.run.duration (Histogram): Wall-clock duration of a run

All metrics carry the ``record_kind`` (counters) or ``workflow`` and
``success`` (histogram) attributes.

Example:
    >>> metrics = ReconciliationMetrics()
    >>> metrics.record_migrated(RecordKind.QUESTION, 10)
    >>> metrics.record_run(MigrationWorkflow.FULL, 1.5, success=True)
    >>> metrics.snapshot().migrated
    {'Question': 10}
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from opentelemetry import metrics

if TYPE_CHECKING:
    from ownership.reconciliation.models import MigrationWorkflow
    from ownership.records.base import RecordKind

_meter: Any = None

MAX_RECORDED_RUNS = 100


def _get_meter() -> Any:
    """Get or create the meter for the reconciliation namespace."""
    global _meter
    if _meter is None:
        _meter = metrics.get_meter("ownership.reconciliation", version="1.0.0")
    return _meter


def reset_meter() -> None:
    """
    Reset the module-level meter.

    Tests that install their own MeterProvider call this so the next
    ReconciliationMetrics picks it up.
    """
    global _meter
    _meter = None


class NoOpCounter:
    """Counter used when metrics are disabled."""

    def add(
        self,
        amount: int | float,
        attributes: dict[str, Any] | None = None,
    ) -> None:
        pass


class NoOpHistogram:
    """Histogram used when metrics are disabled."""

    def record(
        self,
        value: float,
        attributes: dict[str, Any] | None = None,
    ) -> None:
        pass


@dataclass(frozen=True)
class ReconciliationMetricSnapshot:
    """
    Snapshot of the values recorded by one ReconciliationMetrics instance.

    Attributes:
        migrated: Migrated record count per kind name
        failed: Failed record count per kind name
        run_durations: Durations of the most recent runs, oldest first, in seconds
    """

    migrated: dict[str, int] = field(default_factory=dict)
    failed: dict[str, int] = field(default_factory=dict)
    run_durations: list[float] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "migrated": dict(self.migrated),
            "failed": dict(self.failed),
            "run_durations": list(self.run_durations),
        }


@dataclass
class ReconciliationMetrics:
    """
    Container for reconciliation metric instruments.

    Values are also tracked locally so that snapshot() works whether or not
    an OpenTelemetry SDK is configured.

    Attributes:
        enable_metrics: Whether OpenTelemetry instruments are created (default True)
        meter_provider: MeterProvider to create instruments from (defaults to
            the global provider)
        max_recorded_runs: Number of recent run durations kept for snapshot()
    """

    enable_metrics: bool = True
    meter_provider: Any = None
    max_recorded_runs: int = MAX_RECORDED_RUNS

    _meter: Any = field(default=None, init=False, repr=False)
    _migrated_counter: Any = field(default=None, init=False, repr=False)
    _failed_counter: Any = field(default=None, init=False, repr=False)
    _run_duration_histogram: Any = field(default=None, init=False, repr=False)

    _migrated: dict[str, int] = field(default_factory=dict, init=False, repr=False)
    _failed: dict[str, int] = field(default_factory=dict, init=False, repr=False)
    _run_durations: deque[float] = field(default_factory=deque, init=False, repr=False)

    def __post_init__(self) -> None:
        """Initialize metric instruments."""
        if self.max_recorded_runs < 1:
            raise ValueError(f"max_recorded_runs must be positive, got {self.max_recorded_runs}")
        self._run_durations = deque(maxlen=self.max_recorded_runs)
        if self.enable_metrics:
            self._setup_metrics()
        else:
            self._setup_noop()

    def _setup_metrics(self) -> None:
        if self.meter_provider is not None:
            self._meter = self.meter_provider.get_meter("ownership.reconciliation", version="1.0.0")
        else:
            self._meter = _get_meter()

        self._migrated_counter = self._meter.create_counter(
            name="ownership.records.migrated",
            unit="records",
            description="Number of orphan records assigned an owner",
        )
        self._failed_counter = self._meter.create_counter(
            name="ownership.records.failed",
            unit="records",
            description="Number of orphan records whose save failed",
        )
        self._run_duration_histogram = self._meter.create_histogram(
            name="ownership.run.duration",
            unit="s",
            description="Duration of reconciliation runs",
        )

    def _setup_noop(self) -> None:
        self._migrated_counter = NoOpCounter()
        self._failed_counter = NoOpCounter()
        self._run_duration_histogram = NoOpHistogram()

    def record_migrated(self, kind: RecordKind, count: int = 1) -> None:
        """Record records of a kind that were assigned an owner."""
        if count <= 0:
            return
        self._migrated[kind.value] = self._migrated.get(kind.value, 0) + count
        self._migrated_counter.add(count, {"record_kind": kind.value})

    def record_failed(self, kind: RecordKind, count: int = 1) -> None:
        """Record records of a kind whose save failed."""
        if count <= 0:
            return
        self._failed[kind.value] = self._failed.get(kind.value, 0) + count
        self._failed_counter.add(count, {"record_kind": kind.value})

    def record_run(
        self,
        workflow: MigrationWorkflow,
        duration_seconds: float,
        *,
        success: bool,
    ) -> None:
        """Record the duration of a finished run."""
        self._run_durations.append(duration_seconds)
        self._run_duration_histogram.record(
            duration_seconds,
            {"workflow": workflow.value, "success": success},
        )

    def snapshot(self) -> ReconciliationMetricSnapshot:
        """Return the values recorded so far."""
        return ReconciliationMetricSnapshot(
            migrated=dict(self._migrated),
            failed=dict(self._failed),
            run_durations=list(self._run_durations),
        )


__all__ = [
    "ReconciliationMetrics",
    "ReconciliationMetricSnapshot",
    "NoOpCounter",
    "NoOpHistogram",
    "reset_meter",
    "MAX_RECORDED_RUNS",
]
