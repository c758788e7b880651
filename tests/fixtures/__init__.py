"""
Shared test fixtures for the ownership library.

This module provides:
- Record factories (make_category, make_question, seed_records)
- Principal factory (make_principal)
- FailingRemoteStore, a store wrapper that injects failures
- collect_metric_points, for InMemoryMetricReader assertions

Usage:
    from tests.fixtures import FailingRemoteStore, make_category, make_principal
"""

from tests.fixtures.metrics import collect_metric_points
from tests.fixtures.records import (
    make_category,
    make_principal,
    make_question,
    seed_records,
)
from tests.fixtures.stores import FailingRemoteStore

__all__ = [
    "make_category",
    "make_question",
    "make_principal",
    "seed_records",
    "FailingRemoteStore",
    "collect_metric_points",
]
