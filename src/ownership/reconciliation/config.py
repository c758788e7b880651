"""
Configuration for ownership reconciliation runs.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_PAGE_SIZE = 100


@dataclass(frozen=True)
class ReconciliationConfig:
    """
    Configuration for scanners, appliers and orchestrators.

    Attributes:
        page_size: Number of orphan records fetched per store query
        use_version_check: Save with an optimistic version check so that a
            record modified between scan and save counts as a failure
            instead of being overwritten
        enable_tracing: Whether components create OpenTelemetry spans
        enable_metrics: Whether components record OpenTelemetry metrics

    Example:
        >>> config = ReconciliationConfig(page_size=500)
        >>> ReconciliationConfig(page_size=0)
        Traceback (most recent call last):
        ...
        ValueError: page_size must be positive, got 0. ...
    """

    page_size: int = DEFAULT_PAGE_SIZE
    use_version_check: bool = True
    enable_tracing: bool = True
    enable_metrics: bool = True

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.page_size < 1:
            raise ValueError(
                f"page_size must be positive, got {self.page_size}. "
                f"Use a value like {DEFAULT_PAGE_SIZE} (default)."
            )


__all__ = ["DEFAULT_PAGE_SIZE", "ReconciliationConfig"]
