"""Prometheus metrics definitions for partcopy.

All metrics use the ``partcopy_`` prefix. Collectors are only registered
once ``init_metrics()`` has been called; until then the module-level
references stay ``None`` and the copier records nothing.
"""

from __future__ import annotations

from prometheus_client import REGISTRY, Counter, push_to_gateway

# Flag indicating whether metrics have been initialised via init_metrics().
_initialized: bool = False

# ---------------------------------------------------------------------------
# Copy outcome counter  (labels: outcome)
# ---------------------------------------------------------------------------
copies_total: Counter | None = None

# ---------------------------------------------------------------------------
# Part and byte counters
# ---------------------------------------------------------------------------
parts_copied_total: Counter | None = None
bytes_copied_total: Counter | None = None


def init_metrics() -> None:
    """Create and register all Prometheus metrics in the global registry.

    Safe to call more than once; only the first call registers collectors.
    """
    global _initialized
    global copies_total, parts_copied_total, bytes_copied_total

    if _initialized:
        return

    copies_total = Counter(
        "partcopy_copies_total",
        "Total multipart copies by outcome",
        ["outcome"],
    )

    parts_copied_total = Counter(
        "partcopy_parts_copied_total",
        "Total parts successfully copied",
    )

    bytes_copied_total = Counter(
        "partcopy_bytes_copied_total",
        "Total bytes copied by completed multipart copies",
    )

    _initialized = True


def record_outcome(outcome: str) -> None:
    """Count one finished copy under ``outcome`` when metrics are enabled."""
    if copies_total is not None:
        copies_total.labels(outcome=outcome).inc()


def record_completed(parts: int, size: int) -> None:
    """Count the parts and bytes of a completed copy when metrics are enabled."""
    if parts_copied_total is not None:
        parts_copied_total.inc(parts)
    if bytes_copied_total is not None:
        bytes_copied_total.inc(size)


def push_metrics(gateway: str, job: str = "partcopy") -> None:
    """Push the default registry to a Prometheus Pushgateway."""
    push_to_gateway(gateway, job=job, registry=REGISTRY)
