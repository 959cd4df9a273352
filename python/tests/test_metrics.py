"""Tests for partcopy Prometheus metrics."""

import pytest
from prometheus_client import REGISTRY

from conftest import client_error, make_request
from partcopy import metrics
from partcopy.coordinator import MultipartCopier
from partcopy.errors import AbortedError


def _sample(name: str, labels: dict | None = None) -> float:
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


@pytest.fixture(autouse=True)
def _metrics_enabled():
    metrics.init_metrics()


class TestMetrics:
    """Counters updated by MultipartCopier."""

    def test_init_is_idempotent(self):
        metrics.init_metrics()
        assert metrics.copies_total is not None

    async def test_completed_copy_counted(self, service):
        before = _sample("partcopy_copies_total", {"outcome": "completed"})
        parts_before = _sample("partcopy_parts_copied_total")
        bytes_before = _sample("partcopy_bytes_copied_total")
        request = make_request(parts=3)

        await MultipartCopier(service).copy(request)

        assert _sample("partcopy_copies_total", {"outcome": "completed"}) == before + 1
        assert _sample("partcopy_parts_copied_total") == parts_before + 3
        assert _sample("partcopy_bytes_copied_total") == bytes_before + request.object_size

    async def test_aborted_copy_counted(self, service):
        async def _copy(*args):
            raise client_error("InternalError")

        service.upload_part_copy.side_effect = _copy
        before = _sample("partcopy_copies_total", {"outcome": "aborted"})

        with pytest.raises(AbortedError):
            await MultipartCopier(service).copy(make_request())

        assert _sample("partcopy_copies_total", {"outcome": "aborted"}) == before + 1
