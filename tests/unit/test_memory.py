"""Unit tests for process memory collection."""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import psutil

from src.doorguard.observability.memory import MemoryUsage, collect_memory_usage


def _fake_process(full_info_error=None, shared=True):
    info = SimpleNamespace(rss=100, vms=400)
    if shared:
        info.shared = 30
    proc = MagicMock()
    proc.memory_info.return_value = info
    if full_info_error is not None:
        proc.memory_full_info.side_effect = full_info_error
    else:
        proc.memory_full_info.return_value = SimpleNamespace(uss=80)
    return proc


class TestCollectMemoryUsage:
    """psutil metrics mapped onto the four reported values."""

    def test_maps_psutil_fields(self):
        with patch("src.doorguard.observability.memory._get_process", return_value=_fake_process()):
            usage = collect_memory_usage()

        assert usage == MemoryUsage(rss=100, heap_total=400, heap_used=80, external=30)

    def test_access_denied_falls_back_to_rss(self):
        proc = _fake_process(full_info_error=psutil.AccessDenied())
        with patch("src.doorguard.observability.memory._get_process", return_value=proc):
            usage = collect_memory_usage()

        assert usage.heap_used == 100

    def test_missing_shared_reports_zero(self):
        with patch("src.doorguard.observability.memory._get_process", return_value=_fake_process(shared=False)):
            usage = collect_memory_usage()

        assert usage.external == 0

    def test_real_process_values_non_negative(self):
        usage = collect_memory_usage()

        assert usage.rss > 0
        assert usage.heap_total > 0
        assert usage.heap_used >= 0
        assert usage.external >= 0
