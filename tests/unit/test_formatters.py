"""Unit tests for message formatting functions."""

from src.doorguard.gateway.formatters import (
    format_door_alert,
    format_megabytes,
    format_memory_report,
    format_motion_alert,
    format_status,
)
from src.doorguard.observability.memory import MemoryUsage

MB = 1024 * 1024


class TestFormatMegabytes:
    """Byte counts rendered as megabytes."""

    def test_zero(self):
        assert format_megabytes(0) == "0 MB"

    def test_whole_megabytes(self):
        assert format_megabytes(64 * MB) == "64 MB"

    def test_whole_value_has_no_decimal_part(self):
        assert format_megabytes(50 * MB) == "50 MB"

    def test_rounded_to_two_decimals(self):
        assert format_megabytes(123456789) == "117.74 MB"

    def test_half_rounds_up(self):
        # 0.125 MB is exactly representable, so no float noise
        assert format_megabytes(MB // 8) == "0.13 MB"

    def test_small_value_rounds_down(self):
        assert format_megabytes(1024) == "0 MB"


class TestFormatMemoryReport:
    """The /memory reply."""

    def test_four_labelled_lines_in_order(self):
        usage = MemoryUsage(rss=2 * MB, heap_total=4 * MB, heap_used=3 * MB, external=MB // 2)

        assert format_memory_report(usage).split("\n") == [
            "RSS: 2 MB ",
            "HEAP (total): 4 MB ",
            "HEAP (used): 3 MB ",
            "EXTERNAL: 0.5 MB",
        ]

    def test_lines_end_with_space_before_newline(self):
        usage = MemoryUsage(rss=MB, heap_total=MB, heap_used=MB, external=MB)

        assert format_memory_report(usage) == (
            "RSS: 1 MB \nHEAP (total): 1 MB \nHEAP (used): 1 MB \nEXTERNAL: 1 MB"
        )


class TestAlertTexts:
    """Status and sensor alert texts."""

    def test_status(self):
        assert format_status(True) == "Guard: enabled"
        assert format_status(False) == "Guard: disabled"

    def test_door(self):
        assert format_door_alert(True) == 'Magnet sensor "door-1" is opened'
        assert format_door_alert(False) == 'Magnet sensor "door-1" is closed'

    def test_motion(self):
        assert format_motion_alert() == 'Motion detected on sensor "motion-1"'
