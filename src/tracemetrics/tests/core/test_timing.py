from __future__ import annotations

from tracemetrics.core.timing import (
    TimeUnit,
    format_microseconds,
    milliseconds_to_microseconds,
    seconds_to_microseconds,
)


class TestConversions:
    def test_milliseconds_to_microseconds(self) -> None:
        assert milliseconds_to_microseconds(50) == 50_000

    def test_seconds_to_microseconds(self) -> None:
        assert seconds_to_microseconds(2) == 2_000_000


class TestFormatMicroseconds:
    def test_seconds_drop_trailing_zeros(self) -> None:
        assert format_microseconds(1_800_000, TimeUnit.SECONDS) == "1.8s"
        assert format_microseconds(2_000_000, TimeUnit.SECONDS) == "2s"

    def test_seconds_round_to_two_fraction_digits(self) -> None:
        assert format_microseconds(1_234_567, TimeUnit.SECONDS) == "1.23s"
        assert format_microseconds(12_345, TimeUnit.SECONDS) == "0.01s"

    def test_milliseconds(self) -> None:
        assert format_microseconds(150_000, TimeUnit.MILLISECONDS) == "150ms"
        assert format_microseconds(120_500, TimeUnit.MILLISECONDS) == "120.5ms"

    def test_groups_thousands(self) -> None:
        assert format_microseconds(1_234_500, TimeUnit.MILLISECONDS) == "1,234.5ms"

    def test_zero(self) -> None:
        assert format_microseconds(0, TimeUnit.SECONDS) == "0s"
        assert format_microseconds(0, TimeUnit.MILLISECONDS) == "0ms"

    def test_respects_fraction_digit_limit(self) -> None:
        assert format_microseconds(1_234_567, TimeUnit.SECONDS, maximum_fraction_digits=0) == "1s"
