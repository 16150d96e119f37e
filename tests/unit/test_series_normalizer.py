"""Unit tests for normalizing monitoring samples onto the report grid."""

from __future__ import annotations

import datetime as dt

import pytest

from stackreport.common.time import fixed_offset
from stackreport.series import Interval, Sample, normalize
from tests.helpers.fakes import day_interval, latest_first

UTC = dt.UTC


class TestNormalize:
    """Tests for ``normalize``."""

    def test_single_sample_lands_on_its_tick(self) -> None:
        """A 05:00 sample fills the tick at 05:00 and leaves 23 gaps."""
        interval = day_interval()
        samples = [Sample(timestamp=dt.datetime(2024, 1, 1, 5, tzinfo=UTC), value=3.0)]

        points = normalize(samples, interval, fixed_offset(0))

        assert len(points) == 24
        filled = [index for index, point in enumerate(points) if not point.is_gap]
        # Ticks are start + (i + 1) * step, so 05:00 is index 4.
        assert filled == [4]
        assert points[4].value == 3.0
        assert points[4].local_datetime == "2024-01-01 05:00:00"

    def test_zero_samples_yield_all_gaps(self) -> None:
        """No samples still produce one gap point per tick."""
        points = normalize([], day_interval(), fixed_offset(0))

        assert len(points) == 24
        assert all(point.is_gap for point in points)

    def test_latest_first_input_is_emitted_chronologically(self) -> None:
        """Samples arrive latest first; values come out oldest first."""
        interval = day_interval()
        values = {index: float(index) for index in range(24)}

        points = normalize(latest_first(interval, values), interval, fixed_offset(0))

        assert [point.value for point in points] == [float(i) for i in range(24)]

    def test_offset_shifts_emitted_timestamps(self) -> None:
        """Epoch seconds and wall-clock strings both carry the offset."""
        interval = day_interval()
        points = normalize([], interval, fixed_offset(9))

        first_tick = dt.datetime(2024, 1, 1, 1, tzinfo=UTC)
        assert points[0].local_datetime == "2024-01-01 10:00:00"
        assert points[0].epoch_seconds == int(first_tick.timestamp()) + 9 * 3600

    def test_misaligned_sample_is_not_emitted(self) -> None:
        """A sample off the grid never appears in the output."""
        interval = day_interval()
        samples = [
            Sample(timestamp=dt.datetime(2024, 1, 1, 6, tzinfo=UTC), value=6.0),
            Sample(timestamp=dt.datetime(2024, 1, 1, 5, 30, tzinfo=UTC), value=99.0),
        ]

        points = normalize(samples, interval, fixed_offset(0))

        assert [point.value for point in points if not point.is_gap] == [6.0]
        assert points[5].value == 6.0

    def test_negative_offset(self) -> None:
        """Negative offsets move the wall clock back across midnight."""
        points = normalize([], day_interval(), fixed_offset(-5))

        assert points[0].local_datetime == "2023-12-31 20:00:00"

    @pytest.mark.parametrize(
        ("hours", "step_minutes", "expected"),
        [(24, 60, 24), (1, 1, 60), (168, 60, 168)],
    )
    def test_output_length_matches_tick_count(
        self, hours: int, step_minutes: int, expected: int
    ) -> None:
        """Output length is always (end - start) / step with increasing epochs."""
        start = dt.datetime(2024, 3, 1, tzinfo=UTC)
        interval = Interval(
            start=start,
            end=start + dt.timedelta(hours=hours),
            step=dt.timedelta(minutes=step_minutes),
        )

        points = normalize([], interval, fixed_offset(0))

        epochs = [point.epoch_seconds for point in points]
        assert len(points) == expected
        assert epochs == sorted(set(epochs))


class TestInterval:
    """Tests for ``Interval`` validation."""

    def test_rejects_naive_bounds(self) -> None:
        """Naive datetimes are refused."""
        with pytest.raises(ValueError, match="timezone-aware"):
            Interval(
                start=dt.datetime(2024, 1, 1),  # noqa: DTZ001 - deliberately naive
                end=dt.datetime(2024, 1, 2, tzinfo=UTC),
                step=dt.timedelta(hours=1),
            )

    def test_rejects_non_positive_step(self) -> None:
        """A zero step cannot build a grid."""
        with pytest.raises(ValueError, match="step must be positive"):
            Interval(
                start=dt.datetime(2024, 1, 1, tzinfo=UTC),
                end=dt.datetime(2024, 1, 2, tzinfo=UTC),
                step=dt.timedelta(0),
            )

    def test_ticks_start_after_start(self) -> None:
        """The first tick is one step after ``start``; the last is ``end``."""
        ticks = list(day_interval().ticks())

        assert ticks[0] == dt.datetime(2024, 1, 1, 1, tzinfo=UTC)
        assert ticks[-1] == dt.datetime(2024, 1, 2, tzinfo=UTC)
