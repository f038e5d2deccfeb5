"""Tests for cron evaluation."""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from uptimer.core.errors import InvalidCronExpression, NoUpcomingOccurrence
from uptimer.core.scheduling.cron import next_run, validate_cron


class TestNextRun:
    """Tests for next_run()."""

    def test_top_of_hour_with_seconds_field(self):
        """Six fields put seconds first: '0 0 * * * *' is hourly."""
        now = datetime(2024, 1, 1, 10, 15, 0, tzinfo=UTC)
        assert next_run("0 0 * * * *", now) == datetime(2024, 1, 1, 11, 0, 0, tzinfo=UTC)

    def test_five_field_expression(self):
        now = datetime(2024, 1, 1, 10, 16, 30, tzinfo=UTC)
        assert next_run("*/5 * * * *", now) == datetime(2024, 1, 1, 10, 20, 0, tzinfo=UTC)

    def test_strictly_after_now(self):
        """An occurrence exactly at ``now`` is not returned."""
        now = datetime(2024, 1, 1, 10, 20, 0, tzinfo=UTC)
        assert next_run("*/5 * * * *", now) == datetime(2024, 1, 1, 10, 25, 0, tzinfo=UTC)

    def test_every_second(self):
        now = datetime(2024, 1, 1, 10, 0, 0, tzinfo=UTC)
        assert next_run("* * * * * *", now) == now + timedelta(seconds=1)

    def test_naive_now_is_taken_as_utc(self):
        naive = datetime(2024, 1, 1, 10, 15, 0)
        result = next_run("0 0 * * * *", naive)
        assert result == datetime(2024, 1, 1, 11, 0, 0, tzinfo=UTC)
        assert result.tzinfo is not None

    def test_offset_now_is_converted_to_utc(self):
        plus_two = timezone(timedelta(hours=2))
        now = datetime(2024, 1, 1, 12, 15, 0, tzinfo=plus_two)  # 10:15 UTC
        result = next_run("0 0 * * * *", now)
        assert result == datetime(2024, 1, 1, 11, 0, 0, tzinfo=UTC)
        assert result.utcoffset() == timedelta(0)

    def test_alias(self):
        now = datetime(2024, 1, 1, 10, 15, 0, tzinfo=UTC)
        assert next_run("@daily", now) == datetime(2024, 1, 2, 0, 0, 0, tzinfo=UTC)

    def test_invalid_expression(self):
        now = datetime(2024, 1, 1, tzinfo=UTC)
        with pytest.raises(InvalidCronExpression) as exc_info:
            next_run("not a cron", now)
        assert exc_info.value.context.cron == "not a cron"

    def test_out_of_range_field(self):
        with pytest.raises(InvalidCronExpression):
            next_run("0 99 * * *", datetime(2024, 1, 1, tzinfo=UTC))

    def test_expression_in_the_past_has_no_occurrence(self):
        """A year field that is already over can never fire again."""
        now = datetime(2030, 1, 1, tzinfo=UTC)
        with pytest.raises(NoUpcomingOccurrence):
            next_run("* * * * * * 2020", now)


class TestValidateCron:
    """Tests for validate_cron()."""

    @pytest.mark.parametrize(
        "expr",
        ["*/5 * * * *", "0 0 * * * *", "30 */10 9-17 * * mon-fri", "@hourly"],
    )
    def test_valid(self, expr):
        validate_cron(expr)

    @pytest.mark.parametrize("expr", ["", "   ", "* *", "61 * * * *", "banana"])
    def test_invalid(self, expr):
        with pytest.raises(InvalidCronExpression):
            validate_cron(expr)
