"""Tests for the pure status aggregation functions."""
from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from pulsewatch.errors import ValidationError
from pulsewatch.services.aggregation import (
    DEGRADED,
    OPERATIONAL,
    OTHER_SERVICES,
    active_incidents,
    group_for_display,
    history,
    overall_status,
    uptime_percentage,
)

NOW = datetime(2026, 3, 1, 12, 0, 0)


def monitor(id, last_status=None, group_id=None):
    return SimpleNamespace(id=id, last_status=last_status, group_id=group_id)


def result(minutes_ago, status="up"):
    return SimpleNamespace(created_at=NOW - timedelta(minutes=minutes_ago), status=status, response_time=12)


def group(id, name, order=0):
    return SimpleNamespace(id=id, name=name, order=order)


class TestOverallStatus:
    def test_empty_is_operational(self):
        assert overall_status([]) == OPERATIONAL

    def test_all_up(self):
        assert overall_status([monitor(1, "up"), monitor(2, "up")]) == OPERATIONAL

    def test_any_down_degrades(self):
        assert overall_status([monitor(1, "up"), monitor(2, "down")]) == DEGRADED

    def test_unknown_degrades(self):
        assert overall_status([monitor(1, "up"), monitor(2, None)]) == DEGRADED


class TestUptimePercentage:
    def test_no_results_is_no_data(self):
        assert uptime_percentage([], timedelta(hours=24), now=NOW) is None

    def test_only_old_results_is_no_data(self):
        results = [result(60 * 25), result(60 * 30, "down")]
        assert uptime_percentage(results, timedelta(hours=24), now=NOW) is None

    def test_percentage_within_window(self):
        results = [result(1), result(2), result(3, "down"), result(4), result(60 * 48, "down")]
        assert uptime_percentage(results, timedelta(hours=24), now=NOW) == 75.0

    def test_rounded(self):
        results = [result(1), result(2, "down"), result(3, "down")]
        assert uptime_percentage(results, timedelta(hours=1), now=NOW) == 33.33

    @pytest.mark.parametrize("window", [timedelta(0), timedelta(hours=-1), 24])
    def test_bad_window(self, window):
        with pytest.raises(ValidationError):
            uptime_percentage([result(1)], window, now=NOW)


class TestHistory:
    def test_newest_first_and_limited(self):
        results = [result(m) for m in (5, 1, 3, 2, 4)]
        points = list(history(results, limit=3))
        assert [p.created_at for p in points] == [NOW - timedelta(minutes=m) for m in (1, 2, 3)]

    def test_restartable(self):
        h = history([result(m) for m in range(10)], limit=5)
        assert list(h) == list(h)
        assert len(h) == 5

    def test_reversed_for_charting(self):
        h = history([result(m) for m in range(4)], limit=4)
        assert list(reversed(h)) == list(h)[::-1]

    def test_lazy_until_iterated(self):
        consumed = []

        def source():
            for m in range(3):
                consumed.append(m)
                yield result(m)

        h = history(source(), limit=2)
        assert consumed == []
        assert len(list(h)) == 2
        assert len(list(h)) == 2

    @pytest.mark.parametrize("limit", [0, -1, True, "10"])
    def test_bad_limit(self, limit):
        with pytest.raises(ValidationError):
            history([], limit=limit)


class TestGroupForDisplay:
    def test_other_services_always_last(self):
        groups = [group(1, "API", order=5), group(2, "DB", order=1)]
        monitors = [monitor(1, group_id=1), monitor(2, group_id=2), monitor(3), monitor(4)]
        sections = group_for_display(monitors, groups)
        assert [s.name for s in sections] == ["DB", "API", OTHER_SERVICES]
        assert [m.id for m in sections[-1].monitors] == [3, 4]

    def test_other_services_last_even_with_negative_orders(self):
        groups = [group(1, "Edge", order=-100)]
        sections = group_for_display([monitor(1), monitor(2, group_id=1)], groups)
        assert [s.name for s in sections] == ["Edge", OTHER_SERVICES]

    def test_ties_broken_by_name(self):
        groups = [group(1, "Zeta"), group(2, "Alpha")]
        sections = group_for_display([], groups)
        assert [s.name for s in sections] == ["Alpha", "Zeta"]

    def test_no_other_section_when_everything_grouped(self):
        sections = group_for_display([monitor(1, group_id=1)], [group(1, "Core")])
        assert [s.name for s in sections] == ["Core"]

    def test_dangling_group_falls_back_to_other(self):
        sections = group_for_display([monitor(1, group_id=99)], [group(1, "Core")])
        assert sections[-1].name == OTHER_SERVICES
        assert [m.id for m in sections[-1].monitors] == [1]


class TestActiveIncidents:
    def test_only_ongoing_regardless_of_age(self):
        incidents = [
            SimpleNamespace(id=1, status="ongoing", start_time=NOW - timedelta(days=400)),
            SimpleNamespace(id=2, status="resolved", start_time=NOW),
            SimpleNamespace(id=3, status="ongoing", start_time=NOW),
        ]
        assert [i.id for i in active_incidents(incidents)] == [1, 3]
