"""Status aggregation engine.

Pure functions over monitors, groups, incidents and check results. Nothing in
here touches the database or keeps state between calls; ``status_service``
fetches bounded record sets and feeds them through these functions.

Records may be ORM objects or anything exposing the same attribute names.
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterable, Iterator, List, Optional, Sequence

from ..errors import ValidationError
from ..utils.clock import utcnow

OPERATIONAL = "operational"
DEGRADED = "degraded"

OTHER_SERVICES = "Other Services"

DEFAULT_HISTORY_LIMIT = 50
DEFAULT_UPTIME_WINDOW = timedelta(hours=24)


def overall_status(monitors: Iterable) -> str:
    """``operational`` iff every monitor is up. An empty set is operational:
    an empty page must not read as an outage."""
    for monitor in monitors:
        if monitor.last_status != "up":
            return DEGRADED
    return OPERATIONAL


def _check_window(window: timedelta):
    if not isinstance(window, timedelta) or window <= timedelta(0):
        raise ValidationError("window must be a positive duration")


def _check_limit(limit: int):
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise ValidationError("limit must be a positive integer")


def uptime_percentage(
    results: Iterable,
    window: timedelta = DEFAULT_UPTIME_WINDOW,
    now: Optional[datetime] = None,
) -> Optional[float]:
    """Percentage of ``up`` results among those inside the trailing window.

    Returns None when the window holds no results. Callers render that as
    "no data", never as 0% or 100%.
    """
    _check_window(window)
    cutoff = (now or utcnow()) - window
    total = 0
    up = 0
    for result in results:
        if result.created_at < cutoff:
            continue
        total += 1
        if result.status == "up":
            up += 1
    if total == 0:
        return None
    return round(100.0 * up / total, 2)


class History:
    """The most recent ``limit`` results, newest first.

    Lazy and restartable: every iteration walks the same snapshot again, so a
    consumer may iterate once to chart and again to tabulate. Reverse it
    (``reversed(history)``) for left-to-right time display.
    """

    def __init__(self, results: Iterable, limit: int = DEFAULT_HISTORY_LIMIT):
        _check_limit(limit)
        self.limit = limit
        self._results = results
        self._snapshot: Optional[List] = None

    def _materialize(self) -> List:
        if self._snapshot is None:
            ordered = sorted(self._results, key=lambda r: r.created_at, reverse=True)
            self._snapshot = ordered[: self.limit]
        return self._snapshot

    def __iter__(self) -> Iterator:
        return iter(self._materialize())

    def __reversed__(self) -> Iterator:
        return reversed(self._materialize())

    def __len__(self) -> int:
        return len(self._materialize())


def history(results: Iterable, limit: int = DEFAULT_HISTORY_LIMIT) -> History:
    """Most recent ``limit`` check results in reverse-chronological order."""
    return History(results, limit)


@dataclass
class DisplayGroup:
    """One section of the grouped listing."""
    name: str
    order: Optional[int]
    group_id: Optional[int]
    monitors: List = field(default_factory=list)


def group_for_display(monitors: Sequence, groups: Sequence) -> List[DisplayGroup]:
    """Partition monitors by group for display.

    Named groups come first, sorted by ``order`` (then name, then id, so ties
    are stable). Monitors with no group, or whose group no longer exists, land
    in "Other Services", which is always last and only present when it has
    members.
    """
    sections = {
        group.id: DisplayGroup(name=group.name, order=group.order or 0, group_id=group.id)
        for group in groups
    }
    other = DisplayGroup(name=OTHER_SERVICES, order=None, group_id=None)

    for monitor in monitors:
        section = sections.get(monitor.group_id) if monitor.group_id is not None else None
        (section or other).monitors.append(monitor)

    ordered = sorted(sections.values(), key=lambda s: (s.order, s.name, s.group_id))
    if other.monitors:
        ordered.append(other)
    return ordered


def active_incidents(incidents: Iterable) -> list:
    """Every ongoing incident, regardless of age."""
    return [incident for incident in incidents if incident.status == "ongoing"]
