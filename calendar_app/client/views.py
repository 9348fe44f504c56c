"""
Calendar view helpers: the "events for this day" and "events this month"
panes, computed from the list returned by GET /api/events.
"""

from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List


def event_datetime(event: Dict[str, Any]) -> datetime:
    val = event["date"]
    if val.endswith("Z"):
        val = val[:-1] + "+00:00"
    parsed = datetime.fromisoformat(val)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def events_on_day(events: Iterable[Dict[str, Any]], day: date) -> List[Dict[str, Any]]:
    """Events whose date falls on `day` (UTC), in the order given."""
    return [e for e in events if event_datetime(e).date() == day]


def events_in_month(events: Iterable[Dict[str, Any]], year: int, month: int) -> List[Dict[str, Any]]:
    """Events in the given month (UTC), earliest first."""
    matching = [
        e for e in events
        if (event_datetime(e).year, event_datetime(e).month) == (year, month)
    ]
    return sorted(matching, key=event_datetime)
