import logging
from collections.abc import Callable
from collections.abc import Iterator
from collections.abc import Mapping
from datetime import date
from datetime import datetime
from datetime import timedelta
from typing import Any

from isocalendar.clients.secondary_feed import range_query
from isocalendar.models import Calendar
from isocalendar.models import ContributionRecord
from isocalendar.models import DayCell
from isocalendar.models import WeekChunk
from isocalendar.models import WeekRow


logger = logging.getLogger(__name__)

# GitHub rejects contributionsCollection spans longer than this.
WINDOW = timedelta(days=28)

CalendarQuery = Callable[[str, datetime, datetime], list[list[Mapping[str, Any]]]]


def date_windows(start: datetime, end: datetime) -> Iterator[tuple[datetime, datetime]]:
    """Yield contiguous [from, to) windows of at most 28 days covering [start, end)."""

    window_start = start
    while window_start < end:
        window_end = min(window_start + WINDOW, end)
        yield window_start, window_end
        window_start = window_end


def merge_weeks(
    primary_weeks: list[list[Mapping[str, Any]]], secondary_chunks: list[WeekChunk]
) -> list[WeekRow]:
    """Annotate primary weeks with same-index secondary chunks, matching days by date."""

    rows: list[WeekRow] = []
    for i, week in enumerate(primary_weeks):
        extra_by_date: dict[date, ContributionRecord] = {}
        if i < len(secondary_chunks):
            extra_by_date = {
                record.date: record for record in secondary_chunks[i].contribution_days
            }

        days = []
        for raw_day in week:
            primary = ContributionRecord.model_validate(raw_day)
            days.append(DayCell(primary=primary, secondary=extra_by_date.get(primary.date)))
        rows.append(WeekRow(contribution_days=days))

    return rows


def fetch_calendar(
    login: str,
    start: datetime,
    end: datetime,
    query: CalendarQuery,
    feed: list[ContributionRecord],
) -> Calendar:
    """Fetch the primary calendar window by window and merge the feed into it."""

    calendar = Calendar()
    for window_start, window_end in date_windows(start, end):
        # Inclusive upper bound for the API, so windows never overlap.
        query_end = window_end - timedelta(milliseconds=1)
        logger.debug(
            "Loading calendar of %s from %s to %s",
            login,
            window_start.isoformat(),
            query_end.isoformat(),
        )
        weeks = query(login, window_start, query_end)
        chunks = range_query(feed, window_start, window_end)
        calendar = calendar.with_weeks(merge_weeks(weeks, chunks))

    return calendar
