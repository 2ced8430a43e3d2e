from datetime import UTC
from datetime import date
from datetime import datetime
from datetime import timedelta

import pytest

from isocalendar.models import Calendar
from isocalendar.models import ContributionRecord
from isocalendar.models import DayCell
from isocalendar.models import WeekRow


PRIMARY_COLOR = "#40c463"
IDLE_COLOR = "#ebedf0"
SECONDARY_COLOR = "#fc6d26"

# A Sunday, so GitHub style weeks start on it.
FIRST_SUNDAY = datetime(2024, 1, 7, tzinfo=UTC)


def record(day: date, count: int, color: str = PRIMARY_COLOR) -> ContributionRecord:
    return ContributionRecord(date=day, contribution_count=count, color=color)


def make_calendar(
    counts: list[int], secondary: dict[int, int] | None = None
) -> Calendar:
    """Calendar of consecutive days starting on FIRST_SUNDAY.

    `secondary` maps a day index to the secondary count of that day.
    """

    secondary = secondary or {}
    cells = []
    for index, count in enumerate(counts):
        day = FIRST_SUNDAY.date() + timedelta(days=index)
        extra = None
        if index in secondary:
            extra = record(day, secondary[index], SECONDARY_COLOR)
        cells.append(
            DayCell(
                primary=record(day, count, PRIMARY_COLOR if count else IDLE_COLOR),
                secondary=extra,
            )
        )

    weeks = [
        WeekRow(contribution_days=cells[i : i + 7]) for i in range(0, len(cells), 7)
    ]
    return Calendar(weeks=weeks)


class FakeCalendarQuery:
    """Stands in for the GitHub GraphQL calendar query."""

    def __init__(self, counts: dict[date, int] | None = None) -> None:
        self.counts = counts or {}
        self.calls: list[tuple[str, datetime, datetime]] = []

    def __call__(self, login: str, from_: datetime, to: datetime) -> list[list[dict]]:
        self.calls.append((login, from_, to))
        days = []
        day = from_.date()
        while day <= to.date():
            count = self.counts.get(day, 0)
            days.append(
                {
                    "date": day.isoformat(),
                    "contributionCount": count,
                    "color": PRIMARY_COLOR if count else IDLE_COLOR,
                }
            )
            day += timedelta(days=1)
        return [days[i : i + 7] for i in range(0, len(days), 7)]


@pytest.fixture
def fake_query() -> FakeCalendarQuery:
    return FakeCalendarQuery()
