from collections.abc import Iterator
from datetime import date
from datetime import datetime
from typing import Literal

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator


Duration = Literal["full-year", "half-year"]

# Declaration order decides slab stacking and the cap color tie-break.
SOURCE_TAGS: tuple[str, ...] = ("primary", "secondary")


class ContributionRecord(BaseModel):
    """Contribution count reported by one source for one day."""

    model_config = ConfigDict(populate_by_name=True)

    date: date
    contribution_count: int = Field(alias="contributionCount", ge=0)
    color: str

    @field_validator("date", mode="before")
    @classmethod
    def _strip_time(cls, value: object) -> object:
        if isinstance(value, str) and "T" in value:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
        return value


class DayCell(BaseModel):
    """Records of a single day keyed by source tag."""

    primary: ContributionRecord
    secondary: ContributionRecord | None = None

    def entries(self) -> Iterator[tuple[str, ContributionRecord]]:
        for tag in SOURCE_TAGS:
            record = getattr(self, tag)
            if record is not None:
                yield tag, record

    @property
    def total(self) -> int:
        return sum(record.contribution_count for _, record in self.entries())


class WeekRow(BaseModel):
    """Reconciled week, oldest day first."""

    model_config = ConfigDict(populate_by_name=True)

    contribution_days: list[DayCell] = Field(alias="contributionDays")


class WeekChunk(BaseModel):
    """Seven-day bucket of secondary feed records."""

    start: date
    end: date
    contribution_days: list[ContributionRecord]


class Calendar(BaseModel):
    """Reconciled contribution calendar, oldest week first."""

    weeks: list[WeekRow] = Field(default_factory=list)

    def with_weeks(self, rows: list[WeekRow]) -> "Calendar":
        return Calendar(weeks=[*self.weeks, *rows])

    def days(self) -> Iterator[DayCell]:
        for week in self.weeks:
            yield from week.contribution_days


class Streak(BaseModel):
    max: int = 0
    current: int = 0


class Statistics(BaseModel):
    """Summary statistics over a reconciled calendar."""

    streak: Streak = Field(default_factory=Streak)
    peak: int = 0
    average: str = "0"


class IsocalendarOptions(BaseModel):
    """Caller supplied switches for one computation."""

    enabled: bool = False
    duration: Duration = "half-year"


class IsocalendarResult(BaseModel):
    """Statistics and rendered SVG for one user."""

    streak: Streak
    peak: int
    average: str
    svg: str
    duration: Duration
