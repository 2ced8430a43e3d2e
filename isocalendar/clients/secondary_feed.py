import logging
from dataclasses import dataclass
from dataclasses import field
from datetime import datetime
from datetime import timedelta

import httpx
from pydantic import TypeAdapter
from pydantic import ValidationError

from isocalendar.models import ContributionRecord
from isocalendar.models import WeekChunk


logger = logging.getLogger(__name__)

_records_adapter = TypeAdapter(list[ContributionRecord])


@dataclass(frozen=True)
class FeedResult:
    """Outcome of a best-effort feed load.

    `reason` is None when the feed was read successfully, otherwise it says
    why `records` is empty.
    """

    records: list[ContributionRecord] = field(default_factory=list)
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.reason is None


def build_feed_url(login: str, host: str, branch: str) -> str:
    return f"https://{host}/{login}/{login}/refs/heads/{branch}/.contributions/gitlab.json"


def load_secondary_feed(
    login: str,
    host: str = "raw.githubusercontent.com",
    branch: str = "metrics-renders",
    timeout: float = 15.0,
) -> FeedResult:
    """Load the per-user contribution feed published next to the profile repo."""

    url = build_feed_url(login, host, branch)
    try:
        response = httpx.get(url, timeout=timeout, follow_redirects=True)
    except httpx.HTTPError as exc:
        logger.warning("Failed to fetch contributions from %s: %s", url, exc)
        return FeedResult(reason=f"request failed: {exc}")

    if not response.is_success:
        logger.warning(
            "Contribution feed %s answered with status %s", url, response.status_code
        )
        return FeedResult(reason=f"status {response.status_code}")

    try:
        records = _records_adapter.validate_python(response.json())
    except (ValueError, ValidationError) as exc:
        logger.warning("Contribution feed %s is malformed: %s", url, exc)
        return FeedResult(reason="malformed payload")

    logger.debug("Loaded %d feed records for %s", len(records), login)
    return FeedResult(records=records)


def range_query(
    records: list[ContributionRecord], from_: datetime, to: datetime
) -> list[WeekChunk]:
    """Split feed records into consecutive 7-day chunks covering [from_, to)."""

    chunks: list[WeekChunk] = []
    start = from_
    while start < to:
        end = start + timedelta(days=7)
        start_day, end_day = start.date(), end.date()
        days = sorted(
            (record for record in records if start_day <= record.date < end_day),
            key=lambda record: record.date,
        )
        chunks.append(WeekChunk(start=start_day, end=end_day, contribution_days=days))
        start = end

    return chunks
