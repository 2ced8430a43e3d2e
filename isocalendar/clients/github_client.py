from collections.abc import Mapping
from datetime import datetime
from typing import Any

import httpx


USER_AGENT = "isocalendar"

CALENDAR_QUERY = """
query($login: String!, $from: DateTime!, $to: DateTime!) {
  user(login: $login) {
    calendar: contributionsCollection(from: $from, to: $to) {
      contributionCalendar {
        weeks {
          contributionDays {
            date
            contributionCount
            color
          }
        }
      }
    }
  }
}
"""


def fetch_authenticated_user(token: str, timeout: float = 15.0) -> dict[str, str | int]:
    """Fetch basic profile data for the token owner from GitHub REST API."""

    response = httpx.get(
        "https://api.github.com/user",
        headers={
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "User-Agent": USER_AGENT,
        },
        timeout=timeout,
    )
    response.raise_for_status()

    payload: Any = response.json()
    if not isinstance(payload, Mapping):
        raise ValueError("GitHub user response is invalid")

    raw_id = payload.get("id")
    raw_login = payload.get("login")
    if not isinstance(raw_id, int) or not isinstance(raw_login, str) or not raw_login:
        raise ValueError("GitHub user response is missing required fields")

    return {"id": raw_id, "login": raw_login}


def format_graphql_datetime(value: datetime) -> str:
    """Render a UTC datetime as GitHub's DateTime scalar with milliseconds."""

    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def fetch_contribution_weeks(
    login: str,
    from_: datetime,
    to: datetime,
    token: str | None,
    graphql_url: str,
    timeout: float = 20.0,
) -> list[list[dict[str, Any]]]:
    """Fetch contribution calendar weeks of a user for one date window.

    Each week is the list of raw `contributionDays` items, oldest first.
    """

    if not token:
        raise ValueError("GITHUB_TOKEN is required for GraphQL requests")

    variables = {
        "login": login,
        "from": format_graphql_datetime(from_),
        "to": format_graphql_datetime(to),
    }
    headers = {
        "Authorization": f"Bearer {token}",
        "Content-Type": "application/json",
        "User-Agent": USER_AGENT,
    }

    response = httpx.post(
        graphql_url,
        json={"query": CALENDAR_QUERY, "variables": variables},
        headers=headers,
        timeout=timeout,
    )
    response.raise_for_status()

    payload = response.json()
    if not isinstance(payload, Mapping):
        raise ValueError("GitHub GraphQL response is invalid")

    if payload.get("errors"):
        raise ValueError("GitHub GraphQL returned errors")

    data = payload.get("data")
    if not isinstance(data, Mapping):
        raise ValueError("GitHub GraphQL data is missing")

    user = data.get("user")
    if not isinstance(user, Mapping):
        raise ValueError("GitHub user not found")

    collection = user.get("calendar")
    if not isinstance(collection, Mapping):
        raise ValueError("GitHub contributionsCollection is missing")

    calendar = collection.get("contributionCalendar")
    if not isinstance(calendar, Mapping):
        raise ValueError("GitHub contributionCalendar is missing")

    weeks = calendar.get("weeks")
    if not isinstance(weeks, list):
        raise ValueError("GitHub contribution weeks are missing")

    result: list[list[dict[str, Any]]] = []
    # Weeks and days define the render grid, so nothing may be skipped.
    for week in weeks:
        if not isinstance(week, Mapping):
            raise ValueError("GitHub contribution week is invalid")
        contribution_days = week.get("contributionDays")
        if not isinstance(contribution_days, list):
            raise ValueError("GitHub contribution week is invalid")
        days = []
        for item in contribution_days:
            if not isinstance(item, Mapping):
                raise ValueError("GitHub contribution day is invalid")
            raw_date = item.get("date")
            raw_count = item.get("contributionCount")
            raw_color = item.get("color")
            if (
                not isinstance(raw_date, str)
                or not isinstance(raw_count, int)
                or not isinstance(raw_color, str)
            ):
                raise ValueError("GitHub contribution day is invalid")
            days.append(
                {"date": raw_date, "contributionCount": raw_count, "color": raw_color}
            )
        result.append(days)

    return result
