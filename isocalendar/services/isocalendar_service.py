import logging
from collections.abc import Callable
from datetime import UTC
from datetime import datetime
from datetime import timedelta
from functools import partial

import httpx

from isocalendar.clients.github_client import fetch_authenticated_user
from isocalendar.clients.github_client import fetch_contribution_weeks
from isocalendar.clients.secondary_feed import FeedResult
from isocalendar.clients.secondary_feed import load_secondary_feed
from isocalendar.core.errors import GitHubAPIError
from isocalendar.core.errors import InvalidGitHubTokenError
from isocalendar.core.errors import IsocalendarError
from isocalendar.models import Duration
from isocalendar.models import IsocalendarOptions
from isocalendar.models import IsocalendarResult
from isocalendar.services.calendar_service import CalendarQuery
from isocalendar.services.calendar_service import fetch_calendar
from isocalendar.services.render_service import render_svg
from isocalendar.services.statistics_service import compute_statistics
from isocalendar.services.statistics_service import reference_peak
from isocalendar.settings import Settings


logger = logging.getLogger(__name__)

FeedLoader = Callable[[str], FeedResult]


def compute_start(now: datetime, duration: Duration) -> datetime:
    """First day shown: a year or 180 days back, moved to the preceding Sunday."""

    if duration == "full-year":
        try:
            start = now.replace(year=now.year - 1)
        except ValueError:
            # Feb 29 has no counterpart in the previous year.
            start = now.replace(year=now.year - 1, month=3, day=1)
    else:
        start = now - timedelta(days=180)

    start -= timedelta(days=(start.weekday() + 1) % 7)
    return start.replace(hour=0, minute=0, second=0, microsecond=0)


def _wrap_github_error(exc: Exception) -> IsocalendarError:
    if isinstance(exc, httpx.HTTPStatusError):
        if exc.response.status_code in {401, 403}:
            return InvalidGitHubTokenError("GitHub token is invalid", cause=exc)
        return GitHubAPIError("GitHub API request failed", cause=exc)
    return GitHubAPIError("GitHub API request failed", cause=exc)


def compute_isocalendar(
    login: str,
    options: IsocalendarOptions,
    query: CalendarQuery,
    load_feed: FeedLoader = load_secondary_feed,
    now: datetime | None = None,
) -> IsocalendarResult | None:
    """Compute contribution statistics and the isometric calendar of a user.

    Returns None when the computation is not enabled. Any failure of the
    primary source or of the computation itself raises an IsocalendarError
    subclass; nothing partial is returned.
    """

    if not options.enabled:
        return None

    now = now or datetime.now(UTC)
    start = compute_start(now, options.duration)

    try:
        logger.debug("Computing isocalendar stats for %s", login)
        feed = load_feed(login)
        if not feed.ok:
            logger.info("Rendering %s without secondary feed: %s", login, feed.reason)

        try:
            calendar = fetch_calendar(login, start, now, query, feed.records)
        except IsocalendarError:
            raise
        except Exception as exc:
            raise _wrap_github_error(exc) from exc

        statistics = compute_statistics(calendar)
        reference = reference_peak(calendar)

        logger.debug("Computing isocalendar svg render for %s", login)
        svg = render_svg(calendar, options.duration, reference)
    except IsocalendarError:
        raise
    except Exception as exc:
        raise IsocalendarError("isocalendar computation failed", cause=exc) from exc

    return IsocalendarResult(
        streak=statistics.streak,
        peak=statistics.peak,
        average=statistics.average,
        svg=svg,
        duration=options.duration,
    )


def bind_sources(settings: Settings, token: str | None) -> tuple[CalendarQuery, FeedLoader]:
    """Bind the GitHub query and the feed loader to runtime settings."""

    query = partial(
        fetch_contribution_weeks,
        token=token,
        graphql_url=settings.github_graphql_url,
        timeout=settings.github_timeout_seconds,
    )
    load_feed = partial(
        load_secondary_feed,
        host=settings.secondary_feed_host,
        branch=settings.secondary_feed_branch,
        timeout=settings.feed_timeout_seconds,
    )
    return query, load_feed


def get_user_isocalendar(
    username: str, options: IsocalendarOptions, settings: Settings
) -> IsocalendarResult | None:
    """Build the isocalendar of a user with the server configured token."""

    query, load_feed = bind_sources(settings, settings.github_token)
    return compute_isocalendar(username, options, query, load_feed)


def get_authenticated_user_isocalendar(
    token: str, options: IsocalendarOptions, settings: Settings
) -> tuple[str, IsocalendarResult | None]:
    """Build the isocalendar of the GitHub user linked to token.

    Returns the lowercased login with the result; the login is empty when
    the computation is disabled since no lookup is made then.
    """

    if not options.enabled:
        return "", None

    try:
        github_user = fetch_authenticated_user(token)
    except Exception as exc:
        raise _wrap_github_error(exc) from exc

    raw_login = github_user.get("login")
    if not isinstance(raw_login, str) or not raw_login:
        raise GitHubAPIError("GitHub user response is invalid")

    query, load_feed = bind_sources(settings, token)
    return raw_login.lower(), compute_isocalendar(raw_login, options, query, load_feed)
