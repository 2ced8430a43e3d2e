import pytest
from fastapi.testclient import TestClient

from isocalendar.core.errors import GitHubAPIError
from isocalendar.core.errors import InvalidGitHubTokenError
from isocalendar.core.errors import IsocalendarError
from isocalendar.main import create_app
from isocalendar.models import IsocalendarResult
from isocalendar.models import Streak
from isocalendar.settings import Settings
from isocalendar.settings import get_settings


SVG = '<svg version="1.1" xmlns="http://www.w3.org/2000/svg"></svg>'


def make_result(duration: str = "half-year") -> IsocalendarResult:
    return IsocalendarResult(
        streak=Streak(max=4, current=1),
        peak=9,
        average="1.5",
        svg=SVG,
        duration=duration,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(github_token="server-token", rate_limit_per_minute=1000)


@pytest.fixture
def client(settings: Settings) -> TestClient:
    app = create_app(settings)
    app.dependency_overrides[get_settings] = lambda: settings

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def test_read_root_returns_hello_world(client: TestClient) -> None:
    response = client.get("/")

    assert response.status_code == 200
    assert response.json() == {"message": "Hello World"}


def test_health_live_returns_ok(client: TestClient) -> None:
    response = client.get("/health/live")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_settings_reads_isocalendar_values_from_environment(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("SECONDARY_FEED_BRANCH", "gh-pages")
    monkeypatch.setenv("ISOCALENDAR_ENABLED", "false")
    monkeypatch.setenv("DEFAULT_DURATION", "full-year")

    settings = Settings()

    assert settings.secondary_feed_branch == "gh-pages"
    assert settings.isocalendar_enabled is False
    assert settings.default_duration == "full-year"


def test_get_user_calendar_returns_statistics_and_svg(
    monkeypatch: pytest.MonkeyPatch, client: TestClient
) -> None:
    calls: list[tuple[str, str, bool]] = []

    def fake_get_user_isocalendar(username, options, settings):
        calls.append((username, options.duration, options.enabled))
        return make_result(options.duration)

    monkeypatch.setattr(
        "isocalendar.api.routes.isocalendar.get_user_isocalendar",
        fake_get_user_isocalendar,
    )

    response = client.get("/isocalendar/OctoCat?duration=full-year")

    assert response.status_code == 200
    assert response.json() == {
        "username": "octocat",
        "streak": {"max": 4, "current": 1},
        "peak": 9,
        "average": "1.5",
        "duration": "full-year",
        "svg": SVG,
    }
    assert calls == [("OctoCat", "full-year", True)]


def test_get_user_calendar_uses_default_duration(
    monkeypatch: pytest.MonkeyPatch, client: TestClient
) -> None:
    monkeypatch.setattr(
        "isocalendar.api.routes.isocalendar.get_user_isocalendar",
        lambda username, options, settings: make_result(options.duration),
    )

    response = client.get("/isocalendar/octocat")

    assert response.json()["duration"] == "half-year"


def test_get_user_calendar_rejects_unknown_duration(client: TestClient) -> None:
    response = client.get("/isocalendar/octocat?duration=decade")

    assert response.status_code == 422


def test_get_user_calendar_svg_returns_markup(
    monkeypatch: pytest.MonkeyPatch, client: TestClient
) -> None:
    monkeypatch.setattr(
        "isocalendar.api.routes.isocalendar.get_user_isocalendar",
        lambda username, options, settings: make_result(),
    )

    response = client.get("/isocalendar/octocat/svg")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("image/svg+xml")
    assert response.text == SVG


def test_disabled_isocalendar_returns_404_without_github_calls(
    monkeypatch: pytest.MonkeyPatch, settings: Settings, client: TestClient
) -> None:
    settings.isocalendar_enabled = False

    def unexpected_call(*args, **kwargs):
        raise AssertionError("no network call expected")

    monkeypatch.setattr(
        "isocalendar.services.isocalendar_service.load_secondary_feed", unexpected_call
    )
    monkeypatch.setattr(
        "isocalendar.services.isocalendar_service.fetch_contribution_weeks",
        unexpected_call,
    )

    response = client.get("/isocalendar/octocat")

    assert response.status_code == 404
    assert response.json() == {"detail": "isocalendar is disabled"}


@pytest.mark.parametrize(
    ("error", "status_code", "detail"),
    [
        (InvalidGitHubTokenError("rejected"), 401, "GitHub token is invalid"),
        (GitHubAPIError("down"), 502, "GitHub API request failed"),
        (IsocalendarError("broken"), 500, "isocalendar computation failed"),
    ],
)
def test_get_user_calendar_maps_errors(
    monkeypatch: pytest.MonkeyPatch,
    client: TestClient,
    error: IsocalendarError,
    status_code: int,
    detail: str,
) -> None:
    def failing(username, options, settings):
        raise error

    monkeypatch.setattr(
        "isocalendar.api.routes.isocalendar.get_user_isocalendar", failing
    )

    response = client.get("/isocalendar/octocat")

    assert response.status_code == status_code
    assert response.json() == {"detail": detail}


def test_authenticated_calendar_requires_bearer_token(client: TestClient) -> None:
    response = client.get("/isocalendar/me")

    assert response.status_code == 401
    assert response.json() == {"detail": "Authorization Bearer token is required"}


def test_authenticated_calendar_returns_token_owner_render(
    monkeypatch: pytest.MonkeyPatch, client: TestClient
) -> None:
    tokens: list[str] = []

    def fake_authenticated(token, options, settings):
        tokens.append(token)
        return "octocat", make_result()

    monkeypatch.setattr(
        "isocalendar.api.routes.isocalendar.get_authenticated_user_isocalendar",
        fake_authenticated,
    )

    response = client.get(
        "/isocalendar/me", headers={"Authorization": "Bearer user-token"}
    )

    assert response.status_code == 200
    assert response.json()["username"] == "octocat"
    assert response.json()["streak"] == {"max": 4, "current": 1}
    assert tokens == ["user-token"]
