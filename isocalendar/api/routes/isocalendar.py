from fastapi import APIRouter
from fastapi import Depends
from fastapi import HTTPException
from fastapi import Query
from fastapi import Response
from fastapi import Security
from fastapi.security import HTTPAuthorizationCredentials

from isocalendar.api.schemas.isocalendar import IsocalendarResponse
from isocalendar.core.errors import GitHubAPIError
from isocalendar.core.errors import InvalidGitHubTokenError
from isocalendar.core.errors import IsocalendarError
from isocalendar.core.security import bearer_scheme
from isocalendar.core.security import extract_bearer_token
from isocalendar.models import Duration
from isocalendar.models import IsocalendarOptions
from isocalendar.models import IsocalendarResult
from isocalendar.services.isocalendar_service import get_authenticated_user_isocalendar
from isocalendar.services.isocalendar_service import get_user_isocalendar
from isocalendar.settings import Settings
from isocalendar.settings import get_settings


router = APIRouter()


def build_options(
    duration: Duration | None = Query(default=None),
    settings: Settings = Depends(get_settings),
) -> IsocalendarOptions:
    return IsocalendarOptions(
        enabled=settings.isocalendar_enabled,
        duration=duration or settings.default_duration,
    )


def _ensure_result(result: IsocalendarResult | None) -> IsocalendarResult:
    if result is None:
        raise HTTPException(status_code=404, detail="isocalendar is disabled")
    return result


def _to_http_error(exc: IsocalendarError) -> HTTPException:
    if isinstance(exc, InvalidGitHubTokenError):
        return HTTPException(status_code=401, detail="GitHub token is invalid")
    if isinstance(exc, GitHubAPIError):
        return HTTPException(status_code=502, detail="GitHub API request failed")
    return HTTPException(status_code=500, detail="isocalendar computation failed")


def _to_response(username: str, result: IsocalendarResult) -> dict[str, object]:
    return {
        "username": username,
        "streak": result.streak.model_dump(),
        "peak": result.peak,
        "average": result.average,
        "duration": result.duration,
        "svg": result.svg,
    }


@router.get("/")
async def root() -> dict[str, str]:
    """Return a basic service greeting."""

    return {"message": "Hello World"}


@router.get("/health/live")
def health_live() -> dict[str, str]:
    """Return liveness probe response for health checks."""

    return {"status": "ok"}


@router.get("/isocalendar/me", response_model=IsocalendarResponse)
def get_authenticated_user_calendar(
    credentials: HTTPAuthorizationCredentials | None = Security(bearer_scheme),
    options: IsocalendarOptions = Depends(build_options),
    settings: Settings = Depends(get_settings),
) -> dict[str, object]:
    """Return isocalendar statistics and render for the token owner."""

    token = extract_bearer_token(credentials)

    try:
        login, result = get_authenticated_user_isocalendar(token, options, settings)
    except IsocalendarError as exc:
        raise _to_http_error(exc) from exc

    return _to_response(login, _ensure_result(result))


@router.get("/isocalendar/{username}", response_model=IsocalendarResponse)
def get_user_calendar(
    username: str,
    options: IsocalendarOptions = Depends(build_options),
    settings: Settings = Depends(get_settings),
) -> dict[str, object]:
    """Return isocalendar statistics and render for a public GitHub user."""

    try:
        result = get_user_isocalendar(username, options, settings)
    except IsocalendarError as exc:
        raise _to_http_error(exc) from exc

    return _to_response(username.lower(), _ensure_result(result))


@router.get("/isocalendar/{username}/svg")
def get_user_calendar_svg(
    username: str,
    options: IsocalendarOptions = Depends(build_options),
    settings: Settings = Depends(get_settings),
) -> Response:
    """Return only the isometric SVG render of a GitHub user."""

    try:
        result = get_user_isocalendar(username, options, settings)
    except IsocalendarError as exc:
        raise _to_http_error(exc) from exc

    return Response(content=_ensure_result(result).svg, media_type="image/svg+xml")
