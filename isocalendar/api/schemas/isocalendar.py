from pydantic import BaseModel

from isocalendar.models import Duration


class StreakResponse(BaseModel):
    """Longest and current run of active days."""

    max: int
    current: int


class IsocalendarResponse(BaseModel):
    """Isocalendar statistics and SVG render for one user."""

    username: str
    streak: StreakResponse
    peak: int
    average: str
    duration: Duration
    svg: str
