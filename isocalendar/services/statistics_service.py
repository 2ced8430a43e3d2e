from isocalendar.models import Calendar
from isocalendar.models import Statistics
from isocalendar.models import Streak


def format_average(values: list[int]) -> str:
    """Mean of values with at most two decimals and no trailing zeros.

    An empty list averages to "0".
    """

    if not values:
        return "0"
    formatted = f"{sum(values) / len(values):.2f}"
    return formatted.rstrip("0").rstrip(".")


def compute_statistics(calendar: Calendar) -> Statistics:
    """Compute streaks, peak day and average daily contributions."""

    streak = Streak()
    peak = 0
    values: list[int] = []

    for day in calendar.days():
        for _, record in day.entries():
            values.append(record.contribution_count)
            peak = max(peak, record.contribution_count)
            # Walked per record, so each source of a day is its own step.
            streak.current = streak.current + 1 if record.contribution_count else 0
            streak.max = max(streak.max, streak.current)

    return Statistics(streak=streak, peak=peak, average=format_average(values))


def reference_peak(calendar: Calendar) -> int:
    """Highest single-source count of a day, used to scale rendered slabs."""

    return max(
        (
            record.contribution_count
            for day in calendar.days()
            for _, record in day.entries()
        ),
        default=0,
    )
