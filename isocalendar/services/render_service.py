from isocalendar.models import Calendar
from isocalendar.models import DayCell
from isocalendar.models import Duration


CELL_SIZE = 6
# Isometric skew: each row and column step moves 1.7 horizontally, 1 vertically.
SKEW_X = 1.7
SKEW_Y = 1

VIEWBOX_WIDTH = 480
VIEWBOX_HEIGHTS: dict[str, int] = {"full-year": 270, "half-year": 170}

# Each shaded slab face darkens by another step of linear channel slope.
BRIGHTNESS_STEP = 0.4
BRIGHTNESS_SLOPES = tuple(1 - k * BRIGHTNESS_STEP for k in (1, 2))

CAP_PATH = "M1.7,2 0,1 1.7,0 3.4,1 z"


def fmt(value: float) -> str:
    """Shortest round-trip decimal form of an SVG number, integers without ".0"."""

    value = value + 0.0
    if value.is_integer():
        return str(int(value))
    return repr(value)


def dominant_color(day: DayCell) -> str:
    """Color of the first source with activity, or of the first source on idle days."""

    entries = list(day.entries())
    if day.total:
        for _, record in entries:
            if record.contribution_count:
                return record.color
    return entries[0][1].color


def _filters() -> str:
    filters = []
    for index, slope in enumerate(BRIGHTNESS_SLOPES, start=1):
        funcs = "".join(
            f'<feFunc{channel} type="linear" slope="{fmt(slope)}" />'
            for channel in "RGB"
        )
        filters.append(
            f'<filter id="brightness{index}">'
            f"<feComponentTransfer>{funcs}</feComponentTransfer>"
            "</filter>"
        )
    return "".join(filters)


def _render_day(day: DayCell, column: int, reference: int) -> str:
    ratio = day.total / reference if reference else 0
    parts = [
        f'<g transform="translate({fmt(-column * SKEW_X)}, '
        f'{fmt(column * SKEW_Y + (1 - ratio) * CELL_SIZE)})">',
        f'<path fill="{dominant_color(day)}" d="{CAP_PATH}" />',
    ]

    offset = 0.0
    for _, record in day.entries():
        shift = record.contribution_count / reference * CELL_SIZE if reference else 0
        upper_left, upper_right = 1 + offset, 2 + offset
        parts.append(
            f'<path fill="{record.color}" filter="url(#brightness1)" '
            f'd="M0,{fmt(upper_left)} 1.7,{fmt(upper_right)} '
            f'1.7,{fmt(upper_right + shift)} 0,{fmt(upper_left + shift)} z" />'
        )
        parts.append(
            f'<path fill="{record.color}" filter="url(#brightness2)" '
            f'd="M1.7,{fmt(upper_right)} 3.4,{fmt(upper_left)} '
            f'3.4,{fmt(upper_left + shift)} 1.7,{fmt(upper_right + shift)} z" />'
        )
        offset += shift

    parts.append("</g>")
    return "".join(parts)


def render_svg(calendar: Calendar, duration: Duration, reference: int) -> str:
    """Render the calendar as isometric day cells, oldest week at the top left."""

    height = VIEWBOX_HEIGHTS.get(duration, VIEWBOX_HEIGHTS["half-year"])
    parts = [
        '<svg version="1.1" xmlns="http://www.w3.org/2000/svg" '
        f'style="margin-top: -130px;" viewBox="0,0 {VIEWBOX_WIDTH},{height}">',
        _filters(),
        '<g transform="scale(4) translate(12, 0)">',
    ]

    for row, week in enumerate(calendar.weeks):
        parts.append(
            f'<g transform="translate({fmt(row * SKEW_X)}, {fmt(row * SKEW_Y)})">'
        )
        for column, day in enumerate(week.contribution_days):
            parts.append(_render_day(day, column, reference))
        parts.append("</g>")

    parts.append("</g></svg>")
    return "".join(parts)
