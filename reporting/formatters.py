"""
Reporting - Value Formatters.

Micro-unit integers are rendered by string slicing only; no value
ever passes through float.
"""

from datetime import datetime, timezone

from core.constants import MICRO_UNIT_DECIMALS


def render_decimal(micro_units: int, decimals: int = MICRO_UNIT_DECIMALS) -> str:
    """
    Render micro units as a decimal token string.

    The digits are zero-padded to at least decimals + 1 characters, then
    a point is inserted `decimals` places from the right:

        render_decimal(1352464598000000) == "1352464.598000"
        render_decimal(500) == "0.000500"
    """
    if micro_units < 0:
        return "-" + render_decimal(-micro_units, decimals)
    digits = str(micro_units).zfill(decimals + 1)
    return f"{digits[:-decimals]}.{digits[-decimals:]}"


def format_whole_units(micro_units: int, decimals: int = MICRO_UNIT_DECIMALS) -> str:
    """Integer token part with thousands separators, e.g. "1,352,464,598"."""
    whole = render_decimal(micro_units, decimals).split(".")[0]
    sign = "-" if whole.startswith("-") else ""
    return sign + f"{int(whole.lstrip('-')):,}"


def format_timestamp(dt: datetime) -> str:
    """UTC ISO 8601 with milliseconds and a Z suffix."""
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"
