"""Human-readable timestamps for display alongside the canonical UTC values."""

from datetime import datetime
from zoneinfo import ZoneInfo

from protean.utils.globals import current_domain

DEFAULT_DISPLAY_TIMEZONE = "Asia/Kolkata"


def display_timezone() -> str:
    return current_domain.config["custom"].get("DISPLAY_TIMEZONE") or DEFAULT_DISPLAY_TIMEZONE


def display_timestamp(moment: datetime, tz_name: str | None = None) -> str:
    """Render ``moment`` as e.g. ``15/01/2026, 2:00:00 pm`` in the display timezone."""
    local = moment.astimezone(ZoneInfo(tz_name or display_timezone()))
    hour = local.hour % 12 or 12
    meridiem = "am" if local.hour < 12 else "pm"
    return f"{local:%d/%m/%Y}, {hour}:{local:%M:%S} {meridiem}"
