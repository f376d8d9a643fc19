"""Map Windguru text forecasts onto wave configuration snapshots.

Fetching is left to the caller; this module only parses saved text, builds
a sample forecast when nothing parses, and converts an entry into config
values.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
import logging
import math
import re

from coastal.config import WaveConfig, clamp_to_limits


logger = logging.getLogger(__name__)

KNOTS_TO_MS = 0.514444
DEFAULT_WIND_SPEED_KN = 10.0
DEFAULT_WIND_DIRECTION = 45.0
CHOP_REFERENCE_WIND_MS = 15.0

_DAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")

_PRE_RE = re.compile(r"<pre[^>]*>([\s\S]*?)</pre>", re.IGNORECASE)
_WIND_ROW_RE = re.compile(r"^\s*(\w{3})\s+(\d+)\.\s+(\d+)h\s+(\d+)\s+\d+\s+\w+\s+(\d+)")
_WAVE_ROW_RE = re.compile(r"^\s*(\w{3})\s+(\d+)\.\s+(\d+)h\s+([\d.]+)\s+\w+\s+(\d+)\s+(\d+)")
_DAY_NUMBER_RE = re.compile(r"(\d+)\.")


@dataclass(frozen=True)
class ForecastEntry:
    """One forecast time step. Wave direction is meteorological (coming from);
    wind speed is in knots."""

    datetime: str
    day_name: str
    hour: int
    wave_height: float
    wave_period: float
    wave_direction: float
    wind_speed: float
    wind_direction: float


@dataclass(frozen=True)
class ForecastResult:
    entries: tuple[ForecastEntry, ...]
    error: str | None = None


def _pre_content(text: str) -> str:
    match = _PRE_RE.search(text)
    return match.group(1) if match else text


def parse_windguru_text(wave_text: str, wind_text: str) -> list[ForecastEntry]:
    """Join wave rows with wind rows on their "Fri 16. 18h" key."""

    wind_by_key: dict[str, tuple[float, float]] = {}
    for line in _pre_content(wind_text).splitlines():
        match = _WIND_ROW_RE.match(line)
        if match:
            day_name, day_num, hour, speed, direction = match.groups()
            wind_by_key[f"{day_name} {day_num}. {hour}h"] = (float(speed), float(direction))

    entries: list[ForecastEntry] = []
    for line in _pre_content(wave_text).splitlines():
        match = _WAVE_ROW_RE.match(line)
        if not match:
            continue
        day_name, day_num, hour, height, direction, period = match.groups()
        key = f"{day_name} {day_num}. {hour}h"
        wind_speed, wind_direction = wind_by_key.get(key, (DEFAULT_WIND_SPEED_KN, DEFAULT_WIND_DIRECTION))
        entries.append(
            ForecastEntry(
                datetime=key,
                day_name=day_name,
                hour=int(hour),
                wave_height=float(height),
                wave_period=float(period),
                wave_direction=float(direction),
                wind_speed=wind_speed,
                wind_direction=wind_direction,
            )
        )
    return entries


def sample_forecast(today: date) -> list[ForecastEntry]:
    """Deterministic 7-day, 3-hourly stand-in forecast starting at `today`."""

    entries: list[ForecastEntry] = []
    for d in range(7):
        day = today + timedelta(days=d)
        # date.weekday() is Monday=0; the labels start at Sunday.
        day_name = _DAY_NAMES[(day.weekday() + 1) % 7]
        for hour in range(0, 24, 3):
            variation = math.sin(d * 0.8 + hour * 0.1) * 0.5 + 0.5
            entries.append(
                ForecastEntry(
                    datetime=f"{day_name} {day.day}. {hour}h",
                    day_name=day_name,
                    hour=hour,
                    wave_height=round(3 + variation * 12, 1),
                    wave_period=round(10 + variation * 8, 1),
                    wave_direction=float(round(280 + math.sin(d) * 40)),
                    wind_speed=round(5 + variation * 20, 1),
                    wind_direction=float(round(45 + math.cos(d * 0.5) * 40)),
                )
            )
    return entries


def load_forecast(wave_text: str | None, wind_text: str | None = None, *, today: date) -> ForecastResult:
    """Parse saved forecast text, falling back to the sample forecast.

    Without wind text every wave row gets the default wind.
    """

    if wave_text is None:
        logger.warning("No forecast text supplied, using sample forecast")
        return ForecastResult(tuple(sample_forecast(today)), "Using sample data (live fetch unavailable)")
    if wind_text is None:
        logger.info("No wind forecast supplied, using %.0f kn from %.0f deg", DEFAULT_WIND_SPEED_KN, DEFAULT_WIND_DIRECTION)

    entries = parse_windguru_text(wave_text, wind_text or "")
    if not entries:
        logger.warning("Forecast text contained no rows, using sample forecast")
        return ForecastResult(tuple(sample_forecast(today)), "Could not parse forecast data, using sample data")
    return ForecastResult(tuple(entries))


def _entry_datetime(entry: ForecastEntry, now: datetime) -> datetime | None:
    """Naive local time of `entry`; day numbers past the month end roll over."""

    match = _DAY_NUMBER_RE.search(entry.datetime)
    if not match:
        return None
    day = int(match.group(1))
    year, month = now.year, now.month
    # A day number well behind today belongs to next month.
    if day < now.day - 7:
        month += 1
        if month > 12:
            month = 1
            year += 1
    return datetime(year, month, 1) + timedelta(days=day - 1, hours=entry.hour)


def nearest_forecast(entries: list[ForecastEntry] | tuple[ForecastEntry, ...], now: datetime) -> ForecastEntry | None:
    """Entry whose time is closest to `now`; the first entry if none parse.

    Forecast labels carry no offset, so an aware `now` is compared by its
    wall-clock time.
    """

    if not entries:
        return None
    if now.tzinfo is not None:
        now = now.replace(tzinfo=None)

    nearest = entries[0]
    smallest = None
    for entry in entries:
        when = _entry_datetime(entry, now)
        if when is None:
            continue
        diff = abs((when - now).total_seconds())
        if smallest is None or diff < smallest:
            smallest = diff
            nearest = entry
    return nearest


def apply_forecast(config: WaveConfig, entry: ForecastEntry) -> WaveConfig:
    """Return `config` updated from `entry`, clamped to the slider limits.

    The wave direction flips from "coming from" to "travelling toward" and
    wind speed converts from knots to m/s.
    """

    wind_ms = entry.wind_speed * KNOTS_TO_MS
    updated = replace(
        config,
        wave_height=entry.wave_height,
        wave_period=entry.wave_period,
        wave_direction=(entry.wave_direction + 180.0) % 360.0,
        wind_speed=wind_ms,
        wind_direction=entry.wind_direction,
        wind_chop_intensity=min(1.0, wind_ms / CHOP_REFERENCE_WIND_MS),
    )
    return clamp_to_limits(updated)
