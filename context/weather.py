# context/weather.py
"""
Game-day weather helpers.

Maps team codes to stadium coordinates, samples one representative hour
from an hourly forecast and formats it as "<F>°F / <pct>% rain". The
scoring engine parses that summary back into numbers.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from context.defense import to_number

# UTC hour used when kickoff is unknown (the 1 PM Eastern slot)
DEFAULT_SAMPLE_HOUR = 17

STADIUM_LOCATIONS: dict[str, tuple[float, float]] = {
    "ARI": (33.53, -112.26), "ATL": (33.76, -84.40), "BAL": (39.28, -76.62),
    "BUF": (42.77, -78.79), "CAR": (35.23, -80.85), "CHI": (41.86, -87.62),
    "CIN": (39.10, -84.52), "CLE": (41.51, -81.70), "DAL": (32.75, -97.09),
    "DEN": (39.74, -105.02), "DET": (42.34, -83.05), "GB": (44.50, -88.06),
    "HOU": (29.68, -95.41), "IND": (39.76, -86.16), "JAX": (30.32, -81.64),
    "KC": (39.05, -94.48), "LAC": (33.95, -118.34), "LAR": (33.95, -118.34),
    "LV": (36.09, -115.18), "MIA": (25.96, -80.24), "MIN": (44.97, -93.26),
    "NE": (42.09, -71.26), "NO": (29.95, -90.08), "NYG": (40.81, -74.07),
    "NYJ": (40.81, -74.07), "PHI": (39.90, -75.17), "PIT": (40.45, -80.02),
    "SEA": (47.60, -122.33), "SF": (37.40, -121.97), "TB": (27.98, -82.50),
    "TEN": (36.17, -86.77), "WAS": (38.91, -76.86),
}

# Scoreboards and rankings sources disagree on a few codes
TEAM_CODE_ALIASES = {"WSH": "WAS", "JAC": "JAX", "LA": "LAR", "OAK": "LV", "SD": "LAC"}

_SUMMARY_TEMP = re.compile(r"(-?\d+(?:\.\d+)?)\s*°?\s*F", re.IGNORECASE)
_SUMMARY_RAIN = re.compile(r"(\d+(?:\.\d+)?)\s*%\s*rain", re.IGNORECASE)


@dataclass(frozen=True)
class WeatherReading:
    """One sampled forecast hour."""

    temperature_f: float
    precipitation_pct: float
    time: Optional[str] = None

    @property
    def summary(self) -> str:
        return format_weather_summary(self.temperature_f, self.precipitation_pct)


def canonical_team(team: str) -> str:
    code = (team or "").strip().upper()
    return TEAM_CODE_ALIASES.get(code, code)


def stadium_location(team: str) -> Optional[tuple[float, float]]:
    """Return (lat, lon) for a team's home stadium, None if unknown."""
    return STADIUM_LOCATIONS.get(canonical_team(team))


def format_weather_summary(temperature_f: float, precipitation_pct: float) -> str:
    return f"{round(temperature_f)}°F / {round(precipitation_pct)}% rain"


def parse_weather_summary(summary: Optional[str]) -> tuple[Optional[float], Optional[float]]:
    """Extract (temperature °F, rain %) from a summary string."""
    if not summary:
        return None, None
    temp = _SUMMARY_TEMP.search(summary)
    rain = _SUMMARY_RAIN.search(summary)
    return (
        float(temp.group(1)) if temp else None,
        float(rain.group(1)) if rain else None,
    )


def _sample_index(times: list, kickoff: Optional[str]) -> int:
    if kickoff:
        try:
            kick = datetime.fromisoformat(kickoff.replace("Z", "+00:00"))
        except ValueError:
            kick = None
        if kick is not None:
            if kick.tzinfo is not None:
                kick = kick.astimezone(timezone.utc)
            # Forecasts are requested in UTC as "YYYY-MM-DDTHH:00"
            prefix = kick.strftime("%Y-%m-%dT%H")
            for index, value in enumerate(times):
                if isinstance(value, str) and value.startswith(prefix):
                    return index

    for index, value in enumerate(times):
        if isinstance(value, str) and value[11:13] == f"{DEFAULT_SAMPLE_HOUR:02d}":
            return index
    return 0


def sample_hourly_forecast(
    payload: Mapping[str, Any],
    kickoff: Optional[str] = None,
) -> Optional[WeatherReading]:
    """
    Pick one representative hour from an Open-Meteo hourly payload.

    The kickoff hour is used when it appears in the series, otherwise
    DEFAULT_SAMPLE_HOUR UTC of the first forecast day, otherwise the first hour.
    """
    hourly = payload.get("hourly") if isinstance(payload, Mapping) else None
    if not isinstance(hourly, Mapping):
        return None

    temps = hourly.get("temperature_2m") or []
    precip = hourly.get("precipitation_probability") or []
    times = hourly.get("time") or []
    if not temps:
        return None

    index = _sample_index(times, kickoff)
    if index >= len(temps):
        index = 0

    temperature = to_number(temps[index])
    if temperature is None:
        return None
    rain = to_number(precip[index]) if index < len(precip) else None

    return WeatherReading(
        temperature_f=temperature,
        precipitation_pct=rain if rain is not None else 0.0,
        time=times[index] if index < len(times) else None,
    )
