# context/providers/open_meteo.py
"""
Stadium weather provider (Open-Meteo hourly forecast).

No API key required. Returns a single sampled WeatherReading per team, or
None when the team has no known stadium or live data is disabled.
"""

from __future__ import annotations

import logging
from typing import Optional

from context.errors import MalformedPayloadError
from context.providers.base import ContextProvider, fetch_json
from context.weather import WeatherReading, sample_hourly_forecast, stadium_location

_logger = logging.getLogger(__name__)

OPEN_METEO_URL = "https://api.open-meteo.com/v1/forecast"


def build_forecast_params(lat: float, lon: float) -> dict:
    return {
        "latitude": lat,
        "longitude": lon,
        "hourly": "temperature_2m,precipitation_probability",
        "temperature_unit": "fahrenheit",
        "timezone": "UTC",
        "forecast_days": 7,
    }


class WeatherProvider(ContextProvider):
    """Hourly forecast lookup by home-team stadium."""

    @property
    def source_name(self) -> str:
        return "open-meteo" if self._use_live_data else "weather-disabled"

    async def fetch(self, team: str, kickoff: Optional[str] = None) -> Optional[WeatherReading]:
        """
        Fetch the forecast at a team's stadium and sample one hour.

        Args:
            team: Home team code (the game's location)
            kickoff: ISO kickoff time used to pick the sampled hour

        Raises:
            UpstreamUnavailableError: if Open-Meteo cannot be reached
            MalformedPayloadError: if the payload has no hourly series
        """
        location = stadium_location(team)
        if location is None:
            _logger.debug(f"No stadium location for {team}")
            return None
        if not self._use_live_data:
            return None

        payload = await fetch_json(
            OPEN_METEO_URL,
            params=build_forecast_params(*location),
            timeout=self._timeout,
        )
        reading = sample_hourly_forecast(payload, kickoff)
        if reading is None:
            raise MalformedPayloadError(f"Open-Meteo returned no hourly data for {team}")
        return reading
