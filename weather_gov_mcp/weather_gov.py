"""
Client and response projections for the National Weather Service API
(https://api.weather.gov).
"""

from __future__ import annotations

import logging
import math
from decimal import Decimal
from typing import Any, TypedDict

import requests
from requests import Session
from requests.adapters import HTTPAdapter

from .rate_limit import RateLimiter

logger = logging.getLogger(__name__)

WEATHER_GOV_URL = "https://api.weather.gov"
USER_AGENT = "(mcp-weather-gov, chris.sellers01@gmail.com)"
GEO_JSON = "application/geo+json"

DEFAULT_TIMEOUT = 30
HOURLY_PERIOD_LIMIT = 24
STATION_LIMIT = 10
ALERT_DESCRIPTION_LIMIT = 500
MPS_TO_MPH = 0.621371


class WeatherGovError(RuntimeError):
    """Raised when weather.gov cannot satisfy a request."""


class UpstreamStatusError(WeatherGovError):
    """Raised when weather.gov answers with a non-success status."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"weather.gov {status_code}")
        self.status_code = status_code


class MissingLinkError(WeatherGovError):
    """Raised when a response lacks the link needed for the next request."""


class ForecastPeriod(TypedDict, total=False):
    name: str
    temperature: float
    temperatureUnit: str
    windSpeed: str
    windDirection: str
    shortForecast: str
    detailedForecast: str


class Forecast(TypedDict, total=False):
    location: dict[str, Any]
    periods: list[ForecastPeriod]


class HourlyPeriod(TypedDict, total=False):
    startTime: str
    temperature: float
    windSpeed: str
    shortForecast: str
    probabilityOfPrecipitation: float | None


class Alert(TypedDict, total=False):
    headline: str | None
    severity: str
    event: str
    description: str
    onset: str | None
    expires: str
    areaDesc: str


class Alerts(TypedDict, total=False):
    count: int
    alerts: list[Alert]


class Station(TypedDict, total=False):
    id: str
    name: str
    coordinates: list[float]


class Observation(TypedDict, total=False):
    station: str
    timestamp: str
    temperature: str | None
    humidity: str | None
    windSpeed: str | None
    windDirection: float | None
    description: str
    visibility: float | None
    barometricPressure: float | None


# Marks an upstream field that is not there at all, as opposed to JSON null.
_MISSING: Any = object()


def _dig(data: Any, *keys: str) -> Any:
    current = data
    for key in keys:
        if not isinstance(current, dict) or key not in current:
            return _MISSING
        current = current[key]
    return current


def _present(**fields: Any) -> dict[str, Any]:
    """
    Build a record from keyword fields, dropping those that were missing upstream.
    """
    return {key: value for key, value in fields.items() if value is not _MISSING}


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _format_coordinate(value: float) -> str:
    """
    Render a coordinate the way weather.gov links print numbers: no
    trailing ".0", positional notation for 1e-6 <= |x| < 1e21, and
    unpadded exponents ("1e-7", "1e+21") outside that range.
    """
    number = float(value)
    if number.is_integer() and abs(number) < 1e21:
        return str(int(number))
    text = repr(number)
    if "e" not in text:
        return text
    mantissa, exponent = text.split("e")
    power = int(exponent)
    if -7 < power < 21:
        return format(Decimal(text), "f")
    sign = "+" if power > 0 else "-"
    return f"{mantissa}e{sign}{abs(power)}"


def format_temperature(celsius: float | None) -> str | None:
    if celsius is None:
        return None
    fahrenheit = celsius * 9 / 5 + 32
    return f"{_round_half_up(fahrenheit)}°F ({_round_half_up(celsius)}°C)"


def format_wind_speed(meters_per_second: float | None) -> str | None:
    if meters_per_second is None:
        return None
    return f"{_round_half_up(meters_per_second * MPS_TO_MPH)} mph"


def format_humidity(percent: float | None) -> str | None:
    if percent is None:
        return None
    return f"{_round_half_up(percent)}%"


def _value(properties: Any, field: str) -> Any:
    return _dig(properties, field, "value")


def _configure_session(user_agent: str) -> Session:
    session = requests.Session()
    session.headers["User-Agent"] = user_agent
    adapter = HTTPAdapter(max_retries=0)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


class WeatherGovClient:
    """
    Thin weather.gov client: rate-limited lookups plus link following.
    """

    def __init__(
        self,
        *,
        base_url: str = WEATHER_GOV_URL,
        user_agent: str = USER_AGENT,
        timeout: float = DEFAULT_TIMEOUT,
        limiter: RateLimiter | None = None,
        session: Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.timeout = timeout
        self.limiter = limiter or RateLimiter()
        self.session = session or _configure_session(user_agent)

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _request_json(
        self,
        url: str,
        *,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        logger.debug("GET %s params=%s", url, params)
        try:
            response = self.session.get(
                url, params=params, headers=headers, timeout=self.timeout
            )
        except requests.RequestException as exc:
            raise WeatherGovError(f"Could not reach weather.gov: {exc}") from exc

        if not response.ok:
            logger.debug("GET %s failed with status %d", url, response.status_code)
            raise UpstreamStatusError(response.status_code)

        try:
            return response.json()
        except ValueError as exc:
            raise WeatherGovError("weather.gov returned an invalid response") from exc

    def get_json(self, path: str, params: dict[str, str] | None = None) -> Any:
        """
        Rate-limited GET of a path on the API host, asking for GeoJSON.
        """
        self.limiter.wait()
        return self._request_json(
            f"{self.base_url}{path}",
            params=params,
            headers={"User-Agent": self.user_agent, "Accept": GEO_JSON},
        )

    def follow_link(self, url: str) -> Any:
        """
        GET an absolute URL taken from a previous response.

        Not rate-limited and sent without the GeoJSON Accept header.
        """
        return self._request_json(url, headers={"User-Agent": self.user_agent})

    def get_point(self, lat: float, lon: float) -> Any:
        return self.get_json(
            f"/points/{_format_coordinate(lat)},{_format_coordinate(lon)}"
        )

    def _follow_point_link(
        self, lat: float, lon: float, link: str, missing_message: str
    ) -> tuple[Any, Any]:
        point = self.get_point(lat, lon)
        url = _dig(point, "properties", link)
        if url is _MISSING or not url:
            raise MissingLinkError(missing_message)
        return point, self.follow_link(url)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def get_forecast(self, lat: float, lon: float) -> Forecast:
        """
        Day/night forecast periods for a coordinate, with its relative location.
        """
        point, forecast = self._follow_point_link(
            lat, lon, "forecast", "No forecast available for this location"
        )
        periods = _dig(forecast, "properties", "periods")
        if periods is None:
            periods = _MISSING
        elif periods is not _MISSING:
            periods = [
                _present(
                    name=_dig(period, "name"),
                    temperature=_dig(period, "temperature"),
                    temperatureUnit=_dig(period, "temperatureUnit"),
                    windSpeed=_dig(period, "windSpeed"),
                    windDirection=_dig(period, "windDirection"),
                    shortForecast=_dig(period, "shortForecast"),
                    detailedForecast=_dig(period, "detailedForecast"),
                )
                for period in periods
            ]
        return _present(
            location=_dig(point, "properties", "relativeLocation", "properties"),
            periods=periods,
        )

    def get_hourly_forecast(self, lat: float, lon: float) -> list[HourlyPeriod] | None:
        """
        First 24 hourly periods for a coordinate.
        """
        _, forecast = self._follow_point_link(
            lat, lon, "forecastHourly", "No hourly forecast"
        )
        periods = _dig(forecast, "properties", "periods")
        if periods is _MISSING or periods is None:
            return None
        return [
            _present(
                startTime=_dig(period, "startTime"),
                temperature=_dig(period, "temperature"),
                windSpeed=_dig(period, "windSpeed"),
                shortForecast=_dig(period, "shortForecast"),
                probabilityOfPrecipitation=_value(period, "probabilityOfPrecipitation"),
            )
            for period in periods[:HOURLY_PERIOD_LIMIT]
        ]

    def get_alerts(
        self,
        state: str | None = None,
        zone: str | None = None,
        area: str | None = None,
    ) -> Alerts:
        """
        Active, actual alerts. ``state`` and ``area`` share the ``area``
        query parameter; when both are given ``area`` wins.
        """
        params = {"active": "true", "status": "actual"}
        if state:
            params["area"] = state
        if zone:
            params["zone"] = zone
        if area:
            params["area"] = area

        data = self.get_json("/alerts", params)
        features = _dig(data, "features")
        if features is _MISSING or features is None:
            return {}

        alerts = []
        for feature in features:
            description = _dig(feature, "properties", "description")
            if description is None:
                description = _MISSING
            elif description is not _MISSING:
                description = description[:ALERT_DESCRIPTION_LIMIT]
            alerts.append(
                _present(
                    headline=_dig(feature, "properties", "headline"),
                    severity=_dig(feature, "properties", "severity"),
                    event=_dig(feature, "properties", "event"),
                    description=description,
                    onset=_dig(feature, "properties", "onset"),
                    expires=_dig(feature, "properties", "expires"),
                    areaDesc=_dig(feature, "properties", "areaDesc"),
                )
            )
        return {"count": len(alerts), "alerts": alerts}

    def get_stations(self, lat: float, lon: float) -> list[Station] | None:
        """
        Up to ten observation stations listed for a coordinate, in upstream order.
        """
        _, data = self._follow_point_link(
            lat, lon, "observationStations", "No stations found"
        )
        features = _dig(data, "features")
        if features is _MISSING or features is None:
            return None
        return [
            _present(
                id=_dig(feature, "properties", "stationIdentifier"),
                name=_dig(feature, "properties", "name"),
                coordinates=_dig(feature, "geometry", "coordinates"),
            )
            for feature in features[:STATION_LIMIT]
        ]

    def get_current_conditions(self, station_id: str) -> Observation:
        """
        Latest observation of a station, with display conversions applied.
        """
        data = self.get_json(f"/stations/{station_id}/observations/latest")
        properties = _dig(data, "properties")

        def converted(field: str, convert: Any) -> str | None:
            raw = _value(properties, field)
            if raw is _MISSING:
                return None
            return convert(raw)

        return _present(
            station=station_id,
            timestamp=_dig(properties, "timestamp"),
            temperature=converted("temperature", format_temperature),
            humidity=converted("relativeHumidity", format_humidity),
            windSpeed=converted("windSpeed", format_wind_speed),
            windDirection=_value(properties, "windDirection"),
            description=_dig(properties, "textDescription"),
            visibility=_value(properties, "visibility"),
            barometricPressure=_value(properties, "barometricPressure"),
        )


__all__ = [
    "ALERT_DESCRIPTION_LIMIT",
    "Alert",
    "Alerts",
    "Forecast",
    "ForecastPeriod",
    "HOURLY_PERIOD_LIMIT",
    "HourlyPeriod",
    "MissingLinkError",
    "Observation",
    "STATION_LIMIT",
    "Station",
    "UpstreamStatusError",
    "WEATHER_GOV_URL",
    "WeatherGovClient",
    "WeatherGovError",
    "format_humidity",
    "format_temperature",
    "format_wind_speed",
]
