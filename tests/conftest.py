"""Shared test fixtures."""

import json
from pathlib import Path

import pytest
import responses

from weather_gov_mcp.rate_limit import RateLimiter
from weather_gov_mcp.weather_gov import WeatherGovClient

FIXTURE_DIR = Path(__file__).parent / "fixtures"

POINT_URL = "https://api.weather.gov/points/39.7456,-97.0892"
FORECAST_URL = "https://api.weather.gov/gridpoints/TOP/32,81/forecast"
HOURLY_URL = "https://api.weather.gov/gridpoints/TOP/32,81/forecast/hourly"
STATIONS_URL = "https://api.weather.gov/gridpoints/TOP/32,81/stations"
ALERTS_URL = "https://api.weather.gov/alerts"
OBSERVATION_URL = "https://api.weather.gov/stations/KLAX/observations/latest"


def load_fixture(name: str) -> dict:
    with open(FIXTURE_DIR / name) as f:
        return json.load(f)


def hourly_payload(count: int) -> dict:
    """Build an hourly forecast body with ``count`` periods."""
    return {
        "properties": {
            "periods": [
                {
                    "number": index + 1,
                    "startTime": f"2026-10-19T{index % 24:02d}:00:00-05:00",
                    "temperature": 50 + index,
                    "temperatureUnit": "F",
                    "windSpeed": "5 mph",
                    "shortForecast": "Sunny",
                    "probabilityOfPrecipitation": {
                        "unitCode": "wmoUnit:percent",
                        "value": index,
                    },
                }
                for index in range(count)
            ]
        }
    }


class FakeClock:
    """Monotonic clock whose sleep advances time instantly."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def mocked():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


@pytest.fixture
def client() -> WeatherGovClient:
    """Client with rate limiting disabled so tests stay fast."""
    return WeatherGovClient(limiter=RateLimiter(min_interval=0))


@pytest.fixture
def points() -> dict:
    return load_fixture("points.json")


@pytest.fixture
def forecast() -> dict:
    return load_fixture("forecast.json")


@pytest.fixture
def alerts() -> dict:
    return load_fixture("alerts.json")


@pytest.fixture
def stations() -> dict:
    return load_fixture("stations.json")


@pytest.fixture
def observation() -> dict:
    return load_fixture("observation.json")
