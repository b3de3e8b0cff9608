"""
FastMCP server exposing weather.gov lookups as tools.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Annotated, Any, Callable

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from pydantic import Field

from .weather_gov import WeatherGovClient, WeatherGovError

logger = logging.getLogger(__name__)

SERVER_NAME = "mcp-weather-gov"
SERVER_VERSION = "1.0.0"

Latitude = Annotated[float, Field(description="Latitude")]
Longitude = Annotated[float, Field(description="Longitude")]


def _to_text(payload: Any) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False)


async def _run(label: str, operation: Callable[[], Any]) -> str:
    """
    Run a blocking client operation in a worker thread so rate-limit waits
    and HTTP calls do not stall the server's event loop.
    """
    try:
        payload = await asyncio.to_thread(operation)
    except WeatherGovError as exc:
        logger.error("Error fetching %s: %s", label, exc)
        raise ToolError(str(exc)) from exc
    return _to_text(payload)


def create_weather_server(client: WeatherGovClient | None = None) -> FastMCP:
    """
    Create and configure the FastMCP server with weather.gov tools.

    Tools answer with a single text block of indented JSON, so no output
    schema is declared for them.
    """

    weather = client or WeatherGovClient()
    server = FastMCP(SERVER_NAME, version=SERVER_VERSION)

    @server.tool(
        name="get_forecast",
        description="Get 7-day forecast for a location (US only).",
        output_schema=None,
    )
    async def get_forecast(lat: Latitude, lon: Longitude) -> str:
        logger.info("Forecast lookup lat=%s lon=%s", lat, lon)
        return await _run("forecast", lambda: weather.get_forecast(lat, lon))

    @server.tool(
        name="get_hourly_forecast",
        description="Get hourly forecast for a location.",
        output_schema=None,
    )
    async def get_hourly_forecast(lat: float, lon: float) -> str:
        logger.info("Hourly forecast lookup lat=%s lon=%s", lat, lon)
        return await _run(
            "hourly forecast", lambda: weather.get_hourly_forecast(lat, lon)
        )

    @server.tool(
        name="get_alerts",
        description="Get active weather alerts for a state or area.",
        output_schema=None,
    )
    async def get_alerts(
        state: Annotated[
            str | None, Field(description="2-letter state code (e.g. CA, NY)")
        ] = None,
        zone: Annotated[str | None, Field(description="NWS zone ID")] = None,
        area: Annotated[str | None, Field(description="Area code")] = None,
    ) -> str:
        logger.info("Alerts lookup state=%s zone=%s area=%s", state, zone, area)
        return await _run(
            "alerts", lambda: weather.get_alerts(state=state, zone=zone, area=area)
        )

    @server.tool(
        name="get_stations",
        description="Find weather observation stations near a point.",
        output_schema=None,
    )
    async def get_stations(lat: float, lon: float) -> str:
        logger.info("Stations lookup lat=%s lon=%s", lat, lon)
        return await _run("stations", lambda: weather.get_stations(lat, lon))

    # The argument keeps its camelCase wire name, like the output keys.
    @server.tool(
        name="get_current_conditions",
        description="Get current weather observations from nearest station.",
        output_schema=None,
    )
    async def get_current_conditions(
        stationId: Annotated[
            str, Field(description="Station ID (e.g. 'KLAX', 'KJFK')")
        ],
    ) -> str:
        logger.info("Current conditions lookup station=%s", stationId)
        return await _run(
            "current conditions", lambda: weather.get_current_conditions(stationId)
        )

    return server


__all__ = ["SERVER_NAME", "SERVER_VERSION", "create_weather_server"]
