"""
MCP server package exposing National Weather Service (weather.gov) tools.
"""

from .weather_server import create_weather_server

__all__ = ["create_weather_server"]
