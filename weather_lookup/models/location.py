"""Geocoding and raw weather payload models."""

from pydantic import BaseModel


class CityLocation(BaseModel):
    """Candidate location returned by the geocoding API."""

    lat: float
    lon: float
    country: str
    state: str | None = None
    name: str


class WeatherDescription(BaseModel):
    description: str


class MainWeather(BaseModel):
    temp: float


class WeatherResponse(BaseModel):
    """Subset of the current weather payload that the client reads."""

    weather: list[WeatherDescription]
    main: MainWeather
