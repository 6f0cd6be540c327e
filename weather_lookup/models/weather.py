"""Resolved weather record returned to callers."""

from pydantic import BaseModel

from weather_lookup.models.location import CityLocation, WeatherResponse


class CityWeather(BaseModel):
    """Current weather for one deduplicated location."""

    weather: str
    country: str
    state: str | None = None
    city_name: str
    temperature: float

    @property
    def degrees(self) -> int:
        """Temperature truncated toward zero, as shown to users."""
        return int(self.temperature)

    @classmethod
    def from_api_response(
        cls, location: CityLocation, api_data: WeatherResponse
    ) -> "CityWeather | None":
        """Combine a geocoded location with its weather payload.

        Args:
            location: Location the weather was fetched for.
            api_data: Parsed weather payload.

        Returns:
            A populated CityWeather, or None when the payload carries no
            weather description.
        """
        if not api_data.weather:
            return None
        return cls(
            weather=api_data.weather[0].description,
            country=location.country,
            state=location.state,
            city_name=location.name,
            temperature=api_data.main.temp,
        )
