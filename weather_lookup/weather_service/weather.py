"""OpenWeatherMap integration: geocoding, deduplication and weather lookup."""

import httpx
from pydantic import TypeAdapter, ValidationError

from weather_lookup.config import ClientConfig
from weather_lookup.logging_config import logger
from weather_lookup.models.location import CityLocation, WeatherResponse
from weather_lookup.models.weather import CityWeather
from weather_lookup.weather_service.dedup import dedup_locations
from weather_lookup.weather_service.timing import timed

GEOCODING_URL = "https://api.openweathermap.org/geo/1.0/direct"
WEATHER_URL = "https://api.openweathermap.org/data/2.5/weather"
GEOCODING_LIMIT = 100
PROBE_CITY = "London"

_locations_adapter = TypeAdapter(list[CityLocation])


class WeatherServiceError(Exception):
    """Base exception for weather service failures."""
    pass


class UnauthorizedError(WeatherServiceError):
    """Raised when the API rejects the configured key (HTTP 401)."""
    pass


class RequestFailedError(WeatherServiceError):
    """Raised on transport failures, bad statuses or unexpected payloads."""
    pass


class ServiceConnectionError(WeatherServiceError):
    """Raised when the connectivity probe fails."""
    pass


class ClientNotConnectedError(WeatherServiceError):
    """Raised when a query is issued before connect() succeeded."""
    pass


class WeatherClient:
    """Async client resolving a city name to weather per distinct region.

    A new client is unconnected. ``connect()`` issues a probe query and only
    then are ``get_weather`` calls accepted.
    """

    def __init__(
        self, config: ClientConfig, http_client: httpx.AsyncClient | None = None
    ):
        self._config = config
        self._http = http_client or httpx.AsyncClient()
        self._connected = False

    @property
    def connected(self) -> bool:
        return self._connected

    async def __aenter__(self) -> "WeatherClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def connect(self) -> "WeatherClient":
        """Validate credentials and connectivity with a known-good query.

        Returns:
            This client, now accepting weather queries.

        Raises:
            ServiceConnectionError: If the probe query fails for any reason.
        """
        try:
            await self._get_city_locations(PROBE_CITY)
        except WeatherServiceError as exc:
            logger.error("CONNECT_FAILED", error=str(exc))
            raise ServiceConnectionError(
                f"Failed to connect to the weather service: {exc}"
            ) from exc
        self._connected = True
        logger.debug("CONNECTED")
        return self

    async def get_weather(self, city: str) -> list[CityWeather]:
        """Return current weather for every distinct region named ``city``.

        Args:
            city: Free-text city name.

        Returns:
            One CityWeather per (country, state) pair that could be
            resolved. Empty when the city is unknown.

        Raises:
            ClientNotConnectedError: If connect() has not succeeded yet.
            UnauthorizedError: If the geocoding call is rejected with 401.
            RequestFailedError: If the geocoding call fails otherwise.
        """
        if not self._connected:
            raise ClientNotConnectedError(
                "Client is not connected; call connect() first"
            )

        city = city.strip()
        locations = await self._get_city_locations(city)
        weathers = []
        for location in dedup_locations(locations):
            weather = await self._get_city_weather(location)
            if weather is not None:
                weathers.append(weather)
        logger.info(
            "WEATHER_RESOLVED",
            city=city,
            candidates=len(locations),
            results=len(weathers),
        )
        return weathers

    async def _get_city_locations(self, city: str) -> list[CityLocation]:
        response = await self._request(
            url=GEOCODING_URL,
            params={"q": city, "limit": GEOCODING_LIMIT},
            identifier="city_location",
            event_prefix="CITY_LOOKUP",
            log_context={"city": city},
            error_message="City lookup failed",
        )
        try:
            return _locations_adapter.validate_json(response.content)
        except ValidationError as exc:
            logger.error("CITY_LOOKUP_BAD_PAYLOAD", city=city, error=str(exc))
            raise RequestFailedError("City lookup failed: unexpected response") from exc

    async def _get_city_weather(self, location: CityLocation) -> CityWeather | None:
        """Fetch weather for one location, returning None when it cannot."""
        try:
            response = await self._request(
                url=WEATHER_URL,
                params={
                    "lat": location.lat,
                    "lon": location.lon,
                    "units": "metric",
                    "lang": self._config.lang,
                },
                identifier="city_weather",
                event_prefix="WEATHER",
                log_context={"city": location.name, "country": location.country},
                error_message="Weather lookup failed",
            )
            payload = WeatherResponse.model_validate_json(response.content)
        except (WeatherServiceError, ValidationError) as exc:
            logger.warning(
                "WEATHER_LOOKUP_SKIPPED",
                city=location.name,
                country=location.country,
                state=location.state,
                error=str(exc),
            )
            return None

        weather = CityWeather.from_api_response(location, payload)
        if weather is None:
            logger.warning(
                "WEATHER_LOOKUP_SKIPPED",
                city=location.name,
                country=location.country,
                state=location.state,
                error="no weather description",
            )
        return weather

    async def _request(
        self,
        *,
        url: str,
        params: dict,
        identifier: str,
        event_prefix: str,
        log_context: dict,
        error_message: str,
    ) -> httpx.Response:
        """Execute an authenticated GET with consistent logging.

        Args:
            url: The URL to call.
            params: Query parameters, without the API key.
            identifier: Name used for the elapsed-time log event.
            event_prefix: Log event prefix for consistent names.
            log_context: Extra log fields for all events.
            error_message: Error message to wrap in RequestFailedError.

        Returns:
            The successful HTTP response.

        Raises:
            UnauthorizedError: On HTTP 401.
            RequestFailedError: On transport errors or any other bad status.
        """
        with timed(identifier):
            try:
                response = await self._http.get(
                    url, params={**params, "appid": self._config.api_key}
                )
            except httpx.RequestError as exc:
                logger.error(
                    f"{event_prefix}_REQUEST_FAILED", **log_context, error=str(exc)
                )
                raise RequestFailedError(f"{error_message}: {exc}") from exc

        logger.info(
            f"{event_prefix}_RESPONSE", **log_context, status=response.status_code
        )
        if response.status_code == httpx.codes.UNAUTHORIZED:
            raise UnauthorizedError(
                "Invalid API key for weather service. Please check the configuration."
            )
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error(
                f"{event_prefix}_BAD_STATUS", **log_context, status=response.status_code
            )
            raise RequestFailedError(
                f"{error_message}: HTTP {response.status_code}"
            ) from exc
        return response


async def connect(
    config: ClientConfig, http_client: httpx.AsyncClient | None = None
) -> WeatherClient:
    """Build a client and run its connectivity probe.

    Closes the client again if the probe fails.
    """
    client = WeatherClient(config, http_client=http_client)
    try:
        return await client.connect()
    except ServiceConnectionError:
        await client.aclose()
        raise
