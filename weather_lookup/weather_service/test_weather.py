import httpx
import pytest

from weather_lookup.config import ClientConfig
from weather_lookup.weather_service.weather import (
    GEOCODING_URL,
    WEATHER_URL,
    ClientNotConnectedError,
    RequestFailedError,
    ServiceConnectionError,
    UnauthorizedError,
    WeatherClient,
    connect,
)

CONFIG = ClientConfig(api_key="secret", lang="en")


def location(name, country, state=None, lat=51.5, lon=-0.12):
    data = {"name": name, "country": country, "lat": lat, "lon": lon}
    if state is not None:
        data["state"] = state
    return data


def weather_body(description="clear sky", temp=12.7):
    return {"weather": [{"description": description}], "main": {"temp": temp}}


class FakeOpenWeather:
    """Serves canned geocoding results and per-coordinate weather."""

    def __init__(self, locations, weather=None, probe_status=200):
        self.locations = locations
        self.weather = weather or {}
        self.probe_status = probe_status
        self.requests = []

    def weather_requests(self):
        return [r for r in self.requests if str(r.url).startswith(WEATHER_URL)]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)
        params = request.url.params
        assert params["appid"] == "secret"
        if url.startswith(GEOCODING_URL):
            if params["q"] == "London" and self.probe_status != 200:
                return httpx.Response(self.probe_status, json={"cod": self.probe_status})
            assert params["limit"] == "100"
            return httpx.Response(200, json=self.locations)
        if url.startswith(WEATHER_URL):
            assert params["units"] == "metric"
            assert params["lang"] == "en"
            key = (float(params["lat"]), float(params["lon"]))
            status, body = self.weather.get(key, (200, weather_body()))
            if isinstance(body, bytes):
                return httpx.Response(status, content=body)
            return httpx.Response(status, json=body)
        raise AssertionError(f"Unexpected URL: {url}")


async def connected_client(fake):
    client = WeatherClient(CONFIG, http_client=httpx.AsyncClient(transport=httpx.MockTransport(fake)))
    await client.connect()
    fake.requests.clear()
    return client


@pytest.mark.asyncio
async def test_duplicate_regions_collapse_to_one_fetch():
    fake = FakeOpenWeather([location("London", "GB"), location("London", "GB", lat=51.6)])
    async with await connected_client(fake) as client:
        weathers = await client.get_weather("London")

    assert len(weathers) == 1
    assert len(fake.weather_requests()) == 1
    assert weathers[0].city_name == "London"
    assert weathers[0].country == "GB"
    assert weathers[0].state is None
    assert weathers[0].weather == "clear sky"
    assert weathers[0].temperature == pytest.approx(12.7)


@pytest.mark.asyncio
async def test_distinct_states_each_get_a_fetch():
    fake = FakeOpenWeather(
        [
            location("Springfield", "US", "IL", lat=39.8, lon=-89.6),
            location("Springfield", "US", "MO", lat=37.2, lon=-93.3),
        ]
    )
    async with await connected_client(fake) as client:
        weathers = await client.get_weather("Springfield")

    assert len(weathers) == 2
    assert len(fake.weather_requests()) == 2
    assert {w.state for w in weathers} == {"IL", "MO"}


@pytest.mark.asyncio
async def test_city_not_found_returns_empty_list():
    fake = FakeOpenWeather([])
    async with await connected_client(fake) as client:
        assert await client.get_weather("Atlantis") == []
    assert fake.weather_requests() == []


@pytest.mark.asyncio
async def test_city_name_is_trimmed():
    fake = FakeOpenWeather([])
    async with await connected_client(fake) as client:
        await client.get_weather("  Paris \n")
    assert fake.requests[0].url.params["q"] == "Paris"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "failure",
    [
        (500, {"message": "internal error"}),
        (200, b"not json"),
        (200, {"main": {"temp": 3.0}}),
        (200, {"weather": [], "main": {"temp": 3.0}}),
        (401, {"cod": 401}),
    ],
)
async def test_failing_location_is_skipped(failure):
    fake = FakeOpenWeather(
        [
            location("Springfield", "US", "IL", lat=39.8, lon=-89.6),
            location("Springfield", "US", "MO", lat=37.2, lon=-93.3),
        ],
        weather={(37.2, -93.3): failure},
    )
    async with await connected_client(fake) as client:
        weathers = await client.get_weather("Springfield")

    assert [w.state for w in weathers] == ["IL"]
    assert len(fake.weather_requests()) == 2


@pytest.mark.asyncio
async def test_transport_error_on_one_location_is_skipped():
    def handler(request):
        if str(request.url).startswith(WEATHER_URL) and request.url.params["lat"] == "1.0":
            raise httpx.ConnectError("connection refused", request=request)
        return fake(request)

    fake = FakeOpenWeather(
        [location("Paris", "FR", lat=1.0, lon=1.0), location("Paris", "US", "TX", lat=2.0, lon=2.0)]
    )
    client = WeatherClient(CONFIG, http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    async with await client.connect():
        weathers = await client.get_weather("Paris")

    assert [(w.country, w.state) for w in weathers] == [("US", "TX")]


@pytest.mark.asyncio
async def test_geocoding_unauthorized_is_distinct_from_request_failure():
    def handler(request):
        if request.url.params["q"] == "London":
            return httpx.Response(200, json=[])
        return httpx.Response(401, json={"cod": 401, "message": "Invalid API key"})

    client = WeatherClient(CONFIG, http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    async with await client.connect():
        with pytest.raises(UnauthorizedError):
            await client.get_weather("Berlin")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, json={"message": "boom"}),
        httpx.Response(200, content=b"<html>"),
        httpx.Response(200, json=[{"name": "Berlin"}]),
    ],
)
async def test_geocoding_failures_raise_request_failed(response):
    def handler(request):
        if request.url.params["q"] == "London":
            return httpx.Response(200, json=[])
        return response

    client = WeatherClient(CONFIG, http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    async with await client.connect():
        with pytest.raises(RequestFailedError):
            await client.get_weather("Berlin")


@pytest.mark.asyncio
async def test_query_before_connect_is_rejected():
    fake = FakeOpenWeather([])
    async with WeatherClient(CONFIG, http_client=httpx.AsyncClient(transport=httpx.MockTransport(fake))) as client:
        assert not client.connected
        with pytest.raises(ClientNotConnectedError):
            await client.get_weather("London")
    assert fake.requests == []


@pytest.mark.asyncio
async def test_connect_probes_london():
    fake = FakeOpenWeather([location("London", "GB")])
    client = await connect(CONFIG, http_client=httpx.AsyncClient(transport=httpx.MockTransport(fake)))
    async with client:
        assert client.connected
    assert [r.url.params["q"] for r in fake.requests] == ["London"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status", "cause"),
    [(401, UnauthorizedError), (503, RequestFailedError)],
)
async def test_connect_failure_wraps_cause(status, cause):
    fake = FakeOpenWeather([], probe_status=status)
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(fake))
    with pytest.raises(ServiceConnectionError) as exc_info:
        await connect(CONFIG, http_client=http_client)

    assert isinstance(exc_info.value.__cause__, cause)
    assert http_client.is_closed
