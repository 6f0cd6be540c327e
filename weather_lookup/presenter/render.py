"""Render resolved weather as a table, plain text or JSON."""

import json

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from weather_lookup.models.output import OutputType
from weather_lookup.models.weather import CityWeather

TABLE_COLUMNS = ("City", "Country", "State", "Weather", "Degrees")


def _degrees(weather: CityWeather) -> str:
    return f"{weather.degrees}°"


def build_table(weathers: list[CityWeather]) -> Table:
    """Create a table with one row per location."""
    table = Table(box=box.SIMPLE_HEAD)
    for name in TABLE_COLUMNS:
        table.add_column(name, justify="right" if name == "Degrees" else "left")
    for weather in weathers:
        table.add_row(
            escape(weather.city_name),
            escape(weather.country),
            escape(weather.state or ""),
            escape(weather.weather),
            _degrees(weather),
        )
    return table


def format_simple(weathers: list[CityWeather]) -> str:
    lines = [
        f"{w.city_name} ({w.country}, {w.state or ''}): {w.weather}, {_degrees(w)}"
        for w in weathers
    ]
    return "\n".join(lines) + "\n"


def format_json(weathers: list[CityWeather]) -> str:
    """Serialize to a pretty-printed JSON array of CityWeather objects."""
    return json.dumps(
        [w.model_dump(mode="json") for w in weathers], indent=2, ensure_ascii=False
    )


def render(weathers: list[CityWeather], output: OutputType, console: Console) -> None:
    """Print ``weathers`` to ``console`` in the requested format.

    Args:
        weathers: Resolved weather records; nothing is printed when empty.
        output: Rendering to use.
        console: Destination console.
    """
    if not weathers:
        return
    if output is OutputType.table:
        console.print(build_table(weathers))
        console.print()
    elif output is OutputType.simple:
        console.print(
            format_simple(weathers),
            markup=False,
            emoji=False,
            highlight=False,
            soft_wrap=True,
        )
    else:
        console.print(
            format_json(weathers),
            markup=False,
            emoji=False,
            highlight=False,
            soft_wrap=True,
        )
        console.print()
