"""Command-line entry point: single lookups and the interactive prompt."""

import asyncio
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Annotated

import typer

from weather_lookup.config import DEFAULT_CONFIG_PATH, ConfigError, load_config
from weather_lookup.logging_config import configure_logging, logger, parse_level
from weather_lookup.models.output import OutputType
from weather_lookup.presenter.console import console, dim, error
from weather_lookup.presenter.render import render
from weather_lookup.weather_service.weather import (
    RequestFailedError,
    WeatherClient,
    WeatherServiceError,
    connect,
)

PROMPT = "Enter the city name: "

app = typer.Typer(
    name="weather-lookup",
    help="Look up the current weather for every city matching a name.",
    add_completion=False,
)


def _version_callback(value: bool) -> None:
    if value:
        try:
            typer.echo(version("weather-lookup"))
        except PackageNotFoundError:
            typer.echo("unknown")
        raise typer.Exit()


async def print_city_weather(
    client: WeatherClient, city: str, output: OutputType
) -> None:
    """Look up ``city`` and print the results in the requested format."""
    weathers = await client.get_weather(city.strip())
    if not weathers:
        dim(f"No locations found for '{city.strip()}'")
        return
    render(weathers, output, console)


def print_city_weather_interactive(
    runner: asyncio.Runner, client: WeatherClient, output: OutputType
) -> None:
    """Prompt for city names until EOF or Ctrl-C.

    The prompt blocks outside the event loop so Ctrl-C reaches it as
    KeyboardInterrupt. Blank input re-prompts. Request failures are reported
    and the session continues; a rejected API key ends it.
    """
    while True:
        try:
            city = console.input(PROMPT)
        except (EOFError, KeyboardInterrupt):
            console.print()
            return

        if not city.strip():
            continue

        try:
            runner.run(print_city_weather(client, city, output))
        except RequestFailedError as exc:
            logger.error("QUERY_FAILED", city=city.strip(), error=str(exc))
            error(str(exc))


@app.command()
def main(
    city: Annotated[
        str | None,
        typer.Option(
            "--city",
            "-c",
            help="The city name to retrieve the weather information for.",
        ),
    ] = None,
    output: Annotated[
        OutputType | None,
        typer.Option(
            "--output",
            "-o",
            case_sensitive=False,
            help="How to display the weather information.",
        ),
    ] = None,
    config: Annotated[
        Path,
        typer.Option(
            "--config",
            help="Path to configuration file",
        ),
    ] = DEFAULT_CONFIG_PATH,
    show_version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show the version and exit.",
        ),
    ] = False,
) -> None:
    """Print the current weather for a city, or prompt for cities interactively."""
    try:
        app_config = load_config(config)
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=1) from exc

    configure_logging(parse_level(app_config.level))
    output = output or app_config.output

    try:
        with asyncio.Runner() as runner:
            client = runner.run(connect(app_config.client))
            try:
                if city is not None:
                    runner.run(print_city_weather(client, city, output))
                else:
                    print_city_weather_interactive(runner, client, output)
            finally:
                runner.run(client.aclose())
    except WeatherServiceError as exc:
        error(str(exc))
        raise typer.Exit(code=1) from exc
