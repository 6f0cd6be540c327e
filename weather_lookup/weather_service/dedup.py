"""Collapse geocoder candidates that share a country and state."""

from itertools import groupby

from weather_lookup.models.location import CityLocation


def _region(location: CityLocation) -> tuple[str, str | None]:
    return location.country, location.state


def _state_order(location: CityLocation) -> tuple[bool, str]:
    # Missing states order below any named state.
    return location.state is not None, location.state or ""


def sort_locations(locations: list[CityLocation]) -> list[CityLocation]:
    """Order locations so entries of the same region end up adjacent.

    Sorts by country descending, then stably by state descending.
    """
    by_country = sorted(locations, key=lambda loc: loc.country, reverse=True)
    return sorted(by_country, key=_state_order, reverse=True)


def dedup_locations(locations: list[CityLocation]) -> list[CityLocation]:
    """Keep the first location of every distinct (country, state) pair.

    Args:
        locations: Raw geocoder results, in any order.

    Returns:
        Sorted locations with no two sharing a (country, state) pair.
    """
    return [next(group) for _, group in groupby(sort_locations(locations), key=_region)]
