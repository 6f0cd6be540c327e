"""Output format choices."""

from enum import Enum


class OutputType(str, Enum):
    """How resolved weather is rendered."""

    table = "table"
    simple = "simple"
    json = "json"
