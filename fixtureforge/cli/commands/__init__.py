"""CLI commands for fixtureforge."""

from . import (
    make,
    config_cmd,
)

__all__ = [
    "make",
    "config_cmd",
]
