"""Command line interface for fixtureforge."""

from .app import app

__all__ = ["app"]
