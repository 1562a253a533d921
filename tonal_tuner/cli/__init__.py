"""Command-line interface for Tonal Tuner."""

from .main import cli, main

__all__ = ["cli", "main"]
