"""CLI module for mkv-slimmer."""

from .main import SlimmerCLI, main

__all__ = [
    "SlimmerCLI",
    "main",
]
