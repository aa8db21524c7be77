"""Journal insight gateway: routes journal text to an AI provider for analysis."""

__version__ = "0.1.0"
