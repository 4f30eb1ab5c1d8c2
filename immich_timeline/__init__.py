"""Immich Timeline Generator."""

__version__ = "0.1.0"
