"""Immich API access."""

from .client import ImmichClient

__all__ = ["ImmichClient"]
