"""Utility functions for Immich Timeline Generator."""

from .auth import build_session, normalize_base_url
from .time_utils import format_timestamp, parse_timestamp

__all__ = ["build_session", "normalize_base_url", "format_timestamp", "parse_timestamp"]
