"""Timeline exporters."""

from .google_timeline import export_google_timeline

__all__ = ["export_google_timeline"]
