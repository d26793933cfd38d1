"""HTTP handlers for the feedback collector API."""

from .api_handler import api_handler

__all__ = ["api_handler"]
