# vine_ui/errors.py
from __future__ import annotations


class VineUIError(Exception):
    """Base class for errors raised by vine_ui services."""


class ConfigError(VineUIError):
    """Raised when the config cannot be written."""


class GeoCheckError(VineUIError):
    """Raised when the geo-blocking check cannot produce an answer."""
