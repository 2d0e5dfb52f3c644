from __future__ import annotations


class DispatchError(Exception):
    """Base class for errors raised by phase_dispatch."""


class ConfigurationError(DispatchError, ValueError):
    """Raised when a dispatcher or its settings are configured with invalid values."""
