"""Exceptions raised by checks, configuration and the HTTP listener."""

from __future__ import annotations


class HealthServerError(Exception):
    """Base class for all health server errors."""


class CheckError(HealthServerError):
    """Raised by a check to report that the thing it watches is unhealthy."""


class CheckFault(CheckError):
    """A check crashed with an unexpected exception.

    The collector wraps the original exception (available as ``__cause__``)
    so the outcome looks like an ordinary failure.
    """


class ConfigurationError(HealthServerError):
    """Invalid endpoints, addresses or templates. Prevents the server from starting."""


class TransportError(HealthServerError):
    """The listening socket could not be bound or the server failed to start."""
