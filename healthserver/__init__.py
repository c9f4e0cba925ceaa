"""Health server — concurrent liveness/readiness checks behind HTTP endpoints."""

__version__ = "0.1.0"

from .endpoint import Endpoint
from .engine import AggregateResult, Check, CheckOutcome, collect
from .errors import (
    CheckError,
    CheckFault,
    ConfigurationError,
    HealthServerError,
    TransportError,
)
from .report import Response, ResponseMode, render
from .server import HealthServer, create_app

__all__ = [
    "AggregateResult",
    "Check",
    "CheckError",
    "CheckFault",
    "CheckOutcome",
    "ConfigurationError",
    "Endpoint",
    "HealthServer",
    "HealthServerError",
    "Response",
    "ResponseMode",
    "TransportError",
    "collect",
    "create_app",
    "render",
]
