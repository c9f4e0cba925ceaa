"""Endpoint — a named group of checks answered with one response mode."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from .engine import Check, collect
from .errors import ConfigurationError
from .report import Response, ResponseMode, render

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Endpoint:
    """A route (``"/" + name``) that evaluates ``checks`` on every request."""

    name: str
    checks: Sequence[Check] = field(default_factory=tuple)
    mode: ResponseMode = ResponseMode.NO_BODY

    def __post_init__(self) -> None:
        name = self.name.strip("/")
        if not name:
            raise ConfigurationError(f"Endpoint name must not be empty: {self.name!r}")
        if any(c in name for c in "{}") or any(c.isspace() for c in name):
            raise ConfigurationError(f"Invalid endpoint name: {self.name!r}")
        try:
            mode = ResponseMode(self.mode)
        except ValueError as e:
            raise ConfigurationError(f"Unknown response mode for {name}: {self.mode!r}") from e

        object.__setattr__(self, "name", name)
        object.__setattr__(self, "checks", tuple(self.checks))
        object.__setattr__(self, "mode", mode)

    @property
    def path(self) -> str:
        return "/" + self.name

    def evaluate(self) -> Response:
        """Run all checks and render the response."""
        result = collect(self.checks)
        if not result.healthy:
            logger.warning(
                "Endpoint %s unhealthy: failing checks %s", self.path, ", ".join(result.failing),
            )
        return render(self.mode, result)
