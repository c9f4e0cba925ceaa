"""Endpoint registry — loads endpoints.yaml and resolves check targets.

Example:

    endpoints:
      - name: health/live
        mode: no_body
      - name: health/ready
        mode: detailed_report
        checks:
          - name: database
            target: myapp.checks:ping_database

Every ``target`` is a ``module:attribute`` import string pointing at a
zero-argument callable.
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

import yaml

from .endpoint import Endpoint
from .engine import Check
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

REGISTRY_PATH = Path("endpoints.yaml")


# ── Registry ─────────────────────────────────────────────────────────────────


class EndpointRegistry:
    """Loads and caches endpoints from an endpoints.yaml file."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or REGISTRY_PATH
        self._endpoints: list[Endpoint] = []
        self._loaded = False

    @property
    def path(self) -> Path:
        return self._path

    def load(self, force: bool = False) -> list[Endpoint]:
        """Parse the file and return its endpoints. Raises ConfigurationError on any problem."""
        if self._loaded and not force:
            return self._endpoints

        if not self._path.exists():
            raise ConfigurationError(f"Endpoints file not found: {self._path}")

        try:
            raw = yaml.safe_load(self._path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse {self._path}: {e}") from e

        if not isinstance(raw, dict):
            raise ConfigurationError(f"{self._path}: top level must be a mapping")

        endpoints = []
        for i, entry in enumerate(raw.get("endpoints") or []):
            if not isinstance(entry, dict):
                raise ConfigurationError(f"{self._path}: endpoint #{i} must be a mapping")
            endpoints.append(_parse_endpoint(entry))

        self._endpoints = endpoints
        self._loaded = True
        logger.info("Loaded %d endpoints from %s", len(endpoints), self._path)
        return self._endpoints

    @property
    def endpoints(self) -> list[Endpoint]:
        return self.load()

    def get(self, name: str) -> Endpoint | None:
        name = name.strip("/")
        return next((e for e in self.endpoints if e.name == name), None)

    def reload(self) -> list[Endpoint]:
        """Force reload from disk."""
        return self.load(force=True)


# ── Parsers ──────────────────────────────────────────────────────────────────


def resolve_target(target: str) -> Callable[[], object]:
    """Import ``module:attribute`` (attribute may be dotted) and return the callable."""
    module_name, sep, attr_path = target.partition(":")
    if not sep or not module_name or not attr_path:
        raise ConfigurationError(f"Check target must be 'module:attribute', got {target!r}")

    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import module for check target {target!r}: {e}") from e

    for attr in attr_path.split("."):
        try:
            obj = getattr(obj, attr)
        except AttributeError as e:
            raise ConfigurationError(f"Check target not found: {target!r}") from e

    if not callable(obj):
        raise ConfigurationError(f"Check target is not callable: {target!r}")
    return obj


def _parse_check(raw: dict[str, Any]) -> Check:
    target = raw.get("target")
    if not target:
        raise ConfigurationError(f"Check entry missing 'target': {raw!r}")
    name = raw.get("name") or target
    return Check(name=str(name), func=resolve_target(str(target)))


def _parse_endpoint(raw: dict[str, Any]) -> Endpoint:
    name = raw.get("name")
    if not name:
        raise ConfigurationError(f"Endpoint entry missing 'name': {raw!r}")

    checks = []
    for c in raw.get("checks") or []:
        if not isinstance(c, dict):
            raise ConfigurationError(f"Check entry for {name} must be a mapping: {c!r}")
        checks.append(_parse_check(c))

    return Endpoint(name=str(name), checks=checks, mode=raw.get("mode", "no_body"))
