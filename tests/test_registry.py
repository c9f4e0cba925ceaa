"""Tests for the endpoint registry (endpoints.yaml)."""

from __future__ import annotations

import sys
import textwrap
import types
from pathlib import Path

import pytest
import yaml

from healthserver.errors import CheckError, ConfigurationError
from healthserver.registry import EndpointRegistry, resolve_target
from healthserver.report import ResponseMode


def _db_down() -> None:
    raise CheckError("database unreachable")


@pytest.fixture(autouse=True)
def fake_checks(monkeypatch: pytest.MonkeyPatch) -> types.ModuleType:
    """Importable module ``fake_checks`` holding a few check callables."""
    module = types.ModuleType("fake_checks")
    module.cache_ok = lambda: None
    module.db_down = _db_down
    module.not_callable = 42
    module.group = types.SimpleNamespace(nested=lambda: None)
    monkeypatch.setitem(sys.modules, "fake_checks", module)
    return module


@pytest.fixture
def sample_yaml(tmp_path: Path) -> Path:
    data = {
        "endpoints": [
            {"name": "health/live", "mode": "no_body"},
            {
                "name": "health/ready",
                "mode": "detailed_report",
                "checks": [
                    {"name": "cache", "target": "fake_checks:cache_ok"},
                    {"name": "database", "target": "fake_checks:db_down"},
                ],
            },
        ],
    }
    path = tmp_path / "endpoints.yaml"
    path.write_text(yaml.dump(data), encoding="utf-8")
    return path


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "endpoints.yaml"
    path.write_text(textwrap.dedent(text), encoding="utf-8")
    return path


# ── Loading ──────────────────────────────────────────────────────────────────


class TestEndpointRegistry:
    def test_load(self, sample_yaml: Path) -> None:
        endpoints = EndpointRegistry(path=sample_yaml).load()
        assert [e.name for e in endpoints] == ["health/live", "health/ready"]
        assert endpoints[0].mode is ResponseMode.NO_BODY
        assert endpoints[0].checks == ()
        assert endpoints[1].mode is ResponseMode.DETAILED_REPORT
        assert [c.name for c in endpoints[1].checks] == ["cache", "database"]

    def test_loaded_checks_evaluate(self, sample_yaml: Path) -> None:
        registry = EndpointRegistry(path=sample_yaml)
        assert registry.get("health/live").evaluate().status_code == 200
        response = registry.get("/health/ready").evaluate()
        assert response.status_code == 503
        assert "database unreachable" in response.body

    def test_cached_until_reload(self, sample_yaml: Path) -> None:
        registry = EndpointRegistry(path=sample_yaml)
        first = registry.load()
        sample_yaml.write_text(yaml.dump({"endpoints": [{"name": "other"}]}), encoding="utf-8")
        assert registry.load() is first
        assert [e.name for e in registry.reload()] == ["other"]

    def test_get_unknown(self, sample_yaml: Path) -> None:
        assert EndpointRegistry(path=sample_yaml).get("nope") is None

    def test_check_name_defaults_to_target(self, tmp_path: Path) -> None:
        path = _write(tmp_path, """
            endpoints:
              - name: health
                checks:
                  - target: fake_checks:cache_ok
        """)
        endpoint = EndpointRegistry(path=path).load()[0]
        assert endpoint.checks[0].name == "fake_checks:cache_ok"

    def test_empty_file(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "")
        assert EndpointRegistry(path=path).load() == []

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="not found"):
            EndpointRegistry(path=tmp_path / "missing.yaml").load()

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "endpoints: [unclosed\n")
        with pytest.raises(ConfigurationError):
            EndpointRegistry(path=path).load()

    def test_unknown_mode(self, tmp_path: Path) -> None:
        path = _write(tmp_path, """
            endpoints:
              - name: health
                mode: verbose
        """)
        with pytest.raises(ConfigurationError):
            EndpointRegistry(path=path).load()

    def test_missing_name(self, tmp_path: Path) -> None:
        path = _write(tmp_path, """
            endpoints:
              - mode: no_body
        """)
        with pytest.raises(ConfigurationError):
            EndpointRegistry(path=path).load()

    def test_missing_target(self, tmp_path: Path) -> None:
        path = _write(tmp_path, """
            endpoints:
              - name: health
                checks:
                  - name: db
        """)
        with pytest.raises(ConfigurationError):
            EndpointRegistry(path=path).load()


# ── Target resolution ────────────────────────────────────────────────────────


class TestResolveTarget:
    def test_resolves(self, fake_checks: types.ModuleType) -> None:
        assert resolve_target("fake_checks:db_down") is fake_checks.db_down

    def test_dotted_attribute(self) -> None:
        assert callable(resolve_target("fake_checks:group.nested"))

    @pytest.mark.parametrize(
        "target",
        [
            "fake_checks",
            ":cache_ok",
            "fake_checks:",
            "no_such_module_xyz:check",
            "fake_checks:missing",
            "fake_checks:not_callable",
        ],
    )
    def test_invalid(self, target: str) -> None:
        with pytest.raises(ConfigurationError):
            resolve_target(target)
