"""Unit tests for the stackreport.runtime module."""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

import falcon.asgi
import falcon.testing
import pytest

from stackreport import runtime

if typ.TYPE_CHECKING:
    from pathlib import Path


class TestHealthOnlyRuntime:
    """Tests for the runtime without a configuration file."""

    @pytest.fixture
    def client(self) -> falcon.testing.TestClient:
        """Create a test client for the health-only runtime app."""
        return falcon.testing.TestClient(runtime.create_app())

    def test_returns_falcon_app(self) -> None:
        """create_app returns a Falcon ASGI App instance."""
        assert isinstance(runtime.create_app(), falcon.asgi.App)

    def test_health(self, client: falcon.testing.TestClient) -> None:
        """GET /health returns JSON status ok."""
        result = client.simulate_get("/health")

        assert result.status_code == HTTPStatus.OK
        assert result.json == {"status": "ok"}
        assert result.headers.get("content-type", "").startswith("application/json")

    def test_ready_without_domain(self, client: falcon.testing.TestClient) -> None:
        """GET /ready reports that the domain endpoints are disabled."""
        result = client.simulate_get("/ready")

        assert result.json == {"status": "ready", "domain": False}

    def test_trigger_routes_absent(self, client: falcon.testing.TestClient) -> None:
        """Trigger endpoints need a configuration file."""
        result = client.simulate_post("/cron/weekly-report")

        assert result.status_code == HTTPStatus.NOT_FOUND


class TestConfiguredRuntime:
    """Tests for the runtime with ``STACKREPORT_CONFIG_PATH`` set."""

    def test_registers_domain_routes(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A configuration file and token enable the trigger endpoints."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text(
            f"destination: {tmp_path}\ntimezone: 9\n", encoding="utf-8"
        )
        monkeypatch.setenv("STACKREPORT_CONFIG_PATH", str(config_path))
        monkeypatch.setenv("STACKREPORT_GCP_ACCESS_TOKEN", "token")

        client = falcon.testing.TestClient(runtime.create_app())

        assert client.simulate_get("/ready").json == {
            "status": "ready",
            "domain": True,
        }
        result = client.simulate_post("/cron/yearly-report")
        assert result.status_code == HTTPStatus.BAD_REQUEST


class TestParsePort:
    """Tests for ``_parse_port``."""

    @pytest.mark.parametrize(("raw", "expected"), [("1", 1), ("8080", 8080)])
    def test_valid(self, raw: str, expected: int) -> None:
        """Ports within range are returned as integers."""
        assert runtime._parse_port(raw) == expected

    @pytest.mark.parametrize("raw", ["0", "65536", "http", ""])
    def test_invalid_exits(self, raw: str) -> None:
        """Invalid ports terminate with exit status 1."""
        with pytest.raises(SystemExit) as excinfo:
            runtime._parse_port(raw)

        assert excinfo.value.code == 1


class TestMain:
    """Tests for ``main``."""

    def test_starts_granian_with_environment(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Host, port and the app factory are handed to Granian."""
        started: dict[str, object] = {}

        class _FakeGranian:
            def __init__(self, target: str, **kwargs: object) -> None:
                started["target"] = target
                started.update(kwargs)

            def serve(self) -> None:
                started["served"] = True

        monkeypatch.setattr("granian.Granian", _FakeGranian)
        monkeypatch.setattr(
            runtime, "configure_logging", lambda level: (level.upper(), False)
        )
        monkeypatch.setenv("STACKREPORT_HOST", "127.0.0.1")
        monkeypatch.setenv("STACKREPORT_PORT", "9000")

        runtime.main()

        assert started["target"] == "stackreport.runtime:create_app"
        assert started["address"] == "127.0.0.1"
        assert started["port"] == 9000
        assert started["factory"] is True
        assert started["served"] is True
