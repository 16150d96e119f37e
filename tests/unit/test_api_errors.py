"""Unit tests for the API error handlers.

Usage
-----
Run with pytest::

    pytest tests/unit/test_api_errors.py

"""

from __future__ import annotations

import falcon
import falcon.asgi
import falcon.testing
import pytest

from stackreport.api.errors import (
    InvalidInputError,
    handle_invalid_input,
    handle_invalid_job,
    handle_monitoring_error,
)
from stackreport.export import InvalidJobError
from stackreport.monitoring import MonitoringError, MonitoringResponseShapeError


class _RaisingResource:
    """Raises the exception registered for the requested name."""

    def __init__(self, errors: dict[str, Exception]) -> None:
        self._errors = errors

    async def on_get(
        self, _req: falcon.asgi.Request, _resp: falcon.asgi.Response, *, name: str
    ) -> None:
        raise self._errors[name]


@pytest.fixture
def client() -> falcon.testing.TestClient:
    """Build a test client with the error handlers registered."""
    app = falcon.asgi.App()
    app.add_route(
        "/raise/{name}",
        _RaisingResource(
            {
                "input": InvalidInputError("must not be empty"),
                "input-field": InvalidInputError("unknown", field="data_range"),
                "job": InvalidJobError.empty_interval(),
                "upstream": MonitoringResponseShapeError.missing("timeSeries"),
            }
        ),
    )
    app.add_error_handler(InvalidInputError, handle_invalid_input)
    app.add_error_handler(InvalidJobError, handle_invalid_job)
    app.add_error_handler(MonitoringError, handle_monitoring_error)
    return falcon.testing.TestClient(app)


class TestErrorHandlers:
    """Tests for the HTTP mapping of domain errors."""

    def test_invalid_input(self, client: falcon.testing.TestClient) -> None:
        """Validation errors are 400 without a field by default."""
        result = client.simulate_get("/raise/input")

        assert result.status == falcon.HTTP_400
        assert result.json == {
            "title": "Invalid input",
            "description": "must not be empty",
        }

    def test_invalid_input_with_field(self, client: falcon.testing.TestClient) -> None:
        """The offending field is echoed when known."""
        result = client.simulate_get("/raise/input-field")

        assert result.json["field"] == "data_range"

    def test_invalid_job(self, client: falcon.testing.TestClient) -> None:
        """Undecodable jobs are 400 with the decoding detail."""
        result = client.simulate_get("/raise/job")

        assert result.status == falcon.HTTP_400
        assert "intervalEndTime must be after" in result.json["description"]

    def test_monitoring_error(self, client: falcon.testing.TestClient) -> None:
        """Any monitoring failure is a 502."""
        result = client.simulate_get("/raise/upstream")

        assert result.status == falcon.HTTP_502
        assert result.json["title"] == "Monitoring API error"

    def test_error_message_includes_field(self) -> None:
        """The exception message is prefixed by the field."""
        assert str(InvalidInputError("bad", field="x")) == "x: bad"
