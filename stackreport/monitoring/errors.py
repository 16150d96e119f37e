"""Errors raised while talking to the monitoring and resource manager APIs."""

from __future__ import annotations


class MonitoringError(Exception):
    """Base class for monitoring API errors."""


class MonitoringAPIError(MonitoringError):
    """Raised when a Google API call fails.

    Attributes
    ----------
    status_code
        HTTP status code from the API response, if one was received.

    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise with a message and optional HTTP status code."""
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def http_error(cls, url: str, status_code: int) -> MonitoringAPIError:
        """Return an error for non-2xx HTTP responses."""
        return cls(f"HTTP {status_code} from {url}", status_code=status_code)

    @classmethod
    def timeout(cls, url: str) -> MonitoringAPIError:
        """Return an error for a request that timed out."""
        return cls(f"request to {url} timed out")

    @classmethod
    def network_error(cls, url: str, detail: str) -> MonitoringAPIError:
        """Return an error for transport-level failures."""
        return cls(f"network error calling {url}: {detail}")


class MonitoringResponseShapeError(MonitoringError):
    """Raised when an API response is missing expected fields."""

    @classmethod
    def missing(cls, field: str) -> MonitoringResponseShapeError:
        """Return an error for a missing response field."""
        return cls(f"monitoring response missing expected field: {field}")

    @classmethod
    def invalid_json(cls, url: str) -> MonitoringResponseShapeError:
        """Return an error for a body that is not a JSON object."""
        return cls(f"response from {url} is not a JSON object")


class MonitoringConfigError(MonitoringError):
    """Raised when monitoring client configuration is invalid."""

    @classmethod
    def missing_token(cls) -> MonitoringConfigError:
        """Return an error when no access token is configured."""
        return cls(
            "STACKREPORT_GCP_ACCESS_TOKEN or STACKREPORT_GCP_ACCESS_TOKEN_FILE is"
            " required for the monitoring API"
        )

    @classmethod
    def unreadable_token_file(cls, path: str, detail: str) -> MonitoringConfigError:
        """Return an error when the access token file yields no token."""
        return cls(f"cannot read access token from {path}: {detail}")
