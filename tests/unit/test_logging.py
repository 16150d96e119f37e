"""Unit tests for the femtologging helpers."""

from __future__ import annotations

import pytest

from stackreport.logging import (
    configure_logging,
    format_log_message,
    log_debug,
    log_error,
    log_info,
    log_warning,
    normalize_log_level,
)


class _RecordingLogger:
    """Collects ``log`` calls for assertions."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, object | None, bool]] = []

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> str:
        self.calls.append((level, message, exc_info, stack_info))
        return message


class TestNormalizeLogLevel:
    """Tests for ``normalize_log_level``."""

    @pytest.mark.parametrize(
        ("raw", "expected", "invalid"),
        [
            ("debug", "DEBUG", False),
            ("  warn ", "WARN", False),
            ("Critical", "CRITICAL", False),
            (None, "INFO", True),
            ("", "INFO", True),
            ("verbose", "INFO", True),
        ],
    )
    def test_levels(self, raw: str | None, expected: str, *, invalid: bool) -> None:
        """Known levels are upper-cased; anything else falls back to INFO."""
        assert normalize_log_level(raw) == (expected, invalid), (
            f"Unexpected normalization for {raw!r}"
        )


class TestLogHelpers:
    """Tests for the percent-formatting log helpers."""

    def test_format_log_message(self) -> None:
        """Templates are interpolated with percent formatting."""
        assert format_log_message("%d job(s) for %s", 3, "proj") == "3 job(s) for proj"

    @pytest.mark.parametrize(
        ("helper", "level"),
        [
            (log_debug, "DEBUG"),
            (log_info, "INFO"),
            (log_warning, "WARNING"),
            (log_error, "ERROR"),
        ],
    )
    def test_helpers_emit_their_level(self, helper: object, level: str) -> None:
        """Each helper emits its own level without stack info."""
        logger = _RecordingLogger()

        helper(logger, "exported %s", "web-1")  # type: ignore[operator]

        assert logger.calls == [(level, "exported web-1", None, False)]

    def test_exc_info_is_forwarded(self) -> None:
        """Exception payloads reach the logger unchanged."""
        logger = _RecordingLogger()
        exc = ConnectionError("queue down")

        log_warning(logger, "dispatch failed: %s", "proj", exc_info=exc)
        log_error(logger, "run failed", exc_info=exc)

        assert logger.calls == [
            ("WARNING", "dispatch failed: proj", exc, False),
            ("ERROR", "run failed", exc, False),
        ]


class TestConfigureLogging:
    """Tests for ``configure_logging``."""

    @pytest.mark.parametrize(
        ("raw", "expected", "invalid"),
        [("DEBUG", "DEBUG", False), ("nope", "INFO", True)],
    )
    def test_configures_normalized_level(
        self,
        monkeypatch: pytest.MonkeyPatch,
        raw: str,
        expected: str,
        *,
        invalid: bool,
    ) -> None:
        """The normalized level is handed to ``basicConfig``."""
        captured: dict[str, object] = {}

        def fake_basic_config(**kwargs: object) -> None:
            captured.update(kwargs)

        monkeypatch.setattr("stackreport.logging.basicConfig", fake_basic_config)

        assert configure_logging(raw) == (expected, invalid)
        assert captured == {"level": expected, "force": False}
