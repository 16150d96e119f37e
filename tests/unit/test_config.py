"""Unit tests for reporter configuration loading."""

from __future__ import annotations

import datetime as dt
import textwrap
import typing as typ

import pytest

from stackreport.config import ConfigError, ReporterConfig, load_config
from stackreport.monitoring import (
    AGENT_MEMORY_BYTES_USED,
    CPU_USAGE_TIME,
    MetricFamily,
)

if typ.TYPE_CHECKING:
    from pathlib import Path


def _write(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(textwrap.dedent(body), encoding="utf-8")
    return path


class TestLoadConfig:
    """Tests for ``load_config``."""

    def test_minimal_file_uses_defaults(self, tmp_path: Path) -> None:
        """Only the destination is required."""
        config = load_config(_write(tmp_path, "destination: /srv/reports\n"))

        assert config.destination_path.as_posix() == "/srv/reports"
        assert config.offset.utcoffset(None) == dt.timedelta(0)
        assert config.recipients == ()
        assert config.projects == ()
        assert [spec.metric_type for spec in config.metrics.all_metrics] == [
            CPU_USAGE_TIME,
            AGENT_MEMORY_BYTES_USED,
        ]

    def test_full_file(self, tmp_path: Path) -> None:
        """Every documented key is read."""
        path = _write(
            tmp_path,
            """\
            timezone: 9
            destination: /srv/reports
            mail_receiver: "ops@example.com, , sre@example.com"
            mail_sender: "Reports <noreply@example.com>"
            smtp_host: relay.internal
            smtp_port: 2525
            projects: [alpha, beta]
            font_path: /usr/share/fonts/ipag.ttf
            metrics:
              primary:
                - metric_type: compute.googleapis.com/instance/cpu/usage_time
                  aligner: ALIGN_RATE
                  family: cpu
              agent: []
            """,
        )

        config = load_config(path)

        assert config.offset.utcoffset(None) == dt.timedelta(hours=9)
        assert config.recipients == ("ops@example.com", "sre@example.com")
        assert (config.smtp_host, config.smtp_port) == ("relay.internal", 2525)
        assert config.projects == ("alpha", "beta")
        assert config.font is not None
        assert config.font.name == "ipag.ttf"
        assert config.metrics.agent == ()
        assert config.metrics.primary[0].family is MetricFamily.CPU

    @pytest.mark.parametrize(
        ("body", "message"),
        [
            ("timezone: 9\n", "schema validation failed"),
            ("destination: /srv\ntimezone: 20\n", "timezone must be within"),
            ("destination: '  '\n", "destination must not be empty"),
            ("destination: /srv\ntimezone: nine\n", "schema validation failed"),
            (
                "destination: /srv\nmetrics:\n  primary: []\n",
                "metrics.primary must list at least one metric",
            ),
            ("", "is empty"),
        ],
    )
    def test_invalid_files(self, tmp_path: Path, body: str, message: str) -> None:
        """Schema and semantic problems raise ``ConfigError``."""
        with pytest.raises(ConfigError, match=message):
            load_config(_write(tmp_path, body))

    def test_duplicate_keys_rejected(self, tmp_path: Path) -> None:
        """Duplicate keys are a parse error, not a silent override."""
        with pytest.raises(ConfigError, match="failed to read"):
            load_config(_write(tmp_path, "destination: /a\ndestination: /b\n"))

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file is reported with its path."""
        with pytest.raises(ConfigError, match="failed to read"):
            load_config(tmp_path / "absent.yaml")


class TestFromEnv:
    """Tests for ``ReporterConfig.from_env``."""

    def test_reads_path_from_environment(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """``STACKREPORT_CONFIG_PATH`` selects the file."""
        path = _write(tmp_path, "destination: /srv/env\n")
        monkeypatch.setenv("STACKREPORT_CONFIG_PATH", str(path))

        assert ReporterConfig.from_env().destination == "/srv/env"
