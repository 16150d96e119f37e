"""Reporter configuration loaded from YAML.

Usage
-----
A minimal ``config.yaml``::

    timezone: 9
    destination: /var/lib/stackreport
    mail_receiver: "ops@example.com, sre@example.com"

Load it directly or through ``STACKREPORT_CONFIG_PATH``:

>>> config = load_config("config.yaml")
>>> config.recipients
('ops@example.com', 'sre@example.com')

"""

from __future__ import annotations

import datetime as dt
import os
from pathlib import Path

import msgspec
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from stackreport.common.time import (
    MAX_UTC_OFFSET_HOURS,
    MIN_UTC_OFFSET_HOURS,
    fixed_offset,
)
from stackreport.monitoring.catalogue import MetricCatalogue

YAML_VERSION = (1, 2)
DEFAULT_CONFIG_PATH = "config.yaml"


class ConfigError(ValueError):
    """Raised when the configuration file cannot be loaded or is invalid."""

    def __init__(self, issues: list[str]) -> None:
        """Capture validation issues whilst preserving the aggregated message."""
        super().__init__("\n".join(issues))
        self.issues = issues


class ReporterConfig(msgspec.Struct, kw_only=True, frozen=True):
    """Settings shared by the trigger, export and report phases.

    Attributes
    ----------
    destination
        Root directory of the artifact store.
    timezone
        Fixed UTC offset in hours used for periods and emitted timestamps.
    mail_receiver
        Comma-separated recipient list for report emails.
    mail_sender
        ``From`` header of report emails.
    smtp_host, smtp_port
        SMTP relay used to deliver reports.
    projects
        Explicit project IDs. When empty, projects are discovered through the
        Resource Manager API.
    font_path
        Optional TrueType font for chart text.
    metrics
        Metric catalogue exported for every instance.

    """

    destination: str
    timezone: int = 0
    mail_receiver: str = ""
    mail_sender: str = "stackreport <noreply@localhost>"
    smtp_host: str = "localhost"
    smtp_port: int = 25
    projects: tuple[str, ...] = ()
    font_path: str | None = None
    metrics: MetricCatalogue = msgspec.field(default_factory=MetricCatalogue)

    @property
    def offset(self) -> dt.timezone:
        """Return the configured fixed-offset zone."""
        return fixed_offset(self.timezone)

    @property
    def destination_path(self) -> Path:
        """Return the artifact root as a path."""
        return Path(self.destination)

    @property
    def font(self) -> Path | None:
        """Return the chart font path, if configured."""
        return Path(self.font_path) if self.font_path else None

    @property
    def recipients(self) -> tuple[str, ...]:
        """Return the whitespace-stripped, non-empty recipient addresses."""
        return parse_recipients(self.mail_receiver)

    @classmethod
    def from_env(cls) -> ReporterConfig:
        """Load the file named by ``STACKREPORT_CONFIG_PATH`` (or ``config.yaml``)."""
        raw_path = os.environ.get("STACKREPORT_CONFIG_PATH", "").strip()
        return load_config(raw_path or DEFAULT_CONFIG_PATH)


def parse_recipients(raw: str) -> tuple[str, ...]:
    """Split a comma-separated address list.

    Examples
    --------
    >>> parse_recipients(" a@example.com,, b@example.com ")
    ('a@example.com', 'b@example.com')

    """
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def validate_config(config: ReporterConfig) -> ReporterConfig:
    """Return ``config`` when it passes semantic checks."""
    issues: list[str] = []
    if not MIN_UTC_OFFSET_HOURS <= config.timezone <= MAX_UTC_OFFSET_HOURS:
        issues.append(
            f"timezone must be within {MIN_UTC_OFFSET_HOURS}..{MAX_UTC_OFFSET_HOURS}"
            f" hours, got {config.timezone}"
        )
    if not config.destination.strip():
        issues.append("destination must not be empty")
    if not config.metrics.primary:
        issues.append("metrics.primary must list at least one metric")
    short_names = [spec.short_name for spec in config.metrics.all_metrics]
    if len(set(short_names)) != len(short_names):
        issues.append("metric short names must be unique")
    if issues:
        raise ConfigError(issues)
    return config


def load_config(path: Path | str) -> ReporterConfig:
    """Parse and validate a YAML configuration file."""
    yaml = _yaml()
    try:
        loaded = yaml.load(Path(path).read_text(encoding="utf-8"))
    except (OSError, YAMLError) as exc:
        raise ConfigError([f"failed to read {path}: {exc}"]) from exc

    if loaded is None:
        raise ConfigError([f"configuration file {path} is empty"])

    try:
        config = msgspec.convert(loaded, type=ReporterConfig)
    except msgspec.ValidationError as exc:
        raise ConfigError([f"schema validation failed: {exc}"]) from exc

    return validate_config(config)


def _yaml() -> YAML:
    yaml = YAML(typ="safe")
    yaml.version = YAML_VERSION
    yaml.allow_duplicate_keys = False
    return yaml
