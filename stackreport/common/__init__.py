"""Shared helpers used across stackreport subpackages."""
