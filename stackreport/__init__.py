"""Scheduled Cloud Monitoring utilization reports.

stackreport pulls per-instance CPU and memory metrics from the Cloud
Monitoring API, normalizes them onto a fixed-cadence grid, writes CSV and
chart artifacts per instance, and assembles a paginated PDF report that is
emailed to operators.

Subpackages
-----------
series
    Dense-grid normalization of sparse monitoring samples.
monitoring
    Monitoring API client and query filter builders.
export
    Export jobs, fan-out dispatch, and the per-job export service.
artifacts
    Artifact paths, CSV and chart rendering, and storage adapters.
report
    PDF report assembly and mail delivery.
api
    Falcon ASGI trigger surface.
"""
