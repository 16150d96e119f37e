"""stackreport HTTP API layer.

This package provides the Falcon ASGI application serving the health
probes, the cron trigger endpoints and the single-job export endpoint.

Public API
----------
create_app
    Application factory; registers domain endpoints when trigger
    dependencies are provided.
"""

from stackreport.api.app import create_app

__all__ = ["create_app"]
