"""
Emissions core REST API

The ``api`` object wraps the lazily created default application,
so the server can be started via ``uvicorn emissions_core.api:api.app``.
"""

from .api import api, create_app
