"""
API v1 - TempShare REST API

Versioned endpoints with OpenAPI/Swagger documentation.
"""

import os

from flask import Blueprint
from flask_restx import Api

API_VERSION = os.getenv("API_VERSION", "v1")

api_v1_bp = Blueprint("api_v1", __name__, url_prefix=f"/api/{API_VERSION}")

api = Api(
    api_v1_bp,
    version="1.0",
    title="TempShare API",
    description="Expiring, optionally password-protected file sharing",
    doc="/docs",
    authorizations={
        "bearer": {"type": "apiKey", "in": "header", "name": "Authorization"},
    },
)

# Import namespaces after api is created to avoid circular imports
from .namespaces import admin_ns, files_ns, share_ns  # noqa: E402

api.add_namespace(files_ns, path="/files")
api.add_namespace(share_ns, path="/share")
api.add_namespace(admin_ns, path="/admin")
