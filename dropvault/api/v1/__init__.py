"""
API v1 - DropVault REST API

This module contains the versioned API endpoints with OpenAPI/Swagger documentation.
"""

import os

from flask import Blueprint
from flask_restx import Api

# Get API version from environment
API_VERSION = os.getenv("API_VERSION", "v1")

# Create blueprint for API v1
api_v1_bp = Blueprint("api_v1", __name__, url_prefix=f"/api/{API_VERSION}")

# Initialize Flask-RESTX API with Swagger documentation
api = Api(
    api_v1_bp,
    version="1.0",
    title="DropVault API",
    description="File sharing with anonymous and per-user uploads, expiry and download limits",
    doc="/docs",  # Swagger UI will be available at /api/v1/docs
    contact="DropVault Team",
    license="MIT",
)

# Import namespaces after api is created to avoid circular imports
from .namespaces import config_ns, files_ns, user_files_ns  # noqa: E402

# Register namespaces
api.add_namespace(files_ns, path="/files")
api.add_namespace(user_files_ns, path="/user/files")
api.add_namespace(config_ns, path="/config")
