"""
main.py

Development server for the DropVault file-sharing backend.

Dependencies:
  - Python packages: Flask, flask-restx, flask-cors, redis, celery
  - Infrastructure: Redis server

Notes:
  - Uses Redis for file metadata and the local filesystem for file content
  - API v1 endpoints available at /api/v1/ with Swagger docs at /api/v1/docs
  - Expired files are purged by the Celery beat task in dropvault.tasks
"""

import os

from dropvault.app_factory import create_app

app = create_app()

if __name__ == "__main__":
    host = os.getenv("FLASK_HOST", "0.0.0.0")
    port = int(os.getenv("FLASK_PORT", 8000))
    debug = os.getenv("FLASK_DEBUG", "true").lower() == "true"

    app.run(host=host, port=port, debug=debug)
