"""
main.py

Development server for the TempShare backend.

Notes:
  - Requires a Redis server for metadata and the Celery broker
  - API v1 endpoints at /api/v1/ with Swagger docs at /api/v1/docs
  - Run the sweeper with `celery -A tempshare.celery_app worker -B -Q default,sweep_queue`
"""

import os

from tempshare.app_factory import create_app

app = create_app()

if __name__ == "__main__":
    host = os.getenv("FLASK_HOST", "0.0.0.0")
    port = int(os.getenv("FLASK_PORT", 8000))
    debug = os.getenv("FLASK_DEBUG", "true").lower() == "true"

    app.run(host=host, port=port, debug=debug)
