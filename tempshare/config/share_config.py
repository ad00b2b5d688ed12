"""
Share Configuration

Retention, storage and token settings for the sharing subsystem.
"""

import logging
import os
import secrets
from datetime import timedelta
from typing import Optional

logger = logging.getLogger(__name__)


class ShareConfig:
    """Sharing settings read from the environment."""

    def __init__(self, is_production: Optional[bool] = None):
        if is_production is None:
            is_production = os.getenv("FLASK_ENV", "development") == "production"

        self.retention = timedelta(hours=float(os.getenv("RETENTION_HOURS", 24)))
        self.storage_dir = os.getenv("STORAGE_DIR", "/tmp/tempshare/objects")
        self.gcs_bucket_name = os.getenv("GCS_BUCKET_NAME") or None
        self.orphan_grace = timedelta(seconds=int(os.getenv("ORPHAN_GRACE_SECONDS", 3600)))
        self.max_upload_bytes = int(os.getenv("MAX_UPLOAD_BYTES", 100 * 1024 * 1024))
        self.share_base_url = os.getenv("SHARE_BASE_URL", "/api/v1/share")
        self.jwt_algorithm = os.getenv("JWT_ALGORITHM", "HS256")

        self.jwt_secret = os.getenv("JWT_SECRET")
        if not self.jwt_secret:
            if is_production:
                raise RuntimeError("JWT_SECRET must be set in production")
            # Tokens signed with an ephemeral secret stop working on restart
            self.jwt_secret = secrets.token_hex(32)
            logger.warning("JWT_SECRET not set, using an ephemeral development secret")
