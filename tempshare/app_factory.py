"""
Application Factory

Creates and configures the Flask application with all dependencies.
The factory accepts a prebuilt DependencyContainer so tests can run the
full HTTP stack over in-memory adapters.
"""

import logging
import os
from datetime import datetime
from typing import Callable, Optional

from flask import Flask, jsonify
from flask_cors import CORS

from tempshare.application.admin_service import AdminReportService
from tempshare.application.dependency_container import DependencyContainer
from tempshare.application.share_service import ShareService
from tempshare.config.celery_config import make_celery
from tempshare.config.logging_config import configure_logging
from tempshare.config.redis_config import get_redis_repository, init_redis, redis_health_check
from tempshare.config.share_config import ShareConfig
from tempshare.domain.sharing import (
    AccessGate,
    IObjectStore,
    ObjectRegistry,
    OwnershipGuard,
    PasswordHasher,
    ReclamationSweeper,
    utcnow,
)

logger = logging.getLogger(__name__)


class AppConfig:
    """Application configuration."""

    def __init__(self):
        self.api_version = os.getenv("API_VERSION", "v1")
        self.flask_env = os.getenv("FLASK_ENV", "development")
        self.is_production = self.flask_env == "production"
        self.log_level = os.getenv("LOG_LEVEL", "INFO")
        self.share = ShareConfig(is_production=self.is_production)


def build_container(registry: ObjectRegistry, store: IObjectStore,
                    share_config: ShareConfig,
                    password_hasher: Optional[PasswordHasher] = None,
                    clock: Callable[[], datetime] = utcnow) -> DependencyContainer:
    """
    Wire the domain and application services over a registry and a store.

    Args:
        registry: Metadata registry implementation
        store: Object store implementation
        share_config: Retention and sweep settings
        password_hasher: Verifier implementation (default werkzeug scrypt)
        clock: Source of the current time for every service

    Returns:
        DependencyContainer with every service registered as a singleton
    """
    container = DependencyContainer()
    password_hasher = password_hasher or PasswordHasher()

    access_gate = AccessGate(registry, store, password_hasher, clock=clock)
    ownership_guard = OwnershipGuard()
    sweeper = ReclamationSweeper(
        registry, store, clock=clock, orphan_grace=share_config.orphan_grace
    )
    share_service = ShareService(
        registry,
        store,
        password_hasher,
        access_gate,
        ownership_guard,
        retention=share_config.retention,
        share_base_url=share_config.share_base_url,
        clock=clock,
    )
    admin_service = AdminReportService(registry, clock=clock)

    container.register_singleton(ObjectRegistry, registry)
    container.register_singleton(IObjectStore, store)
    container.register_singleton(PasswordHasher, password_hasher)
    container.register_singleton(AccessGate, access_gate)
    container.register_singleton(OwnershipGuard, ownership_guard)
    container.register_singleton(ReclamationSweeper, sweeper)
    container.register_singleton(ShareService, share_service)
    container.register_singleton(AdminReportService, admin_service)

    return container


def create_app(config: Optional[AppConfig] = None,
               container: Optional[DependencyContainer] = None) -> Flask:
    """
    Create and configure Flask application.

    Args:
        config: Application configuration, uses default if None
        container: Prebuilt services; when None, Redis-backed services are wired

    Returns:
        Configured Flask application
    """
    if config is None:
        config = AppConfig()

    configure_logging(config.log_level)

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = config.share.max_upload_bytes
    app.config["JWT_SECRET"] = config.share.jwt_secret
    app.config["JWT_ALGORITHM"] = config.share.jwt_algorithm

    CORS(
        app,
        resources={
            r"/*": {
                "origins": "*",
                "methods": ["GET", "POST", "DELETE", "OPTIONS"],
                "allow_headers": ["Content-Type", "Authorization", "X-Share-Password"],
                "expose_headers": ["Content-Type", "Content-Disposition", "Content-Length"],
                "max_age": 3600,
            }
        },
    )

    if container is None:
        _initialize_infrastructure(app)
        _initialize_services(app, config)
    else:
        app.celery = None
        app.container = container

    _register_blueprints(app, config)
    _register_health_endpoint(app)

    return app


def _initialize_infrastructure(app: Flask) -> None:
    """
    Initialize Redis and Celery.

    Args:
        app: Flask application
    """
    try:
        init_redis()
        logger.info("Redis initialized successfully")

        app.celery = make_celery(app)
        logger.info("Celery initialized successfully")
    except Exception as e:
        logger.warning(f"Could not initialize infrastructure: {e}")
        app.celery = None


def _initialize_services(app: Flask, config: AppConfig) -> None:
    """
    Build the Redis-backed service graph and attach it to the app.

    Args:
        app: Flask application
        config: Application configuration
    """
    from tempshare.infrastructure.redis_object_registry import RedisObjectRegistry
    from tempshare.infrastructure.redis_repository import RedisRepository
    from tempshare.infrastructure.storage_factory import StorageFactory

    try:
        redis_repo = get_redis_repository()
        registry = RedisObjectRegistry(redis_repo)
        store = StorageFactory.create_store(config.share)

        container = build_container(registry, store, config.share)
        container.register_singleton(RedisRepository, redis_repo)

        app.container = container
        logger.info("Application services initialized with DependencyContainer")

    except Exception as e:
        logger.error(f"Could not initialize services: {e}", exc_info=True)
        app.container = None


def _register_blueprints(app: Flask, config: AppConfig) -> None:
    from tempshare.api.v1 import api_v1_bp

    app.register_blueprint(api_v1_bp)

    logger.info(
        f"API {config.api_version} registered at /api/{config.api_version} "
        f"with Swagger UI at /api/{config.api_version}/docs"
    )


def _get_health_status(app: Flask) -> tuple[dict, int]:
    """
    Get health status of all system components.

    Returns:
        Tuple of (health_status_dict, http_status_code)
    """
    health_status = {
        "status": "ok",
        "message": "backend ready",
        "redis": "unknown",
        "celery": "unknown",
        "storage": "unknown",
    }

    try:
        if redis_health_check():
            health_status["redis"] = "connected"
        else:
            health_status["redis"] = "disconnected"
            health_status["status"] = "degraded"
    except Exception as e:
        health_status["redis"] = f"error: {str(e)}"
        health_status["status"] = "degraded"

    if getattr(app, "celery", None) is not None:
        health_status["celery"] = "available"
    else:
        health_status["celery"] = "unavailable"
        health_status["status"] = "degraded"

    container = getattr(app, "container", None)
    if container is not None and container.is_registered(IObjectStore):
        health_status["storage"] = type(container.resolve(IObjectStore)).__name__
    else:
        health_status["storage"] = "unavailable"
        health_status["status"] = "degraded"

    status_code = 200 if health_status["status"] == "ok" else 503
    return health_status, status_code


def _register_health_endpoint(app: Flask) -> None:
    @app.route("/health", methods=["GET"])
    def health():
        """Overall health of the application and its dependencies."""
        health_status, status_code = _get_health_status(app)
        return jsonify(health_status), status_code
