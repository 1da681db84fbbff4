"""
Application Factory

Creates and configures Flask application with all dependencies.
This factory pattern improves testability by allowing dependency injection
and configuration overrides.
"""

import logging
import os
from datetime import timedelta
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS

from dropvault.api.v1.identity import DEFAULT_NAME_HEADER, DEFAULT_USER_HEADER
from dropvault.application.dependency_container import DependencyContainer
from dropvault.application.event_publisher import EventPublisher
from dropvault.application.file_share_service import FileShareService
from dropvault.config.celery_config import make_celery
from dropvault.config.redis_config import get_redis_repository, init_redis, redis_health_check
from dropvault.config.upload_config import UploadPolicyConfig
from dropvault.domain.file_lifecycle.blob_store import IBlobStore
from dropvault.domain.file_lifecycle.identifier_allocator import IdentifierAllocator
from dropvault.domain.file_lifecycle.reaper import ExpiryReaper
from dropvault.domain.file_lifecycle.repositories import IFileRecordRepository
from dropvault.domain.file_lifecycle.services import FileLifecycleEngine
from dropvault.domain.file_lifecycle.value_objects import PolicyTable
from dropvault.infrastructure.redis_file_record_repository import RedisFileRecordRepository
from dropvault.infrastructure.storage_factory import StorageFactory

logger = logging.getLogger(__name__)

# Multipart framing on top of the largest accepted file
UPLOAD_OVERHEAD_BYTES = 1024 * 1024


class AppConfig:
    """Application configuration."""

    def __init__(self):
        self.api_version = os.getenv("API_VERSION", "v1")
        self.flask_env = os.getenv("FLASK_ENV", "development")
        self.is_production = self.flask_env == "production"
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()

        self.storage_dir = os.getenv("STORAGE_DIR", "/tmp/dropvault")
        self.orphan_grace_seconds = int(os.getenv("ORPHAN_GRACE_SECONDS", 3600))

        self.identity_user_header = os.getenv("IDENTITY_USER_HEADER", DEFAULT_USER_HEADER)
        self.identity_name_header = os.getenv("IDENTITY_NAME_HEADER", DEFAULT_NAME_HEADER)

        self.upload_policy = UploadPolicyConfig()


def create_app(
    config: Optional[AppConfig] = None,
    container: Optional[DependencyContainer] = None,
) -> Flask:
    """
    Create and configure Flask application.

    Args:
        config: Application configuration, uses default if None
        container: Prebuilt dependency container (tests); when given, Redis
                   and storage are not initialized from the environment

    Returns:
        Configured Flask application
    """
    if config is None:
        config = AppConfig()

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = Flask(__name__)
    app.config["IDENTITY_USER_HEADER"] = config.identity_user_header
    app.config["IDENTITY_NAME_HEADER"] = config.identity_name_header

    # Configure CORS
    CORS(
        app,
        resources={
            r"/*": {
                "origins": "*",
                "methods": ["GET", "POST", "DELETE", "OPTIONS"],
                "allow_headers": [
                    "Content-Type",
                    "Authorization",
                    config.identity_user_header,
                    config.identity_name_header,
                ],
                "expose_headers": ["Content-Type", "Content-Disposition"],
                "max_age": 3600,
            }
        },
    )

    if container is None:
        _initialize_infrastructure(app)
        container = _build_container(config)
    else:
        app.celery = None

    app.container = container
    _configure_upload_size(app, container)

    _register_blueprints(app, config)
    _register_health_endpoint(app)

    return app


def _initialize_infrastructure(app: Flask) -> None:
    """
    Initialize infrastructure components (Redis, Celery).

    Args:
        app: Flask application
    """
    init_redis()
    logger.info("Redis initialized")

    try:
        app.celery = make_celery(app)
        logger.info("Celery initialized")
    except Exception as e:
        logger.warning(f"Could not initialize Celery: {e}")
        app.celery = None


def _build_container(config: AppConfig) -> DependencyContainer:
    """
    Wire every service into a DependencyContainer.

    Registration order follows the layers: infrastructure adapters, domain
    services, application services.
    """
    container = DependencyContainer()

    event_publisher = EventPublisher()
    container.setup_event_handlers(event_publisher)
    container.register_singleton(EventPublisher, event_publisher)

    # Infrastructure
    metadata_repository = RedisFileRecordRepository(get_redis_repository())
    blob_store = StorageFactory.create_storage(config.storage_dir)
    container.register_singleton(IFileRecordRepository, metadata_repository)
    container.register_singleton(IBlobStore, blob_store)

    # Domain
    policy_table = config.upload_policy.to_policy_table()
    container.register_singleton(PolicyTable, policy_table)

    allocator = IdentifierAllocator(metadata_repository)
    engine = FileLifecycleEngine(
        metadata_repository,
        blob_store,
        policy_table,
        allocator=allocator,
        event_publisher=event_publisher,
    )
    reaper = ExpiryReaper(
        metadata_repository,
        blob_store,
        event_publisher=event_publisher,
        orphan_grace=timedelta(seconds=config.orphan_grace_seconds),
    )
    container.register_singleton(IdentifierAllocator, allocator)
    container.register_singleton(FileLifecycleEngine, engine)
    container.register_singleton(ExpiryReaper, reaper)

    # Application
    container.register_singleton(FileShareService, FileShareService(engine))

    logger.info(
        f"Services initialized: upload limits {policy_table.to_dict()}, "
        f"storage at {config.storage_dir}"
    )
    return container


def _configure_upload_size(app: Flask, container: DependencyContainer) -> None:
    """Reject request bodies far above the largest tier before parsing them."""
    if not container.is_registered(PolicyTable):
        return
    policy_table = container.resolve(PolicyTable)
    largest = max(policy_table.public.max_size_bytes, policy_table.user.max_size_bytes)
    app.config["MAX_CONTENT_LENGTH"] = largest + UPLOAD_OVERHEAD_BYTES


def _register_blueprints(app: Flask, config: AppConfig) -> None:
    """
    Register API blueprints.

    Args:
        app: Flask application
        config: Application configuration
    """
    from dropvault.api.v1 import api_v1_bp

    app.register_blueprint(api_v1_bp)

    logger.info(
        f"API {config.api_version} registered at /api/{config.api_version} "
        f"with Swagger UI at /api/{config.api_version}/docs"
    )


def _get_health_status(app: Flask) -> tuple[dict, int]:
    """
    Get health status of all system components.

    Args:
        app: Flask application instance

    Returns:
        Tuple of (health_status_dict, http_status_code)
    """
    health_status = {
        "status": "ok",
        "message": "backend ready",
        "redis": "unknown",
        "celery": "unknown",
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

    status_code = 200 if health_status["status"] == "ok" else 503
    return health_status, status_code


def _register_health_endpoint(app: Flask) -> None:
    """
    Register health check endpoint.

    Args:
        app: Flask application
    """

    @app.route("/health", methods=["GET"])
    def health():
        """
        Health check endpoint.
        Returns overall health status of the application and its dependencies.
        """
        health_status, status_code = _get_health_status(app)
        return jsonify(health_status), status_code


def require_celery(app: Flask):
    """
    The app's Celery instance, for worker and beat entry points.

    Raises:
        RuntimeError: If Celery failed to initialize or the app was built
            with an injected container
    """
    celery = getattr(app, "celery", None)
    if celery is None:
        raise RuntimeError(
            "Celery is not available for this app. Check the broker settings "
            "(CELERY_BROKER_URL / REDIS_*) and the 'Could not initialize Celery' "
            "warning logged at start-up."
        )
    return celery
