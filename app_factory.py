"""
Application Factory

Creates and configures the Flask application with all dependencies.
The factory pattern allows configuration overrides in tests.
"""

import logging
import os
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS

from sharebox.api.websocket_events import register_socketio_events
from sharebox.application.access_service import ShareAccessService
from sharebox.application.dependency_container import DependencyContainer
from sharebox.application.event_publisher import EventPublisher
from sharebox.application.reaper_service import ExpiryReaper
from sharebox.application.text_room_service import TextRoomService
from sharebox.application.upload_service import UploadCoordinator
from sharebox.config.attempt_limit_config import AttemptLimitConfig
from sharebox.config.celery_config import make_celery
from sharebox.config.redis_config import (
    RedisConfig,
    get_redis_client,
    get_redis_repository,
    init_redis,
)
from sharebox.config.share_config import ShareConfig
from sharebox.config.socketio_config import init_socketio
from sharebox.domain.attempt_limiting.services import (
    AttemptPolicy,
    CounterAttemptPolicy,
    NoAttemptLimit,
)
from sharebox.domain.file_storage.blob_store import IBlobStore
from sharebox.domain.file_storage.signed_url_service import SignedUrlService
from sharebox.domain.sharing.repositories import ProjectRepository
from sharebox.domain.sharing.services import AccessGate, IPasswordHasher
from sharebox.domain.text_rooms.repositories import ITextRoomRepository
from sharebox.infrastructure.password_hasher import WerkzeugPasswordHasher
from sharebox.infrastructure.redis_attempt_repository import RedisAttemptRepository
from sharebox.infrastructure.redis_project_repository import RedisProjectRepository
from sharebox.infrastructure.redis_text_room_repository import RedisTextRoomRepository
from sharebox.infrastructure.storage_factory import StorageFactory

logger = logging.getLogger(__name__)

# Multipart framing on top of the largest allowed project
MULTIPART_OVERHEAD = 10 * 1024 * 1024


class AppConfig:
    """Application configuration."""

    def __init__(self):
        self.api_version = os.getenv("API_VERSION", "v1")
        self.flask_env = os.getenv("FLASK_ENV", "development")
        self.is_production = self.flask_env == "production"

        # SocketIO configuration
        self.socketio_enabled = os.getenv("SOCKETIO_ENABLED", "true").lower() == "true"


def create_app(
    config: Optional[AppConfig] = None,
    share_config: Optional[ShareConfig] = None,
    attempt_config: Optional[AttemptLimitConfig] = None,
) -> Flask:
    """
    Create and configure Flask application.

    Args:
        config: Application configuration, uses default if None
        share_config: Share configuration, read from the environment if None
        attempt_config: Attempt limit configuration, read from the environment if None

    Returns:
        Configured Flask application
    """
    if config is None:
        config = AppConfig()
    if share_config is None:
        share_config = ShareConfig.from_env()
    if attempt_config is None:
        attempt_config = AttemptLimitConfig.from_env()

    _check_secret_key(config, share_config)

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = share_config.max_project_size + MULTIPART_OVERHEAD
    app.share_config = share_config

    # Configure CORS
    CORS(
        app,
        resources={
            r"/*": {
                "origins": "*",
                "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
                "allow_headers": ["Content-Type", "Authorization", "X-API-Key"],
                "expose_headers": [
                    "Content-Type",
                    "Content-Disposition",
                    "Content-Length",
                    "Retry-After",
                ],
                "supports_credentials": True,
                "max_age": 3600,
            }
        },
    )

    # Initialize infrastructure
    _initialize_infrastructure(app, config)

    # Initialize services
    _initialize_services(app, config, share_config, attempt_config)

    # Register blueprints
    _register_blueprints(app, config)

    # Register health check endpoint
    _register_health_endpoint(app)

    return app


def _check_secret_key(config: AppConfig, share_config: ShareConfig) -> None:
    """
    Require SECRET_KEY in production.

    Without it every process signs blob URLs with its own random key, so a
    URL signed by one worker fails on another and after a restart.

    Raises:
        ValueError: If SECRET_KEY is unset in production
    """
    if share_config.secret_key:
        return
    if config.is_production:
        raise ValueError("SECRET_KEY must be set in production")
    logger.warning(
        "SECRET_KEY is not set - using a per-process signing key; signed blob URLs "
        "will not survive a restart or work across workers"
    )


def _initialize_infrastructure(app: Flask, config: AppConfig) -> None:
    """
    Initialize infrastructure components (Redis, Celery, SocketIO).

    Args:
        app: Flask application
        config: Application configuration
    """
    app.celery = None
    app.socketio = None

    try:
        init_redis()
        logger.info("Redis initialized successfully")

        app.celery = make_celery(app)
        logger.info("Celery initialized successfully")
    except Exception as e:
        logger.warning(f"Could not initialize infrastructure: {e}")

    if not config.socketio_enabled:
        logger.info("SocketIO disabled - text rooms available over HTTP only")
        return

    try:
        app.socketio = init_socketio(app)
        register_socketio_events(app)
        logger.info("SocketIO initialized successfully")
    except Exception as e:
        logger.warning(f"Could not initialize SocketIO: {e}")


def _initialize_services(
    app: Flask,
    config: AppConfig,
    share_config: ShareConfig,
    attempt_config: AttemptLimitConfig,
) -> None:
    """
    Build every service and register it in the DependencyContainer.

    Repositories and stores are registered under their interfaces, the
    application services under their classes. API routes read the most
    used services from app attributes; tasks resolve them from
    ``app.container``.

    Args:
        app: Flask application
        config: Application configuration
        share_config: Share configuration
        attempt_config: Attempt limit configuration
    """
    try:
        container = DependencyContainer()
        api_prefix = f"{share_config.public_base_url}/api/{config.api_version}"

        # Infrastructure adapters
        redis_config = RedisConfig()
        redis_repo = get_redis_repository(redis_config.key_prefix)
        project_repository = RedisProjectRepository(redis_repo)
        room_repository = RedisTextRoomRepository(redis_repo)

        signed_url_service = SignedUrlService(
            secret_key=share_config.secret_key, base_url=f"{api_prefix}/blobs"
        )
        blob_store = StorageFactory.create_storage(share_config, signed_url_service)
        password_hasher = WerkzeugPasswordHasher(share_config.password_hash_method)

        container.register_singleton(ProjectRepository, project_repository)
        container.register_singleton(ITextRoomRepository, room_repository)
        container.register_singleton(SignedUrlService, signed_url_service)
        container.register_singleton(IBlobStore, blob_store)
        container.register_singleton(IPasswordHasher, password_hasher)

        # Events
        event_publisher = EventPublisher()
        container.setup_event_handlers(event_publisher)
        container.register_singleton(EventPublisher, event_publisher)

        # Domain services
        access_gate = AccessGate(project_repository, password_hasher)
        if attempt_config.enabled:
            attempt_policy: AttemptPolicy = CounterAttemptPolicy(
                RedisAttemptRepository(get_redis_client(), key_prefix=redis_config.key_prefix),
                attempt_config.to_limit(),
                whitelist=attempt_config.whitelist,
            )
        else:
            attempt_policy = NoAttemptLimit()

        container.register_singleton(AccessGate, access_gate)
        container.register_singleton(AttemptPolicy, attempt_policy)

        # Application services
        download_base = f"{api_prefix}/download"
        upload_service = UploadCoordinator(
            project_repository,
            blob_store,
            password_hasher,
            share_config.security_policy(),
            share_config.retention,
            event_publisher=event_publisher,
            upload_url_ttl=share_config.upload_url_ttl,
            download_base=download_base,
        )
        access_service = ShareAccessService(
            access_gate,
            project_repository,
            blob_store,
            attempt_policy=attempt_policy,
            event_publisher=event_publisher,
            signed_url_ttl=share_config.signed_url_ttl,
            download_base=download_base,
        )
        reaper_service = ExpiryReaper(project_repository, blob_store, event_publisher=event_publisher)
        text_room_service = TextRoomService(
            room_repository,
            id_length=share_config.room_id_length,
            ttl_seconds=share_config.room_ttl_seconds,
            max_content_length=share_config.room_max_content_length,
            event_publisher=event_publisher,
        )

        container.register_singleton(UploadCoordinator, upload_service)
        container.register_singleton(ShareAccessService, access_service)
        container.register_singleton(ExpiryReaper, reaper_service)
        container.register_singleton(TextRoomService, text_room_service)

        app.container = container
        app.upload_service = upload_service
        app.access_service = access_service
        app.reaper_service = reaper_service
        app.text_room_service = text_room_service
        app.blob_store = blob_store
        app.signed_url_service = signed_url_service

        logger.info("Application services initialized successfully with DependencyContainer")

    except Exception as e:
        logger.warning(f"Could not initialize services: {e}", exc_info=True)
        app.container = None
        app.upload_service = None
        app.access_service = None
        app.reaper_service = None
        app.text_room_service = None
        app.blob_store = None
        app.signed_url_service = None


def _register_blueprints(app: Flask, config: AppConfig) -> None:
    """
    Register API blueprints.

    Args:
        app: Flask application
        config: Application configuration
    """
    from sharebox.api.v1 import create_api_blueprint

    app.register_blueprint(create_api_blueprint(config.api_version))

    logger.info(
        f"API {config.api_version} registered at /api/{config.api_version} "
        f"with Swagger UI at /api/{config.api_version}/docs"
    )


def _register_health_endpoint(app: Flask) -> None:
    """
    Register the unversioned health check endpoint.

    Args:
        app: Flask application
    """
    from sharebox.api.v1.namespaces import get_health_status

    @app.route("/health", methods=["GET"])
    def health():
        """Overall health status of the application and its dependencies."""
        health_status, status_code = get_health_status(app)
        return jsonify(health_status), status_code
