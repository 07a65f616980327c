"""
Application context.

Everything the pages share (config, database, backend, session, profile
draft, intake board, retainer service) is built once at startup, handed to
each page at construction and closed at shutdown.
"""

from typing import Optional

from .backend import LocalBackend, RestBackend
from .config import ConfigManager, get_config_manager
from .database.db_manager import DatabaseManager, create_database_manager
from .map.loader import DocumentCache, MapDocumentLoader
from .models import Session, SessionRole
from .services import IntakeBoard, ProfileDraft, RetainerService
from .utils import AuditLogger, get_audit_logger, get_logger


class AppContext:
    """Shared application state with an explicit lifecycle."""

    def __init__(
        self,
        config: ConfigManager,
        db_manager: DatabaseManager,
        backend,
        session: Session,
        audit_logger: AuditLogger,
        map_loader: MapDocumentLoader,
    ) -> None:
        self.config = config
        self.db_manager = db_manager
        self.backend = backend
        self.session = session
        self.audit_logger = audit_logger
        self.map_loader = map_loader
        self.logger = get_logger("context")

        self.profile_draft = ProfileDraft(backend, session, audit_logger)
        self.retainer_service = RetainerService(backend)
        self.intake_board = IntakeBoard(
            regions=db_manager.get_regions(),
            orders=db_manager.get_intake_orders(),
            loader=map_loader,
            db_manager=db_manager,
            audit_logger=audit_logger,
            region_attribute=config.get("map.region_attribute", "data-region"),
        )
        self._closed = False

    @property
    def is_closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Tear down shared state. Safe to call more than once."""
        if self._closed:
            return
        self.intake_board.teardown()
        self.profile_draft.cancel_editing()
        self.db_manager.close()
        self._closed = True
        self.logger.info("Application context closed")


def create_session(config: ConfigManager) -> Session:
    """Build the session identity from configuration."""
    return Session(
        owner_id=config.get("session.owner_id", "attorney-001"),
        role=SessionRole(config.get("session.role", "attorney")),
        organization_id=config.get("session.organization_id"),
    )


def create_backend(config: ConfigManager, db_manager: DatabaseManager):
    """
    Build the profile/retainer backend selected by ``backend.mode``.

    Raises:
        ValueError: If the mode is unknown or the REST backend has no URL
    """
    mode = config.get("backend.mode", "local")
    if mode == "local":
        return LocalBackend(db_manager)
    if mode == "rest":
        credentials = config.get_backend_credentials()
        return RestBackend(
            base_url=config.get("backend.url", ""),
            api_key=credentials.get("api_key"),
            access_token=credentials.get("access_token"),
            timeout_seconds=config.get("backend.timeout_seconds", 15),
        )
    raise ValueError(f"Unknown backend mode: {mode}")


def create_app_context(
    config: Optional[ConfigManager] = None,
    db_manager: Optional[DatabaseManager] = None
) -> AppContext:
    """
    Create the application context.

    Args:
        config: Configuration (defaults to the global config manager)
        db_manager: Database manager (defaults to one at ``database.path``)

    Returns:
        AppContext instance
    """
    config = config or get_config_manager()
    logger = get_logger("context")

    if db_manager is None:
        db_path = config.get("database.path", "data/caseboard.db")
        logger.info(f"Connecting to database: {db_path}")
        db_manager = create_database_manager(db_path)

    session = create_session(config)
    backend = create_backend(config, db_manager)
    audit_logger = get_audit_logger(db_manager)

    map_loader = MapDocumentLoader(
        url=config.get("map.url", ""),
        cache=DocumentCache(db_manager, config.get("map.cache_key", "caseboard.map.us_states_svg")),
        timeout_seconds=config.get("map.timeout_seconds", 10),
        region_attribute=config.get("map.region_attribute", "data-region"),
    )

    logger.info(
        f"Session {session.owner_id} ({session.role.value}), "
        f"backend {config.get('backend.mode', 'local')}"
    )
    return AppContext(
        config=config,
        db_manager=db_manager,
        backend=backend,
        session=session,
        audit_logger=audit_logger,
        map_loader=map_loader,
    )
