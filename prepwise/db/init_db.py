import logging

from prepwise.db.session import engine
from prepwise.db.base import Base
from prepwise.core import config

logger = logging.getLogger(__name__)


def init_db():
    """Create tables directly, or run Alembic when RUN_MIGRATIONS=1."""
    if config.RUN_MIGRATIONS:
        from prepwise.db.migrate import run_migrations
        run_migrations()
        return

    # Registers every model on Base.metadata
    import prepwise.db.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ensured")
