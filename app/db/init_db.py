import logging

from app.db.base import Base
# Registers every model with Base.metadata
import app.db.models  # noqa: F401

logger = logging.getLogger(__name__)


def init_db(engine) -> None:
    """Create any missing tables on the given engine."""
    Base.metadata.create_all(bind=engine)
    logger.info("Database schema ready")
