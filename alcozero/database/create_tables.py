"""
Create every table known to the model metadata (idempotent).
"""
import alcozero.models  # noqa: F401  registers all tables on Base.metadata

from alcozero.core.logging_config import get_logger
from alcozero.database.session import engine, Base

logger = get_logger(__name__)


def create_tables(bind=None):
    """Initialize the database and create all tables."""
    try:
        Base.metadata.create_all(bind=bind or engine)
        logger.info("Database initialization completed")
    except Exception as e:
        logger.error(f"Database initialization failed: {str(e)}")
        raise
