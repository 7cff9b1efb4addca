from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from alcozero.core.logging_config import get_logger
from alcozero.crud.counter import next_value
from common_utils import epoch_millis, utcnow

logger = get_logger(__name__)

DRIVER_ID_COUNTER = "driverIdCounter"


def generate_driver_id(db: Session) -> str:
    """
    Next ``DRV-{year}-{NNNN}`` id from the global counter. If the counter
    cannot be updated, falls back to ``DRV-{epoch millis}``.
    """
    try:
        value = next_value(db, DRIVER_ID_COUNTER)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"[DriverId] Counter update failed, using timestamp id: {e}")
        return f"DRV-{epoch_millis()}"
    return f"DRV-{utcnow().year}-{value:04d}"
