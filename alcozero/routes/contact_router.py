from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from alcozero.core.logging_config import get_logger
from alcozero.crud.contact import contact_crud
from alcozero.database.session import get_db
from alcozero.schemas.contact import ContactCreate, ContactResponse
from alcozero.utils.response_utils import (
    ResponseWrapper,
    handle_db_error,
    handle_http_error,
    validate_pagination_params,
)
from common_utils.auth.permission_checker import PermissionChecker

logger = get_logger(__name__)
router = APIRouter(prefix="/contact", tags=["contact"])


@router.post("/", status_code=status.HTTP_201_CREATED)
def submit_contact(contact_in: ContactCreate, db: Session = Depends(get_db)):
    """Public contact form; stored with status ``new``."""
    try:
        message = contact_crud.create(db, obj_in=contact_in)
        logger.info(f"[ContactSubmit] Message {message.contact_id} from {message.email}")
        return ResponseWrapper.created(
            data=ContactResponse.model_validate(message),
            message="Thank you! Your message has been sent successfully.",
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"[ContactSubmit] DB error: {e}")
        raise handle_db_error(e)
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.exception(f"[ContactSubmit] Unexpected error: {e}")
        raise handle_http_error(e)


@router.get("/", status_code=status.HTTP_200_OK)
def list_contact_messages(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    db: Session = Depends(get_db),
    user_data=Depends(PermissionChecker(["contact.read"])),
):
    try:
        page, per_page = validate_pagination_params(skip, limit)
        total = contact_crud.count(db)
        messages = contact_crud.get_recent(db, skip=skip, limit=limit)
        return ResponseWrapper.paginated(
            items=[ContactResponse.model_validate(m) for m in messages],
            total=total,
            page=page,
            per_page=per_page,
            message="Contact messages",
        )
    except SQLAlchemyError as e:
        raise handle_db_error(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"[ContactList] Unexpected error: {e}")
        raise handle_http_error(e)
