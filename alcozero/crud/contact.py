from typing import List
from sqlalchemy.orm import Session

from alcozero.crud.base import CRUDBase
from alcozero.models.contact import ContactMessage
from alcozero.schemas.contact import ContactCreate


class CRUDContact(CRUDBase[ContactMessage, ContactCreate, ContactCreate]):
    def get_recent(self, db: Session, *, skip: int = 0, limit: int = 50) -> List[ContactMessage]:
        return (
            db.query(ContactMessage)
            .order_by(ContactMessage.timestamp.desc(), ContactMessage.contact_id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )


contact_crud = CRUDContact(ContactMessage)
