from typing import Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from alcozero.crud.base import CRUDBase
from alcozero.models.admin import Admin
from alcozero.schemas.auth import SignupRequest
from alcozero.schemas.settings import ProfileUpdate
from common_utils.auth.utils import hash_password


class CRUDAdmin(CRUDBase[Admin, SignupRequest, ProfileUpdate]):
    def get_by_email(self, db: Session, *, email: str) -> Optional[Admin]:
        return db.query(Admin).filter(func.lower(Admin.email) == email.strip().lower()).first()

    def create_with_password(self, db: Session, *, obj_in: SignupRequest, role: str = "admin") -> Admin:
        """Flushes only; the caller commits together with the account's settings."""
        db_obj = Admin(
            name=obj_in.name,
            email=obj_in.email.lower(),
            password=hash_password(obj_in.password),
            organization=obj_in.organization,
            phone=obj_in.phone,
            role=role,
        )
        db.add(db_obj)
        db.flush()
        return db_obj

    def set_password(self, db: Session, *, db_obj: Admin, new_password: str) -> Admin:
        db_obj.password = hash_password(new_password)
        db.add(db_obj)
        db.flush()
        return db_obj


admin_crud = CRUDAdmin(Admin)
