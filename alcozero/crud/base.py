from typing import Any, Dict, Generic, Optional, Type, TypeVar, Union
from pydantic import BaseModel
from sqlalchemy.orm import Session
from sqlalchemy import inspect

from alcozero.database.session import Base

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """
    Base class for CRUD operations.

    ``create``/``update``/``remove`` commit by default; pass ``commit=False``
    to only flush when the caller owns the transaction.
    """
    def __init__(self, model: Type[ModelType]):
        self.model = model

    @property
    def _pk(self):
        return getattr(self.model, inspect(self.model).primary_key[0].name)

    def _filtered(self, db: Session, filters: Optional[Dict]):
        query = db.query(self.model)
        if filters:
            for attr, value in filters.items():
                if hasattr(self.model, attr):
                    if isinstance(value, list):
                        query = query.filter(getattr(self.model, attr).in_(value))
                    else:
                        query = query.filter(getattr(self.model, attr) == value)
        return query

    def _finish(self, db: Session, db_obj, commit: bool):
        if commit:
            db.commit()
            db.refresh(db_obj)
        else:
            db.flush()
        return db_obj

    def get(self, db: Session, id: Any) -> Optional[ModelType]:
        return db.query(self.model).filter(self._pk == id).first()

    def create(self, db: Session, *, obj_in: Union[CreateSchemaType, Dict[str, Any]], commit: bool = True) -> ModelType:
        obj_in_data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump()
        db_obj = self.model(**obj_in_data)
        db.add(db_obj)
        return self._finish(db, db_obj, commit)

    def update(
        self,
        db: Session,
        *,
        db_obj: ModelType,
        obj_in: Union[UpdateSchemaType, Dict[str, Any]],
        commit: bool = True,
    ) -> ModelType:
        if isinstance(obj_in, dict):
            update_data = obj_in
        else:
            update_data = obj_in.model_dump(exclude_unset=True)

        columns = {c.key for c in inspect(self.model).column_attrs}
        for field, value in update_data.items():
            if field in columns:
                setattr(db_obj, field, value)

        db.add(db_obj)
        return self._finish(db, db_obj, commit)

    def remove(self, db: Session, *, id: Any, commit: bool = True) -> Optional[ModelType]:
        obj = self.get(db, id)
        if obj is None:
            return None
        db.delete(obj)
        if commit:
            db.commit()
        else:
            db.flush()
        return obj

    def count(self, db: Session, *, filters: Dict = None) -> int:
        return self._filtered(db, filters).count()
