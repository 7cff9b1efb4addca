from typing import List, Optional
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from alcozero.crud.base import CRUDBase
from alcozero.models.device import Device, DeviceStatusEnum
from alcozero.schemas.device import DeviceCreate, DeviceUpdate, DeviceStats
from common_utils import utcnow


class CRUDDevice(CRUDBase[Device, DeviceCreate, DeviceUpdate]):
    def get_for_admin(self, db: Session, *, admin_id: int, id: int) -> Optional[Device]:
        return db.query(Device).filter(Device.id == id, Device.admin_id == admin_id).first()

    def get_by_hardware_id(self, db: Session, *, admin_id: int, device_id: str) -> Optional[Device]:
        return db.query(Device).filter(Device.admin_id == admin_id, Device.device_id == device_id).first()

    def hardware_ids_for_admin(self, db: Session, *, admin_id: int) -> List[str]:
        return [row[0] for row in db.query(Device.device_id).filter(Device.admin_id == admin_id).all()]

    def query_for_admin(self, db: Session, *, admin_id: int, search: Optional[str] = None, status: Optional[str] = None):
        """
        Devices owned by ``admin_id``, newest first.

        ``search`` is a case-insensitive substring match on name or hardware
        id; ``status`` is an exact match where ``all`` means no filter.
        """
        query = db.query(Device).filter(Device.admin_id == admin_id)

        term = (search or "").strip().lower()
        if term:
            query = query.filter(
                or_(
                    func.lower(Device.name).contains(term, autoescape=True),
                    func.lower(Device.device_id).contains(term, autoescape=True),
                )
            )

        if status and status != "all":
            query = query.filter(Device.status == DeviceStatusEnum(status))

        return query.order_by(Device.created_at.desc(), Device.id.desc())

    def stats_for_admin(self, db: Session, *, admin_id: int) -> DeviceStats:
        rows = (
            db.query(Device.status, func.count(Device.id))
            .filter(Device.admin_id == admin_id)
            .group_by(Device.status)
            .all()
        )
        counts = {status: count for status, count in rows}
        return DeviceStats(
            total=sum(counts.values()),
            active=counts.get(DeviceStatusEnum.ACTIVE, 0),
            offline=counts.get(DeviceStatusEnum.OFFLINE, 0),
        )

    def create_for_admin(self, db: Session, *, admin_id: int, obj_in: DeviceCreate, driver_id: Optional[str] = None) -> Device:
        """Flushes only; the router commits."""
        data = obj_in.model_dump()
        if driver_id and not data.get("driver_id"):
            data["driver_id"] = driver_id
        db_obj = Device(**data, admin_id=admin_id, last_seen=utcnow(), captured_images=[])
        db.add(db_obj)
        db.flush()
        return db_obj

    def touch_last_seen(self, db: Session, *, device_id: str) -> int:
        """Refresh ``last_seen`` on every device registered under this hardware id"""
        return (
            db.query(Device)
            .filter(Device.device_id == device_id)
            .update({Device.last_seen: utcnow()}, synchronize_session=False)
        )


device_crud = CRUDDevice(Device)
