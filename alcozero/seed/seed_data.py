import logging
import random
from datetime import timedelta
from typing import Dict, List, Optional
from sqlalchemy.orm import Session

from alcozero.core.severity import LOG_ALERT_THRESHOLD, WARNING_THRESHOLD, log_status
from alcozero.crud.alert import create_alert
from alcozero.crud.device import device_crud
from alcozero.crud.device_log import create_log
from alcozero.models.alert import AlertTypeEnum
from alcozero.schemas.device import DeviceCreate
from alcozero.services.driver_id import generate_driver_id
from common_utils import utcnow

logger = logging.getLogger(__name__)

SAMPLE_DEVICES = [
    {
        "name": "Car Alcohol Detector #1",
        "device_id": "ALCH-001",
        "driver_name": "John Smith",
        "driver_age": 35,
        "location": "Downtown Area",
        "vehicle_name": "Toyota Camry",
        "vehicle_number": "ABC-1234",
        "contact_number": "+1234567890",
        "license_no": "DL-1234567890",
        "status": "active",
    },
    {
        "name": "Truck Alcohol Detector #2",
        "device_id": "ALCH-002",
        "driver_name": "Sarah Johnson",
        "driver_age": 28,
        "location": "Highway 101",
        "vehicle_name": "Ford F-150",
        "vehicle_number": "XYZ-5678",
        "contact_number": "+1987654321",
        "license_no": "DL-9876543210",
        "status": "active",
    },
    {
        "name": "Bus Alcohol Detector #3",
        "device_id": "ALCH-003",
        "driver_name": "Michael Chen",
        "driver_age": 42,
        "location": "Bus Terminal",
        "vehicle_name": "Volvo Bus",
        "vehicle_number": "BUS-9012",
        "contact_number": "+1122334455",
        "license_no": "DL-5566778899",
        "status": "active",
    },
    {
        "name": "Taxi Alcohol Detector #4",
        "device_id": "ALCH-004",
        "driver_name": "Emily Davis",
        "driver_age": 31,
        "location": "Airport",
        "vehicle_name": "Honda Accord",
        "vehicle_number": "TAXI-3456",
        "contact_number": "+1555666777",
        "license_no": "DL-3344556677",
        "status": "maintenance",
    },
    {
        "name": "Van Alcohol Detector #5",
        "device_id": "ALCH-005",
        "driver_name": "David Martinez",
        "driver_age": 39,
        "location": "City Center",
        "vehicle_name": "Mercedes Sprinter",
        "vehicle_number": "VAN-7890",
        "contact_number": "+1888999000",
        "license_no": "DL-7788990011",
        "status": "offline",
    },
]

SAMPLE_LOG_COUNT = 50
SAMPLE_ALERT_COUNT = 10


def seed_devices(db: Session, admin_id: int) -> List[str]:
    """
    Seed the sample devices for an admin (idempotent). Returns the hardware
    ids that were created.
    """
    existing = set(device_crud.hardware_ids_for_admin(db, admin_id=admin_id))
    created = []
    for sample in SAMPLE_DEVICES:
        if sample["device_id"] in existing:
            logger.info(f"Device {sample['device_id']} already exists, skipping.")
            continue
        device_in = DeviceCreate(**sample, battery_level=random.randint(70, 100))
        device_crud.create_for_admin(db, admin_id=admin_id, obj_in=device_in, driver_id=generate_driver_id(db))
        created.append(sample["device_id"])
    db.flush()
    return created


def _sample_level(rng: random.Random) -> float:
    """Mostly safe, some warnings, a few alerts"""
    roll = rng.random()
    if roll < 0.7:
        level = rng.random() * 0.10
    elif roll < 0.9:
        level = 0.10 + rng.random() * 0.20
    else:
        level = 0.30 + rng.random() * 0.20
    return round(level, 3)


def seed_logs(db: Session, device_ids: List[str], count: int = SAMPLE_LOG_COUNT, rng: Optional[random.Random] = None) -> int:
    """Readings spread over the last 7 days"""
    rng = rng or random.Random()
    now = utcnow()
    for _ in range(count):
        level = _sample_level(rng)
        create_log(
            db,
            device_id=rng.choice(device_ids),
            alcohol_level=level,
            engine="LOCKED" if level > WARNING_THRESHOLD else "ON",
            status=log_status(level),
            source="seed",
            timestamp=now - timedelta(days=rng.randint(0, 6), hours=rng.randint(0, 23)),
        )
    return count


def seed_alerts(db: Session, device_ids: List[str], admin_id: int, count: int = SAMPLE_ALERT_COUNT, rng: Optional[random.Random] = None) -> int:
    rng = rng or random.Random()
    for _ in range(count):
        device_id = rng.choice(device_ids)
        create_alert(
            db,
            device_id=device_id,
            alcohol_level=round(LOG_ALERT_THRESHOLD + rng.random() * 0.20, 3),
            engine="UNKNOWN",
            alert_type=AlertTypeEnum.MANUAL,
            message=f"Manual alert triggered for device {device_id}",
            triggered_by=admin_id,
        )
    return count


def seed_all(db: Session, admin_id: int) -> Dict[str, int]:
    created = seed_devices(db, admin_id)
    device_ids = [sample["device_id"] for sample in SAMPLE_DEVICES[:3]]
    result = {
        "devices": len(created),
        "logs": seed_logs(db, device_ids),
        "alerts": seed_alerts(db, device_ids, admin_id),
    }
    db.commit()
    logger.info(f"✅ Sample data seeded for admin {admin_id}: {result}")
    return result
