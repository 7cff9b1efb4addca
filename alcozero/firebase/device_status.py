"""
Live device status in the Firebase Realtime Database:
deviceStatus/{deviceId} -> {alcoholLevel, engine, timestamp, connected}
"""
from typing import Any, Dict, Optional
import firebase_admin
from firebase_admin import db

from alcozero.config import settings
from alcozero.core.logging_config import get_logger
from alcozero.core.severity import monitor_status
from common_utils import epoch_millis

logger = get_logger(__name__)


class FirebaseUnavailableError(Exception):
    """The Admin SDK is not initialized or the RTDB call failed"""


def normalize_status(device_id: str, raw: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    RTDB node -> snapshot dict. A present node counts as connected unless it
    says otherwise; a missing node reads as disconnected defaults.
    """
    connected = bool(raw.get("connected", True)) if raw else False
    raw = raw or {}
    snapshot = {
        "device_id": device_id,
        "alcohol_level": float(raw.get("alcoholLevel") or 0),
        "engine": raw.get("engine") or "UNKNOWN",
        "timestamp": raw.get("timestamp") or epoch_millis(),
        "connected": connected,
    }
    snapshot["status"] = monitor_status(snapshot["alcohol_level"], connected).value
    return snapshot


def error_status(device_id: str) -> Dict[str, Any]:
    return {
        "device_id": device_id,
        "alcohol_level": 0.0,
        "engine": "ERROR",
        "timestamp": epoch_millis(),
        "connected": False,
        "status": monitor_status(0, False).value,
    }


class DeviceStatusStore:
    def __init__(self, root: Optional[str] = None):
        self.root = root or settings.DEVICE_STATUS_ROOT

    def _path(self, device_id: str) -> str:
        return f"{self.root}/{device_id}"

    def _get_reference(self, path: str):
        try:
            firebase_admin.get_app()
        except ValueError:
            raise FirebaseUnavailableError("Firebase Admin SDK not initialized")
        return db.reference(path)

    def get_raw(self, device_id: str) -> Optional[Dict[str, Any]]:
        """Raw node, or None when the device never reported"""
        try:
            return self._get_reference(self._path(device_id)).get()
        except FirebaseUnavailableError:
            raise
        except Exception as e:
            logger.error(f"[DeviceStatus] Read failed for {device_id}: {e}")
            raise FirebaseUnavailableError(str(e)) from e

    def get_status(self, device_id: str) -> Dict[str, Any]:
        """
        Normalized snapshot. Read failures are reported in the snapshot itself
        (engine ``ERROR``, disconnected) instead of raising.
        """
        try:
            return normalize_status(device_id, self.get_raw(device_id))
        except FirebaseUnavailableError as e:
            logger.warning(f"[DeviceStatus] Falling back to error status for {device_id}: {e}")
            return error_status(device_id)

    def update_status(self, device_id: str, values: Dict[str, Any]) -> None:
        """Write camelCase keys into the node; missing keys are left untouched"""
        try:
            self._get_reference(self._path(device_id)).update(values)
        except FirebaseUnavailableError:
            raise
        except Exception as e:
            logger.error(f"[DeviceStatus] Write failed for {device_id}: {e}")
            raise FirebaseUnavailableError(str(e)) from e


device_status_store = DeviceStatusStore()
