"""
Telemetry rules applied whenever a device's live status changes:

* every change of the alcohol level is logged;
* an upward crossing of the detection threshold raises an AUTO alert and
  notifies;
* every engine state change is logged, and ON -> OFF sends the lock notice;
* the device's ``last_seen`` is refreshed.
"""
from typing import Any, Dict, Optional
from sqlalchemy.orm import Session

from alcozero.core.logging_config import get_logger
from alcozero.core.severity import (
    AUTO_ALERT_THRESHOLD,
    auto_alert_priority,
    crossed_alert_threshold,
    log_status,
)
from alcozero.crud.alert import create_alert
from alcozero.crud.device import device_crud
from alcozero.crud.device_log import create_log
from alcozero.crud.engine_log import create_engine_log
from alcozero.firebase.device_status import DeviceStatusStore, device_status_store, normalize_status
from alcozero.models.alert import AlertTypeEnum
from alcozero.services.notification_service import NotificationService, get_notification_service
from common_utils import epoch_millis

logger = get_logger(__name__)

ENGINE_OFF = "OFF"
ENGINE_ON = "ON"


def auto_alert_message(level: float) -> str:
    return f"ALERT: High alcohol level detected ({float(level):.3f} BAC)"


def engine_action(new_status: str) -> str:
    return "LOCKED" if new_status == ENGINE_OFF else "UNLOCKED"


class TelemetryService:
    def __init__(self, store: Optional[DeviceStatusStore] = None, notifier: Optional[NotificationService] = None):
        self.store = store or device_status_store
        self._notifier = notifier

    @property
    def notifier(self) -> NotificationService:
        if self._notifier is None:
            self._notifier = get_notification_service()
        return self._notifier

    def process_update(
        self,
        db: Session,
        device_id: str,
        alcohol_level: Optional[float] = None,
        engine: Optional[str] = None,
        connected: Optional[bool] = None,
    ) -> Dict[str, Any]:
        """
        Write the new values to the live node, then apply the telemetry rules
        against the previous node. Commits the session.

        Raises:
            FirebaseUnavailableError: the live node could not be read or written
        """
        previous = self.store.get_raw(device_id) or {}

        changes: Dict[str, Any] = {"timestamp": epoch_millis()}
        if alcohol_level is not None:
            changes["alcoholLevel"] = float(alcohol_level)
        if engine is not None:
            changes["engine"] = engine.strip().upper()
        if connected is not None:
            changes["connected"] = bool(connected)

        self.store.update_status(device_id, changes)
        current = {**previous, **changes}
        current_engine = current.get("engine") or "UNKNOWN"

        result: Dict[str, Any] = {"log_id": None, "alert_id": None, "engine_action": None}
        alert = None
        engine_locked = False

        previous_level = previous.get("alcoholLevel")
        if "alcoholLevel" in changes and changes["alcoholLevel"] != previous_level:
            level = changes["alcoholLevel"]
            log = create_log(
                db,
                device_id=device_id,
                alcohol_level=level,
                engine=current_engine,
                status=log_status(level, threshold=AUTO_ALERT_THRESHOLD),
                source="telemetry",
            )
            result["log_id"] = log.log_id

            if crossed_alert_threshold(previous_level, level):
                alert = create_alert(
                    db,
                    device_id=device_id,
                    alcohol_level=level,
                    engine=current_engine,
                    alert_type=AlertTypeEnum.AUTO,
                    message=auto_alert_message(level),
                    priority=auto_alert_priority(level),
                )
                result["alert_id"] = alert.alert_id
                logger.warning(f"[Telemetry] {device_id}: level {previous_level} -> {level}, alert {alert.alert_id} raised")

        previous_engine = previous.get("engine")
        if "engine" in changes and previous_engine is not None and changes["engine"] != previous_engine:
            action = engine_action(changes["engine"])
            create_engine_log(
                db,
                device_id=device_id,
                previous_status=previous_engine,
                new_status=changes["engine"],
                action=action,
            )
            result["engine_action"] = action
            engine_locked = previous_engine == ENGINE_ON and changes["engine"] == ENGINE_OFF
            logger.info(f"[Telemetry] {device_id}: engine {previous_engine} -> {changes['engine']} ({action})")

        device_crud.touch_last_seen(db, device_id=device_id)
        db.commit()

        if alert is not None:
            self.notifier.notify_alert_triggered(alert)
        if engine_locked:
            self.notifier.notify_engine_locked(device_id, current.get("alcoholLevel") or 0)

        result["snapshot"] = normalize_status(device_id, current)
        return result


telemetry_service = TelemetryService()
