"""
Notification Service for alcohol alerts
Fans an alert out over email and, when enabled, SMS.
"""
from typing import Dict, Any, Optional

from alcozero.config import settings
from alcozero.core.email_service import EmailService, get_email_service
from alcozero.core.logging_config import get_logger
from alcozero.models.alert import Alert
from alcozero.services.twilio_adapter import TwilioAdapter

logger = get_logger(__name__)


class NotificationService:
    def __init__(self, email_service: Optional[EmailService] = None, sms_adapter: Optional[TwilioAdapter] = None):
        self.email_service = email_service or get_email_service()
        self.sms_adapter = sms_adapter or TwilioAdapter()

    def notify_alert_triggered(self, alert: Alert) -> Dict[str, Any]:
        """Returns which channels succeeded"""
        alert_data = {
            "device_id": alert.device_id,
            "alcohol_level": alert.alcohol_level,
            "engine": alert.engine,
            "priority": alert.priority.value if alert.priority else None,
            "message": alert.message,
            "timestamp": alert.timestamp.isoformat() if alert.timestamp else None,
        }

        result = {"email": self.email_service.send_alcohol_alert_email(alert_data), "sms": 0}

        if settings.SMS_ALERTS_ENABLED:
            for number in settings.alert_sms_recipients:
                if self.sms_adapter.send_sms(number, alert.message):
                    result["sms"] += 1

        logger.info(f"[notification] Alert {alert.alert_id} for {alert.device_id}: email={result['email']} sms={result['sms']}")
        return result

    def notify_engine_locked(self, device_id: str, alcohol_level: float) -> bool:
        sent = self.email_service.send_engine_lock_email(device_id, alcohol_level)
        logger.info(f"[notification] Engine lock notice for {device_id}: email={sent}")
        return sent


_notification_service: Optional[NotificationService] = None


def get_notification_service() -> NotificationService:
    global _notification_service
    if _notification_service is None:
        _notification_service = NotificationService()
    return _notification_service
