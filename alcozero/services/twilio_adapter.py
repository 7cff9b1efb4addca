from twilio.rest import Client

from alcozero.config import settings
from alcozero.core.logging_config import get_logger

logger = get_logger(__name__)


class TwilioAdapter:
    """Simple Twilio adapter for sending SMS alerts."""

    def __init__(self):
        if not settings.TWILIO_ENABLED:
            logger.info("TwilioAdapter disabled via configuration")
        self.enabled = settings.TWILIO_ENABLED
        self.account_sid = settings.TWILIO_ACCOUNT_SID
        self.auth_token = settings.TWILIO_AUTH_TOKEN
        self.from_number = settings.TWILIO_PHONE_NUMBER
        self._client = None

    def _get_client(self) -> Client:
        if not self._client:
            self._client = Client(self.account_sid, self.auth_token)
        return self._client

    def send_sms(self, to: str, body: str) -> bool:
        """Send an SMS message via Twilio Messaging API."""
        logger.info("[twilio.sms] Attempting to send SMS to=%s, body_length=%d", to, len(body))

        if not self.enabled:
            logger.warning("[twilio.sms] Twilio disabled - skipping send_sms")
            return False

        try:
            msg = self._get_client().messages.create(body=body, from_=self.from_number, to=to)
            logger.info("[twilio.sms] SMS sent: sid=%s to=%s status=%s",
                        getattr(msg, 'sid', None), to, getattr(msg, 'status', None))
            return True
        except Exception as e:
            logger.error("[twilio.sms] Failed to send SMS to=%s error=%s", to, str(e))
            return False
