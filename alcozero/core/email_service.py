import smtplib
import ssl
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional, List, Dict, Any, Union
from contextlib import contextmanager
from enum import Enum

from alcozero.config import settings
from alcozero.core.logging_config import get_logger

logger = get_logger(__name__)


class EmailPriority(str, Enum):
    """Email priority levels"""
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class EmailService:
    """SMTP sender for AlcoZero alert and engine-lock notifications"""

    def __init__(self):
        self.smtp_server = settings.SMTP_SERVER
        self.smtp_port = settings.SMTP_PORT
        self.smtp_username = settings.SMTP_USERNAME
        self.smtp_password = settings.SMTP_PASSWORD
        self.smtp_use_tls = settings.SMTP_USE_TLS
        self.smtp_use_ssl = settings.SMTP_USE_SSL
        self.app_name = settings.APP_NAME
        self.email_enabled = settings.EMAIL_ENABLED
        self.retry_attempts = max(settings.EMAIL_RETRY_ATTEMPTS, 1)

        self.sender_email = settings.SENDER_EMAIL
        self.sender_name = settings.SENDER_NAME

        self.is_configured = self._validate_config()

    def _validate_config(self) -> bool:
        """Validate SMTP configuration"""
        if not self.email_enabled:
            logger.info("Email service is disabled by configuration")
            return False

        if not all([self.smtp_server, self.smtp_port, self.smtp_username,
                    self.smtp_password, self.sender_email]):
            logger.warning("SMTP configuration incomplete. Email notifications will be disabled.")
            return False

        logger.info(f"Email service configured with {self.smtp_server}:{self.smtp_port} using sender: {self.sender_email}")
        return True

    @contextmanager
    def _create_smtp_connection(self):
        server = None
        try:
            if self.smtp_use_ssl:
                context = ssl.create_default_context()
                server = smtplib.SMTP_SSL(self.smtp_server, self.smtp_port, context=context)
            else:
                server = smtplib.SMTP(self.smtp_server, self.smtp_port)
                if self.smtp_use_tls:
                    server.starttls()

            server.login(self.smtp_username, self.smtp_password)
            yield server

        except smtplib.SMTPAuthenticationError as e:
            logger.error(f"SMTP authentication failed: {str(e)}")
            raise
        except smtplib.SMTPException as e:
            logger.error(f"SMTP error: {str(e)}")
            raise
        finally:
            if server:
                try:
                    server.quit()
                except smtplib.SMTPException:
                    logger.debug("SMTP quit failed; connection already closed")

    def _create_message(
        self,
        to_emails: List[str],
        subject: str,
        html_content: Optional[str] = None,
        text_content: Optional[str] = None,
        priority: EmailPriority = EmailPriority.NORMAL
    ) -> MIMEMultipart:
        msg = MIMEMultipart('alternative')
        msg['Subject'] = subject
        msg['From'] = f"{self.sender_name} <{self.sender_email}>"
        msg['To'] = ', '.join(to_emails)

        if priority == EmailPriority.HIGH:
            msg['X-Priority'] = '2'
        elif priority == EmailPriority.URGENT:
            msg['X-Priority'] = '1'

        if text_content:
            msg.attach(MIMEText(text_content, 'plain', 'utf-8'))
        if html_content:
            msg.attach(MIMEText(html_content, 'html', 'utf-8'))
        return msg

    def send_email(
        self,
        to_emails: Union[str, List[str]],
        subject: str,
        html_content: Optional[str] = None,
        text_content: Optional[str] = None,
        priority: EmailPriority = EmailPriority.NORMAL
    ) -> bool:
        """
        Send an email. Failures are logged and reported as False; alerting
        never fails the request that produced it.

        Returns:
            bool: True if email sent successfully, False otherwise
        """
        if not self.is_configured:
            logger.warning(f"Email service not configured. Skipping email: {subject}")
            return False

        if isinstance(to_emails, str):
            to_emails = [to_emails]

        if not to_emails or not subject:
            logger.error("to_emails and subject are required")
            return False

        if not html_content and not text_content:
            logger.error("Either html_content or text_content is required")
            return False

        for attempt in range(self.retry_attempts):
            try:
                msg = self._create_message(to_emails, subject, html_content, text_content, priority)
                with self._create_smtp_connection() as server:
                    server.send_message(msg, to_addrs=to_emails)

                logger.info(f"Email sent successfully to {', '.join(to_emails)} - Subject: {subject}")
                return True

            except (smtplib.SMTPException, OSError) as e:
                logger.warning(f"Email send attempt {attempt + 1}/{self.retry_attempts} failed: {str(e)}")

        logger.error(f"Failed to send email after {self.retry_attempts} attempts: {subject}")
        return False

    def send_alcohol_alert_email(self, alert_data: Dict[str, Any], recipients: Optional[List[str]] = None) -> bool:
        """High alcohol level detected on a device"""
        recipients = recipients or settings.alert_email_recipients
        level = float(alert_data.get("alcohol_level") or 0)
        device_id = alert_data.get("device_id")

        html_content = f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
            <div style="background-color: #dc3545; color: white; padding: 20px; border-radius: 8px 8px 0 0;">
                <h2 style="margin: 0;">High Alcohol Level Detected</h2>
                <p style="margin: 5px 0 0 0;">{self.app_name} Safety Alert</p>
            </div>
            <div style="background-color: #f9f9f9; padding: 20px; border-radius: 0 0 8px 8px;">
                <p><strong>Device:</strong> {device_id}</p>
                <p><strong>BAC Level:</strong> {level:.3f}</p>
                <p><strong>Engine:</strong> {alert_data.get('engine', 'UNKNOWN')}</p>
                <p><strong>Priority:</strong> {alert_data.get('priority', '')}</p>
                <p><strong>Time:</strong> {alert_data.get('timestamp', '')}</p>
                <p>The vehicle has been flagged. Review the alert in the
                <a href="{settings.FRONTEND_URL}/dashboard/alerts">dashboard</a>.</p>
            </div>
        </div>
        """

        return self.send_email(
            to_emails=recipients,
            subject=f"ALERT: High alcohol level detected on {device_id}",
            html_content=html_content,
            text_content=alert_data.get("message"),
            priority=EmailPriority.URGENT,
        )

    def send_engine_lock_email(self, device_id: str, alcohol_level: float, recipients: Optional[List[str]] = None) -> bool:
        """Engine switched from ON to OFF by the interlock"""
        recipients = recipients or settings.alert_email_recipients

        html_content = f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
            <div style="background-color: #fd7e14; color: white; padding: 20px; border-radius: 8px 8px 0 0;">
                <h2 style="margin: 0;">Engine Locked</h2>
            </div>
            <div style="background-color: #f9f9f9; padding: 20px; border-radius: 0 0 8px 8px;">
                <p>The engine of device <strong>{device_id}</strong> has been locked.</p>
                <p><strong>Last BAC Level:</strong> {float(alcohol_level or 0):.3f}</p>
                <p>Best regards,<br>The {self.app_name} Team</p>
            </div>
        </div>
        """

        return self.send_email(
            to_emails=recipients,
            subject=f"Engine locked on {device_id}",
            html_content=html_content,
            priority=EmailPriority.HIGH,
        )

_email_service: Optional[EmailService] = None


def get_email_service() -> EmailService:
    global _email_service
    if _email_service is None:
        _email_service = EmailService()
    return _email_service
