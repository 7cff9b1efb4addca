import os
from typing import List
from pydantic_settings import BaseSettings


def _csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    ENV: str = os.getenv("ENV", "development")  # development, dev-server, production
    DEBUG: bool = ENV in ["development", "dev-server"]

    # Database settings
    POSTGRES_HOST: str = os.getenv("POSTGRES_HOST", "localhost")
    POSTGRES_USER: str = os.getenv("POSTGRES_USER", "alcozero")
    POSTGRES_PASSWORD: str = os.getenv("POSTGRES_PASSWORD", "alcozero")
    POSTGRES_DB: str = os.getenv("POSTGRES_DB", "alcozero_db")
    POSTGRES_PORT: int = int(os.getenv("POSTGRES_PORT", "5432"))
    DATABASE_URL: str = os.getenv("DATABASE_URL", f"postgresql://{POSTGRES_USER}:{POSTGRES_PASSWORD}@{POSTGRES_HOST}:{POSTGRES_PORT}/{POSTGRES_DB}")

    # Database connection pool settings
    DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "10"))
    DB_MAX_OVERFLOW: int = int(os.getenv("DB_MAX_OVERFLOW", "20"))
    DB_POOL_TIMEOUT: int = int(os.getenv("DB_POOL_TIMEOUT", "30"))
    DB_POOL_RECYCLE: int = int(os.getenv("DB_POOL_RECYCLE", "3600"))

    # Redis settings (token revocation list)
    REDIS_HOST: str = os.getenv("REDIS_HOST", "localhost")
    REDIS_PORT: int = int(os.getenv("REDIS_PORT", "6379"))
    REDIS_DB: int = int(os.getenv("REDIS_DB", "0"))
    REDIS_PASSWORD: str = os.getenv("REDIS_PASSWORD", "")
    USE_REDIS: bool = os.getenv("USE_REDIS", "0") == "1"

    # Auth settings
    SECRET_KEY: str = os.getenv("SECRET_KEY", "supersecretkey")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))

    # Firebase Realtime Database (live device telemetry)
    FIREBASE_ENABLED: bool = os.getenv("FIREBASE_ENABLED", "false").lower() == "true"
    FIREBASE_KEY_PATH: str = os.getenv("FIREBASE_KEY_PATH", "firebase_key.json")
    FIREBASE_DATABASE_URL: str = os.getenv("FIREBASE_DATABASE_URL", "")
    DEVICE_STATUS_ROOT: str = os.getenv("DEVICE_STATUS_ROOT", "deviceStatus")

    # Cloudinary unsigned uploads (driver photos, captured images)
    CLOUDINARY_CLOUD_NAME: str = os.getenv("CLOUDINARY_CLOUD_NAME", "")
    CLOUDINARY_UPLOAD_PRESET: str = os.getenv("CLOUDINARY_UPLOAD_PRESET", "ml_default")
    CLOUDINARY_FOLDER: str = os.getenv("CLOUDINARY_FOLDER", "alchozero/drivers")
    CLOUDINARY_TIMEOUT: float = float(os.getenv("CLOUDINARY_TIMEOUT", "30"))
    MAX_IMAGE_SIZE_MB: int = int(os.getenv("MAX_IMAGE_SIZE_MB", "5"))
    MAX_CAPTURED_IMAGES: int = int(os.getenv("MAX_CAPTURED_IMAGES", "5"))

    # SMTP Email settings
    SMTP_SERVER: str = os.getenv("SMTP_SERVER", "")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USERNAME: str = os.getenv("SMTP_USERNAME", "")
    SMTP_PASSWORD: str = os.getenv("SMTP_PASSWORD", "")
    SMTP_USE_TLS: bool = os.getenv("SMTP_USE_TLS", "true").lower() == "true"
    SMTP_USE_SSL: bool = os.getenv("SMTP_USE_SSL", "false").lower() == "true"
    SENDER_EMAIL: str = os.getenv("SENDER_EMAIL", "")
    SENDER_NAME: str = os.getenv("SENDER_NAME", "AlcoZero Alert")
    EMAIL_ENABLED: bool = os.getenv("EMAIL_ENABLED", "true").lower() == "true"
    EMAIL_RETRY_ATTEMPTS: int = int(os.getenv("EMAIL_RETRY_ATTEMPTS", "1"))
    ALERT_EMAIL_RECIPIENTS: str = os.getenv("ALERT_EMAIL_RECIPIENTS", "admin@alcozero.com")

    # Twilio SMS alerts (off unless configured)
    TWILIO_ENABLED: bool = os.getenv("TWILIO_ENABLED", "false").lower() == "true"
    TWILIO_ACCOUNT_SID: str = os.getenv("TWILIO_ACCOUNT_SID", "")
    TWILIO_AUTH_TOKEN: str = os.getenv("TWILIO_AUTH_TOKEN", "")
    TWILIO_PHONE_NUMBER: str = os.getenv("TWILIO_PHONE_NUMBER", "")
    SMS_ALERTS_ENABLED: bool = os.getenv("SMS_ALERTS_ENABLED", "false").lower() == "true"
    ALERT_SMS_RECIPIENTS: str = os.getenv("ALERT_SMS_RECIPIENTS", "")

    # Telemetry & maintenance
    DEFAULT_DEVICE_ID: str = os.getenv("DEFAULT_DEVICE_ID", "Car123")
    LOG_RETENTION_DAYS: int = int(os.getenv("LOG_RETENTION_DAYS", "30"))
    MAINTENANCE_SCHEDULER_ENABLED: bool = os.getenv("MAINTENANCE_SCHEDULER_ENABLED", "false").lower() == "true"
    MAINTENANCE_INTERVAL_HOURS: int = int(os.getenv("MAINTENANCE_INTERVAL_HOURS", "24"))
    MONITOR_POLL_SECONDS: float = float(os.getenv("MONITOR_POLL_SECONDS", "2"))

    # Frontend URL for email links
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:5173")

    # API specific settings
    API_PREFIX: str = "/api/v1"
    APP_NAME: str = "AlcoZero"
    APP_VERSION: str = "1.0.0"

    @property
    def alert_email_recipients(self) -> List[str]:
        return _csv(self.ALERT_EMAIL_RECIPIENTS)

    @property
    def alert_sms_recipients(self) -> List[str]:
        return _csv(self.ALERT_SMS_RECIPIENTS)

    class Config:
        case_sensitive = True
        env_file = None

settings = Settings()
