# Import all models here so Base.metadata knows every table
from alcozero.models.admin import Admin
from alcozero.models.device import Device, DeviceStatusEnum
from alcozero.models.device_log import DeviceLog
from alcozero.models.alert import Alert, AlertTypeEnum, AlertStatusEnum
from alcozero.models.security_log import SecurityLog
from alcozero.models.user_settings import UserSettings
from alcozero.models.contact import ContactMessage
from alcozero.models.counter import Counter
from alcozero.models.engine_log import EngineLog
from alcozero.models.statistics import DailyStatistic
