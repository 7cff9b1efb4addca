"""
BAC severity policy.

Every numeric threshold the dashboard and the telemetry pipeline use lives
here. Levels are BAC readings as reported by the sensor (e.g. 0.12).
"""
from enum import Enum
from typing import Dict, Iterable, List

# Dashboard display thresholds
WARNING_THRESHOLD = 0.15
CRITICAL_THRESHOLD = 0.3

# Sensor pipeline: a reading above this is a detection
AUTO_ALERT_THRESHOLD = 0.03
# Auto alerts above this are raised as CRITICAL instead of HIGH
AUTO_ALERT_CRITICAL_LEVEL = 0.08

# Manually recorded logs are flagged at the dashboard's critical level
LOG_ALERT_THRESHOLD = CRITICAL_THRESHOLD

# (label, lower bound exclusive, upper bound inclusive)
BAC_BUCKETS = (
    ("0.00 - 0.05", None, 0.05),
    ("0.05 - 0.15", 0.05, 0.15),
    ("0.15 - 0.25", 0.15, 0.25),
    ("0.25+", 0.25, None),
)


class Severity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"

    @property
    def label(self) -> str:
        return self.value.upper()


class MonitorStatus(str, Enum):
    DISCONNECTED = "DISCONNECTED"
    ALERT = "ALERT - HIGH LEVEL"
    WARNING = "WARNING"
    SAFE = "SAFE"


class LogStatus(str, Enum):
    SAFE = "SAFE"
    ALERT = "ALERT"


class AlertPriority(str, Enum):
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"


SEVERITY_FILTERS = ("all",) + tuple(s.value for s in Severity)


def _level(value) -> float:
    return float(value or 0)


def classify_severity(level) -> Severity:
    level = _level(level)
    if level > CRITICAL_THRESHOLD:
        return Severity.CRITICAL
    if level > WARNING_THRESHOLD:
        return Severity.WARNING
    return Severity.INFO


def monitor_status(level, connected: bool) -> MonitorStatus:
    if not connected:
        return MonitorStatus.DISCONNECTED
    level = _level(level)
    if level > CRITICAL_THRESHOLD:
        return MonitorStatus.ALERT
    if level > WARNING_THRESHOLD:
        return MonitorStatus.WARNING
    return MonitorStatus.SAFE


def log_status(level, threshold: float = LOG_ALERT_THRESHOLD) -> LogStatus:
    return LogStatus.ALERT if _level(level) > threshold else LogStatus.SAFE


def crossed_alert_threshold(previous, current) -> bool:
    """Upward crossing of the detection threshold; staying above does not re-fire"""
    return _level(current) > AUTO_ALERT_THRESHOLD and _level(previous) <= AUTO_ALERT_THRESHOLD


def auto_alert_priority(level) -> AlertPriority:
    return AlertPriority.CRITICAL if _level(level) > AUTO_ALERT_CRITICAL_LEVEL else AlertPriority.HIGH


def bac_bucket(level) -> str:
    level = _level(level)
    for label, lower, upper in BAC_BUCKETS:
        if (lower is None or level > lower) and (upper is None or level <= upper):
            return label
    return BAC_BUCKETS[-1][0]


def severity_distribution(levels: Iterable) -> Dict[str, int]:
    distribution = {s.value: 0 for s in Severity}
    for level in levels:
        distribution[classify_severity(level).value] += 1
    return distribution


def bucket_distribution(levels: Iterable) -> List[Dict[str, object]]:
    counts = {label: 0 for label, _, _ in BAC_BUCKETS}
    for level in levels:
        counts[bac_bucket(level)] += 1
    return [{"range": label, "count": counts[label]} for label, _, _ in BAC_BUCKETS]
