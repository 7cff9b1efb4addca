"""
Severity policy: thresholds shared by the dashboard and the telemetry pipeline
"""
import pytest

from alcozero.core.severity import (
    AlertPriority,
    LogStatus,
    MonitorStatus,
    Severity,
    auto_alert_priority,
    bac_bucket,
    bucket_distribution,
    classify_severity,
    crossed_alert_threshold,
    log_status,
    monitor_status,
    severity_distribution,
)


class TestClassifySeverity:
    @pytest.mark.parametrize("level,expected", [
        (0.0, Severity.INFO),
        (0.15, Severity.INFO),
        (0.16, Severity.WARNING),
        (0.3, Severity.WARNING),
        (0.31, Severity.CRITICAL),
        (None, Severity.INFO),
    ])
    def test_bands(self, level, expected):
        """Boundaries belong to the lower band"""
        assert classify_severity(level) == expected

    def test_label_is_upper_case(self):
        assert Severity.CRITICAL.label == "CRITICAL"


class TestMonitorStatus:
    def test_disconnected_wins(self):
        """A disconnected device reports DISCONNECTED whatever its level"""
        assert monitor_status(0.9, connected=False) == MonitorStatus.DISCONNECTED

    def test_connected_bands(self):
        assert monitor_status(0.1, True) == MonitorStatus.SAFE
        assert monitor_status(0.2, True) == MonitorStatus.WARNING
        assert monitor_status(0.35, True).value == "ALERT - HIGH LEVEL"


class TestLogStatusAndAlerts:
    def test_manual_log_threshold(self):
        assert log_status(0.3) == LogStatus.SAFE
        assert log_status(0.31) == LogStatus.ALERT

    def test_custom_threshold(self):
        assert log_status(0.04, threshold=0.03) == LogStatus.ALERT

    def test_only_upward_crossing_fires(self):
        """Staying above the detection threshold does not re-fire"""
        assert crossed_alert_threshold(None, 0.05)
        assert crossed_alert_threshold(0.03, 0.031)
        assert not crossed_alert_threshold(0.05, 0.09)
        assert not crossed_alert_threshold(0.09, 0.02)

    def test_auto_priority(self):
        assert auto_alert_priority(0.05) == AlertPriority.HIGH
        assert auto_alert_priority(0.08) == AlertPriority.HIGH
        assert auto_alert_priority(0.081) == AlertPriority.CRITICAL


class TestDistributions:
    def test_buckets(self):
        assert bac_bucket(0.05) == "0.00 - 0.05"
        assert bac_bucket(0.051) == "0.05 - 0.15"
        assert bac_bucket(0.25) == "0.15 - 0.25"
        assert bac_bucket(0.8) == "0.25+"

    def test_bucket_distribution_keeps_order_and_empty_buckets(self):
        result = bucket_distribution([0.01, 0.02, 0.4])
        assert [item["range"] for item in result] == ["0.00 - 0.05", "0.05 - 0.15", "0.15 - 0.25", "0.25+"]
        assert [item["count"] for item in result] == [2, 0, 0, 1]

    def test_severity_distribution(self):
        assert severity_distribution([0.1, 0.2, 0.35, 0.5]) == {"critical": 2, "warning": 1, "info": 1}
