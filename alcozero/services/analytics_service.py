"""
Chart data and exports for the analytics dashboard.

Everything here works on a bounded window of recent records (the last 200
logs and 100 alerts) narrowed to the selected time range.
"""
import csv
from datetime import timedelta
from io import BytesIO, StringIO
from typing import Any, Dict, List, Sequence

import openpyxl
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from sqlalchemy.orm import Session

from alcozero.config import settings
from alcozero.core.severity import (
    Severity,
    bucket_distribution,
    classify_severity,
    severity_distribution,
)
from alcozero.crud.alert import get_alerts
from alcozero.crud.device_log import get_logs, get_logs_between
from alcozero.models.alert import Alert
from alcozero.models.device_log import DeviceLog
from alcozero.schemas.analytics import TimeRangeEnum
from alcozero.schemas.device import DeviceStatistics
from common_utils import days_ago, utcnow

LOG_WINDOW = 200
ALERT_WINDOW = 100

CSV_HEADERS = ["Type", "Timestamp", "BAC Level", "Engine Status", "Device ID"]


def _level(record) -> float:
    return float(record.alcohol_level or 0)


def fetch_window(db: Session, time_range: TimeRangeEnum, now=None):
    """(logs, alerts) inside the range, taken from the bounded recent window"""
    cutoff = (now or utcnow()) - timedelta(days=time_range.days)
    logs = [log for log in get_logs(db, limit=LOG_WINDOW) if log.timestamp >= cutoff]
    alerts = [alert for alert in get_alerts(db, limit=ALERT_WINDOW) if alert.timestamp >= cutoff]
    return logs, alerts


def hourly_breakdown(logs: Sequence[DeviceLog], alerts: Sequence[Alert] = ()) -> List[Dict[str, Any]]:
    hours: Dict[int, Dict[str, Any]] = {}
    for log in logs:
        bucket = hours.setdefault(log.timestamp.hour, {"hour": log.timestamp.hour, "readings": 0, "total": 0.0, "alerts": 0})
        bucket["readings"] += 1
        bucket["total"] += _level(log)
    for alert in alerts:
        if alert.timestamp.hour in hours:
            hours[alert.timestamp.hour]["alerts"] += 1

    return [
        {
            "hour": item["hour"],
            "readings": item["readings"],
            "avg_bac": item["total"] / item["readings"],
            "alerts": item["alerts"],
        }
        for item in sorted(hours.values(), key=lambda i: i["hour"])
    ]


def daily_breakdown(logs: Sequence[DeviceLog]) -> List[Dict[str, Any]]:
    days: Dict[str, Dict[str, Any]] = {}
    for log in sorted(logs, key=lambda l: l.timestamp):
        key = log.timestamp.date().isoformat()
        bucket = days.setdefault(key, {"date": key, "readings": 0, "total": 0.0, "max_bac": 0.0})
        bucket["readings"] += 1
        bucket["total"] += _level(log)
        bucket["max_bac"] = max(bucket["max_bac"], _level(log))

    return [
        {
            "date": item["date"],
            "readings": item["readings"],
            "avg_bac": item["total"] / item["readings"],
            "max_bac": item["max_bac"],
        }
        for item in days.values()
    ]


def build_summary(logs: Sequence[DeviceLog], alerts: Sequence[Alert], time_range: TimeRangeEnum) -> Dict[str, Any]:
    levels = [_level(log) for log in logs]
    return {
        "range": time_range.value,
        "total_readings": len(logs),
        "total_alerts": len(alerts),
        "average_bac": sum(levels) / max(len(levels), 1),
        "max_bac": max(levels + [0.0]),
        "alert_rate": round(len(alerts) / max(len(logs), 1) * 100, 1),
        "hourly": hourly_breakdown(logs, alerts),
        "daily": daily_breakdown(logs),
        "alert_distribution": severity_distribution(_level(alert) for alert in alerts),
        "bac_distribution": bucket_distribution(levels),
    }


def export_rows(logs: Sequence[DeviceLog], alerts: Sequence[Alert]) -> List[List[Any]]:
    """One ``Log`` row per log followed by one ``Alert`` row per alert"""
    default_device = settings.DEFAULT_DEVICE_ID
    rows = [
        ["Log", log.timestamp.isoformat(), log.alcohol_level, log.engine, log.device_id or default_device]
        for log in logs
    ]
    rows.extend(
        ["Alert", alert.timestamp.isoformat(), alert.alcohol_level, alert.engine, alert.device_id or default_device]
        for alert in alerts
    )
    return rows


def build_csv(logs: Sequence[DeviceLog], alerts: Sequence[Alert]) -> str:
    buffer = StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    writer.writerows(export_rows(logs, alerts))
    return buffer.getvalue()


def export_filename(time_range: TimeRangeEnum, extension: str) -> str:
    return f"alcozero-analytics-{time_range.value}-{utcnow().date().isoformat()}.{extension}"


def style_excel_report(ws, headers):
    """Styled, frozen header row"""
    header_fill = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
    header_font = Font(bold=True, color="FFFFFF", size=11)
    border = Border(
        left=Side(style='thin'),
        right=Side(style='thin'),
        top=Side(style='thin'),
        bottom=Side(style='thin')
    )

    for col_num, header in enumerate(headers, 1):
        cell = ws.cell(row=1, column=col_num)
        cell.value = header
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = Alignment(horizontal='center', vertical='center', wrap_text=True)
        cell.border = border
        ws.column_dimensions[get_column_letter(col_num)].width = max(len(str(header)) + 5, 15)

    ws.freeze_panes = 'A2'
    return ws


def build_workbook(logs: Sequence[DeviceLog], alerts: Sequence[Alert], time_range: TimeRangeEnum) -> BytesIO:
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Readings"
    style_excel_report(ws, CSV_HEADERS)
    for row_num, row in enumerate(export_rows(logs, alerts), 2):
        for col_num, value in enumerate(row, 1):
            ws.cell(row=row_num, column=col_num, value=value)

    summary = build_summary(logs, alerts, time_range)
    summary_ws = wb.create_sheet(title="Summary")
    summary_data = [
        ["Report Summary", ""],
        ["Generated On", utcnow().strftime('%Y-%m-%d %H:%M:%S')],
        ["Time Range", time_range.value],
        ["", ""],
        ["Total Readings", summary["total_readings"]],
        ["Total Alerts", summary["total_alerts"]],
        ["Average BAC", round(summary["average_bac"], 3)],
        ["Max BAC", round(summary["max_bac"], 3)],
        ["Alert Rate (%)", summary["alert_rate"]],
        ["", ""],
        ["Alert Severity", "Count"],
    ]
    for severity in Severity:
        summary_data.append([severity.label, summary["alert_distribution"][severity.value]])

    for row_num, row_data in enumerate(summary_data, 1):
        for col_num, value in enumerate(row_data, 1):
            cell = summary_ws.cell(row=row_num, column=col_num, value=value)
            if row_num in (1, 11):
                cell.font = Font(bold=True, size=12)

    summary_ws.column_dimensions['A'].width = 30
    summary_ws.column_dimensions['B'].width = 30

    output = BytesIO()
    wb.save(output)
    output.seek(0)
    return output


def device_statistics(db: Session, device_id: str, days: int = 7) -> DeviceStatistics:
    """Reading counts per severity band for one hardware id over the last ``days``"""
    logs = get_logs_between(db, start=days_ago(days), device_id=device_id)
    stats = DeviceStatistics(device_id=device_id, days=days, total_readings=len(logs))

    total = 0.0
    for log in logs:
        level = _level(log)
        total += level
        stats.max_bac = max(stats.max_bac, level)
        severity = classify_severity(level)
        if severity == Severity.CRITICAL:
            stats.critical_readings += 1
            stats.alert_count += 1
        elif severity == Severity.WARNING:
            stats.warning_readings += 1
        else:
            stats.safe_readings += 1

    if logs:
        stats.average_bac = total / len(logs)
    return stats
