from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response, StreamingResponse
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from alcozero.core.logging_config import get_logger
from alcozero.crud.statistics import get_recent_statistics
from alcozero.database.session import get_db
from alcozero.schemas.analytics import DailyStatisticResponse, TimeRangeEnum
from alcozero.services import analytics_service
from alcozero.utils.response_utils import ResponseWrapper, handle_db_error, handle_http_error
from common_utils.auth.permission_checker import PermissionChecker

logger = get_logger(__name__)
router = APIRouter(prefix="/analytics", tags=["analytics"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("/summary", status_code=status.HTTP_200_OK)
def get_summary(
    time_range: TimeRangeEnum = Query(TimeRangeEnum.SEVEN_DAYS, alias="range"),
    db: Session = Depends(get_db),
    user_data=Depends(PermissionChecker(["analytics.read"])),
):
    """Headline numbers plus hourly, daily and distribution chart data."""
    try:
        logs, alerts = analytics_service.fetch_window(db, time_range)
        summary = analytics_service.build_summary(logs, alerts, time_range)
        logger.info(f"[Analytics] Summary {time_range.value}: {summary['total_readings']} readings, {summary['total_alerts']} alerts")
        return ResponseWrapper.success(data=summary, message=f"Analytics for the last {time_range.value}")
    except SQLAlchemyError as e:
        logger.exception(f"[Analytics] DB error: {e}")
        raise handle_db_error(e)
    except Exception as e:
        logger.exception(f"[Analytics] Unexpected error: {e}")
        raise handle_http_error(e)


@router.get("/export.csv", status_code=status.HTTP_200_OK)
def export_csv(
    time_range: TimeRangeEnum = Query(TimeRangeEnum.SEVEN_DAYS, alias="range"),
    db: Session = Depends(get_db),
    user_data=Depends(PermissionChecker(["analytics.read"])),
):
    try:
        logs, alerts = analytics_service.fetch_window(db, time_range)
        content = analytics_service.build_csv(logs, alerts)
        filename = analytics_service.export_filename(time_range, "csv")
        logger.info(f"[AnalyticsExport] CSV {filename}: {len(logs)} logs, {len(alerts)} alerts")
        return Response(
            content=content,
            media_type="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )
    except SQLAlchemyError as e:
        logger.exception(f"[AnalyticsExport] DB error: {e}")
        raise handle_db_error(e)
    except Exception as e:
        logger.exception(f"[AnalyticsExport] Unexpected error: {e}")
        raise handle_http_error(e)


@router.get("/export.xlsx", status_code=status.HTTP_200_OK)
def export_xlsx(
    time_range: TimeRangeEnum = Query(TimeRangeEnum.SEVEN_DAYS, alias="range"),
    db: Session = Depends(get_db),
    user_data=Depends(PermissionChecker(["analytics.read"])),
):
    try:
        logs, alerts = analytics_service.fetch_window(db, time_range)
        output = analytics_service.build_workbook(logs, alerts, time_range)
        filename = analytics_service.export_filename(time_range, "xlsx")
        logger.info(f"[AnalyticsExport] Workbook {filename}: {len(logs)} logs, {len(alerts)} alerts")
        return StreamingResponse(
            output,
            media_type=XLSX_MEDIA_TYPE,
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )
    except SQLAlchemyError as e:
        logger.exception(f"[AnalyticsExport] DB error: {e}")
        raise handle_db_error(e)
    except Exception as e:
        logger.exception(f"[AnalyticsExport] Unexpected error: {e}")
        raise handle_http_error(e)


@router.get("/daily-statistics", status_code=status.HTTP_200_OK)
def list_daily_statistics(
    limit: int = Query(30, ge=1, le=365),
    db: Session = Depends(get_db),
    user_data=Depends(PermissionChecker(["analytics.read"])),
):
    rows = get_recent_statistics(db, limit=limit)
    return ResponseWrapper.success(
        data={"items": [DailyStatisticResponse.model_validate(row) for row in rows]},
        message=f"{len(rows)} daily statistic rows",
    )
