from fastapi import APIRouter, Query, status

from alcozero.utils.navigation import DASHBOARD_ROUTES, PUBLIC_ROUTES, breadcrumb_trail, build_breadcrumbs
from alcozero.utils.response_utils import ResponseWrapper

router = APIRouter(prefix="/navigation", tags=["navigation"])


@router.get("/breadcrumbs", status_code=status.HTTP_200_OK)
def get_breadcrumbs(path: str = Query("/", max_length=500)):
    return ResponseWrapper.success(
        data={"path": path, "items": build_breadcrumbs(path), "trail": breadcrumb_trail(path)},
        message="Breadcrumbs",
    )


@router.get("/routes", status_code=status.HTTP_200_OK)
def get_routes():
    """Client route table; dashboard routes require sign-in."""
    return ResponseWrapper.success(
        data={"public": PUBLIC_ROUTES, "dashboard": DASHBOARD_ROUTES},
        message="Client routes",
    )
