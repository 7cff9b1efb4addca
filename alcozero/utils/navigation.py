from typing import Dict, List

BREADCRUMB_LABELS = {
    "": "Home",
    "about": "About",
    "contact": "Contact",
    "dashboard": "Dashboard",
    "events": "Event Log",
    "devices": "Devices",
    "settings": "Settings",
    "monitor": "Monitor",
    "alerts": "Alerts",
    "analytics": "Analytics",
    "security": "Security",
}

PUBLIC_ROUTES = [
    {"path": "/", "label": "Home"},
    {"path": "/about", "label": "About"},
    {"path": "/features", "label": "Features"},
    {"path": "/contact", "label": "Contact"},
    {"path": "/help-center", "label": "Help Center"},
    {"path": "/privacy-policy", "label": "Privacy Policy"},
    {"path": "/terms-of-service", "label": "Terms of Service"},
    {"path": "/faq", "label": "FAQ"},
    {"path": "/login", "label": "Login"},
    {"path": "/signup", "label": "Sign Up"},
]

DASHBOARD_ROUTES = [
    {"path": "/dashboard", "label": "Dashboard"},
    {"path": "/dashboard/monitor", "label": "Monitor"},
    {"path": "/dashboard/alerts", "label": "Alerts"},
    {"path": "/dashboard/analytics", "label": "Analytics"},
    {"path": "/dashboard/devices", "label": "Devices"},
    {"path": "/dashboard/device/:id", "label": "Device Details"},
    {"path": "/dashboard/security", "label": "Security"},
    {"path": "/dashboard/settings", "label": "Settings"},
]


def build_breadcrumbs(path: str) -> List[Dict[str, object]]:
    """
    Home crumb followed by one crumb per path segment with a cumulative href.
    Unknown segments keep their raw text. The last crumb is the current page.
    """
    segments = [segment for segment in (path or "").strip().split("/") if segment]
    crumbs = [{"label": BREADCRUMB_LABELS[""], "href": "/", "current": False}]

    href = ""
    for segment in segments:
        href += "/" + segment
        crumbs.append({"label": BREADCRUMB_LABELS.get(segment, segment), "href": href, "current": False})

    crumbs[-1]["current"] = True
    return crumbs


def breadcrumb_trail(path: str) -> str:
    return " / ".join(crumb["label"] for crumb in build_breadcrumbs(path))
