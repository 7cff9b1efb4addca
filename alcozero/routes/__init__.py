# ── Auth & account ────────────────────────────────────────────
from alcozero.routes.auth_router import router as auth_router
from alcozero.routes.security_router import router as security_router
from alcozero.routes.settings_router import router as settings_router

# ── Fleet ─────────────────────────────────────────────────────
from alcozero.routes.device_router import router as device_router
from alcozero.routes.log_router import router as log_router
from alcozero.routes.alert_router import router as alert_router
from alcozero.routes.analytics_router import router as analytics_router

# ── Real-time ─────────────────────────────────────────────────
from alcozero.routes.monitor_router import router as monitor_router
from alcozero.routes.telemetry_router import router as telemetry_router

# ── Site & housekeeping ───────────────────────────────────────
from alcozero.routes.contact_router import router as contact_router
from alcozero.routes.navigation_router import router as navigation_router
from alcozero.routes.maintenance_router import router as maintenance_router
from alcozero.routes.seed_router import router as seed_router
