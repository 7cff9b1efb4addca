from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from alcozero.config import settings
from alcozero.core.logging_config import setup_logging, get_logger
from alcozero.database.create_tables import create_tables
from alcozero.routes import (
    auth_router,
    security_router,
    settings_router,
    device_router,
    log_router,
    alert_router,
    analytics_router,
    monitor_router,
    telemetry_router,
    contact_router,
    navigation_router,
    maintenance_router,
    seed_router,
)
from alcozero.services.maintenance_service import maintenance_scheduler

# Setup logging as early as possible
setup_logging(force_configure=True)

logger = get_logger(__name__)
logger.info("🚀 Main module starting...")

app = FastAPI(
    title=f"{settings.APP_NAME} API",
    description="API for the AlcoZero vehicle alcohol-detection dashboard",
    version=settings.APP_VERSION,
)

# Set up CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth_router, prefix=settings.API_PREFIX)
app.include_router(security_router, prefix=settings.API_PREFIX)
app.include_router(settings_router, prefix=settings.API_PREFIX)
app.include_router(device_router, prefix=settings.API_PREFIX)
app.include_router(log_router, prefix=settings.API_PREFIX)
app.include_router(alert_router, prefix=settings.API_PREFIX)
app.include_router(analytics_router, prefix=settings.API_PREFIX)
app.include_router(monitor_router, prefix=settings.API_PREFIX)
app.include_router(telemetry_router, prefix=settings.API_PREFIX)
app.include_router(contact_router, prefix=settings.API_PREFIX)
app.include_router(navigation_router, prefix=settings.API_PREFIX)
app.include_router(maintenance_router, prefix=settings.API_PREFIX)
app.include_router(seed_router, prefix=settings.API_PREFIX)


@app.get("/")
async def root():
    return {"message": "Welcome to AlcoZero API"}


@app.get("/health")
async def health_check():
    return {"message": "I Am Alive!!"}


@app.on_event("startup")
async def startup_event():
    """Application startup event"""
    logger.info(f"🌟 {settings.APP_NAME} application starting up (env={settings.ENV})...")
    create_tables()

    if settings.FIREBASE_ENABLED:
        from alcozero.firebase.config import init_firebase
        try:
            init_firebase()
            logger.info("✅ Firebase initialized")
        except Exception as e:
            # live monitor endpoints report FIREBASE_UNAVAILABLE until fixed
            logger.error(f"❌ Firebase initialization failed: {e}")

    if settings.MAINTENANCE_SCHEDULER_ENABLED:
        maintenance_scheduler.start()


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown event"""
    await maintenance_scheduler.stop()
    logger.info(f"🛑 {settings.APP_NAME} application shutting down...")


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
