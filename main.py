# File: main.py

from contextlib import asynccontextmanager

import sentry_sdk
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sentry_sdk.integrations.fastapi import FastApiIntegration

from api.routers.all_endpoints import all_routers
from common.config.settings import settings
from common.exceptions.exception_handlers import register_exception_handlers
from common.logging.logger import log_info, log_error
from api.middleware.error_middleware import ErrorLoggingMiddleware
from domain.moderation.services.alert_store import build_alert_store
from domain.moderation.services.sla_monitor import SLAMonitor
from infrastructure.database.mongodb.connection import MongoDBConnection
from infrastructure.database.redis.redis_client import init_redis_pool, close_redis_pool
from infrastructure.setup.initial_setup import ensure_indexes

# Load environment variables
load_dotenv()

# Initialize Sentry
if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        integrations=[FastApiIntegration()],
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        environment=settings.ENVIRONMENT,
        send_default_pii=settings.SENTRY_SEND_PII
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup tasks
    try:
        await MongoDBConnection.connect()
        db = MongoDBConnection.get_db()
        await ensure_indexes(db)

        redis = None
        if settings.SLA_ALERT_DEDUP_BACKEND == "redis":
            redis = await init_redis_pool()

        monitor = SLAMonitor(db, alert_store=build_alert_store(redis))
        if settings.SLA_MONITOR_ENABLED:
            monitor.start()
        app.state.sla_monitor = monitor

        log_info("Artmart Trust & Safety API started", extra={
            "version": app.version, "sla_monitor": settings.SLA_MONITOR_ENABLED
        })
    except Exception as e:
        log_error("Startup failed", extra={"error": str(e)})
        sentry_sdk.capture_exception(e)
        raise

    yield  # Application is running

    # Shutdown tasks
    monitor = getattr(app.state, "sla_monitor", None)
    if monitor is not None:
        await monitor.stop()
    await MongoDBConnection.disconnect()
    await close_redis_pool()
    log_info("Artmart Trust & Safety API stopped")


# Create FastAPI app instance
app = FastAPI(
    title="Artmart Trust & Safety API",
    version="1.0.0",
    description="Reports, moderation actions, SLA monitoring and user blocking for Artmart.",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)


# Request logger middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    log_info("Incoming request", extra={"method": request.method, "path": request.url.path})
    return await call_next(request)

# Register middlewares
app.add_middleware(ErrorLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register exception handlers
register_exception_handlers(app)

# Register routers
app.include_router(all_routers)
