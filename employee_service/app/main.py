from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from shared.logging_config import (
    apply_quiet_filter,
    setup_service_logging,
    log_service_startup,
    log_service_ready,
    log_dependency_status,
    log_service_shutdown,
)
from shared.error_handlers import register_error_handlers
from .api.routes import router as employee_router
from .api.auth_routes import router as auth_router
from .api.errors import hierarchy_exception_handler
from .core.config import settings
from .core.database import init_db, close_db
from .core.exceptions import HierarchyError

logger = setup_service_logging(settings.service_name, log_level=settings.LOG_LEVEL, suppress_warnings=True)
apply_quiet_filter()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events"""
    # Startup
    log_service_startup(logger, settings.service_name, settings.PORT, settings.service_version)

    await init_db()

    log_dependency_status(logger, "SQLite" if settings.is_sqlite else "PostgreSQL", "ok")
    log_service_ready(logger, settings.service_name)

    yield

    # Shutdown
    log_service_shutdown(logger, settings.service_name)
    await close_db()


app = FastAPI(
    title="Employee Hierarchy Service",
    version=settings.service_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Error-ID", "X-Token-Expired", "Content-Disposition"],
)

register_error_handlers(app)
app.add_exception_handler(HierarchyError, hierarchy_exception_handler)

app.include_router(auth_router)
app.include_router(employee_router)


@app.get("/health")
async def health_check():
    return {"status": "ok", "service": settings.service_name}


@app.get("/api")
async def api_index():
    """Endpoint index"""
    return {
        "service": settings.service_name,
        "version": settings.service_version,
        "endpoints": {
            "auth": "/api/auth",
            "employees": "/api/employees",
            "hierarchy": "/api/employees/hierarchy",
            "dashboard": "/api/employees/dashboard-stats",
            "health": "/health",
        },
    }
