from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging
import uvicorn
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

# Import routers
from blitzweek.api.routes import admin, auth, health, register, stats
from blitzweek.core.config import settings
from blitzweek.core.exceptions import InternalFailure, RegistrationError
from blitzweek.core.logging import setup_logging
from blitzweek.db.session import SessionLocal, engine
from blitzweek.db.base import Base

# Setup logging
setup_logging()
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan events for startup and shutdown"""
    # Startup
    logger.info("🚀 Starting Blitz Week Registration API...")

    # Create database tables
    logger.info("📦 Creating database tables...")
    Base.metadata.create_all(bind=engine)

    # Test database connection
    try:
        db = SessionLocal()
        db.execute(text("SELECT 1"))
        db.close()
        logger.info("✅ Database connection successful")
    except SQLAlchemyError as e:
        logger.error(f"❌ Database connection failed: {e}")
        raise

    yield

    # Shutdown
    logger.info("👋 Shutting down...")

# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Participant sign-ups and live statistics for ScaleUp Blitz Week",
    version=settings.VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Error handlers
@app.exception_handler(RegistrationError)
async def registration_error_handler(request: Request, exc: RegistrationError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": str(error["loc"][-1]) if error.get("loc") else "body", "message": error["msg"]}
        for error in exc.errors()
    ]
    logger.warning(f"{request.method} {request.url.path} rejected: malformed request")
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": "Validation failed", "errors": errors}
    )

@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    failure = InternalFailure()
    return JSONResponse(status_code=failure.status_code, content=failure.to_payload())

@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    failure = InternalFailure()
    return JSONResponse(status_code=failure.status_code, content=failure.to_payload())

# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(health.router, prefix="/api", tags=["Health"])
app.include_router(register.router, prefix="/api", tags=["Registration"])
app.include_router(admin.router, prefix="/api", tags=["Admin"])
app.include_router(stats.router, prefix="/api", tags=["Statistics"])
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])

@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "service": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "status": "operational",
        "docs": "/docs",
        "endpoints": {
            "register": "POST /api/register",
            "check_registration": "GET /api/check-registration/{identifier}",
            "registration": "GET /api/registration/{registrationNumber}",
            "stats": "GET /api/stats",
            "stats_live": "GET /api/stats/live-count",
            "stats_event": "GET /api/stats/event/{eventName}",
            "health": "GET /health"
        }
    }

def run():
    uvicorn.run("blitzweek.main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)

if __name__ == "__main__":
    run()
