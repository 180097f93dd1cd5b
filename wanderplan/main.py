import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

# Import all models so every table is registered on Base before create_all
from . import (
    models,  # noqa: F401
    models_crm,  # noqa: F401
)
from .config import ALLOWED_ORIGINS, SECURITY_HEADERS_ENABLED
from .database import Base, engine
from .domain.clients import router as clients_router
from .domain.collaborators import router as collaborators_router
from .domain.events import router as events_router
from .domain.expenses import router as expenses_router
from .domain.guest import router as guest_router
from .domain.invoices import router as invoices_router
from .domain.landing_pages import router as landing_pages_router
from .domain.polls import router as polls_router
from .domain.proposals import router as proposals_router
from .domain.shares import router as shares_router
from .domain.tags import router as tags_router
from .domain.trips import router as trips_router
from .errors import register_exception_handlers
from .routes import auth_router, users_router
from .security_headers import SecurityHeadersMiddleware

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Another worker may have created the tables first
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")
            raise

    yield
    logger.info("Application shutting down...")


app = FastAPI(title="WanderPlan API", version="1.0.0", lifespan=lifespan)

register_exception_handlers(app)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise
    duration_ms = (time.perf_counter() - start) * 1000
    logger.info(f"{request.method} {request.url.path} - {response.status_code} ({duration_ms:.1f}ms)")
    return response


if SECURITY_HEADERS_ENABLED:
    app.add_middleware(SecurityHeadersMiddleware, exclude_paths=["/health"])
    logger.info("Security headers enabled")
else:
    logger.warning("Security headers DISABLED - only use in development!")

logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,  # Session cookie
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    expose_headers=["Retry-After"],
)

# Routes
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(trips_router)
app.include_router(shares_router)
app.include_router(events_router)
app.include_router(collaborators_router)
app.include_router(expenses_router)
app.include_router(tags_router)
app.include_router(polls_router)
app.include_router(clients_router)
app.include_router(invoices_router)
app.include_router(proposals_router)
app.include_router(landing_pages_router)
app.include_router(guest_router)


@app.get("/")
def root():
    return {"message": "WanderPlan API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}
