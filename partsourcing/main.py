# Set Windows event loop policy FIRST before any other imports
import sys
import asyncio

if sys.platform == 'win32':
    # ProactorEventLoop is required for Playwright subprocess spawning
    asyncio.set_event_loop_policy(asyncio.WindowsProactorEventLoopPolicy())

import logging
import traceback
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from partsourcing.core.config import settings
from partsourcing.core.dependencies import get_session_manager

# Setup Logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Multi-Vendor Parts Sourcing & Matching Engine",
    docs_url="/docs",
    redoc_url="/redoc",
)

# --------------------------------------------------------------------------
# CORS Middleware
# --------------------------------------------------------------------------
origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
]

if settings.PORTAL_BASE_URL and settings.PORTAL_BASE_URL not in origins:
    origins.append(settings.PORTAL_BASE_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --------------------------------------------------------------------------
# Startup / Shutdown
# --------------------------------------------------------------------------
@app.on_event("startup")
async def on_startup():
    if settings.INVENTORY_ADAPTER_TYPE != "mongo":
        logger.info(f"Using {settings.INVENTORY_ADAPTER_TYPE} inventory, no database to connect")
        return

    from partsourcing.core.database import init_db
    try:
        logger.info("Connecting to Database...")
        await init_db()
        logger.info("Database Connection Successful!")
    except Exception as e:
        logger.error(f"Database Connection FAILED: {e}")


@app.on_event("shutdown")
async def on_shutdown():
    # Browser is released exactly once, however many requests ran
    await get_session_manager().cleanup()

# --------------------------------------------------------------------------
# Global Exception Handler (JSON response even on 500)
# --------------------------------------------------------------------------
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    error_msg = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    logger.error(f"ERROR OCCURRED AT {request.url.path}:\n{error_msg}")

    return JSONResponse(
        status_code=500,
        content={
            "message": "Internal Server Error",
            "detail": str(exc),
            "path": str(request.url)
        }
    )

# --------------------------------------------------------------------------
# Basic Routes
# --------------------------------------------------------------------------
@app.get("/")
async def root():
    return {
        "message": "PartSourcing API is running",
        "version": settings.APP_VERSION,
        "docs": "/docs"
    }

@app.get("/health")
async def health_check():
    return {"status": "healthy"}

# --------------------------------------------------------------------------
# API Routers
# --------------------------------------------------------------------------
from partsourcing.api.v1 import api_router

app.include_router(api_router, prefix="/api/v1")
