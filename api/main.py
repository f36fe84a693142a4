"""
FastAPI main application for the furniture recolor API
"""
import logging
import os
import re
import sys
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

# Add api directory to path for imports
api_dir = os.path.dirname(os.path.abspath(__file__))
if api_dir not in sys.path:
    sys.path.insert(0, api_dir)

from core.config import settings  # noqa: E402
from core.database import create_tables  # noqa: E402
from core.exceptions import RecolorError  # noqa: E402
from core.logging import setup_logging  # noqa: E402
from middleware.logging_middleware import RequestLoggingMiddleware  # noqa: E402
from routers import colors, diagnostics, projects, recolor, uploads  # noqa: E402
from services.recolor_service import RecolorOrchestrator  # noqa: E402
from services.replicate_service import ReplicateGateway  # noqa: E402
from services.storage_service import UPLOAD_URL_PREFIX, UploadStore  # noqa: E402

setup_logging()
logger = logging.getLogger(__name__)


def build_upload_store() -> UploadStore:
    return UploadStore(
        upload_dir=settings.upload_path,
        base_url=settings.public_base_url or settings.server_base_url,
        max_file_size=settings.max_file_size,
        allowed_types=settings.allowed_image_types,
    )


def build_orchestrator() -> RecolorOrchestrator:
    gateway = ReplicateGateway(
        api_token=settings.replicate_api_token,
        public_base_url=settings.public_base_url,
        inpaint_model=settings.replicate_model_inpaint,
        recolor_model=settings.replicate_model_recolor,
        segment_point_model=settings.replicate_model_segment_point,
        segment_auto_model=settings.replicate_model_segment_auto,
        api_base=settings.replicate_api_base,
        user_agent=settings.replicate_user_agent,
    )
    return RecolorOrchestrator(gateway)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info("Starting Furniture Recolor API...")

    if settings.replicate_api_token:
        token = settings.replicate_api_token
        key_preview = f"{token[:7]}...{token[-4:]}" if len(token) > 11 else "***"
        logger.info(f"✅ REPLICATE_API_TOKEN is set: {key_preview}")
    else:
        logger.error("❌ REPLICATE_API_TOKEN is NOT set - segmentation and inpainting will not work!")

    sanitized = re.sub(r":\/\/[^:]*:[^@]*@", "://***:***@", settings.database_url)
    logger.info(f"Database: {sanitized}")

    if settings.public_base_url:
        logger.info(f"Public base URL: {settings.public_base_url}")
    else:
        logger.warning("PUBLIC_BASE_URL is not set - loopback image URLs are sent to Replicate unchanged")

    app.state.upload_store = build_upload_store()
    app.state.upload_store.ensure_directory()
    app.state.orchestrator = build_orchestrator()

    await create_tables()
    logger.info("Application started")

    yield

    logger.info("Shutting down Furniture Recolor API...")
    logger.info("Application stopped")


app = FastAPI(
    title=settings.app_name,
    description="Upload furniture photos and recolor parts with hosted AI models",
    version=settings.version,
    lifespan=lifespan,
    docs_url="/docs" if settings.environment == "development" else None,
    redoc_url="/redoc" if settings.environment == "development" else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(RequestLoggingMiddleware)


@app.middleware("http")
async def uploads_headers(request: Request, call_next):
    """Uploaded assets must be fetchable from any origin, including the inference provider"""
    response = await call_next(request)
    if request.url.path.startswith(f"{UPLOAD_URL_PREFIX}/"):
        response.headers["Access-Control-Allow-Origin"] = "*"
        response.headers["Cache-Control"] = "no-cache"
    return response


@app.exception_handler(RecolorError)
async def recolor_error_handler(request: Request, exc: RecolorError):
    log_level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(log_level, f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"{request.method} {request.url.path} rejected: invalid request data")
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid request data", "error": jsonable_encoder(exc.errors())},
    )


@app.get("/health")
async def health_check():
    """Health check endpoint for load balancers"""
    return {
        "status": "healthy",
        "timestamp": time.time(),
        "version": settings.version,
        "replicate_configured": bool(settings.replicate_api_token),
    }


@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "name": settings.app_name,
        "version": settings.version,
        "docs": "/docs" if settings.environment == "development" else None,
        "endpoints": {
            "upload": "/api/upload",
            "projects": "/api/projects",
            "recolor": "/api/professional-recolor",
            "colors": "/api/colors",
        },
    }


app.include_router(uploads.router, prefix="/api", tags=["uploads"])
app.include_router(projects.router, prefix="/api/projects", tags=["projects"])
app.include_router(recolor.router, prefix="/api", tags=["recolor"])
app.include_router(colors.router, prefix="/api", tags=["colors"])
app.include_router(diagnostics.router, prefix="/api", tags=["diagnostics"])

app.mount(UPLOAD_URL_PREFIX, StaticFiles(directory=settings.upload_path, check_dir=False), name="uploads")

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.environment == "development",
        log_config=None,  # Use our custom logging
        access_log=False,  # We handle this in middleware
    )
