"""Main FastAPI application handler for the feedback collector."""

import logging
import os
import time
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from mangum import Mangum
from pydantic import ValidationError

from models.feedback import FeedbackSubmission
from services.feedback_service import FeedbackService
from services.storage_backend import FeedbackStorageError
from utils.environment import StorageSettings

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

APP_VERSION = "1.0.0"
START_TIME = time.time()

SUCCESS_MESSAGE = (
    "Thank you for your valuable feedback! Your response has been recorded."
)
FAILURE_MESSAGE = "Server error occurred while saving your feedback."


@asynccontextmanager
async def lifespan(app):
    """Create the Excel workbook on startup when running locally."""
    if not get_settings().hosting:
        excel = get_feedback_service().get_backend("Excel")
        try:
            excel.ensure_file()
        except FeedbackStorageError as e:
            logger.warning(f"Could not create Excel file on startup: {e}")
    yield


# Initialize FastAPI app
app = FastAPI(
    title="Feedback Collector API",
    description="API for collecting customer feedback into Excel, JSON and CSV files",
    version=APP_VERSION,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    lifespan=lifespan,
)

CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request, call_next):
    """Log all API requests with timing."""
    start = time.time()
    response = await call_next(request)
    duration_ms = (time.time() - start) * 1000

    # Excel saves may retry for up to ~2s
    path = request.url.path
    if duration_ms > 1000:
        logger.warning(
            "[SLOW] %s %s %.0fms status=%d",
            request.method,
            path,
            duration_ms,
            response.status_code,
        )
    elif response.status_code >= 500:
        logger.error(
            "[ERROR] %s %s %.0fms status=%d",
            request.method,
            path,
            duration_ms,
            response.status_code,
        )
    elif response.status_code >= 400:
        logger.info(
            "[CLIENT_ERROR] %s %s %.0fms status=%d",
            request.method,
            path,
            duration_ms,
            response.status_code,
        )

    return response


# Lazy-initialized settings and services
_settings = None
_feedback_service = None


def reset_services():
    """Reset all lazy-initialized services. Useful for testing."""
    global _settings, _feedback_service
    _settings = None
    _feedback_service = None


def get_settings() -> StorageSettings:
    """Get or create storage settings from the process environment."""
    global _settings
    if _settings is None:
        _settings = StorageSettings.from_environment()
    return _settings


def get_feedback_service() -> FeedbackService:
    """Get or create the feedback service (lazy init). Creates no files."""
    global _feedback_service
    if _feedback_service is None:
        _feedback_service = FeedbackService.from_settings(get_settings())
    return _feedback_service


async def _read_payload(request: Request) -> dict:
    """Read a JSON or form-encoded request body into a plain dict.

    Repeated form keys (multi-select checkboxes) become lists.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(
        ("application/x-www-form-urlencoded", "multipart/form-data")
    ):
        form = await request.form()
        payload = {}
        for key in form.keys():
            values = form.getlist(key)
            field = key[:-2] if key.endswith("[]") else key
            payload[field] = values if len(values) > 1 or key.endswith("[]") else values[0]
        return payload

    body = await request.body()
    if not body.strip():
        return {}
    try:
        payload = await request.json()
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Request body must be JSON or form data",
        )
    if not isinstance(payload, dict):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Request body must be an object",
        )
    return payload


# MARK: - Health Check


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    settings = get_settings()
    return {
        "status": "healthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "version": APP_VERSION,
        "environment": settings.environment,
        "hosting": settings.hosting,
        "platform": settings.platform,
        "uptime_seconds": round(time.time() - START_TIME, 3),
        "storage": get_feedback_service().storage_status(),
    }


# MARK: - Feedback Endpoints


@app.post("/submit-feedback")
async def submit_feedback(request: Request):
    """Store a feedback submission in every available backend."""
    payload = await _read_payload(request)
    logger.info(f"Received feedback data: {payload}")

    try:
        submission = FeedbackSubmission.model_validate(payload)
    except ValidationError as e:
        raise HTTPException(
            status_code=422,
            detail=e.errors(
                include_url=False, include_context=False, include_input=False
            ),
        )

    outcome = get_feedback_service().save(submission)

    if outcome.success:
        return {
            "success": True,
            "message": SUCCESS_MESSAGE,
            "storage_methods": outcome.storage_methods,
        }

    content = {"success": False, "message": FAILURE_MESSAGE}
    if not get_settings().is_production:
        content["details"] = [result.model_dump() for result in outcome.details]
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content
    )


@app.get("/view-feedback")
async def view_feedback():
    """Return stored feedback from the highest-priority readable source."""
    rows, source = get_feedback_service().load_all()
    response = {
        "success": True,
        "data": rows,
        "total": len(rows),
        "source": source,
    }
    if not rows:
        response["message"] = "No feedback data found yet."
    return response


def _download(backend_name: str, media_type: str):
    backend = get_feedback_service().get_backend(backend_name)
    if backend is None or not backend.exists():
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={
                "success": False,
                "message": f"No {backend_name} feedback file found.",
            },
        )
    return FileResponse(
        backend.path, media_type=media_type, filename=backend.path.name
    )


@app.get("/download-csv")
async def download_csv():
    """Download the raw CSV feedback file."""
    return _download("CSV", "text/csv")


@app.get("/download-json")
async def download_json():
    """Download the raw JSON feedback file."""
    return _download("JSON", "application/json")


@app.get("/download-excel")
async def download_excel():
    """Download the raw Excel workbook."""
    return _download(
        "Excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )


@app.post("/fix-excel")
async def fix_excel():
    """Remove duplicate and blank rows from the Excel workbook."""
    service = get_feedback_service()
    if get_settings().hosting:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "success": False,
                "message": "Excel repair is not available in a hosting environment.",
            },
        )

    excel = service.get_backend("Excel")
    if excel is None or not excel.exists():
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"success": False, "message": "No Excel file found to fix."},
        )

    report = service.repair_excel()
    return {
        "success": True,
        "message": (
            f"Excel file fixed: {report.rows_after} unique rows kept, "
            f"{report.duplicates_removed} duplicates removed."
        ),
        "report": report.model_dump(),
    }


# MARK: - Error Handlers


@app.exception_handler(FeedbackStorageError)
async def storage_error_handler(request, exc: FeedbackStorageError):
    """Handle storage errors that escape a route."""
    logger.error(f"Storage error on {request.url.path}: {exc}")
    content = {"success": False, "message": "Error accessing feedback data."}
    if not get_settings().is_production:
        content["error"] = str(exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content
    )


@app.exception_handler(ValueError)
async def value_error_handler(request, exc: ValueError):
    """Handle value errors."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)}
    )


# MARK: - Lambda Handler

# Create the Lambda handler
api_handler = Mangum(app, lifespan="off")


# For local development
if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", "8080")))
