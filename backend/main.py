from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import os

from database import engine, Base
import models  # noqa: F401  (registers tables on Base.metadata)
import schemas
from errors import ApiError, error_envelope
from auth.routes import router as auth_router
from routes.teams import router as teams_router
from routes.tasks import router as tasks_router
from routes.comments import router as comments_router

# Configure logging
logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Team Tasks API",
    description="Teams, membership-scoped tasks and task comments",
    version="1.0.0"
)

# CORS middleware for frontend
DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:3001",
    "http://127.0.0.1:3001",
]
cors_origins = [
    origin.strip()
    for origin in os.environ.get("CORS_ORIGINS", ",".join(DEFAULT_CORS_ORIGINS)).split(",")
    if origin.strip()
]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(auth_router)
app.include_router(teams_router)
app.include_router(tasks_router)
app.include_router(comments_router)


# ============== Startup ==============

@app.on_event("startup")
def create_tables():
    """Create any missing tables."""
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ensured")


# ============== Error envelope ==============

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if isinstance(exc, ApiError):
        message = exc.detail
    elif exc.status_code == status.HTTP_404_NOT_FOUND:
        # Raised by the router itself for unmatched paths
        message = "Route not found"
    else:
        message = str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(message),
        headers=getattr(exc, "headers", None),
    )


def format_validation_errors(errors) -> str:
    parts = []
    for error in errors:
        # Drop the "body"/"query"/"path" prefix from the location
        loc = [str(p) for p in error.get("loc", ())[1:]]
        field = ".".join(loc)
        parts.append(f"{field}: {error.get('msg')}" if field else error.get("msg", "Invalid request"))
    return ", ".join(parts) or "Invalid request"


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    message = format_validation_errors(exc.errors())
    logger.info(f"Request validation failed for {request.method} {request.url.path}: {message}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=error_envelope(message))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_envelope("Server Error"),
    )


# Health check
@app.get("/api/health", response_model=schemas.MessageResponse)
def health_check():
    return schemas.MessageResponse(message="Server is running")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=int(os.environ.get("PORT", "5000")))
