"""
Student Records Platform - FastAPI Application Entry Point.

This is the main application module that:
1. Initializes the FastAPI app with CORS middleware
2. Sets up structured JSON logging
3. Builds the record store and StudentService once at startup
4. Implements request ID middleware (X-Request-ID header)
5. Maps service errors to HTTP status codes in the response envelope
6. Registers the student routes and a health check endpoint

The application follows a modular architecture:
- routes/: API endpoint handlers
- services/: validation rules and the StudentService use cases
- stores/: record store contract with in-memory and SQL backends
- models/: SQLAlchemy ORM models
- logging_config.py: Structured logging configuration
- database.py: Database connection management
"""

import time
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.exceptions import ErrorKind, ServiceError
from app.logging_config import (
    setup_logging, get_logger, log_with_context,
    request_id_var, generate_request_id
)
from app.responses import error_response
from app.routes import students
from app.services.student_service import StudentService
from app.stores.factory import create_store

# ──────────────────────────────────────────────────────────────
# Initialize structured logging BEFORE anything else
# ──────────────────────────────────────────────────────────────
setup_logging()
logger = get_logger("http")

STATUS_BY_KIND = {
    ErrorKind.INVALID_ARGUMENT: 400,
    ErrorKind.VALIDATION: 400,
    ErrorKind.DUPLICATE_KEY: 409,
    ErrorKind.STORAGE: 500,
}

# ──────────────────────────────────────────────────────────────
# Create FastAPI application
# ──────────────────────────────────────────────────────────────
app = FastAPI(
    title="Student Records Platform",
    description=(
        "REST API for managing student records: create, read, update and "
        "delete students, search by name, email or status, and view "
        "enrollment statistics."
    ),
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.state.student_service = StudentService(create_store())

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"]
)


# ──────────────────────────────────────────────────────────────
# Request ID Middleware
#
# Generates a UUID per request, stores it in a context variable so every
# log entry carries it, returns it in X-Request-ID and logs latency.
# ──────────────────────────────────────────────────────────────
@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    req_id = generate_request_id()
    request_id_var.set(req_id)

    start_time = time.time()

    log_with_context(logger, "INFO",
        f"Request started: {request.method} {request.url.path}",
        context={"request_id": req_id},
        extra_data={
            "ip": request.client.host if request.client else "unknown",
            "user_agent": request.headers.get("user-agent", ""),
            "query_params": dict(request.query_params)
        })

    response = await call_next(request)

    duration_ms = (time.time() - start_time) * 1000
    response.headers["X-Request-ID"] = req_id

    log_with_context(logger, "INFO",
        f"Request completed: {request.method} {request.url.path} → {response.status_code}",
        context={"request_id": req_id},
        extra_data={
            "duration_ms": round(duration_ms, 2),
            "status_code": response.status_code
        })

    return response


# ──────────────────────────────────────────────────────────────
# Exception handlers - every error uses the response envelope
# ──────────────────────────────────────────────────────────────
@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    status_code = STATUS_BY_KIND.get(exc.kind, 500)
    level = "ERROR" if status_code >= 500 else "WARNING"
    log_with_context(logger, level, f"Service error: {exc.message}",
                     extra_data={"kind": exc.kind.value, "status_code": status_code})
    data = {"kind": exc.kind.value}
    if exc.field:
        data["field"] = exc.field
    return JSONResponse(status_code=status_code, content=error_response(exc.message, data))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content=error_response(str(exc.detail)))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        errors[".".join(loc) or "request"] = error.get("msg")
    return JSONResponse(status_code=400, content=error_response("Validation failed", errors))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    log_with_context(logger, "ERROR", f"Unhandled error: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content=error_response(f"An error occurred: {exc}"))


app.include_router(students.router, tags=["Students"])


@app.get("/health", tags=["Health"])
def health_check():
    """Health check endpoint for container orchestration and monitoring."""
    service = app.state.student_service
    return {
        "status": "healthy",
        "service": "student-records-backend",
        "version": "1.0.0",
        "store": service.store.name,
    }


@app.get("/", tags=["Root"])
def root():
    """Root endpoint with API information."""
    return {
        "service": "Student Records Platform",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "list": "GET /api/v1/students",
            "create": "POST /api/v1/students",
            "detail": "GET /api/v1/students/{id}",
            "update": "PUT /api/v1/students/{id}",
            "delete": "DELETE /api/v1/students/{id}",
            "search_first_name": "GET /api/v1/students/search/first-name?name=",
            "search_last_name": "GET /api/v1/students/search/last-name?name=",
            "search_email": "GET /api/v1/students/search/email?email=",
            "search_name": "GET /api/v1/students/search/name?name=",
            "search_status": "GET /api/v1/students/search/status?status=",
            "search_gpa": "GET /api/v1/students/search/gpa?min_gpa=&max_gpa=",
            "statistics": "GET /api/v1/students/statistics",
            "count": "GET /api/v1/students/count"
        }
    }
