"""
Students API routes - REST front end over StudentService.

Provides endpoints for:
- Listing students with pagination
- Creating, reading, updating and deleting a student
- Searching by first name, last name, email, name fragment, status or GPA range
- Counts and per-status statistics

Failures surface as ServiceError or HTTPException and are turned into the
response envelope by the handlers registered in app.main.
"""

import time
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel, Field, field_validator

from app.logging_config import get_logger, log_with_context
from app.responses import paginate, serialize_student, success_response
from app.schemas import OPTIONAL_FIELDS, StudentRecord, StudentStatus
from app.services.student_service import StudentService

router = APIRouter(prefix="/api/v1/students")
logger = get_logger("http")


def get_student_service(request: Request) -> StudentService:
    """FastAPI dependency returning the service built at startup."""
    return request.app.state.student_service


# ── Pydantic schemas ─────────────────────────────────────────

class StudentPayload(BaseModel):
    """Request body for create (POST) and full update (PUT)."""
    first_name: str = Field(..., description="First name, 2-50 letters")
    last_name: str = Field(..., description="Last name, 2-50 letters")
    email: str = Field(..., description="Unique email address")
    phone_number: Optional[str] = Field(None, description="At least 10 digits; required on create")
    date_of_birth: Optional[date] = Field(None, description="ISO date; student must be 16+")
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = Field(None, description="12345 or 12345-6789")
    enrollment_date: Optional[date] = Field(None, description="Defaults to today")
    enrollment_status: Optional[StudentStatus] = Field(None, description="Active | Inactive | Suspended | Graduated")
    gpa: Optional[float] = Field(None, description="Grade point average, 0.0 to 4.0")

    @field_validator("enrollment_status", mode="before")
    @classmethod
    def _parse_status(cls, value):
        if value is None or value == "":
            return None
        return StudentStatus.parse(value)


def _not_found(student_id: int):
    return HTTPException(status_code=404, detail="Student not found with ID: {}".format(student_id))


# ── Collection & search endpoints ────────────────────────────

@router.get("")
def list_students(
    page: int = Query(0, ge=0, description="Zero-based page number"),
    size: int = Query(10, ge=1, le=100, description="Results per page"),
    service: StudentService = Depends(get_student_service)
):
    """List all students with pagination."""
    start_time = time.time()
    students = service.list_students()

    duration_ms = (time.time() - start_time) * 1000
    log_with_context(logger, "INFO",
        "Listed {} students (page {})".format(len(students), page),
        extra_data={"duration_ms": round(duration_ms, 2)})

    return success_response(paginate(students, page, size), "Students retrieved successfully")


@router.post("", status_code=201)
def create_student(payload: StudentPayload, service: StudentService = Depends(get_student_service)):
    """Add a new student."""
    optional = {
        field: getattr(payload, field)
        for field in OPTIONAL_FIELDS
        if getattr(payload, field) is not None
    }
    student = service.add_student(
        payload.first_name, payload.last_name, payload.email, payload.phone_number,
        **optional
    )
    log_with_context(logger, "INFO", "Student {} created via API".format(student.student_id),
                     context={"student_id": student.student_id})
    return success_response(serialize_student(student), "Student created successfully")


@router.get("/search/first-name")
def search_by_first_name(
    name: str = Query(..., description="Exact first name, case-insensitive"),
    service: StudentService = Depends(get_student_service)
):
    students = service.search_by_first_name(name)
    return success_response([serialize_student(s) for s in students], "Search results")


@router.get("/search/last-name")
def search_by_last_name(
    name: str = Query(..., description="Exact last name, case-insensitive"),
    service: StudentService = Depends(get_student_service)
):
    students = service.search_by_last_name(name)
    return success_response([serialize_student(s) for s in students], "Search results")


@router.get("/search/email")
def search_by_email(
    email: str = Query(..., description="Exact email, case-insensitive"),
    service: StudentService = Depends(get_student_service)
):
    student = service.search_by_email(email)
    if student is None:
        raise HTTPException(status_code=404, detail="Student not found with email: {}".format(email))
    return success_response(serialize_student(student), "Student retrieved successfully")


@router.get("/search/name")
def search_by_name(
    name: str = Query(..., description="Name fragment, case-insensitive"),
    page: int = Query(0, ge=0),
    size: int = Query(10, ge=1, le=100),
    service: StudentService = Depends(get_student_service)
):
    """Search students whose first, last or full name contains ``name``."""
    students = service.search_by_name(name)
    return success_response(paginate(students, page, size), "Search results")


@router.get("/search/status")
def search_by_status(
    status: str = Query(..., description="Active | Inactive | Suspended | Graduated"),
    page: int = Query(0, ge=0),
    size: int = Query(10, ge=1, le=100),
    service: StudentService = Depends(get_student_service)
):
    students = service.list_by_status(status)
    label = StudentStatus.parse(status).value
    return success_response(paginate(students, page, size), "Students with status: {}".format(label))


@router.get("/search/gpa")
def filter_by_gpa_range(
    min_gpa: float = Query(..., description="Lowest GPA, inclusive"),
    max_gpa: float = Query(..., description="Highest GPA, inclusive"),
    page: int = Query(0, ge=0),
    size: int = Query(10, ge=1, le=100),
    service: StudentService = Depends(get_student_service)
):
    """Students with a GPA in the range, highest first."""
    students = service.filter_by_gpa_range(min_gpa, max_gpa)
    return success_response(paginate(students, page, size),
                            "GPA Range: {} - {}".format(min_gpa, max_gpa))


@router.get("/statistics")
def get_statistics(service: StudentService = Depends(get_student_service)):
    stats = service.get_statistics()
    return success_response(stats.model_dump(), "Statistics retrieved")


@router.get("/count")
def count_students(service: StudentService = Depends(get_student_service)):
    return success_response({"count": service.count_students()}, "Student count")


# ── Single-student endpoints ─────────────────────────────────

@router.get("/{student_id}")
def get_student(student_id: int, service: StudentService = Depends(get_student_service)):
    """Get a student by ID."""
    student = service.get_student(student_id)
    if student is None:
        raise _not_found(student_id)
    return success_response(serialize_student(student), "Student retrieved successfully")


@router.put("/{student_id}")
def update_student(student_id: int, payload: StudentPayload,
                   service: StudentService = Depends(get_student_service)):
    """Replace every mutable field of an existing student."""
    record = StudentRecord(student_id=student_id, **payload.model_dump())
    if not service.update_student(record):
        raise _not_found(student_id)

    log_with_context(logger, "INFO", "Student {} updated via API".format(student_id),
                     context={"student_id": student_id})
    return success_response(serialize_student(service.get_student(student_id)),
                            "Student updated successfully")


@router.delete("/{student_id}")
def delete_student(student_id: int, service: StudentService = Depends(get_student_service)):
    """Remove a student."""
    if not service.delete_student(student_id):
        raise _not_found(student_id)

    log_with_context(logger, "INFO", "Student {} deleted via API".format(student_id),
                     context={"student_id": student_id})
    return success_response(message="Student deleted successfully")
