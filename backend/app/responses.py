"""
Response envelope shared by every REST endpoint.

Shape: {"success": bool, "message": str, "data": ..., "timestamp": epoch_ms}.
``data`` is left out when there is nothing to return.
"""

import time
from typing import Any, Dict, List, Optional, Union

from app.schemas import StudentRecord

Payload = Optional[Union[Dict[str, Any], List[Any], str, int, float, bool]]


def api_response(success: bool, message: str, data: Payload = None) -> Dict[str, Any]:
    body = {
        "success": success,
        "message": message,
        "timestamp": int(time.time() * 1000),
    }
    if data is not None:
        body["data"] = data
    return body


def success_response(data: Payload = None, message: str = "OK") -> Dict[str, Any]:
    return api_response(True, message, data)


def error_response(message: str, data: Payload = None) -> Dict[str, Any]:
    return api_response(False, message, data)


def serialize_student(student: StudentRecord) -> dict:
    """Serialize a StudentRecord for an API response."""
    return {
        "id": student.student_id,
        "first_name": student.first_name,
        "last_name": student.last_name,
        "full_name": student.full_name,
        "email": student.email,
        "phone_number": student.phone_number,
        "date_of_birth": student.date_of_birth.isoformat() if student.date_of_birth else None,
        "address": student.address,
        "city": student.city,
        "state": student.state,
        "zip_code": student.zip_code,
        "enrollment_date": student.enrollment_date.isoformat() if student.enrollment_date else None,
        "status": student.enrollment_status.value if student.enrollment_status else None,
        "gpa": student.gpa,
        "created_at": student.created_at.isoformat() if student.created_at else None,
        "updated_at": student.updated_at.isoformat() if student.updated_at else None,
    }


def paginate(students: List[StudentRecord], page: int, size: int) -> dict:
    """Slice an already-ordered result list. ``page`` is zero-based."""
    total = len(students)
    start = page * size
    return {
        "content": [serialize_student(s) for s in students[start:start + size]],
        "page": page,
        "size": size,
        "total_elements": total,
        "total_pages": (total + size - 1) // size,
    }
