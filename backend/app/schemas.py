"""
Domain types shared by the stores, the service and both front ends.

``StudentRecord`` is the plain record passed across every layer. Neither
the service nor the front ends ever see an ORM row.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StudentStatus(str, Enum):
    """Closed set of enrollment statuses."""
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    SUSPENDED = "Suspended"
    GRADUATED = "Graduated"

    @classmethod
    def parse(cls, value) -> "StudentStatus":
        """
        Accept an enum member, a display value ("Active") or a member
        name in any case ("ACTIVE", "active").

        Raises:
            ValueError: if the value is not one of the four statuses
        """
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        for status in cls:
            if text.upper() == status.name or text.lower() == status.value.lower():
                return status
        allowed = ", ".join(s.value for s in cls)
        raise ValueError(f"Enrollment status must be one of: {allowed}")


# Fields replaced by update; student_id and created_at are never touched.
MUTABLE_FIELDS = (
    "first_name", "last_name", "email", "phone_number", "date_of_birth",
    "address", "city", "state", "zip_code", "enrollment_date",
    "enrollment_status", "gpa",
)

# Keyword fields accepted by the service when adding a student.
OPTIONAL_FIELDS = (
    "date_of_birth", "address", "city", "state", "zip_code",
    "enrollment_date", "enrollment_status", "gpa",
)

# Required fields that get a default on create; an update carrying None
# for them keeps the stored value.
DEFAULTED_FIELDS = ("enrollment_date", "enrollment_status")


class StudentRecord(BaseModel):
    """A student as stored by any backend."""
    model_config = ConfigDict(from_attributes=True, validate_assignment=True)

    student_id: Optional[int] = Field(None, description="Assigned by the store on create")
    first_name: str
    last_name: str
    email: str
    phone_number: Optional[str] = None
    date_of_birth: Optional[date] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    enrollment_date: Optional[date] = None
    enrollment_status: Optional[StudentStatus] = None
    gpa: Optional[float] = Field(None, description="Grade point average, 0.0 to 4.0")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("enrollment_status", mode="before")
    @classmethod
    def _parse_status(cls, value):
        if value is None or value == "":
            return None
        return StudentStatus.parse(value)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def copy_record(self) -> "StudentRecord":
        """Independent copy, so callers never share state with a store."""
        return self.model_copy(deep=True)

    def __repr__(self):
        return f"<StudentRecord(id={self.student_id}, name='{self.full_name}', email='{self.email}')>"


class StudentStatistics(BaseModel):
    """Per-status counts plus GPA figures (None when no student has a GPA)."""
    total_students: int = 0
    active_students: int = 0
    inactive_students: int = 0
    suspended_students: int = 0
    graduated_students: int = 0
    average_gpa: Optional[float] = None
    highest_gpa: Optional[float] = None
    lowest_gpa: Optional[float] = None
