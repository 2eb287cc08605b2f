"""
Validation Service - field rules for student records.

Pure functions with no side effects. Each ``validate_*`` function either
returns silently or raises ``ValidationError`` naming the field and the
rule it broke. The service calls them before any store mutation.

Rules:
1. Names: 2-50 characters, letters, spaces, hyphens and apostrophes
2. Email: at most 100 characters, loose ``local@domain`` shape
3. Phone: at least 10 digits once punctuation is stripped
4. Date of birth (optional): not in the future, age 16 or more
5. Zip code (optional): 12345 or 12345-6789
6. Enrollment status (optional): one of the four StudentStatus values
7. GPA (optional): between 0.0 and 4.0 inclusive
"""

import math
import re
from datetime import date
from typing import Optional

from app.exceptions import ValidationError
from app.schemas import StudentStatus

# ──────────────────────────────────────────────────────────────
# Rule constants
# ──────────────────────────────────────────────────────────────
NAME_PATTERN = re.compile(r"^[a-zA-Z\s'-]{2,50}$", re.ASCII)
EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9+_.-]+@(.+)$")
ZIP_CODE_PATTERN = re.compile(r"^[0-9]{5}(-[0-9]{4})?$")

EMAIL_MAX_LENGTH = 100
PHONE_MIN_DIGITS = 10
MINIMUM_AGE_YEARS = 16
GPA_MIN = 0.0
GPA_MAX = 4.0


def is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def normalize_phone(phone: str) -> str:
    """
    Keep only the ASCII digits 0-9 of a phone number.

    Examples:
        "(555) 010-1234" → "5550101234"
        "+1 555 010 1234" → "15550101234"
    """
    if not phone:
        return ""
    return re.sub(r"[^0-9]", "", phone)


def calculate_age(date_of_birth: Optional[date], today: Optional[date] = None) -> int:
    """Age in full years, or -1 when the date is missing or in the future."""
    today = today or date.today()
    if date_of_birth is None or date_of_birth > today:
        return -1
    years = today.year - date_of_birth.year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        years -= 1
    return years


def validate_name(value: Optional[str], field_name: str = "Name") -> None:
    if is_blank(value):
        raise ValidationError(field_name, f"{field_name} cannot be empty")
    if not NAME_PATTERN.match(value.strip()):
        raise ValidationError(
            field_name,
            f"{field_name} must be 2-50 characters and contain only letters, "
            "spaces, hyphens, or apostrophes")


def validate_email(value: Optional[str]) -> None:
    if is_blank(value):
        raise ValidationError("Email", "Email cannot be empty")
    if len(value) > EMAIL_MAX_LENGTH:
        raise ValidationError("Email", f"Email is too long (max {EMAIL_MAX_LENGTH} characters)")
    if not EMAIL_PATTERN.match(value.strip()):
        raise ValidationError("Email", "Invalid email format")


def validate_phone(value: Optional[str]) -> None:
    if is_blank(value):
        raise ValidationError("Phone number", "Phone number cannot be empty")
    if len(normalize_phone(value)) < PHONE_MIN_DIGITS:
        raise ValidationError(
            "Phone number", f"Phone number must contain at least {PHONE_MIN_DIGITS} digits")


def validate_date_of_birth(value: Optional[date], today: Optional[date] = None) -> None:
    """
    Optional field. A present date must not lie in the future and must
    make the student at least MINIMUM_AGE_YEARS old.
    """
    if value is None:
        return
    today = today or date.today()
    if value > today:
        raise ValidationError("Date of birth", "Date of birth cannot be in the future")
    if calculate_age(value, today) < MINIMUM_AGE_YEARS:
        raise ValidationError(
            "Date of birth", f"Student must be at least {MINIMUM_AGE_YEARS} years old")


def validate_zip_code(value: Optional[str]) -> None:
    if is_blank(value):
        return
    if not ZIP_CODE_PATTERN.match(value.strip()):
        raise ValidationError("Zip code", "Zip code must be 5 digits or 5+4 digits (12345-6789)")


def validate_enrollment_status(value) -> None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return
    try:
        StudentStatus.parse(value)
    except ValueError as e:
        raise ValidationError("Enrollment status", str(e)) from e


def validate_gpa(value: Optional[float]) -> None:
    if value is None:
        return
    if math.isnan(value):
        raise ValidationError("GPA", "GPA must be a number")
    if value < GPA_MIN:
        raise ValidationError("GPA", "GPA cannot be negative")
    if value > GPA_MAX:
        raise ValidationError("GPA", f"GPA cannot exceed {GPA_MAX}")
