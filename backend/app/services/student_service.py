"""
Student Service - use-case layer over a record store.

Validates input, delegates to whichever ``StudentStore`` it was given and
translates every store or validation failure into ``ServiceError`` so the
front ends handle a single error type. Lookups that miss return ``None``,
``False`` or an empty list.
"""

import time
from typing import List, Optional

from pydantic import ValidationError as RecordValidationError

from app.exceptions import (
    DuplicateKeyError, ErrorKind, InvalidArgumentError, ServiceError,
    StorageError, StoreError, ValidationError,
)
from app.logging_config import get_logger, log_with_context
from app.schemas import OPTIONAL_FIELDS, StudentRecord, StudentStatistics, StudentStatus
from app.services import validation
from app.stores.base import StudentStore

logger = get_logger("service")

_KIND_BY_ERROR = (
    (DuplicateKeyError, ErrorKind.DUPLICATE_KEY),
    (InvalidArgumentError, ErrorKind.INVALID_ARGUMENT),
    (StorageError, ErrorKind.STORAGE),
)


def _translate(action: str, exc: StoreError) -> ServiceError:
    kind = ErrorKind.STORAGE
    for error_type, error_kind in _KIND_BY_ERROR:
        if isinstance(exc, error_type):
            kind = error_kind
            break
    return ServiceError(kind, f"Failed to {action}: {exc}")


def _invalid(message: str) -> ServiceError:
    return ServiceError(ErrorKind.INVALID_ARGUMENT, message)


def _validation_failed(exc: ValidationError) -> ServiceError:
    return ServiceError(ErrorKind.VALIDATION, exc.message, field=exc.field)


class StudentService:
    """CRUD and search operations for students."""

    def __init__(self, store: StudentStore):
        if store is None:
            raise ValueError("StudentStore cannot be None")
        self.store = store

    # ── validation ───────────────────────────────────────────

    @staticmethod
    def _validate_optional_fields(record: StudentRecord) -> None:
        validation.validate_date_of_birth(record.date_of_birth)
        validation.validate_zip_code(record.zip_code)
        validation.validate_enrollment_status(record.enrollment_status)
        validation.validate_gpa(record.gpa)

    @staticmethod
    def _require_id(student_id) -> None:
        if student_id is None or student_id <= 0:
            raise _invalid("Invalid student ID")

    @staticmethod
    def _require_term(value: Optional[str], label: str) -> None:
        if validation.is_blank(value):
            raise _invalid(f"{label} cannot be empty")

    # ── operations ───────────────────────────────────────────

    def add_student(self, first_name: str, last_name: str, email: str,
                    phone_number: str, **optional) -> StudentRecord:
        """
        Validate and create a student.

        ``optional`` may carry date_of_birth, address, city, state,
        zip_code, enrollment_date, enrollment_status and gpa. Any other
        keyword is rejected as INVALID_ARGUMENT.
        """
        start_time = time.time()
        unexpected = sorted(set(optional) - set(OPTIONAL_FIELDS))
        if unexpected:
            raise _invalid("Unsupported student fields: {}".format(", ".join(unexpected)))
        try:
            validation.validate_name(first_name, "First name")
            validation.validate_name(last_name, "Last name")
            validation.validate_email(email)
            validation.validate_phone(phone_number)
            validation.validate_enrollment_status(optional.get("enrollment_status"))
            record = StudentRecord(
                first_name=first_name.strip(),
                last_name=last_name.strip(),
                email=email.strip(),
                phone_number=phone_number.strip(),
                **optional,
            )
            self._validate_optional_fields(record)
        except ValidationError as e:
            log_with_context(logger, "INFO", "Rejected new student: {}".format(e.message),
                             context={"email": email}, extra_data={"field": e.field})
            raise _validation_failed(e) from e
        except RecordValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first.get("loc", ())) or "record"
            raise ServiceError(ErrorKind.VALIDATION, "{}: {}".format(field, first.get("msg")),
                               field=field) from e

        try:
            created = self.store.create(record)
        except StoreError as e:
            raise _translate("add student", e) from e

        duration_ms = (time.time() - start_time) * 1000
        log_with_context(logger, "INFO", "Student added: {}".format(created.full_name),
                         context={"student_id": created.student_id},
                         extra_data={"duration_ms": round(duration_ms, 2)})
        return created

    def get_student(self, student_id: int) -> Optional[StudentRecord]:
        self._require_id(student_id)
        try:
            return self.store.find_by_id(student_id)
        except StoreError as e:
            raise _translate("retrieve student", e) from e

    def list_students(self) -> List[StudentRecord]:
        try:
            return self.store.find_all()
        except StoreError as e:
            raise _translate("retrieve students", e) from e

    def search_by_first_name(self, first_name: str) -> List[StudentRecord]:
        self._require_term(first_name, "First name")
        try:
            return self.store.find_by_first_name(first_name)
        except StoreError as e:
            raise _translate("search", e) from e

    def search_by_last_name(self, last_name: str) -> List[StudentRecord]:
        self._require_term(last_name, "Last name")
        try:
            return self.store.find_by_last_name(last_name)
        except StoreError as e:
            raise _translate("search", e) from e

    def search_by_email(self, email: str) -> Optional[StudentRecord]:
        self._require_term(email, "Email")
        try:
            return self.store.find_by_email(email)
        except StoreError as e:
            raise _translate("search", e) from e

    def search_by_name(self, term: str) -> List[StudentRecord]:
        """Case-insensitive substring match on first, last or full name."""
        self._require_term(term, "Name")
        needle = term.strip().lower()
        return [
            s for s in self.list_students()
            if needle in s.first_name.lower()
            or needle in s.last_name.lower()
            or needle in s.full_name.lower()
        ]

    def list_by_status(self, status) -> List[StudentRecord]:
        if status is None or (isinstance(status, str) and not status.strip()):
            raise _invalid("Status cannot be empty")
        try:
            wanted = StudentStatus.parse(status)
        except ValueError as e:
            raise ServiceError(ErrorKind.VALIDATION, str(e), field="Enrollment status") from e
        return [s for s in self.list_students() if s.enrollment_status == wanted]

    def filter_by_gpa_range(self, min_gpa: float, max_gpa: float) -> List[StudentRecord]:
        """Students whose GPA lies in [min_gpa, max_gpa], highest GPA first."""
        if min_gpa is None or max_gpa is None:
            raise _invalid("GPA range requires both a minimum and a maximum")
        for bound in (min_gpa, max_gpa):
            if not validation.GPA_MIN <= bound <= validation.GPA_MAX:
                raise _invalid("GPA range must lie between {} and {}".format(
                    validation.GPA_MIN, validation.GPA_MAX))
        if min_gpa > max_gpa:
            raise _invalid("Minimum GPA cannot exceed maximum GPA")

        matches = [
            s for s in self.list_students()
            if s.gpa is not None and min_gpa <= s.gpa <= max_gpa
        ]
        return sorted(matches, key=lambda s: s.gpa, reverse=True)

    def update_student(self, record: StudentRecord) -> bool:
        """
        Validate and store every mutable field of ``record``.

        Phone is only validated when present. Returns False if no student
        has ``record.student_id``.
        """
        if record is None or record.student_id is None:
            raise _invalid("Invalid student data")
        try:
            validation.validate_name(record.first_name, "First name")
            validation.validate_name(record.last_name, "Last name")
            validation.validate_email(record.email)
            if not validation.is_blank(record.phone_number):
                validation.validate_phone(record.phone_number)
            self._validate_optional_fields(record)
        except ValidationError as e:
            log_with_context(logger, "INFO", "Rejected update: {}".format(e.message),
                             context={"student_id": record.student_id}, extra_data={"field": e.field})
            raise _validation_failed(e) from e

        try:
            updated = self.store.update(record)
        except StoreError as e:
            raise _translate("update student", e) from e

        if not updated:
            log_with_context(logger, "INFO", "Update skipped, student not found",
                             context={"student_id": record.student_id})
        return updated

    def delete_student(self, student_id: int) -> bool:
        self._require_id(student_id)
        try:
            return self.store.delete(student_id)
        except StoreError as e:
            raise _translate("delete student", e) from e

    def count_students(self) -> int:
        try:
            return self.store.count()
        except StoreError as e:
            raise _translate("count students", e) from e

    def get_statistics(self) -> StudentStatistics:
        """Total, per-status counts and GPA average/highest/lowest."""
        students = self.list_students()
        by_status = {status: 0 for status in StudentStatus}
        for student in students:
            if student.enrollment_status in by_status:
                by_status[student.enrollment_status] += 1
        gpas = [s.gpa for s in students if s.gpa is not None]
        return StudentStatistics(
            average_gpa=round(sum(gpas) / len(gpas), 2) if gpas else None,
            highest_gpa=max(gpas) if gpas else None,
            lowest_gpa=min(gpas) if gpas else None,
            total_students=len(students),
            active_students=by_status[StudentStatus.ACTIVE],
            inactive_students=by_status[StudentStatus.INACTIVE],
            suspended_students=by_status[StudentStatus.SUSPENDED],
            graduated_students=by_status[StudentStatus.GRADUATED],
        )
