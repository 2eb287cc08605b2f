"""
In-memory record store.

Keeps records in a list in insertion order. The identifier counter and
the list are owned by the store instance and guarded by one lock, so the
email check and the insert/update that follows it happen atomically.
Records handed in or out are copies; callers never hold a reference to
stored state.
"""

import threading
from datetime import date, datetime, timezone
from typing import List, Optional

from app.exceptions import DuplicateKeyError
from app.logging_config import get_logger, log_with_context
from app.schemas import DEFAULTED_FIELDS, MUTABLE_FIELDS, StudentRecord, StudentStatus
from app.stores.base import StudentStore

logger = get_logger("store")


def _same_email(a: Optional[str], b: Optional[str]) -> bool:
    if a is None or b is None:
        return False
    return a.strip().lower() == b.strip().lower()


class InMemoryStudentStore(StudentStore):
    """List-backed store. Data is lost when the process exits."""

    name = "memory"

    def __init__(self):
        self._students: List[StudentRecord] = []
        self._next_id = 1
        self._lock = threading.RLock()

    def create(self, record: StudentRecord) -> StudentRecord:
        self._check_record(record)
        with self._lock:
            if any(_same_email(s.email, record.email) for s in self._students):
                log_with_context(logger, "WARNING", "Duplicate email rejected on create",
                                 context={"email": record.email})
                raise DuplicateKeyError(record.email)

            stored = record.copy_record()
            stored.student_id = self._next_id
            self._next_id += 1
            if stored.enrollment_date is None:
                stored.enrollment_date = date.today()
            if stored.enrollment_status is None:
                stored.enrollment_status = StudentStatus.ACTIVE
            now = datetime.now(timezone.utc)
            stored.created_at = now
            stored.updated_at = now
            self._students.append(stored)

        log_with_context(logger, "INFO", "Student created",
                         context={"student_id": stored.student_id, "backend": self.name})
        return stored.copy_record()

    def _find(self, student_id: int) -> Optional[StudentRecord]:
        for student in self._students:
            if student.student_id == student_id:
                return student
        return None

    def find_by_id(self, student_id: int) -> Optional[StudentRecord]:
        self._check_id(student_id)
        with self._lock:
            found = self._find(student_id)
            return found.copy_record() if found else None

    def find_all(self) -> List[StudentRecord]:
        with self._lock:
            return [s.copy_record() for s in self._students]

    def find_by_first_name(self, first_name: str) -> List[StudentRecord]:
        term = self._check_term(first_name, "First name").lower()
        with self._lock:
            return [s.copy_record() for s in self._students if s.first_name.lower() == term]

    def find_by_last_name(self, last_name: str) -> List[StudentRecord]:
        term = self._check_term(last_name, "Last name").lower()
        with self._lock:
            return [s.copy_record() for s in self._students if s.last_name.lower() == term]

    def find_by_email(self, email: str) -> Optional[StudentRecord]:
        term = self._check_term(email, "Email")
        with self._lock:
            for student in self._students:
                if _same_email(student.email, term):
                    return student.copy_record()
        return None

    def update(self, record: StudentRecord) -> bool:
        self._check_update_record(record)
        with self._lock:
            existing = self._find(record.student_id)
            if existing is None:
                return False

            if not _same_email(existing.email, record.email):
                clash = any(
                    _same_email(s.email, record.email) and s.student_id != record.student_id
                    for s in self._students
                )
                if clash:
                    log_with_context(logger, "WARNING", "Duplicate email rejected on update",
                                     context={"student_id": record.student_id, "email": record.email})
                    raise DuplicateKeyError(record.email, f"Email '{record.email}' already in use")

            incoming = record.copy_record()
            for field in MUTABLE_FIELDS:
                value = getattr(incoming, field)
                if value is None and field in DEFAULTED_FIELDS:
                    continue
                setattr(existing, field, value)
            existing.updated_at = datetime.now(timezone.utc)

        log_with_context(logger, "INFO", "Student updated",
                         context={"student_id": record.student_id, "backend": self.name})
        return True

    def delete(self, student_id: int) -> bool:
        self._check_id(student_id)
        with self._lock:
            before = len(self._students)
            self._students = [s for s in self._students if s.student_id != student_id]
            removed = len(self._students) < before

        if removed:
            log_with_context(logger, "INFO", "Student deleted",
                             context={"student_id": student_id, "backend": self.name})
        return removed

    def count(self) -> int:
        with self._lock:
            return len(self._students)

    def clear(self) -> None:
        """Drop every record. The id counter keeps counting."""
        with self._lock:
            self._students = []
