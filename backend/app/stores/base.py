"""
Record store contract.

A store is the single authority over student identifiers and email
uniqueness. Two backends implement it: ``InMemoryStudentStore`` and
``SqlStudentStore``. The service depends only on this class.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from app.exceptions import InvalidArgumentError
from app.schemas import StudentRecord


class StudentStore(ABC):
    """Abstract record store for ``StudentRecord`` values."""

    name = "abstract"

    @abstractmethod
    def create(self, record: StudentRecord) -> StudentRecord:
        """
        Persist a new record.

        Assigns the next identifier, defaults enrollment_date to today and
        enrollment_status to Active, and returns the stored record.

        Raises:
            InvalidArgumentError: record is None
            DuplicateKeyError: email already stored (case-insensitive)
            StorageError: the backend failed
        """

    @abstractmethod
    def find_by_id(self, student_id: int) -> Optional[StudentRecord]:
        """Record with this id, or None. Raises InvalidArgumentError for id <= 0."""

    @abstractmethod
    def find_all(self) -> List[StudentRecord]:
        """Every record in backend order."""

    @abstractmethod
    def find_by_first_name(self, first_name: str) -> List[StudentRecord]:
        """Case-insensitive exact match on first name."""

    @abstractmethod
    def find_by_last_name(self, last_name: str) -> List[StudentRecord]:
        """Case-insensitive exact match on last name."""

    @abstractmethod
    def find_by_email(self, email: str) -> Optional[StudentRecord]:
        """Case-insensitive exact match on email, or None."""

    @abstractmethod
    def update(self, record: StudentRecord) -> bool:
        """
        Replace every mutable field of the stored record with ``record``'s.

        Returns False, without mutating anything, when no record has this id.

        Raises:
            InvalidArgumentError: record or its id is None
            DuplicateKeyError: new email belongs to a different record
        """

    @abstractmethod
    def delete(self, student_id: int) -> bool:
        """Remove the record; True if one was removed."""

    @abstractmethod
    def count(self) -> int:
        """Number of stored records."""

    # ── shared argument checks ───────────────────────────────

    @staticmethod
    def _check_id(student_id) -> None:
        if student_id is None or student_id <= 0:
            raise InvalidArgumentError("Invalid student ID")

    @staticmethod
    def _check_term(value: Optional[str], label: str) -> str:
        if value is None or not value.strip():
            raise InvalidArgumentError(f"{label} cannot be empty")
        return value.strip()

    @staticmethod
    def _check_record(record: Optional[StudentRecord]) -> None:
        if record is None:
            raise InvalidArgumentError("Student cannot be null")

    @staticmethod
    def _check_update_record(record: Optional[StudentRecord]) -> None:
        if record is None or record.student_id is None:
            raise InvalidArgumentError("Invalid student data for update")
