"""
Relational record store backed by the ``students`` table.

Each operation opens its own SQLAlchemy session. Email uniqueness is
checked case-insensitively with a query before writing; the UNIQUE
constraint on the column catches whatever slips past that check, and the
resulting IntegrityError is reported as a DuplicateKeyError. Any other
SQLAlchemy failure is logged on the ``db`` channel and re-raised as
StorageError.
"""

import time
from datetime import date
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.exceptions import DuplicateKeyError, StorageError
from app.logging_config import get_logger, log_with_context
from app.models.student import Student
from app.schemas import DEFAULTED_FIELDS, MUTABLE_FIELDS, StudentRecord, StudentStatus
from app.stores.base import StudentStore

logger = get_logger("store")
db_logger = get_logger("db")


def record_from_row(row: Student) -> StudentRecord:
    """Convert an ORM row into a detached StudentRecord."""
    return StudentRecord.model_validate(row)


def _column_value(field: str, value):
    if field == "enrollment_status" and value is not None:
        return StudentStatus.parse(value).value
    return value


class SqlStudentStore(StudentStore):
    """Store that persists records through SQLAlchemy."""

    name = "sql"

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    # ── helpers ──────────────────────────────────────────────

    def _fail(self, session: Session, action: str, exc: SQLAlchemyError, context: dict = None):
        session.rollback()
        log_with_context(db_logger, "ERROR", "Database error while {}: {}".format(action, exc),
                         context=context, exc_info=True)
        raise StorageError("Failed to {}: {}".format(action, exc)) from exc

    @staticmethod
    def _email_query(session: Session, email: str):
        return session.query(Student).filter(
            func.lower(Student.email) == email.strip().lower()
        )

    @staticmethod
    def _is_email_violation(exc: IntegrityError) -> bool:
        return "email" in str(exc.orig).lower()

    # ── operations ───────────────────────────────────────────

    def create(self, record: StudentRecord) -> StudentRecord:
        self._check_record(record)
        start_time = time.time()

        with self._session_factory() as session:
            try:
                if self._email_query(session, record.email).first() is not None:
                    log_with_context(logger, "WARNING", "Duplicate email rejected on create",
                                     context={"email": record.email})
                    raise DuplicateKeyError(record.email)

                row = Student(**{
                    field: _column_value(field, getattr(record, field))
                    for field in MUTABLE_FIELDS
                })
                if row.enrollment_date is None:
                    row.enrollment_date = date.today()
                if row.enrollment_status is None:
                    row.enrollment_status = StudentStatus.ACTIVE.value

                session.add(row)
                session.commit()
                session.refresh(row)
            except IntegrityError as e:
                session.rollback()
                if self._is_email_violation(e):
                    raise DuplicateKeyError(record.email) from e
                self._fail(session, "create student", e, {"email": record.email})
            except SQLAlchemyError as e:
                self._fail(session, "create student", e, {"email": record.email})

            created = record_from_row(row)

        duration_ms = (time.time() - start_time) * 1000
        log_with_context(logger, "INFO", "Student created",
                         context={"student_id": created.student_id, "backend": self.name},
                         extra_data={"duration_ms": round(duration_ms, 2)})
        return created

    def find_by_id(self, student_id: int) -> Optional[StudentRecord]:
        self._check_id(student_id)
        with self._session_factory() as session:
            try:
                row = session.get(Student, student_id)
                return record_from_row(row) if row else None
            except SQLAlchemyError as e:
                self._fail(session, "find student", e, {"student_id": student_id})

    def find_all(self) -> List[StudentRecord]:
        with self._session_factory() as session:
            try:
                rows = session.query(Student).order_by(
                    Student.first_name, Student.last_name, Student.student_id
                ).all()
            except SQLAlchemyError as e:
                self._fail(session, "retrieve students", e)
            log_with_context(db_logger, "DEBUG", "Found {} students".format(len(rows)))
            return [record_from_row(r) for r in rows]

    def find_by_first_name(self, first_name: str) -> List[StudentRecord]:
        term = self._check_term(first_name, "First name")
        with self._session_factory() as session:
            try:
                rows = session.query(Student).filter(
                    func.lower(Student.first_name) == term.lower()
                ).order_by(Student.last_name, Student.student_id).all()
            except SQLAlchemyError as e:
                self._fail(session, "search by first name", e)
            return [record_from_row(r) for r in rows]

    def find_by_last_name(self, last_name: str) -> List[StudentRecord]:
        term = self._check_term(last_name, "Last name")
        with self._session_factory() as session:
            try:
                rows = session.query(Student).filter(
                    func.lower(Student.last_name) == term.lower()
                ).order_by(Student.first_name, Student.student_id).all()
            except SQLAlchemyError as e:
                self._fail(session, "search by last name", e)
            return [record_from_row(r) for r in rows]

    def find_by_email(self, email: str) -> Optional[StudentRecord]:
        term = self._check_term(email, "Email")
        with self._session_factory() as session:
            try:
                row = self._email_query(session, term).first()
            except SQLAlchemyError as e:
                self._fail(session, "search by email", e)
            return record_from_row(row) if row else None

    def update(self, record: StudentRecord) -> bool:
        self._check_update_record(record)
        context = {"student_id": record.student_id}

        with self._session_factory() as session:
            try:
                row = session.get(Student, record.student_id)
                if row is None:
                    return False

                if (row.email or "").strip().lower() != (record.email or "").strip().lower():
                    clash = self._email_query(session, record.email).filter(
                        Student.student_id != record.student_id
                    ).first()
                    if clash is not None:
                        log_with_context(logger, "WARNING", "Duplicate email rejected on update",
                                         context={**context, "email": record.email})
                        raise DuplicateKeyError(record.email, f"Email '{record.email}' already in use")

                for field in MUTABLE_FIELDS:
                    value = getattr(record, field)
                    if value is None and field in DEFAULTED_FIELDS:
                        continue
                    setattr(row, field, _column_value(field, value))
                session.commit()
            except IntegrityError as e:
                session.rollback()
                if self._is_email_violation(e):
                    raise DuplicateKeyError(record.email, f"Email '{record.email}' already in use") from e
                self._fail(session, "update student", e, context)
            except SQLAlchemyError as e:
                self._fail(session, "update student", e, context)

        log_with_context(logger, "INFO", "Student updated",
                         context={**context, "backend": self.name})
        return True

    def delete(self, student_id: int) -> bool:
        self._check_id(student_id)
        with self._session_factory() as session:
            try:
                deleted = session.query(Student).filter(
                    Student.student_id == student_id
                ).delete(synchronize_session=False)
                session.commit()
            except SQLAlchemyError as e:
                self._fail(session, "delete student", e, {"student_id": student_id})

        if deleted:
            log_with_context(logger, "INFO", "Student deleted",
                             context={"student_id": student_id, "backend": self.name})
        return deleted > 0

    def count(self) -> int:
        with self._session_factory() as session:
            try:
                return session.query(func.count(Student.student_id)).scalar() or 0
            except SQLAlchemyError as e:
                self._fail(session, "count students", e)
