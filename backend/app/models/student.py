"""
Student model - one row per student in the relational backend.

Identifiers come from an autoincrement primary key that is never reused.
Email carries a UNIQUE constraint, which is also its only index; the store also checks it
case-insensitively before writing.
"""

from datetime import datetime, timezone, date
from sqlalchemy import Column, Integer, String, Date, DateTime, Float, Index
from app.database import Base
from app.schemas import StudentStatus


def _utcnow():
    return datetime.now(timezone.utc)


class Student(Base):
    """
    SQLAlchemy model for the students table.

    enrollment_status is stored as the status display value
    ("Active", "Inactive", "Suspended", "Graduated").
    """
    __tablename__ = "students"

    student_id = Column(Integer, primary_key=True, autoincrement=True,
                        doc="Unique student identifier, never reused")
    first_name = Column(String(50), nullable=False,
                        doc="First name of the student")
    last_name = Column(String(50), nullable=False,
                       doc="Last name of the student")
    email = Column(String(100), nullable=False, unique=True,
                   doc="Unique email address")
    phone_number = Column(String(20), nullable=True,
                          doc="Contact phone number")
    date_of_birth = Column(Date, nullable=True,
                           doc="Date of birth of the student")
    address = Column(String(255), nullable=True, doc="Street address")
    city = Column(String(50), nullable=True, doc="City name")
    state = Column(String(50), nullable=True, doc="State or province")
    zip_code = Column(String(20), nullable=True, doc="Postal code")
    enrollment_date = Column(Date, nullable=False, default=date.today,
                             doc="Date when student enrolled")
    enrollment_status = Column(String(20), nullable=False,
                               default=StudentStatus.ACTIVE.value,
                               doc="Active | Inactive | Suspended | Graduated")
    gpa = Column(Float, nullable=True,
                 doc="Grade point average, 0.0 to 4.0")
    created_at = Column(DateTime, default=_utcnow,
                        doc="Timestamp when the row was created")
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow,
                        doc="Timestamp of the last update")

    __table_args__ = (
        Index("ix_students_enrollment_status", "enrollment_status"),
        # SQLite reuses the highest rowid after a delete unless AUTOINCREMENT is set
        {"sqlite_autoincrement": True},
    )

    def __repr__(self):
        return f"<Student(id={self.student_id}, name='{self.first_name} {self.last_name}', email='{self.email}')>"
