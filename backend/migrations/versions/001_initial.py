"""Initial migration - create the students table

Revision ID: 001_initial
Revises: None
Create Date: 2024-01-15

Creates the single table of the Student Records Platform:
- students: one row per student, autoincrement id, unique email

Email lookups use the unique constraint's index; enrollment status gets
its own index.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── Students Table ────────────────────────────────────────
    op.create_table(
        'students',
        sa.Column('student_id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('first_name', sa.String(50), nullable=False),
        sa.Column('last_name', sa.String(50), nullable=False),
        sa.Column('email', sa.String(100), nullable=False, unique=True),
        sa.Column('phone_number', sa.String(20), nullable=True),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('address', sa.String(255), nullable=True),
        sa.Column('city', sa.String(50), nullable=True),
        sa.Column('state', sa.String(50), nullable=True),
        sa.Column('zip_code', sa.String(20), nullable=True),
        sa.Column('enrollment_date', sa.Date(), nullable=False,
                  server_default=sa.func.current_date()),
        sa.Column('enrollment_status', sa.String(20), nullable=False,
                  server_default='Active'),
        sa.Column('gpa', sa.Float(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True),
                  server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True),
                  server_default=sa.func.now(), nullable=False),
        sqlite_autoincrement=True,
    )

    op.create_index('ix_students_enrollment_status', 'students', ['enrollment_status'])


def downgrade() -> None:
    """Drop the students table and its status index."""
    op.drop_index('ix_students_enrollment_status', table_name='students')
    op.drop_table('students')
