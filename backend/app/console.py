"""Menu-driven console front end for the student records platform.

Usage:
    python -m app.console                  # backend from STUDENT_STORE (default: sql)
    python -m app.console --store memory   # in-memory, nothing saved
"""

import sys
from datetime import date
from typing import Callable, List, Optional

import typer
from pydantic import ValidationError as RecordValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from app.exceptions import ServiceError
from app.logging_config import get_logger, log_with_context, setup_logging
from app.schemas import StudentRecord, StudentStatus
from app.services.student_service import StudentService
from app.stores.factory import StudentStoreFactory, create_store

logger = get_logger("console")

MAIN_MENU = (
    ("1", "Add New Student"),
    ("2", "View All Students"),
    ("3", "Search Student"),
    ("4", "Update Student"),
    ("5", "Delete Student"),
    ("6", "Student Statistics"),
    ("0", "Exit"),
)

SEARCH_MENU = (
    ("1", "Search by ID"),
    ("2", "Search by First Name"),
    ("3", "Search by Last Name"),
    ("4", "Search by Email"),
    ("5", "Search by GPA Range"),
)


def _or_missing(value) -> str:
    if value is None or (isinstance(value, str) and not value.strip()):
        return "Not provided"
    return str(value)


class ConsoleUI:
    """Interactive loop over a StudentService.

    ``input_func`` and ``console`` are injectable so the loop can be driven
    from tests.
    """

    def __init__(self, service: StudentService, console: Optional[Console] = None,
                 input_func: Callable[[str], str] = input):
        if service is None:
            raise ValueError("StudentService cannot be None")
        self.service = service
        self.console = console or Console()
        self.input_func = input_func
        self.running = True

    # ── io helpers ───────────────────────────────────────────

    def _ask(self, prompt: str) -> str:
        return self.input_func(prompt).strip()

    def _say(self, message: str, style: str = None) -> None:
        self.console.print(message, style=style)

    def _error(self, message: str) -> None:
        self.console.print(f"Error: {escape(message)}", style="red")

    def _heading(self, title: str) -> None:
        self.console.rule(f"[bold]{title}[/bold]")

    def _ask_id(self, prompt: str) -> Optional[int]:
        raw = self._ask(prompt)
        try:
            return int(raw)
        except ValueError:
            self._error("Invalid ID format.")
            return None

    # ── main loop ────────────────────────────────────────────

    def run(self) -> None:
        log_with_context(logger, "INFO", "Console session started",
                         extra_data={"store": self.service.store.name})
        self._heading("STUDENT MANAGEMENT SYSTEM")
        while self.running:
            self._show_menu(MAIN_MENU, "MAIN MENU")
            try:
                choice = self._ask("Enter your choice: ")
            except EOFError:
                break
            self.handle_choice(choice)
        self._say("Exiting application...")
        log_with_context(logger, "INFO", "Console session closed")

    def _show_menu(self, entries, title: str) -> None:
        self._heading(title)
        for key, label in entries:
            self._say(f"{key}. {label}")

    def handle_choice(self, choice: str) -> None:
        actions = {
            "1": self.add_student,
            "2": self.view_all_students,
            "3": self.search_student,
            "4": self.update_student,
            "5": self.delete_student,
            "6": self.show_statistics,
        }
        if choice == "0":
            self.running = False
            return
        action = actions.get(choice)
        if action is None:
            self._error("Invalid choice. Please try again.")
            return
        try:
            action()
        except ServiceError as e:
            self._error(e.message)
            log_with_context(logger, "WARNING", "Operation failed: {}".format(e.message),
                             extra_data={"kind": e.kind.value, "choice": choice})

    # ── actions ──────────────────────────────────────────────

    def add_student(self) -> None:
        self._heading("ADD NEW STUDENT")
        first_name = self._ask("Enter first name: ")
        last_name = self._ask("Enter last name: ")
        email = self._ask("Enter email: ")
        phone_number = self._ask("Enter phone number: ")

        optional = {}
        dob = self._ask("Enter date of birth (yyyy-mm-dd) [Press Enter to skip]: ")
        if dob:
            try:
                optional["date_of_birth"] = date.fromisoformat(dob)
            except ValueError:
                self._say("Invalid date format. Skipping...", style="yellow")
        for field, label in (("address", "address"), ("city", "city"),
                             ("state", "state"), ("zip_code", "zip code")):
            value = self._ask(f"Enter {label} [Press Enter to skip]: ")
            if value:
                optional[field] = value
        gpa = self._ask("Enter GPA (0.0-4.0) [Press Enter to skip]: ")
        if gpa:
            try:
                optional["gpa"] = float(gpa)
            except ValueError:
                self._say("Invalid GPA format. Skipping...", style="yellow")

        student = self.service.add_student(first_name, last_name, email, phone_number, **optional)
        self._say("Student added successfully!", style="green")
        self._say(f"Student ID: {student.student_id}")
        self._say(f"Name: {escape(student.full_name)}")
        self._say(f"Email: {escape(student.email)}")

    def view_all_students(self) -> None:
        students = self.service.list_students()
        if not students:
            self._say("No students found in the system.")
        else:
            self._print_table(students, "ALL STUDENTS")
        self._say(f"Total students: {len(students)}")

    def search_student(self) -> None:
        self._show_menu(SEARCH_MENU, "SEARCH STUDENT")
        choice = self._ask("Enter search option: ")
        if choice == "1":
            student_id = self._ask_id("Enter student ID: ")
            if student_id is not None:
                self._show_one(self.service.get_student(student_id))
        elif choice == "2":
            self._show_many(self.service.search_by_first_name(self._ask("Enter first name: ")))
        elif choice == "3":
            self._show_many(self.service.search_by_last_name(self._ask("Enter last name: ")))
        elif choice == "4":
            self._show_one(self.service.search_by_email(self._ask("Enter email: ")))
        elif choice == "5":
            self._search_gpa_range()
        else:
            self._error("Invalid option.")

    def _search_gpa_range(self) -> None:
        try:
            min_gpa = float(self._ask("Enter minimum GPA: "))
            max_gpa = float(self._ask("Enter maximum GPA: "))
        except ValueError:
            self._error("Invalid GPA format.")
            return
        self._show_many(self.service.filter_by_gpa_range(min_gpa, max_gpa))

    def update_student(self) -> None:
        self._heading("UPDATE STUDENT")
        student_id = self._ask_id("Enter student ID to update: ")
        if student_id is None:
            return
        student = self.service.get_student(student_id)
        if student is None:
            self._error("Student not found.")
            return

        self._say(f"Current details: {escape(student.full_name)}")
        changes = {}
        for field, label in (("first_name", "first name"), ("last_name", "last name"),
                             ("email", "email"), ("phone_number", "phone number")):
            value = self._ask(f"Enter new {label} [Current: {getattr(student, field)}]: ")
            if value:
                changes[field] = value
        current_status = student.enrollment_status.value if student.enrollment_status else None
        status = self._ask(f"Enter new status [Current: {current_status}]: ")
        if status:
            changes["enrollment_status"] = status
        gpa = self._ask(f"Enter new GPA [Current: {_or_missing(student.gpa)}]: ")
        if gpa:
            try:
                changes["gpa"] = float(gpa)
            except ValueError:
                self._error("Invalid GPA format.")
                return

        try:
            updated = StudentRecord(**{**student.model_dump(), **changes})
        except RecordValidationError as e:
            self._error(e.errors()[0]["msg"].removeprefix("Value error, "))
            return

        if self.service.update_student(updated):
            self._say("Student updated successfully!", style="green")
        else:
            self._error("Failed to update student.")

    def delete_student(self) -> None:
        self._heading("DELETE STUDENT")
        student_id = self._ask_id("Enter student ID to delete: ")
        if student_id is None:
            return
        student = self.service.get_student(student_id)
        if student is None:
            self._error("Student not found.")
            return

        self._say(f"Student to delete: {escape(student.full_name)} ({escape(student.email)})")
        confirmation = self._ask("Are you sure? (yes/no): ").lower()
        if confirmation not in ("yes", "y"):
            self._say("Deletion cancelled.")
            return
        if self.service.delete_student(student_id):
            self._say("Student deleted successfully!", style="green")
        else:
            self._error("Failed to delete student.")

    def show_statistics(self) -> None:
        stats = self.service.get_statistics()
        table = Table(title="SYSTEM STATISTICS", show_header=True, header_style="bold")
        table.add_column("Metric", min_width=20)
        table.add_column("Count", justify="right")
        table.add_row("Total Students", str(stats.total_students))
        table.add_row(StudentStatus.ACTIVE.value, str(stats.active_students))
        table.add_row(StudentStatus.INACTIVE.value, str(stats.inactive_students))
        table.add_row(StudentStatus.SUSPENDED.value, str(stats.suspended_students))
        table.add_row(StudentStatus.GRADUATED.value, str(stats.graduated_students))
        table.add_row("Average GPA", _or_missing(stats.average_gpa))
        table.add_row("Highest GPA", _or_missing(stats.highest_gpa))
        table.add_row("Lowest GPA", _or_missing(stats.lowest_gpa))
        self.console.print(table)

    # ── rendering ────────────────────────────────────────────

    def _print_table(self, students: List[StudentRecord], title: str) -> None:
        table = Table(title=title, show_header=True, header_style="bold")
        table.add_column("ID", justify="right")
        table.add_column("First Name", min_width=12)
        table.add_column("Last Name", min_width=12)
        table.add_column("Email", min_width=25)
        table.add_column("Status")
        table.add_column("GPA", justify="right")
        for s in students:
            table.add_row(
                str(s.student_id), escape(s.first_name), escape(s.last_name), escape(s.email),
                s.enrollment_status.value if s.enrollment_status else "",
                f"{s.gpa:.2f}" if s.gpa is not None else "",
            )
        self.console.print(table)

    def _show_many(self, students: List[StudentRecord]) -> None:
        if not students:
            self._say("No students found matching your search.")
            return
        self._say(f"Found {len(students)} student(s):")
        self._print_table(students, "SEARCH RESULTS")

    def _show_one(self, student: Optional[StudentRecord]) -> None:
        if student is None:
            self._error("Student not found.")
            return
        self._heading("STUDENT DETAILS")
        rows = (
            ("ID", student.student_id),
            ("Name", student.full_name),
            ("Email", student.email),
            ("Phone", student.phone_number),
            ("Date of Birth", student.date_of_birth),
            ("Address", student.address),
            ("City", student.city),
            ("State", student.state),
            ("Zip Code", student.zip_code),
            ("Enrollment Date", student.enrollment_date),
            ("Status", student.enrollment_status.value if student.enrollment_status else None),
            ("GPA", student.gpa),
        )
        for label, value in rows:
            self._say(f"{label}: {escape(_or_missing(value))}")


cli = typer.Typer(
    name="student-console",
    help="Menu-driven console for managing student records",
    add_completion=False,
)


@cli.command()
def main(
    store: Optional[str] = typer.Option(
        None, "--store", "-s",
        help="Record store backend: {} (default: STUDENT_STORE)".format(
            ", ".join(StudentStoreFactory.available_backends()))),
) -> None:
    """Start the interactive student management console."""
    setup_logging(stream=sys.stderr)
    try:
        service = StudentService(create_store(store))
    except ValueError as e:
        Console(stderr=True).print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)
    ConsoleUI(service).run()


if __name__ == "__main__":
    cli()
