import io

import pytest
from rich.console import Console
from typer.testing import CliRunner

from app.console import ConsoleUI, cli
from app.schemas import StudentStatus


def scripted(*answers):
    """input() replacement that replays answers, then signals end of input."""
    remaining = iter(answers)

    def _input(prompt):
        try:
            return next(remaining)
        except StopIteration:
            raise EOFError
    return _input


@pytest.fixture
def run_console(service):
    def _run(*answers):
        console = Console(file=io.StringIO(), width=200)
        ui = ConsoleUI(service, console=console, input_func=scripted(*answers))
        ui.run()
        return console.file.getvalue()
    return _run


def seed(service, first="John", last="Doe", email="john@x.com"):
    return service.add_student(first, last, email, "555-010-1234")


def test_console_requires_service():
    with pytest.raises(ValueError):
        ConsoleUI(None)


def test_exit_choice_stops_loop(run_console):
    output = run_console("0")

    assert "MAIN MENU" in output
    assert "Exiting application..." in output


def test_end_of_input_stops_loop(run_console):
    assert "Exiting application..." in run_console()


def test_invalid_choice(run_console):
    assert "Error: Invalid choice. Please try again." in run_console("9", "0")


def test_add_student(run_console, service):
    output = run_console("1", "Jane", "Smith", "jane@x.com", "(555) 010-1002",
                         "2000-09-30", "", "Madison", "WI", "53703", "3.5", "0")

    assert "Student added successfully!" in output
    assert "Student ID: 1" in output
    student = service.get_student(1)
    assert student.city == "Madison"
    assert student.date_of_birth.isoformat() == "2000-09-30"
    assert student.gpa == 3.5


def test_add_student_invalid_date_is_skipped(run_console, service):
    output = run_console("1", "Jane", "Smith", "jane@x.com", "5550101002",
                         "30/09/2000", "", "", "", "", "", "0")

    assert "Invalid date format. Skipping..." in output
    assert service.get_student(1).date_of_birth is None


def test_add_student_service_errors_are_reported(run_console, service):
    seed(service)

    output = run_console("1", "Jane", "Doe", "JOHN@x.com", "5550101002", "", "", "", "", "", "", "0")

    assert "Error: Failed to add student: Student with email 'JOHN@x.com' already exists" in output
    assert service.count_students() == 1


def test_add_student_validation_error(run_console, service):
    output = run_console("1", "J", "Doe", "j@x.com", "5550101002", "", "", "", "", "", "", "0")

    assert "Error: First name must be 2-50 characters" in output
    assert service.count_students() == 0


def test_view_all_students(run_console, service):
    seed(service)
    seed(service, first="Jane", email="jane@x.com")

    output = run_console("2", "0")

    assert "ALL STUDENTS" in output
    assert "jane@x.com" in output
    assert "Total students: 2" in output


def test_view_all_students_empty(run_console):
    assert "No students found in the system." in run_console("2", "0")


def test_search_by_id(run_console, service):
    seed(service)

    output = run_console("3", "1", "1", "0")

    assert "Name: John Doe" in output
    assert "Phone: 555-010-1234" in output
    assert "Address: Not provided" in output


def test_search_by_id_bad_format(run_console):
    assert "Error: Invalid ID format." in run_console("3", "1", "abc", "0")


def test_search_by_first_name(run_console, service):
    seed(service)
    seed(service, first="Johnny", email="johnny@x.com")

    output = run_console("3", "2", "john", "0")

    assert "Found 1 student(s):" in output


def test_search_by_email_not_found(run_console, service):
    seed(service)

    assert "Error: Student not found." in run_console("3", "4", "nobody@x.com", "0")


def test_search_blank_term(run_console):
    assert "Error: Last name cannot be empty" in run_console("3", "3", "", "0")


def test_update_student(run_console, service):
    seed(service)

    output = run_console("4", "1", "", "Dover", "", "", "graduated", "", "0")

    assert "Student updated successfully!" in output
    student = service.get_student(1)
    assert student.first_name == "John"
    assert student.last_name == "Dover"
    assert student.enrollment_status == StudentStatus.GRADUATED


def test_update_student_bad_status(run_console, service):
    seed(service)

    output = run_console("4", "1", "", "", "", "", "Expelled", "", "0")

    assert "Error: Enrollment status must be one of" in output
    assert service.get_student(1).enrollment_status == StudentStatus.ACTIVE


def test_update_missing_student(run_console):
    assert "Error: Student not found." in run_console("4", "7", "0")


def test_delete_student_confirmed(run_console, service):
    seed(service)

    output = run_console("5", "1", "y", "0")

    assert "Student deleted successfully!" in output
    assert service.count_students() == 0


def test_delete_student_cancelled(run_console, service):
    seed(service)

    output = run_console("5", "1", "no", "0")

    assert "Deletion cancelled." in output
    assert service.count_students() == 1


def test_statistics(run_console, service):
    seed(service)
    service.add_student("Jane", "Doe", "jane@x.com", "5550101002", enrollment_status="Inactive")

    output = run_console("6", "0")

    assert "SYSTEM STATISTICS" in output
    assert "Total Students" in output
    assert "Inactive" in output


def test_cli_rejects_unknown_store():
    result = CliRunner().invoke(cli, ["--store", "bogus"])

    assert result.exit_code == 1


def test_add_student_gpa_out_of_range(run_console, service):
    output = run_console("1", "Jane", "Doe", "jane@x.com", "5550101002", "", "", "", "", "", "4.5", "0")

    assert "Error: GPA cannot exceed 4.0" in output
    assert service.count_students() == 0


def test_update_student_gpa(run_console, service):
    seed(service)

    output = run_console("4", "1", "", "", "", "", "", "3.2", "0")

    assert "Student updated successfully!" in output
    assert service.get_student(1).gpa == 3.2


def test_update_student_bad_gpa_format(run_console, service):
    seed(service)

    output = run_console("4", "1", "", "", "", "", "", "three", "0")

    assert "Error: Invalid GPA format." in output
    assert service.get_student(1).gpa is None


def test_search_by_gpa_range(run_console, service):
    service.add_student("John", "Doe", "john@x.com", "5550101001", gpa=3.8)
    service.add_student("Jane", "Doe", "jane@x.com", "5550101002", gpa=2.1)

    output = run_console("3", "5", "3.0", "4.0", "0")

    assert "Found 1 student(s):" in output
    assert "john@x.com" in output
    assert "jane@x.com" not in output


def test_statistics_show_gpa_figures(run_console, service):
    service.add_student("John", "Doe", "john@x.com", "5550101001", gpa=3.5)
    service.add_student("Jane", "Doe", "jane@x.com", "5550101002", gpa=2.5)

    output = run_console("6", "0")

    assert "Average GPA" in output
    assert "3.0" in output
