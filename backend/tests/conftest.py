import os

# Must be set before any app module is imported
os.environ.setdefault("STUDENT_STORE", "memory")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

from app.database import build_engine, build_session_factory, create_tables
from app.schemas import StudentRecord
from app.services.student_service import StudentService
from app.stores.memory import InMemoryStudentStore
from app.stores.sql import SqlStudentStore


@pytest.fixture
def sqlite_engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'students.db'}")
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def memory_store():
    return InMemoryStudentStore()


@pytest.fixture
def sql_store(sqlite_engine):
    return SqlStudentStore(build_session_factory(sqlite_engine))


@pytest.fixture(params=["memory", "sql"])
def store(request):
    """Runs the test once per backend."""
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
def service(memory_store):
    return StudentService(memory_store)


@pytest.fixture
def make_record():
    def _make(first_name="John", last_name="Doe", email="john@x.com",
              phone_number="5550101", **fields):
        return StudentRecord(first_name=first_name, last_name=last_name,
                             email=email, phone_number=phone_number, **fields)
    return _make


@pytest.fixture
def client(service):
    from app.main import app
    from app.routes.students import get_student_service

    app.dependency_overrides[get_student_service] = lambda: service
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
