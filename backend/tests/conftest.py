from __future__ import annotations

import os
import sys
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Callable, Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Ensure the project root (which exposes the ``backend`` package) is on ``sys.path``
PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# ``backend.app.main`` builds a module level app on import.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RUN_MIGRATIONS_ON_STARTUP", "0")

from backend.app import models
from backend.app.config import Settings
from backend.app.context import AppContext
from backend.app.database import Base, get_db
from backend.app.main import create_app

SQLALCHEMY_DATABASE_URL = "sqlite://"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture(scope="session", autouse=True)
def setup_database() -> Generator[None, None, None]:
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    connection = engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection)
    try:
        yield session
    finally:
        session.close()
        transaction.rollback()
        connection.close()


def build_context(**overrides) -> AppContext:
    settings = Settings(database_url=SQLALCHEMY_DATABASE_URL, run_migrations=False, **overrides)
    return AppContext.from_settings(settings, engine=engine)


@pytest.fixture
def context_factory() -> Callable[..., AppContext]:
    return build_context


@pytest.fixture
def app() -> FastAPI:
    return create_app(build_context())


@pytest.fixture
def client(app: FastAPI, db_session: Session) -> Generator[TestClient, None, None]:
    def override_get_db() -> Generator[Session, None, None]:
        try:
            yield db_session
        finally:
            db_session.expire_all()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.pop(get_db, None)


def _days_ago(days: int) -> datetime:
    return datetime.combine(date.today() - timedelta(days=days), datetime.min.time()) + timedelta(
        hours=10
    )


@pytest.fixture
def seed_portal_data(db_session: Session) -> dict:
    """Three districts, four schools, five students, four teachers and some attendance."""

    khurda = models.District(name="Khurda", code="KHU")
    cuttack = models.District(name="Cuttack", code="CTC")
    puri = models.District(name="Puri", code="PUR")
    db_session.add_all([khurda, cuttack, puri])
    db_session.flush()

    bhubaneswar = models.Block(district_id=khurda.district_id, name="Bhubaneswar")
    jatni = models.Block(district_id=khurda.district_id, name="Jatni")
    sadar = models.Block(district_id=cuttack.district_id, name="Cuttack Sadar")
    db_session.add_all([bhubaneswar, jatni, sadar])
    db_session.flush()

    capital_school = models.School(
        block_id=bhubaneswar.block_id,
        school_code="OD-KHU-001",
        name="Government High School Bhubaneswar",
        total_students=620,
        total_teachers=25,
        established_year=1962,
        facilities={"library": True, "lab": True},
    )
    jatni_school = models.School(
        block_id=jatni.block_id,
        school_code="OD-KHU-002",
        name="Jatni Girls High School",
        total_students=340,
        total_teachers=14,
    )
    ravenshaw = models.School(
        block_id=sadar.block_id,
        school_code="OD-CTC-001",
        name="Ravenshaw Collegiate School",
        total_students=480,
        total_teachers=20,
    )
    closed_school = models.School(
        block_id=sadar.block_id,
        school_code="OD-CTC-002",
        name="Closed Model School",
        status=models.INACTIVE_STATUS,
    )
    db_session.add_all([capital_school, jatni_school, ravenshaw, closed_school])
    db_session.flush()

    aarav = models.Student(
        school_id=capital_school.school_id,
        admission_no="ADM-1001",
        first_name="Aarav",
        last_name="Mohanty",
        gender="M",
        date_of_birth=date(2011, 5, 20),
        class_number=9,
        section="A",
        guardian_name="Sanjay Mohanty",
        created_at=_days_ago(2),
    )
    priya = models.Student(
        school_id=capital_school.school_id,
        admission_no="ADM-1002",
        first_name="Priya",
        last_name="Sahoo",
        class_number=9,
        section="B",
        created_at=_days_ago(5),
    )
    rohan = models.Student(
        school_id=jatni_school.school_id,
        admission_no="ADM-2001",
        first_name="Rohan",
        last_name="Das",
        class_number=10,
        section="A",
        created_at=_days_ago(10),
    )
    ananya = models.Student(
        school_id=ravenshaw.school_id,
        admission_no="ADM-3001",
        first_name="Ananya",
        last_name="Pradhan",
        class_number=8,
        section="A",
        created_at=_days_ago(90),
    )
    former = models.Student(
        school_id=ravenshaw.school_id,
        admission_no="ADM-3002",
        first_name="Former",
        last_name="Student",
        class_number=10,
        status=models.INACTIVE_STATUS,
        created_at=_days_ago(400),
    )
    db_session.add_all([aarav, priya, rohan, ananya, former])

    db_session.add_all(
        [
            models.Teacher(school_id=capital_school.school_id, employee_code="T-001", first_name="Mina", last_name="Rath"),
            models.Teacher(school_id=capital_school.school_id, employee_code="T-002", first_name="Bikash", last_name="Nayak"),
            models.Teacher(school_id=jatni_school.school_id, employee_code="T-003", first_name="Sunita", last_name="Behera"),
            models.Teacher(
                school_id=ravenshaw.school_id,
                employee_code="T-004",
                first_name="Retired",
                last_name="Teacher",
                status=models.INACTIVE_STATUS,
            ),
        ]
    )
    db_session.flush()

    today = date.today()
    db_session.add_all(
        [
            models.StudentAttendance(
                student_id=aarav.student_id,
                attendance_date=today,
                status=models.AttendanceStatus.PRESENT,
            ),
            models.StudentAttendance(
                student_id=aarav.student_id,
                attendance_date=today - timedelta(days=1),
                status=models.AttendanceStatus.PRESENT,
            ),
            models.StudentAttendance(
                student_id=priya.student_id,
                attendance_date=today,
                status=models.AttendanceStatus.ABSENT,
            ),
            models.StudentAttendance(
                student_id=rohan.student_id,
                attendance_date=today,
                status=models.AttendanceStatus.LATE,
            ),
        ]
    )
    db_session.commit()

    return {
        "districts": {"khurda": khurda, "cuttack": cuttack, "puri": puri},
        "blocks": {"bhubaneswar": bhubaneswar, "jatni": jatni, "sadar": sadar},
        "schools": {
            "capital": capital_school,
            "jatni": jatni_school,
            "ravenshaw": ravenshaw,
            "closed": closed_school,
        },
        "students": {
            "aarav": aarav,
            "priya": priya,
            "rohan": rohan,
            "ananya": ananya,
            "former": former,
        },
    }


class FakeClock:
    """Monotonic clock stand-in advanced explicitly by tests."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sample_stats() -> dict:
    return {
        "totals": {"schools": 1250, "students": 48230, "teachers": 2100, "districts": 30},
        "today_attendance": {"total_marked": 900, "present": 850, "absent": 50},
        "recent_enrollments": 1200,
        "district_breakdown": [
            {"district_name": "Khurda", "schools": 120, "students": 8500},
            {"district_name": "Cuttack", "schools": 110, "students": 7200},
        ],
    }


@pytest.fixture
def sample_kpis() -> dict:
    return {
        "enrollment_trend": [
            {"month": "2026-05", "enrollments": 120},
            {"month": "2026-06", "enrollments": 95},
        ],
        "attendance_rate": 91.456,
        "school_metrics": {
            "avg_students_per_school": 386.4,
            "avg_teachers_per_school": 16.8,
            "large_schools": 42,
        },
    }
