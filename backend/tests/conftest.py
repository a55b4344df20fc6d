from __future__ import annotations
import os
from datetime import datetime

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.database import Base
from app.models.candidate import Candidate, CandidateExperience, CandidatePreference, CandidateProject, CandidateSkill
from app.models.posting import Posting, PostingSkill


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    yield factory
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def candidate(db):
    row = Candidate(full_name="Ada Example", gpa=3.8, completed_course_count=10)
    row.skills = [CandidateSkill(skill_id="python", proficiency=5, years_of_experience=5)]
    row.experiences = [CandidateExperience(title="Intern", start_date=datetime(2023, 1, 1), end_date=datetime(2023, 12, 27))]
    row.projects = [CandidateProject(name="compiler"), CandidateProject(name="scraper")]
    row.preferences = [CandidatePreference(preference_id="remote", priority=4)]
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


@pytest.fixture
def posting(db):
    row = Posting(title="Backend Engineer", gpa_threshold=3.5)
    row.skills = [
        PostingSkill(skill_id="python", importance_weight=5, required=True),
        PostingSkill(skill_id="sql", importance_weight=3, required=False),
    ]
    db.add(row)
    db.commit()
    db.refresh(row)
    return row
