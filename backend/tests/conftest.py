import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel

# keep the app module from creating a database file on import
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from member_api.database import get_session, make_engine
from member_api.main import app
from member_api.models import Member, Team


@pytest.fixture(name="engine")
def engine_fixture():
    """A fresh in-memory SQLite database per test.

    StaticPool keeps a single connection so every session sees the same
    in-memory database.
    """
    engine = make_engine("sqlite:///:memory:", poolclass=StaticPool)
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture(name="members")
def members_fixture(session: Session):
    """teamA: member1 (10), member2 (20); teamB: member3 (30), member4 (40)."""
    team_a = Team(name="teamA")
    team_b = Team(name="teamB")
    session.add(team_a)
    session.add(team_b)
    session.commit()
    rows = [
        Member(username="member1", age=10, team_id=team_a.id),
        Member(username="member2", age=20, team_id=team_a.id),
        Member(username="member3", age=30, team_id=team_b.id),
        Member(username="member4", age=40, team_id=team_b.id),
    ]
    for m in rows:
        session.add(m)
    session.commit()
    return {"teamA": team_a, "teamB": team_b}


@pytest.fixture(name="client")
def client_fixture(engine):
    def override_get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
