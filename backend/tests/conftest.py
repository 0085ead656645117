import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from settleup.database import Base, get_db
from settleup.main import app

SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def project_id(client):
    res = client.post("/api/projects", json={"name": "Picnic"})
    return res.json()["id"]


@pytest.fixture
def picnic(client, project_id):
    """Project with three attendees: Alice, Bob, Carol."""
    for name in ["Alice", "Bob", "Carol"]:
        client.post(f"/api/projects/{project_id}/attendees", json={"name": name})
    return project_id
