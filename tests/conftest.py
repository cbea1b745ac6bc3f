import os
import sys
from pathlib import Path

# project root on the path first
sys.path.insert(0, str(Path(__file__).parent.parent))

# the app reads DATABASE_URL at import time, point it at the test store first
os.environ["DATABASE_URL"] = os.getenv("TEST_DATABASE_URL", "sqlite:///./test.db")

import pytest
from fastapi.testclient import TestClient

from blog.core.database import Base, SessionLocal, engine
from blog.main import app
from blog.services.user_service import create_user

TEST_USERNAME = "testuser"
TEST_PASSWORD = "pass123"


@pytest.fixture(autouse=True)
def setup_teardown():
    """Fresh tables around every test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def db():
    db = SessionLocal()
    yield db
    db.close()


@pytest.fixture
def test_user(db):
    return create_user(db, TEST_USERNAME, TEST_PASSWORD).user


@pytest.fixture
def auth_client(client, test_user):
    """Client holding a valid auth cookie"""
    response = client.post(
        "/users/authenticate/",
        data={"username": TEST_USERNAME, "password": TEST_PASSWORD},
        follow_redirects=False
    )
    assert response.status_code == 302
    return client
