# tests/conftest.py
import os
import shutil
import tempfile
import uuid
import logging
import pytest
from fastapi.testclient import TestClient

# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# --- Point the app at a throw-away database and the test catalog before it is imported ---
TEST_DIR = os.path.dirname(os.path.abspath(__file__))
TEST_CATALOG = os.path.join(TEST_DIR, "data", "test_catalog.json")
TEST_DB_DIR = tempfile.mkdtemp(prefix="galaxion_test_")

os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(TEST_DB_DIR, 'test.db')}"
os.environ["CATALOG_PATH"] = TEST_CATALOG
os.environ["LLM_PROVIDER"] = "offline"
os.environ["ADMIN_USERNAMES"] = '["admin"]'

ADMIN_USERNAME = "admin"


def pytest_sessionfinish(session, exitstatus):
    shutil.rmtree(TEST_DB_DIR, ignore_errors=True)


# --- TestClient Fixture ---
@pytest.fixture(scope="session")
def client():
    """
    Creates the TestClient once per session. Startup creates the tables and seeds the test catalog.
    """
    from galaxion.main import app
    logger.info(f"Creating TestClient instance for the session (database in {TEST_DB_DIR}).")
    with TestClient(app) as c:
        yield c


# --- Session Reset Fixture ---
@pytest.fixture(autouse=True)
def logout_after_test(request):
    yield
    if "client" in request.fixturenames:
        request.getfixturevalue("client").cookies.clear()


@pytest.fixture
def login(client: TestClient):
    """Logs the client in; returns the session user. A fresh username is generated when none is given."""
    def _login(username: str | None = None, display_name: str | None = None) -> dict:
        username = username or f"learner_{uuid.uuid4().hex[:10]}"
        response = client.post("/api/auth/login", json={"username": username, "display_name": display_name})
        assert response.status_code == 200, response.text
        return response.json()["user"]
    return _login


@pytest.fixture
def admin(login) -> dict:
    return login(ADMIN_USERNAME)
