# tests/test_main_app.py
import logging
from fastapi.testclient import TestClient
from galaxion.utils.logger import logger, setup_logger


def test_read_root(client: TestClient):
    """Test if the root endpoint returns the welcome message."""
    logger.info("Testing root endpoint...")
    response = client.get("/")
    assert response.status_code == 200
    json_response = response.json()
    assert "message" in json_response
    assert "Welcome to the Galaxion API" in json_response["message"]
    logger.info("Root endpoint test passed.")


def test_validation_errors_are_reported_as_400(client: TestClient):
    response = client.post("/api/auth/login", json={})
    assert response.status_code == 400
    data = response.json()
    assert data["message"] == "Invalid request data"
    assert isinstance(data["errors"], list) and data["errors"]


def test_skills_dna_catalog_is_seeded(client: TestClient):
    response = client.get("/api/skills-dna/")
    assert response.status_code == 200
    competencies = response.json()
    assert [dna["id"] for dna in competencies] == [1, 101, 201, 202, 301]
    assert competencies[2]["name"] == "Prompt Engineering"
    assert competencies[2]["category"] == "ai"


def test_setup_logger_is_idempotent():
    setup_logger("galaxion.test", "debug")
    named = setup_logger("galaxion.test", "debug")
    assert len(named.handlers) == 1
    assert named.level == logging.DEBUG
    assert named.propagate is False
    assert logging.getLogger("httpx").level == logging.WARNING
