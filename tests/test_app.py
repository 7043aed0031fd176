"""Tests for the application factory, health check and authentication."""
from wellness_api import create_app
from wellness_api.models import (
    QuestionCategoryMapping,
    QuestionOption,
    SurveyResponse,
    User,
    WellnessMetricSnapshot,
)

from conftest import TEST_CONFIG


def test_health_endpoint() -> None:
    """Ensure the health check returns the expected response."""
    app = create_app(TEST_CONFIG)
    with app.test_client() as client:
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.get_json() == {"status": "ok"}


def test_external_question_flag_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("SURVEY_EXCLUDE_EXTERNAL_QUESTIONS", "true")
    assert create_app(TEST_CONFIG).config["SURVEY_EXCLUDE_EXTERNAL_QUESTIONS"] is True
    monkeypatch.delenv("SURVEY_EXCLUDE_EXTERNAL_QUESTIONS")
    assert create_app(TEST_CONFIG).config["SURVEY_EXCLUDE_EXTERNAL_QUESTIONS"] is False


def test_register_and_login(client) -> None:
    response = client.post(
        "/api/register",
        json={"username": "carol", "email": "Carol@Example.com", "password": "secret1", "first_name": "Carol"},
    )
    assert response.status_code == 201
    user = response.get_json()
    assert user["email"] == "carol@example.com"
    assert user["role"] == "user"
    assert "password_hash" not in user
    assert user["profile"]["first_name"] == "Carol"

    login = client.post("/api/login", json={"email": "carol@example.com", "password": "secret1"})
    assert login.status_code == 200
    token = login.get_json()["access_token"]

    profile_id = user["profile"]["profile_id"]
    surveys = client.get(f"/api/surveys/profile/{profile_id}", headers={"Authorization": f"Bearer {token}"})
    assert surveys.status_code == 200
    assert surveys.get_json() == []


def test_register_rejects_duplicates_and_bad_input(client) -> None:
    duplicate = client.post(
        "/api/register", json={"username": "alice2", "email": "alice@example.com", "password": "secret1"}
    )
    assert duplicate.status_code == 409

    invalid = client.post("/api/register", json={"username": "x", "email": "nope", "password": "1"})
    assert invalid.status_code == 400
    assert set(invalid.get_json()["error"]["fields"]) == {"username", "email", "password"}


def test_login_failures(client) -> None:
    assert client.post("/api/login", json={"email": "alice@example.com", "password": "wrong"}).status_code == 401

    User.query.filter_by(username="alice").one().is_active = False
    assert client.post("/api/login", json={"email": "alice@example.com", "password": "password"}).status_code == 401


def test_models_keep_their_docstrings() -> None:
    for model in (QuestionOption, QuestionCategoryMapping, SurveyResponse, WellnessMetricSnapshot):
        assert model.__doc__, model.__name__
    assert QuestionOption.__doc__.startswith("A selectable answer")
