"""HTTP tests for the reference catalogs and the metrics endpoints."""
import uuid
from datetime import datetime

from wellness_api import db
from wellness_api.models import Survey, User

from conftest import FINANCIAL, PHYSICAL


def test_categories(client, alice_headers) -> None:
    categories = client.get("/api/categories", headers=alice_headers).get_json()
    assert [c["name"] for c in categories] == ["Physical", "Social", "Financial"]

    category = client.get(f"/api/categories/{PHYSICAL}", headers=alice_headers).get_json()
    assert category["name"] == "Physical"
    assert client.get("/api/categories/99", headers=alice_headers).status_code == 404


def test_category_questions_and_mapping(client, alice_headers) -> None:
    questions = client.get(f"/api/categories/{PHYSICAL}/questions", headers=alice_headers).get_json()
    assert [(q["question_id"], q["weight"]) for q in questions] == [(1, 1.0), (2, 0.5)]

    external = client.get(f"/api/categories/{FINANCIAL}/questions", headers=alice_headers).get_json()
    assert external[0]["is_external"] is True

    mapping = client.get("/api/categories/mapping", headers=alice_headers).get_json()
    assert [(m["question_id"], m["category_name"]) for m in mapping] == [
        (1, "Physical"), (2, "Physical"), (2, "Social"), (3, "Financial"),
    ]


def test_questions_and_options(client, alice_headers) -> None:
    questions = client.get("/api/questions", headers=alice_headers).get_json()
    assert [q["question_number"] for q in questions] == [1, 2, 3, 4]

    assert client.get("/api/questions/2", headers=alice_headers).get_json()["question_text"] == "Question 2?"
    assert client.get("/api/questions/42", headers=alice_headers).status_code == 404

    options = client.get("/api/questions/1/options", headers=alice_headers).get_json()
    assert [(o["option_id"], o["score"]) for o in options] == [(11, 10.0), (12, 5.0)]


def test_questionnaire_grouped_by_section(client, alice_headers) -> None:
    sections = client.get("/api/questions/questionnaire", headers=alice_headers).get_json()
    assert sorted(sections) == ["1", "2"]
    assert [q["question_id"] for q in sections["1"]] == [1, 2]
    assert [o["option_id"] for o in sections["2"][0]["options"]] == [31, 32]


def test_metrics_are_admin_only(client, alice_headers) -> None:
    assert client.get("/api/metrics/wellness", headers=alice_headers).status_code == 403
    assert client.post("/api/metrics/wellness/refresh", headers=alice_headers).status_code == 403
    assert client.get("/api/metrics/surveys/statistics", headers=alice_headers).status_code == 403
    response = client.get("/api/metrics/users", headers=alice_headers)
    assert response.status_code == 403
    assert response.get_json()["error"]["code"] == "FORBIDDEN"


def test_metrics_snapshot_lifecycle(client, admin_headers, alice_headers, alice_profile_id) -> None:
    assert client.get("/api/metrics/wellness", headers=admin_headers).status_code == 404

    client.post(
        "/api/surveys",
        json={"profile_id": alice_profile_id, "responses": [{"question_id": 1, "selected_option_id": 11}]},
        headers=alice_headers,
    )
    refreshed = client.post("/api/metrics/wellness/refresh", headers=admin_headers)
    assert refreshed.status_code == 201

    metrics = client.get("/api/metrics/wellness", headers=admin_headers).get_json()
    assert metrics["snapshot_id"] == refreshed.get_json()["snapshot_id"]
    assert metrics["total_surveys"] == 1
    assert metrics["average_total_score"] == 10.0

    stats = client.get("/api/metrics/surveys/statistics", headers=admin_headers).get_json()
    assert stats["total_surveys"] == 1
    assert stats["unique_profiles"] == 1


def _submit(client, headers, profile_id, question_id, option_id) -> str:
    response = client.post(
        "/api/surveys",
        json={"profile_id": profile_id, "responses": [{"question_id": question_id, "selected_option_id": option_id}]},
        headers=headers,
    )
    assert response.status_code == 201
    return response.get_json()["survey_id"]


def _backdate(survey_id: str, when: datetime) -> None:
    survey = db.session.get(Survey, survey_id)
    survey.created_at = when
    survey.survey_date = when.date()
    db.session.commit()


def test_user_metrics(client, admin_headers, alice_headers, alice_profile_id) -> None:
    _submit(client, alice_headers, alice_profile_id, 1, 11)
    User.query.filter_by(username="bob").one().is_active = False
    db.session.commit()

    metrics = client.get("/api/metrics/users", headers=admin_headers).get_json()
    assert metrics == {
        "total_users": 3,
        "active_users": 2,
        "inactive_users": 1,
        "admin_users": 1,
        "users_with_profiles": 3,
        "users_with_surveys": 1,
    }


def test_wellness_progress(client, alice_headers, bob_headers, admin_headers, alice_profile_id) -> None:
    url = f"/api/metrics/surveys/progress/{alice_profile_id}"
    empty = client.get(url, headers=alice_headers)
    assert empty.status_code == 200
    assert empty.get_json()["survey_count"] == 0
    assert empty.get_json()["change"] is None
    assert empty.get_json()["category_change"] == {}

    # Physical 5, then Physical 0.5 * 4 and Social 2.0 * 4
    _backdate(_submit(client, alice_headers, alice_profile_id, 1, 12), datetime(2024, 1, 1, 9))
    _backdate(_submit(client, alice_headers, alice_profile_id, 2, 21), datetime(2024, 2, 1, 9))

    progress = client.get(url, headers=alice_headers).get_json()
    assert progress["survey_count"] == 2
    assert progress["first_survey_date"] == "2024-01-01"
    assert progress["latest_survey_date"] == "2024-02-01"
    assert progress["first_total_score"] == 5.0
    assert progress["latest_total_score"] == 10.0
    assert progress["change"] == 5.0
    assert progress["category_change"] == {"Physical": -3.0, "Social": 8.0}

    assert client.get(url, headers=bob_headers).status_code == 403
    assert client.get(url, headers=admin_headers).get_json() == progress
    missing = client.get(f"/api/metrics/surveys/progress/{uuid.uuid4()}", headers=admin_headers)
    assert missing.status_code == 404


def test_wellness_profile(client, alice_headers, bob_headers, alice_profile_id) -> None:
    url = f"/api/metrics/wellness-profile/{alice_profile_id}"
    before = client.get(url, headers=alice_headers).get_json()
    assert before["latest_survey"] is None
    assert before["progress"]["survey_count"] == 0

    _submit(client, alice_headers, alice_profile_id, 1, 11)
    body = client.get(url, headers=alice_headers).get_json()
    assert body["profile"]["profile_id"] == alice_profile_id
    assert body["profile"]["first_name"] == "Alice"
    assert body["profile"]["username"] == "alice"
    assert body["latest_survey"]["category_scores"][0]["score"] == 10.0
    assert body["progress"]["survey_count"] == 1
    assert body["progress"]["change"] == 0.0

    assert client.get(url, headers=bob_headers).status_code == 403
