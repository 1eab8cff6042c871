"""End-to-end tests for the quiz endpoints."""
from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.core.security import create_access_token
from app.database import get_user_db
from app.main import app
from app.models import AnonymousQuizSession, UserRecommendation


IPHONE_UA = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1"
)


@pytest.fixture
def quiz_payload() -> dict:
    return {
        "energy_type": "I'm not sure",
        "calculate_energy_type": "yes",
        "balance_activities": ["Meditation & Mindfulness"],
        "budget": "$50–$100",
        "time_commitment": "1–2 hours",
        "session_preference": "Either is fine",
        "practitioner_type": "Spiritual guide (astrology, tarot, meditation)",
        "product_interest": "Yes, please",
        "current_challenge": "spiritual_growth",
        "date_of_birth": "1990-07-15",
        "birth_time": "08:30",
        "eligible_nonprofit": "yes",
        "completion_time": 120,
        "total_questions": 12,
    }


def _auth_headers(user_id: str = "user-123") -> dict:
    token = create_access_token({"sub": user_id, "email": "seeker@example.com"})
    return {"Authorization": f"Bearer {token}"}


def test_submit_quiz_anonymous(client: TestClient, seeded_catalog, quiz_payload, db: Session):
    """Anonymous submission creates a session and returns full results."""
    response = client.post("/api/quiz/submit", json=quiz_payload)

    assert response.status_code == 201
    data = response.json()
    assert data["success"] is True
    assert data["message"] == "Quiz completed successfully"
    assert data["recommendations_stored"] is False
    assert len(data["session_id"]) == 64

    results = data["results"]
    assert {s["category"] for s in results["services"]} == {"astrology", "tarot", "numerology"}
    assert all(s["price"] <= 85.0 for s in results["services"])
    assert results["products"]
    assert results["podcasts"][0]["title"] == "Spiritual Growth Journey"
    assert results["astrology"]["sun_sign"] == "Cancer"
    assert results["human_design"]["strategy"] == "Wait to respond"
    assert results["nonprofit"]["eligible"] is True
    assert results["nonprofit"]["apply_url"]

    assert db.query(AnonymousQuizSession).count() == 1


def test_submit_then_fetch_results(client: TestClient, seeded_catalog, quiz_payload):
    """Stored results come back by session id without authentication."""
    submitted = client.post("/api/quiz/submit", json=quiz_payload).json()
    session_id = submitted["session_id"]

    response = client.get(f"/api/quiz/results/{session_id}")

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["session_id"] == session_id
    assert "timestamp" in data
    for kind in ("services", "products", "podcasts"):
        assert data["results"][kind] == submitted["results"][kind]
    assert data["results"]["insights"]["wellness_profile"] == "spiritual_seeker"
    assert data["results"]["insights"]["priority_areas"][0] == {"area": "spiritual_growth", "priority": 1}


def test_fetch_unknown_session_returns_404(client: TestClient):
    """Unknown ids are reported as not found or expired."""
    response = client.get(f"/api/quiz/results/{'0' * 64}")

    assert response.status_code == 404
    assert response.json()["detail"] == "Quiz results not found or expired"


def test_submit_records_device_info(client: TestClient, seeded_catalog, quiz_payload, db: Session):
    """Device type, browser and country come from request headers."""
    response = client.post(
        "/api/quiz/submit",
        json=quiz_payload,
        headers={"User-Agent": IPHONE_UA, "CF-IPCountry": "CA"},
    )
    assert response.status_code == 201

    record = db.query(AnonymousQuizSession).one()
    assert record.device_type == "mobile"
    assert record.browser_type == "safari"
    assert record.ip_country == "CA"


def test_submit_signed_in_stores_user_recommendations(
    client: TestClient, seeded_catalog, quiz_payload, user_db: Session
):
    """A signed-in caller gets a copy of the recommendations in the user database."""
    response = client.post("/api/quiz/submit", json=quiz_payload, headers=_auth_headers())

    assert response.status_code == 201
    data = response.json()
    assert data["recommendations_stored"] is True

    record = user_db.query(UserRecommendation).one()
    assert record.user_id == "user-123"
    assert [s["service_id"] for s in record.services] == [s["id"] for s in data["results"]["services"]]

    latest = client.get("/api/recommendations/user", headers=_auth_headers())
    assert latest.status_code == 200
    assert len(latest.json()["recommendations"]["services"]) == len(data["results"]["services"])

    history = client.get("/api/recommendations/user/history", headers=_auth_headers())
    assert history.status_code == 200
    entries = history.json()["history"]
    assert len(entries) == 1
    assert entries[0]["services_count"] == len(data["results"]["services"])


def test_submit_succeeds_when_user_database_fails(client: TestClient, seeded_catalog, quiz_payload, db: Session):
    """A user database failure never fails the quiz submission."""
    failing_db = MagicMock()
    failing_db.commit.side_effect = RuntimeError("user database unavailable")
    app.dependency_overrides[get_user_db] = lambda: failing_db

    response = client.post("/api/quiz/submit", json=quiz_payload, headers=_auth_headers())

    assert response.status_code == 201
    assert response.json()["recommendations_stored"] is True
    assert db.query(AnonymousQuizSession).count() == 1
    failing_db.rollback.assert_called_once()


@pytest.mark.parametrize(
    "authorization",
    [
        "Bearer not-a-jwt",
        "Token abc",
        "Bearer " + create_access_token({"sub": "user-123"}, expires_delta=timedelta(minutes=-5)),
    ],
)
def test_submit_with_unusable_token_continues_anonymously(
    client: TestClient, seeded_catalog, quiz_payload, user_db: Session, authorization
):
    """A bad, malformed or expired token does not cost the caller their quiz results."""
    response = client.post(
        "/api/quiz/submit",
        json=quiz_payload,
        headers={"Authorization": authorization},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["recommendations_stored"] is False
    assert data["results"]["services"]
    assert user_db.query(UserRecommendation).count() == 0


def test_submit_accepts_camel_case_keys(client: TestClient, seeded_catalog, db: Session):
    """Answers sent with camelCase keys are read, not silently dropped."""
    response = client.post(
        "/api/quiz/submit",
        json={
            "currentChallenge": "Spiritual Growth & Awakening",
            "practitionerType": "Spiritual guide (astrology, tarot, meditation)",
            "budget": "$50–$100",
            "productInterest": "Yes, please",
            "balanceActivities": ["Meditation & Mindfulness"],
            "dateOfBirth": "1990-07-15",
            "birthTime": "08:30",
            "eligibleNonprofit": "yes",
            "completionTime": 75,
            "timeSpentOnQuestions": [{"questionId": "q1", "timeSpent": 3.5}],
        },
    )

    assert response.status_code == 201
    results = response.json()["results"]
    assert {s["category"] for s in results["services"]} == {"astrology", "tarot", "numerology"}
    assert results["products"]
    assert results["astrology"]["sun_sign"] == "Cancer"
    assert results["nonprofit"]["eligible"] is True

    record = db.query(AnonymousQuizSession).one()
    assert record.current_challenge == "spiritual_growth"
    assert record.completion_time == 75
    assert record.time_spent_on_each_question == [{"question_id": "q1", "time_spent": 3.5}]


def test_submit_with_empty_catalog_returns_500(client: TestClient, quiz_payload, db: Session):
    """An unseeded catalog aborts the submission before anything is stored."""
    response = client.post("/api/quiz/submit", json=quiz_payload)

    assert response.status_code == 500
    detail = response.json()["detail"]
    assert detail["detail"] == "internal_error"
    assert detail["error_type"] == "EmptyCatalogError"
    assert "services" in detail["error"]
    assert db.query(AnonymousQuizSession).count() == 0


def test_delete_results(client: TestClient, seeded_catalog, quiz_payload):
    """Deleting a session makes its results unavailable."""
    session_id = client.post("/api/quiz/submit", json=quiz_payload).json()["session_id"]

    response = client.delete(f"/api/quiz/results/{session_id}")
    assert response.status_code == 204

    assert client.get(f"/api/quiz/results/{session_id}").status_code == 404
    assert client.delete(f"/api/quiz/results/{session_id}").status_code == 404


def test_analytics_empty(client: TestClient):
    """Analytics over no sessions is all zeros."""
    response = client.get("/api/quiz/analytics")

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["analytics"] == {
        "total_sessions": 0,
        "avg_completion_time": 0,
        "most_common_challenge": [],
        "most_common_profile": [],
        "device_types": [],
    }


def test_analytics_after_submissions(client: TestClient, seeded_catalog, quiz_payload):
    """Analytics aggregate over submitted sessions."""
    client.post("/api/quiz/submit", json=quiz_payload, headers={"User-Agent": IPHONE_UA})
    client.post("/api/quiz/submit", json={**quiz_payload, "completion_time": 60})

    data = client.get("/api/quiz/analytics").json()["analytics"]

    assert data["total_sessions"] == 2
    assert data["avg_completion_time"] == 90
    assert data["most_common_challenge"] == [{"challenge": "spiritual_growth", "count": 2}]
    assert data["most_common_profile"] == [{"profile": "spiritual_seeker", "count": 2}]
    assert sorted(data["device_types"]) == ["desktop", "mobile"]


def test_analytics_date_range(client: TestClient, seeded_catalog, quiz_payload):
    """A start date in the future excludes every session."""
    client.post("/api/quiz/submit", json=quiz_payload)

    response = client.get("/api/quiz/analytics", params={"start_date": "2999-01-01T00:00:00"})

    assert response.status_code == 200
    assert response.json()["analytics"]["total_sessions"] == 0


def test_user_recommendations_require_auth(client: TestClient):
    """The per-user endpoints need a bearer token."""
    assert client.get("/api/recommendations/user").status_code == 401
    assert client.get("/api/recommendations/user/history").status_code == 401


def test_user_recommendations_empty_for_new_user(client: TestClient):
    """A user without records gets empty lists."""
    response = client.get("/api/recommendations/user", headers=_auth_headers("fresh-user"))

    assert response.status_code == 200
    data = response.json()
    assert data["recommendations"] == {"services": [], "products": [], "podcasts": []}
    assert data["created_at"] is None
