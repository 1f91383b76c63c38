# tests/test_app.py
import pytest
from fastapi.testclient import TestClient

import app as service
from compliance_health_check.core.report_exporter import ReportExporter


@pytest.fixture
def client(report_store, share_registry, tmp_path):
    service.app.dependency_overrides[service.get_report_store] = lambda: report_store
    service.app.dependency_overrides[service.get_share_registry] = lambda: share_registry
    service.app.dependency_overrides[service.get_report_exporter] = lambda: ReportExporter(str(tmp_path / "exports"))
    yield TestClient(service.app)
    service.app.dependency_overrides.clear()


OWNER = {"X-User-Id": "founder-1"}
OTHER_OWNER = {"X-User-Id": "founder-2"}


def save(client, answers, follow_ups=None, headers=OWNER):
    response = client.post(
        "/api/health-check/save-results",
        json={"answers": answers, "followUpAnswers": follow_ups or {}},
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()


def test_root_and_health(client):
    assert client.get("/").json()["status"] == "operational"
    assert client.get("/health").json()["status"] == "healthy"


def test_questions(client):
    data = client.get("/api/questions").json()
    assert len(data["questions"]) == 15
    assert data["questions"][0]["category"] == "Company & Legal Structure"


def test_score_without_saving(client, report_store):
    response = client.post("/api/health-check/score", json={"answers": {"1": "Yes", "4": "Yes", "5": "Yes"}})
    assert response.status_code == 200
    data = response.json()
    assert data["result"]["overallScore"] == 100
    assert len(data["result"]["strengths"]) == 3
    assert data["formatted"]["categories"][0]["color"] == "text-green-700"
    assert report_store.records_for("founder-1") == []


def test_score_accepts_snake_case_follow_ups(client):
    response = client.post(
        "/api/health-check/score",
        json={"answers": {"5": "No"}, "follow_up_answers": {"5": "3"}},
    )
    assert response.json()["result"]["redFlags"] == ["GST returns missed for 3 month(s)"]


def test_invalid_body_is_rejected(client):
    response = client.post("/api/health-check/score", json={"answers": ["Yes"]})
    assert response.status_code == 422


def test_save_requires_caller_identity(client):
    response = client.post("/api/health-check/save-results", json={"answers": {"1": "Yes"}})
    assert response.status_code == 401


def test_save_and_fetch(client):
    saved = save(client, {"1": "No"})
    assert saved["score"] == 0
    assert saved["riskLevel"] == "critical"
    assert saved["totalAssessments"] == 1

    fetched = client.get(f"/api/health-check/{saved['id']}", headers=OWNER)
    assert fetched.status_code == 200
    assert fetched.json()["result"]["redFlags"] == ["Company not legally incorporated"]
    assert fetched.json()["formatted"]["overallScore"] == 0

    assert client.get(f"/api/health-check/{saved['id']}", headers=OTHER_OWNER).status_code == 404
    assert client.get("/api/health-check/not-a-record", headers=OWNER).status_code == 404


def test_history_latest_and_stats(client, clock):
    save(client, {"1": "No"})
    clock.advance(days=1)
    latest = save(client, {"1": "Yes"})

    history = client.get("/api/health-check/history?limit=1", headers=OWNER).json()
    assert [h["id"] for h in history["history"]] == [latest["id"]]
    assert history["pagination"]["totalResults"] == 2
    assert history["pagination"]["hasNext"] is True

    data = client.get("/api/health-check/latest", headers=OWNER).json()
    assert data["id"] == latest["id"]
    assert data["improvement"]["scoreChange"] == 100
    assert data["improvement"]["daysBetween"] == 1

    stats = client.get("/api/health-check/stats", headers=OWNER).json()
    assert stats["totalAssessments"] == 2
    assert stats["trend"] == "improving"
    assert stats["riskDistribution"] == {"low": 1, "medium": 0, "high": 0, "critical": 1}


def test_latest_without_records(client):
    assert client.get("/api/health-check/latest", headers=OWNER).status_code == 404


def test_export(client):
    saved = save(client, {"1": "No", "5": "No"}, {"5": "2"})

    json_export = client.get(f"/api/health-check/{saved['id']}/export?format=json", headers=OWNER)
    assert json_export.status_code == 200
    assert json_export.json()["result"]["redFlags"][1] == "GST returns missed for 2 month(s)"

    excel_export = client.get(f"/api/health-check/{saved['id']}/export?format=excel", headers=OWNER)
    assert excel_export.status_code == 200
    assert excel_export.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )

    assert client.get(f"/api/health-check/{saved['id']}/export?format=pdf", headers=OWNER).status_code == 400
    assert client.get(f"/api/health-check/{saved['id']}/export", headers=OTHER_OWNER).status_code == 404


def test_shareable_report_lifecycle(client, clock):
    saved = save(client, {"1": "Yes"})

    created = client.post(
        "/api/shareable-reports/create",
        json={"healthCheckId": saved["id"], "companyName": "Acme Tech", "expiresInDays": 3},
        headers=OWNER,
    )
    assert created.status_code == 201
    share = created.json()
    assert share["companySlug"] == "acme-tech"
    assert share["shareableUrl"].endswith(f"/shared-report/acme-tech/{share['reportHash']}")

    public = client.get(f"/api/shareable-reports/acme-tech/{share['reportHash']}")
    assert public.status_code == 200
    assert public.json()["healthCheck"]["result"]["overallScore"] == 100
    assert public.json()["reportInfo"]["viewCount"] == 1

    listed = client.get("/api/shareable-reports/user/list", headers=OWNER).json()
    assert [r["reportHash"] for r in listed["reports"]] == [share["reportHash"]]

    assert client.get(f"/api/shareable-reports/wrong-slug/{share['reportHash']}").status_code == 404

    clock.advance(days=4)
    assert client.get(f"/api/shareable-reports/acme-tech/{share['reportHash']}").status_code == 410


def test_share_validation_and_revoke(client):
    saved = save(client, {"1": "Yes"})

    too_long = client.post(
        "/api/shareable-reports/create",
        json={"healthCheckId": saved["id"], "companyName": "Acme", "expiresInDays": 400},
        headers=OWNER,
    )
    assert too_long.status_code == 422

    no_slug = client.post(
        "/api/shareable-reports/create",
        json={"healthCheckId": saved["id"], "companyName": "!!!"},
        headers=OWNER,
    )
    assert no_slug.status_code == 400

    not_mine = client.post(
        "/api/shareable-reports/create",
        json={"healthCheckId": saved["id"], "companyName": "Acme"},
        headers=OTHER_OWNER,
    )
    assert not_mine.status_code == 404

    share = client.post(
        "/api/shareable-reports/create",
        json={"healthCheckId": saved["id"], "companyName": "Acme"},
        headers=OWNER,
    ).json()

    assert client.delete(f"/api/shareable-reports/{share['reportHash']}", headers=OTHER_OWNER).status_code == 404
    assert client.delete(f"/api/shareable-reports/{share['reportHash']}", headers=OWNER).status_code == 200
    assert client.get(f"/api/shareable-reports/acme/{share['reportHash']}").status_code == 410
