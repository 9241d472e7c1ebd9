from fastapi.testclient import TestClient

from main import app

client = TestClient(app)


def _payload(**overrides) -> dict:
    # Same shape the web client posts (camelCase keys).
    base = {
        "id": "web-a",
        "name": "Main Street",
        "termYears": 5,
        "startDate": "2026-01-01",
        "baseRentMonthly": 5000,
        "escalationType": "none",
        "escalationValue": 0,
        "freeRentMonths": 0,
        "tiAllowance": 0,
        "squareFootage": 1000,
        "nnnMonthly": 0,
    }
    base.update(overrides)
    return base


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert "X-Request-Id" in response.headers


def test_compute_endpoint():
    response = client.post("/compute", params={"discount_rate": 5}, json=_payload())
    assert response.status_code == 200
    data = response.json()
    assert data["proposal_id"] == "web-a"
    assert data["total_months"] == 60
    assert data["total_cash_out"] == 300000
    assert abs(data["npv"] - 265669) <= 5
    assert abs(data["effective_monthly_rent"] - 5000) <= 1
    assert data["cash_flows"][0]["date_label"] == "Jan 2026"


def test_compute_clamps_discount_rate():
    high = client.post("/compute", params={"discount_rate": 50}, json=_payload()).json()
    capped = client.post("/compute", params={"discount_rate": 20}, json=_payload()).json()
    assert high["npv"] == capped["npv"]


def test_compute_accepts_snake_case_body():
    body = {
        "id": "api-1",
        "name": "Snake",
        "term_years": 2,
        "start_date": "2026-03-01",
        "base_rent_monthly": 3000,
        "ti_allowance": 5000,
    }
    response = client.post("/compute", params={"discount_rate": 0}, json=body)
    assert response.status_code == 200
    data = response.json()
    assert data["total_months"] == 24
    assert data["total_cash_out"] == 67000
    assert data["npv"] == 67000


def test_compute_validation_error_shape():
    response = client.post("/compute", json={"id": "bad", "termYears": "ten"})
    assert response.status_code == 422
    data = response.json()
    assert data["error"] == "compute_validation_failed"
    assert data["rid"]


def test_timeline_endpoint():
    response = client.post("/timeline", json=_payload(freeRentMonths=2, termYears=1))
    assert response.status_code == 200
    rows = response.json()["cash_flows"]
    assert len(rows) == 12
    assert rows[0]["is_abated"] is True
    assert rows[2]["actual_rent"] == 5000


def test_compare_endpoint():
    response = client.post(
        "/compare",
        json={
            "proposals": [_payload(), _payload(id="web-b", freeRentMonths=6)],
            "discount_rate": 5,
        },
    )
    assert response.status_code == 200
    data = response.json()
    assert [m["proposal_id"] for m in data["metrics"]] == ["web-a", "web-b"]
    assert data["lowest_npv_ids"] == ["web-b"]
    assert data["lowest_effective_rent_ids"] == ["web-b"]


def test_compare_rejects_too_many_proposals():
    proposals = [_payload(id=f"p{i}") for i in range(5)]
    response = client.post("/compare", json={"proposals": proposals, "discount_rate": 5})
    assert response.status_code == 422
    assert response.json()["error"] == "compute_validation_failed"


def test_compare_rejects_empty_list():
    response = client.post("/compare", json={"proposals": []})
    assert response.status_code == 422


def test_compare_clamps_rate():
    response = client.post("/compare", json={"proposals": [_payload()], "discount_rate": -4})
    assert response.status_code == 200
    assert response.json()["discount_rate"] == 0


def test_default_session_endpoint():
    response = client.get("/session/default")
    assert response.status_code == 200
    data = response.json()
    assert [p["id"] for p in data["session"]["proposals"]] == ["default-proposal-a", "default-proposal-b"]
    assert len(data["comparison"]["metrics"]) == 2
