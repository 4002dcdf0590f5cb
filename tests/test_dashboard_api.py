import io

import pytest
from conftest import make_response

from consent_theater.app import create_app

BASE = "http://10.0.0.7:8080"


@pytest.fixture
def make_client(orchestrator_factory):
    def factory(routes=None):
        app = create_app(orchestrator_factory(routes))
        app.config["TESTING"] = True
        return app.test_client()
    return factory


def test_health_before_load(make_client):
    response = make_client().get("/health")
    assert response.status_code == 200
    assert response.get_json() == {"status": "ok", "is_loaded": False, "source": ""}


def test_upload_multipart_file(make_client, raw_phone_scan, as_bytes):
    client = make_client()
    response = client.post(
        "/upload",
        data={"file": (io.BytesIO(as_bytes(raw_phone_scan)), "scan.json")},
        content_type="multipart/form-data",
    )
    assert response.status_code == 200
    assert response.get_json()["applied"] is True

    dataset = client.get("/dataset").get_json()
    assert dataset["isLoaded"] is True
    assert dataset["source"] == "file:scan.json"
    assert dataset["scanResult"]["total_apps"] == 2


def test_upload_malformed_body_is_not_an_error(make_client):
    client = make_client()
    response = client.post("/upload", data=b"{not json", content_type="application/json")
    assert response.status_code == 200
    assert response.get_json() == {
        "applied": False, "generation": 0, "currentGeneration": 0, "isLoaded": False,
    }


def test_upload_requires_content(make_client):
    response = make_client().post("/upload")
    assert response.status_code == 400


def test_load_from_url_success(make_client, pre_shaped_scan):
    client = make_client({f"{BASE}/scan": make_response(200, pre_shaped_scan)})
    response = client.post("/load", json={"url": f"{BASE}/scan"})
    assert response.status_code == 200
    body = response.get_json()
    assert body["applied"] is True
    assert body["isLoaded"] is True


def test_load_from_url_fetch_error(make_client):
    client = make_client({f"{BASE}/scan": make_response(503)})
    response = client.post("/load", json={"url": f"{BASE}/scan"})
    assert response.status_code == 502
    body = response.get_json()
    assert body["error"] == "fetch_error"
    assert "HTTP 503" in body["detail"]
    assert body["applied"] is False


def test_load_from_base_without_scan(make_client):
    response = make_client().post("/load", json={"url": BASE})
    assert response.status_code == 502
    assert response.get_json()["error"] == "no_scan_data"


def test_sample_then_metrics(make_client):
    client = make_client()
    assert client.post("/sample").status_code == 200

    revenue = client.get("/metrics/revenue").get_json()
    assert revenue["totalAnnualInr"] > 0

    trust = client.get("/metrics/trust").get_json()
    assert 0 <= trust["score"] <= 100
    assert trust["grade"] in {"A", "B", "C", "D", "F"}

    timeline = client.get("/metrics/timeline").get_json()
    assert len(timeline) == 24


def test_unknown_metric(make_client):
    response = make_client().get("/metrics/horoscope")
    assert response.status_code == 404
    assert "revenue" in response.get_json()["available"]


def test_deletion_request_endpoint(make_client):
    client = make_client()
    response = client.post("/deletion-request", json={
        "regime": "gdpr",
        "user_name": "Jan Novak",
        "user_email": "jan@example.eu",
        "company": "Criteo",
    })
    assert response.status_code == 200
    assert "Criteo" in response.get_json()["body"]

    response = client.post("/deletion-request", json={"regime": "gdpr", "company": "Criteo"})
    assert response.status_code == 400


def test_upload_with_bad_value_types_is_accepted(make_client):
    client = make_client()
    response = client.post(
        "/upload",
        data=b'{"scan_id": "s", "apps": [{"package_name": "a", "permissions": 5, "risk_score": NaN}]}',
        content_type="application/json",
    )
    assert response.status_code == 200
    body = response.get_json()
    assert body["applied"] is True
    assert body["currentGeneration"] == body["generation"] == 1


def test_blocking_simulation_categories(make_client):
    client = make_client()
    client.post("/sample")

    defaults = client.get("/blocking-simulation").get_json()
    assert defaults["total"] == 5
    assert defaults["blocked"] == 5

    analytics_only = client.get("/blocking-simulation?categories=Analytics").get_json()
    assert analytics_only["blocked"] == 1
    assert analytics_only["blockedBytes"] == 18432

    assert client.get("/metrics/blocking").get_json() == defaults


def test_new_metrics_are_registered(make_client):
    client = make_client()
    client.post("/sample")
    for name in ("indictment", "ghosts", "permissions"):
        assert client.get(f"/metrics/{name}").status_code == 200
