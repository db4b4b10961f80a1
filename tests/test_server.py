import json

import pytest

from market_scout.core.config import Settings
from market_scout.core.orchestrator import AnalysisOrchestrator
from market_scout.jobs import server
from market_scout.vendors.mock_directory import MockDirectory


class StaticDiscoverer:
    def __init__(self, competitors=()):
        self.competitors = tuple(competitors)

    def discover(self, target):
        return self.competitors


class BrokenOrchestrator:
    narrative_enricher = None
    seo_enricher = None

    def analyze(self, target):
        raise RuntimeError("scoring exploded")


TARGET_PAYLOAD = {
    "id": "target_1",
    "name": "Elite HVAC Services",
    "address": "123 Main St, Phoenix, AZ 85001",
    "service_type": "HVAC",
    "rating": 4.8,
    "review_count": 127,
    "contact": {"phone": "(555) 123-4567", "website": "https://elitehvac.com", "photos": 15},
}


def _events(response):
    body = response.get_data(as_text=True)
    return [json.loads(chunk[len("data: "):]) for chunk in body.split("\n\n") if chunk.startswith("data: ")]


@pytest.fixture
def make_client(business_factory):
    def _make(settings=None, orchestrator=None, directory=None):
        competitors = [business_factory("c1", rating=4.5, review_count=100)]
        app = server.create_app(
            settings=settings or Settings(),
            directory=directory or MockDirectory(),
            orchestrator=orchestrator or AnalysisOrchestrator(StaticDiscoverer(competitors)),
        )
        return app.test_client()

    return _make


def test_health_endpoint(make_client):
    response = make_client().get("/healthz")
    assert response.status_code == 200
    payload = response.get_json()
    assert payload["status"] == "ok"
    assert payload["directory"] == "MockDirectory"
    assert payload["ai_insights"] is False
    assert payload["persistence"] is False


def test_search_rejects_short_query(make_client):
    response = make_client().get("/api/search/businesses?q=a")
    assert response.status_code == 200
    assert response.get_json()["success"] is False


def test_search_returns_records(make_client):
    response = make_client().get("/api/search/businesses?q=hvac")
    payload = response.get_json()

    assert payload["success"] is True
    assert payload["total_results"] == 1
    assert payload["results"][0]["id"] == "mock_place_1"
    assert payload["results"][0]["contact"]["website"] == "https://elitehvac.com"


def test_search_directory_failure(make_client):
    class DownDirectory:
        def search(self, query):
            raise ConnectionError("offline")

    response = make_client(directory=DownDirectory()).get("/api/search/businesses?q=hvac")
    assert response.status_code == 500
    assert response.get_json()["success"] is False


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"id": "x", "name": "Acme"},
        dict(TARGET_PAYLOAD, rating=9),
        dict(TARGET_PAYLOAD, service_type=" "),
        dict(TARGET_PAYLOAD, contact="(555) 123-4567"),
        dict(TARGET_PAYLOAD, location=[33.4, -112.0]),
        dict(TARGET_PAYLOAD, review_count="-5"),
    ],
)
def test_start_analysis_validates_payload(make_client, payload):
    response = make_client().post("/api/analysis/start", json=payload)
    assert response.status_code == 400
    assert response.get_json()["error"].startswith("Invalid business data")


def test_start_analysis_streams_progress(make_client):
    response = make_client().post("/api/analysis/start", json=TARGET_PAYLOAD)

    assert response.status_code == 200
    assert response.mimetype == "text/event-stream"
    events = _events(response)
    assert [e["progress"] for e in events] == [15, 75, 100]
    assert events[1]["message"] == "Preparing results..."
    final = events[-1]
    assert final["completed"] is True
    assert final["analysis_id"] is None
    assert final["result"]["market_position"] == 1
    assert final["result"]["competitors"][0]["id"] == "c1"


def test_start_analysis_reports_failure_event(make_client):
    response = make_client(orchestrator=BrokenOrchestrator()).post("/api/analysis/start", json=TARGET_PAYLOAD)

    events = _events(response)
    assert events[-1]["progress"] == 0
    assert events[-1]["error"] == "Failed to complete analysis"


def test_start_analysis_persists_when_configured(make_client, monkeypatch):
    stored = {}

    def fake_upsert(record):
        stored["business"] = record.id
        return 11

    def fake_insert(business_id, result):
        stored["analysis"] = business_id
        return 21

    monkeypatch.setattr(server.db, "upsert_business", fake_upsert)
    monkeypatch.setattr(server.db, "insert_analysis", fake_insert)

    client = make_client(settings=Settings(database_url="postgres://u:p@h/db"))
    events = _events(client.post("/api/analysis/start", json=TARGET_PAYLOAD))
    final = events[-1]

    assert stored == {"business": "target_1", "analysis": 11}
    assert final["business_id"] == 11
    assert final["analysis_id"] == 21
    assert "Saving analysis..." in [e["message"] for e in events]


def test_get_analysis_requires_persistence(make_client):
    assert make_client().get("/api/analysis/1").status_code == 503


def test_get_analysis_lookup(make_client, monkeypatch):
    analyses = {5: {"id": 5, "target_business_id": 11, "market_position": 2}}
    monkeypatch.setattr(server.db, "get_analysis", lambda analysis_id: analyses.get(analysis_id))
    monkeypatch.setattr(server.db, "get_business", lambda business_id: {"id": business_id, "business_name": "Elite"})
    client = make_client(settings=Settings(database_url="postgres://u:p@h/db"))

    found = client.get("/api/analysis/5")
    assert found.status_code == 200
    payload = json.loads(found.get_data(as_text=True))
    assert payload["analysis"]["market_position"] == 2
    assert payload["business"]["business_name"] == "Elite"

    assert client.get("/api/analysis/6").status_code == 404
