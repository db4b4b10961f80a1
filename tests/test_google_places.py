import pytest

from market_scout.vendors import google_places


class DummyResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload or {}

    def raise_for_status(self):
        if self.status_code >= 400:
            raise RuntimeError("http error")

    def json(self):
        return self._payload


class DummySession:
    def __init__(self):
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params, timeout))
        return self.response


@pytest.fixture(autouse=True)
def patch_session(monkeypatch):
    session = DummySession()
    monkeypatch.setattr(google_places, "_SESSION", session)
    return session


def test_text_search_success(patch_session):
    patch_session.response = DummyResponse(payload={"status": "OK", "results": []})
    payload = google_places.text_search("hvac phoenix", "key")
    assert payload["status"] == "OK"
    url, params, timeout = patch_session.calls[0]
    assert "textsearch" in url
    assert params["query"] == "hvac phoenix"
    assert params["type"] == "establishment"
    assert "pagetoken" not in params
    assert timeout == 10


def test_text_search_error_status(patch_session):
    patch_session.response = DummyResponse(payload={"status": "INVALID_REQUEST", "error_message": "bad"})
    with pytest.raises(google_places.GooglePlacesError):
        google_places.text_search("hvac", "key")


def test_place_details_success(patch_session):
    patch_session.response = DummyResponse(payload={"status": "OK", "result": {"website": "https://acme.com"}})
    result = google_places.place_details("pid", "key")
    assert result["website"] == "https://acme.com"
    assert patch_session.calls[0][1]["fields"] == google_places.DETAIL_FIELDS


def test_place_details_error(patch_session):
    patch_session.response = DummyResponse(payload={"status": "OVER_QUERY_LIMIT", "error_message": "limit"})
    with pytest.raises(google_places.GooglePlacesError):
        google_places.place_details("pid", "key")


def test_directory_requires_api_key():
    with pytest.raises(ValueError):
        google_places.GooglePlacesDirectory("")


def test_directory_search_builds_records(monkeypatch):
    searched = {}

    def fake_text_search(query, api_key):
        searched["query"] = query
        return {
            "status": "OK",
            "results": [
                {
                    "place_id": "p1",
                    "name": "Cool Air Heating",
                    "formatted_address": "1 Main St, Phoenix, AZ 85001, USA",
                    "rating": 4.6,
                    "user_ratings_total": 120,
                    "geometry": {"location": {"lat": 33.4, "lng": -112.0}},
                    "photos": [{}, {}],
                },
                {"name": "No Id"},
                {
                    "place_id": "p2",
                    "name": "Pipe Masters",
                    "formatted_address": "2 Main St, Phoenix, AZ 85001, USA",
                },
            ],
        }

    def fake_place_details(place_id, api_key):
        if place_id == "p2":
            raise google_places.GooglePlacesError("NOT_FOUND")
        return {"formatted_phone_number": "555", "website": "https://coolair.com", "opening_hours": {"open_now": True}}

    monkeypatch.setattr(google_places, "text_search", fake_text_search)
    monkeypatch.setattr(google_places, "place_details", fake_place_details)

    records = google_places.GooglePlacesDirectory("key").search("HVAC near Phoenix")

    assert searched["query"] == "HVAC near Phoenix home services"
    assert [r.id for r in records] == ["p1", "p2"]
    first, second = records
    assert first.service_type == "HVAC"
    assert first.review_count == 120
    assert first.contact.website == "https://coolair.com"
    assert first.contact.photos == 2
    assert first.contact.currently_open is True
    assert second.service_type == "Plumbing"
    assert second.rating == 0.0
    assert second.contact.website is None


def test_directory_search_limits_results(monkeypatch):
    results = [{"place_id": f"p{i}", "name": f"Roof Co {i}"} for i in range(15)]
    monkeypatch.setattr(google_places, "text_search", lambda query, api_key: {"results": results})
    monkeypatch.setattr(google_places, "place_details", lambda place_id, api_key: {})

    records = google_places.GooglePlacesDirectory("key").search("roofing")

    assert len(records) == 10
