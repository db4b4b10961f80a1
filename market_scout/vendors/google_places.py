"""Client utilities for the Google Places API."""

import logging
from typing import Any, Dict, List

import requests

from market_scout.etl.transform import is_home_service, place_to_record
from market_scout.models import BusinessRecord

logger = logging.getLogger(__name__)
_SESSION = requests.Session()
_BASE_URL = "https://maps.googleapis.com/maps/api/place"

DETAIL_FIELDS = "formatted_phone_number,website,opening_hours"
MAX_RESULTS = 10
SEARCH_RADIUS_METERS = 50000


class GooglePlacesError(RuntimeError):
    """Raised when the Places API returns a non-successful response."""


def text_search(query: str, api_key: str) -> Dict[str, Any]:
    params = {
        "query": query,
        "key": api_key,
        "type": "establishment",
        "radius": SEARCH_RADIUS_METERS,
    }
    response = _SESSION.get(f"{_BASE_URL}/textsearch/json", params=params, timeout=10)
    response.raise_for_status()
    payload = response.json()
    status = payload.get("status")
    if status not in {"OK", "ZERO_RESULTS"}:
        logger.error("text_search failed: status=%s, error_message=%s", status, payload.get("error_message"))
        raise GooglePlacesError(payload.get("error_message") or status)
    return payload


def place_details(place_id: str, api_key: str, fields: str = DETAIL_FIELDS) -> Dict[str, Any]:
    params = {"place_id": place_id, "key": api_key, "fields": fields}
    response = _SESSION.get(f"{_BASE_URL}/details/json", params=params, timeout=10)
    response.raise_for_status()
    payload = response.json()
    status = payload.get("status")
    if status not in {"OK", "ZERO_RESULTS"}:
        logger.error("place_details failed: status=%s, error_message=%s", status, payload.get("error_message"))
        raise GooglePlacesError(payload.get("error_message") or status)
    return payload.get("result", {})


class GooglePlacesDirectory:
    """Business directory backed by Places text search and place details."""

    def __init__(self, api_key: str, max_results: int = MAX_RESULTS) -> None:
        if not api_key:
            raise ValueError("api_key is required for GooglePlacesDirectory")
        self.api_key = api_key
        self.max_results = max_results

    def search(self, query: str) -> List[BusinessRecord]:
        logger.info("Running Places text search for query=%s", query)
        response = text_search(query=f"{query} home services", api_key=self.api_key)
        results = response.get("results", [])[: self.max_results]

        records: List[BusinessRecord] = []
        for result in results:
            place_id = result.get("place_id")
            if not place_id:
                logger.debug("Skipping result without place_id: %s", result.get("name"))
                continue

            try:
                details = place_details(place_id=place_id, api_key=self.api_key)
            except (requests.RequestException, GooglePlacesError) as exc:
                logger.warning("Failed to fetch details for %s: %s", place_id, exc)
                details = {}

            try:
                record = place_to_record(result, details)
            except (KeyError, ValueError) as exc:
                logger.warning("Skipping malformed place %s: %s", place_id, exc)
                continue

            if not is_home_service(record.service_type):
                logger.debug("Skipping %s with service type %s", place_id, record.service_type)
                continue
            records.append(record)

        logger.info("Places search returned %d businesses for query=%s", len(records), query)
        return records
