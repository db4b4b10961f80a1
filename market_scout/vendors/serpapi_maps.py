"""SerpAPI Google Maps helpers used as an alternative business directory."""

from __future__ import annotations

import logging
import random
import time
from typing import Any, Dict, Iterable, List, Optional

from serpapi import GoogleSearch

from market_scout.etl.transform import serp_item_to_record
from market_scout.models import BusinessRecord

logger = logging.getLogger(__name__)

RETRY_LIMIT = 2
RETRY_DELAY_SECONDS = 1.2
MAX_RESULTS = 10


def build_serpapi_params(query: str, api_key: str, ll: Optional[str] = None) -> Dict[str, Any]:
    """Construct SerpAPI request parameters for the Google Maps engine."""
    if not query or not query.strip():
        raise ValueError("Query must be provided for SerpAPI lookups.")

    params: Dict[str, Any] = {
        "engine": "google_maps",
        "q": query.strip(),
        "api_key": api_key,
        "type": "search",
    }
    if ll:
        params["ll"] = ll
    return params


def fetch_from_serpapi(query: str, api_key: str, ll: Optional[str] = None) -> Dict[str, Any]:
    """Call SerpAPI Google Maps and return the raw JSON response with retry logic.

    SerpAPI charges per request; every attempt is logged so usage can be
    audited.
    """
    params = build_serpapi_params(query, api_key, ll)

    attempt = 0
    while True:
        attempt += 1
        try:
            logger.info("Calling SerpAPI (attempt %s) for query=%s", attempt, query)
            data = GoogleSearch(params).get_dict()
            if not data:
                raise ValueError("SerpAPI returned an empty payload.")
            if "error" in data:
                raise RuntimeError(f"SerpAPI returned an error response: {data.get('error')}")
            return data
        except Exception as exc:  # noqa: BLE001
            logger.warning("SerpAPI request failed (attempt %s/%s): %s", attempt, RETRY_LIMIT + 1, exc)
            if attempt > RETRY_LIMIT:
                logger.error("SerpAPI request exhausted retries for query=%s", query)
                raise
            time.sleep(RETRY_DELAY_SECONDS + random.uniform(0, 0.8))


def _extract_items(data: Dict[str, Any]) -> Iterable[Any]:
    """SerpAPI sometimes returns local_results as a list or nested dict."""
    local_results = data.get("local_results")
    if isinstance(local_results, list):
        return local_results
    if isinstance(local_results, dict):
        for key in ("places", "results", "local_results"):
            maybe = local_results.get(key)
            if isinstance(maybe, list):
                return maybe

    place_results = data.get("place_results")
    if isinstance(place_results, list):
        return place_results
    if isinstance(place_results, dict):
        return [place_results]
    return []


def parse_serpapi_maps(data: Optional[Dict[str, Any]]) -> List[BusinessRecord]:
    """Extract SerpAPI local/place results into BusinessRecord objects."""
    if not data:
        return []

    records: List[BusinessRecord] = []
    for raw in _extract_items(data):
        if not isinstance(raw, dict):
            continue
        record = serp_item_to_record(raw)
        if record is None:
            logger.debug("Skipping SerpAPI item without name or place id: %s", str(raw)[:200])
            continue
        records.append(record)
    return records


class SerpApiDirectory:
    """Business directory backed by the SerpAPI google_maps engine."""

    def __init__(self, api_key: str, max_results: int = MAX_RESULTS) -> None:
        if not api_key:
            raise ValueError("api_key is required for SerpApiDirectory")
        self.api_key = api_key
        self.max_results = max_results

    def search(self, query: str) -> List[BusinessRecord]:
        data = fetch_from_serpapi(query, self.api_key)
        records = parse_serpapi_maps(data)[: self.max_results]
        logger.info("Parsed %s businesses from SerpAPI for query=%s", len(records), query)
        return records
