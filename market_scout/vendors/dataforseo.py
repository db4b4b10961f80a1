"""Client utilities for the DataForSEO v3 API."""

import logging
from typing import Any, Dict, List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger(__name__)
_BASE_URL = "https://api.dataforseo.com/v3"
_OK_STATUS = 20000
DEFAULT_LOCATION = "United States"


class DataForSeoError(RuntimeError):
    """Raised when DataForSEO rejects a request or a task."""


def _retrying_session() -> requests.Session:
    """Session that retries transient network and 5xx failures on POST."""
    session = requests.Session()
    retries = Retry(
        total=3,
        backoff_factor=1,
        status_forcelist=(500, 502, 503, 504),
        allowed_methods=("POST", "GET"),
    )
    session.mount("https://", HTTPAdapter(max_retries=retries))
    session.mount("http://", HTTPAdapter(max_retries=retries))
    return session


class DataForSeoClient:
    def __init__(
        self,
        login: str,
        password: str,
        base_url: str = _BASE_URL,
        session: Optional[requests.Session] = None,
        timeout: int = 30,
    ) -> None:
        if not login or not password:
            raise ValueError("DataForSEO login and password are required")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or _retrying_session()
        self._session.auth = (login, password)

    def _post(self, path: str, task: Dict[str, Any]) -> List[Dict[str, Any]]:
        """POST a single live task and return its ``result`` list."""
        response = self._session.post(f"{self.base_url}/{path}", json=[task], timeout=self.timeout)
        response.raise_for_status()
        payload = response.json()
        if payload.get("status_code") != _OK_STATUS:
            logger.error("%s failed: status=%s message=%s", path, payload.get("status_code"), payload.get("status_message"))
            raise DataForSeoError(payload.get("status_message") or str(payload.get("status_code")))

        tasks = payload.get("tasks") or []
        if not tasks:
            return []
        first = tasks[0]
        if first.get("status_code") != _OK_STATUS:
            logger.error("%s task failed: status=%s message=%s", path, first.get("status_code"), first.get("status_message"))
            raise DataForSeoError(first.get("status_message") or str(first.get("status_code")))
        return first.get("result") or []

    def _first_items(self, path: str, task: Dict[str, Any]) -> List[Dict[str, Any]]:
        result = self._post(path, task)
        if not result:
            return []
        return result[0].get("items") or []

    def serp_results(self, keywords: List[str], location: str = DEFAULT_LOCATION) -> List[Dict[str, Any]]:
        """Organic SERP items for the joined keyword phrase."""
        items = self._first_items(
            "serp/google/organic/live/advanced",
            {
                "keyword": " ".join(keywords),
                "location_name": location,
                "language_code": "en",
                "device": "desktop",
                "depth": 100,
            },
        )
        return [
            {
                "keyword": item.get("keyword") or "",
                "position": item.get("rank_group") or 0,
                "url": item.get("url") or "",
                "title": item.get("title") or "",
                "description": item.get("description") or "",
            }
            for item in items
            if item.get("type") == "organic"
        ]

    def keyword_data(self, keywords: List[str], location: str = DEFAULT_LOCATION) -> List[Dict[str, Any]]:
        result = self._post(
            "keywords_data/google_ads/search_volume/live",
            {"keywords": keywords, "location_name": location, "language_code": "en"},
        )
        return [
            {
                "keyword": row.get("keyword") or "",
                "search_volume": row.get("search_volume") or 0,
                "competition": row.get("competition") or 0,
                "cpc": row.get("cpc") or 0,
            }
            for row in result
        ]

    def competitor_domains(self, domain: str, location: str = DEFAULT_LOCATION) -> List[Dict[str, Any]]:
        return self._first_items(
            "dataforseo_labs/google/competitors_domain/live",
            {"target": domain, "location_name": location, "language_code": "en", "limit": 10},
        )

    def backlink_summary(self, target: str) -> Optional[Dict[str, Any]]:
        result = self._post("backlinks/summary/live", {"target": target, "include_subdomains": True})
        return result[0] if result else None

    def local_pack(self, keyword: str, location: str) -> List[Dict[str, Any]]:
        return self._first_items(
            "serp/google/local_pack/live/regular",
            {"keyword": keyword, "location_name": location, "language_code": "en"},
        )
