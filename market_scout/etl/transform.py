"""Utilities for transforming provider responses into BusinessRecord objects."""

import logging
from typing import Any, Dict, Iterable, Mapping, Optional

from market_scout.models import BusinessRecord, ContactInfo, Location

logger = logging.getLogger(__name__)

HOME_SERVICE_TYPES = {
    "HVAC",
    "Plumbing",
    "Roofing",
    "Pest Control",
    "Electrical",
    "Landscaping",
    "Painting",
    "General Contractor",
    "Cleaning",
}
DEFAULT_SERVICE_TYPE = "General Contractor"

_NAME_KEYWORDS = (
    ("HVAC", ("hvac", "heating", "cooling", "air condition")),
    ("Plumbing", ("plumb", "pipe", "drain")),
    ("Roofing", ("roof", "gutter", "siding")),
    ("Pest Control", ("pest", "exterminat", "termite")),
    ("Electrical", ("electric", "wiring")),
    ("Landscaping", ("landscap", "lawn", "tree")),
    ("Painting", ("paint",)),
    ("Cleaning", ("clean", "maid", "janitorial")),
)
_PLACE_TYPES = (
    ("plumber", "Plumbing"),
    ("electrician", "Electrical"),
    ("roofing_contractor", "Roofing"),
    ("general_contractor", "General Contractor"),
)


def detect_service_type(name: Optional[str], types: Optional[Iterable[str]] = None) -> str:
    """Classify a business by name keywords first, then by its Google place types."""
    lowered = (name or "").lower()
    for service_type, keywords in _NAME_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return service_type

    type_set = set(types or [])
    for place_type, service_type in _PLACE_TYPES:
        if place_type in type_set:
            return service_type
    return DEFAULT_SERVICE_TYPE


def is_home_service(service_type: str) -> bool:
    return service_type in HOME_SERVICE_TYPES


def _safe_float(value: Any) -> Optional[float]:
    try:
        if value is None:
            return None
        return float(value)
    except (TypeError, ValueError):
        return None


def _safe_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return int(value)

    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
        # Provider counts such as "1,204" or "(87)".
        digits = "".join(ch for ch in value if ch.isdigit())
        if digits:
            return int(digits)
    return None


def _strip_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    value_str = str(value).strip()
    return value_str or None


def normalize_rating(value: Any) -> float:
    rating = _safe_float(value)
    if rating is None:
        return 0.0
    return min(5.0, max(0.0, rating))


def normalize_review_count(value: Any) -> int:
    count = _safe_int(value)
    if count is None:
        return 0
    return max(0, count)


def place_to_record(result: Dict[str, Any], details: Optional[Dict[str, Any]] = None) -> BusinessRecord:
    """Build a record from a Places text-search result plus its details lookup."""
    details = details or {}
    geometry = result.get("geometry", {}).get("location", {})
    opening_hours = details.get("opening_hours")
    name = result.get("name") or ""

    return BusinessRecord(
        id=result["place_id"],
        name=name,
        address=result.get("formatted_address") or "",
        service_type=detect_service_type(name, result.get("types", [])),
        rating=normalize_rating(result.get("rating")),
        review_count=normalize_review_count(result.get("user_ratings_total")),
        location=Location(
            lat=_safe_float(geometry.get("lat")) or 0.0,
            lng=_safe_float(geometry.get("lng")) or 0.0,
        ),
        contact=ContactInfo(
            phone=_strip_or_none(details.get("formatted_phone_number")),
            website=_strip_or_none(details.get("website")),
            photos=len(result.get("photos") or []),
            business_status=result.get("business_status") or "OPERATIONAL",
            currently_open=opening_hours.get("open_now") if opening_hours else None,
            hours=opening_hours,
        ),
    )


def serp_item_to_record(raw: Dict[str, Any]) -> Optional[BusinessRecord]:
    """Build a record from a SerpAPI Google Maps local result; None when unusable."""
    name = (raw.get("title") or raw.get("name") or "").strip()
    place_id = _strip_or_none(raw.get("place_id") or raw.get("data_id"))
    if not name or not place_id:
        return None

    gps = raw.get("gps_coordinates") or {}
    hours = raw.get("operating_hours")
    return BusinessRecord(
        id=place_id,
        name=name,
        address=_strip_or_none(raw.get("address")) or "",
        service_type=detect_service_type(name, raw.get("types") or []),
        rating=normalize_rating(raw.get("rating")),
        review_count=normalize_review_count(raw.get("reviews_count") or raw.get("reviews")),
        location=Location(
            lat=_safe_float(gps.get("latitude")) or 0.0,
            lng=_safe_float(gps.get("longitude")) or 0.0,
        ),
        contact=ContactInfo(
            phone=_strip_or_none(raw.get("phone")),
            website=_strip_or_none(raw.get("website")),
            photos=normalize_review_count(raw.get("photos_count")),
            business_status="OPERATIONAL",
            currently_open=None,
            hours=hours if isinstance(hours, dict) else None,
        ),
    )


def record_from_payload(payload: Mapping[str, Any]) -> BusinessRecord:
    """Parse a JSON business payload as sent by API clients.

    Accepts either ``id`` or ``place_id``. Raises ValueError when the payload
    cannot describe a business.
    """
    if not isinstance(payload, Mapping):
        raise ValueError("business payload must be a JSON object")

    place_id = _strip_or_none(payload.get("id") or payload.get("place_id"))
    name = _strip_or_none(payload.get("name"))
    if not place_id or not name:
        raise ValueError("id and name are required")

    rating = _safe_float(payload.get("rating"))
    if rating is not None and not 0.0 <= rating <= 5.0:
        raise ValueError("rating must be between 0 and 5")
    review_count = _safe_int(payload.get("review_count"))
    if review_count is not None and review_count < 0:
        raise ValueError("review_count must be non-negative")

    location = payload.get("location") or {}
    contact = payload.get("contact") or {}
    if not isinstance(location, Mapping) or not isinstance(contact, Mapping):
        raise ValueError("location and contact must be JSON objects")
    return BusinessRecord(
        id=place_id,
        name=name,
        address=_strip_or_none(payload.get("address")) or "",
        service_type=_strip_or_none(payload.get("service_type")) or "",
        rating=rating or 0.0,
        review_count=review_count or 0,
        location=Location(
            lat=_safe_float(location.get("lat")) or 0.0,
            lng=_safe_float(location.get("lng")) or 0.0,
        ),
        contact=ContactInfo(
            phone=_strip_or_none(contact.get("phone")),
            website=_strip_or_none(contact.get("website")),
            photos=normalize_review_count(contact.get("photos")),
            business_status=contact.get("business_status") or "OPERATIONAL",
            currently_open=contact.get("currently_open"),
            hours=contact.get("hours"),
        ),
    )
