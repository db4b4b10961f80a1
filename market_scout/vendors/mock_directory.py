"""Offline business directory used when no places provider is configured."""

import logging
from typing import List, Optional, Sequence

from market_scout.models import BusinessRecord, ContactInfo, Location

logger = logging.getLogger(__name__)

MOCK_BUSINESSES = (
    BusinessRecord(
        id="mock_place_1",
        name="Elite HVAC Services",
        address="123 Main St, Phoenix, AZ 85001",
        service_type="HVAC",
        rating=4.8,
        review_count=127,
        location=Location(lat=33.4484, lng=-112.0740),
        contact=ContactInfo(
            phone="(555) 123-4567",
            website="https://elitehvac.com",
            photos=15,
            currently_open=True,
        ),
    ),
    BusinessRecord(
        id="mock_place_2",
        name="Phoenix Plumbing Pro",
        address="456 Oak Ave, Phoenix, AZ 85002",
        service_type="Plumbing",
        rating=4.6,
        review_count=89,
        location=Location(lat=33.4734, lng=-112.0431),
        contact=ContactInfo(phone="(555) 234-5678", photos=8, currently_open=False),
    ),
    BusinessRecord(
        id="mock_place_3",
        name="Desert Roofing Solutions",
        address="789 Pine Rd, Phoenix, AZ 85003",
        service_type="Roofing",
        rating=4.9,
        review_count=203,
        location=Location(lat=33.5149, lng=-112.1001),
        contact=ContactInfo(
            phone="(555) 345-6789",
            website="https://desertroof.com",
            photos=25,
            currently_open=True,
        ),
    ),
    BusinessRecord(
        id="mock_place_4",
        name="Lightning Electric",
        address="321 Elm St, Phoenix, AZ 85004",
        service_type="Electrical",
        rating=4.4,
        review_count=56,
        location=Location(lat=33.4255, lng=-112.0889),
        contact=ContactInfo(
            phone="(555) 456-7890",
            website="https://lightningelectric.com",
            photos=12,
            currently_open=True,
        ),
    ),
    BusinessRecord(
        id="mock_place_5",
        name="Green Valley Landscaping",
        address="654 Cedar Ave, Phoenix, AZ 85005",
        service_type="Landscaping",
        rating=4.7,
        review_count=98,
        location=Location(lat=33.3962, lng=-112.0651),
        contact=ContactInfo(phone="(555) 567-8901", photos=18, currently_open=False),
    ),
)


class MockDirectory:
    """Matches queries against a fixed set of businesses.

    A business matches when its name or service type occurs in the query, or
    the whole query occurs in the name or service type (case-insensitive), so
    phrased competitor queries like "HVAC near Phoenix" still hit.
    """

    def __init__(self, businesses: Optional[Sequence[BusinessRecord]] = None, limit: int = 5) -> None:
        self.businesses = tuple(MOCK_BUSINESSES if businesses is None else businesses)
        self.limit = limit

    def search(self, query: str) -> List[BusinessRecord]:
        needle = query.strip().lower()
        if not needle:
            return []

        matches = []
        for business in self.businesses:
            haystacks = (business.name.lower(), business.service_type.lower())
            if any(needle in text or (text and text in needle) for text in haystacks):
                matches.append(business)
        logger.info("Mock directory matched %d businesses for query=%s", len(matches), query)
        return matches[: self.limit]
