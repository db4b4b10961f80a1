import sys
from pathlib import Path

import pytest

# Ensure the `market_scout` package is importable when running pytest from the repository root.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from market_scout.models import BusinessRecord, ContactInfo  # noqa: E402


def make_business(
    id,
    rating=4.0,
    review_count=50,
    name=None,
    website="https://example.com",
    phone="555-0100",
    photos=12,
    service_type="HVAC",
    address="1 Main St, Phoenix, AZ 85001, USA",
):
    return BusinessRecord(
        id=id,
        name=name or f"Business {id}",
        address=address,
        service_type=service_type,
        rating=rating,
        review_count=review_count,
        contact=ContactInfo(phone=phone, website=website, photos=photos),
    )


@pytest.fixture
def business_factory():
    return make_business
