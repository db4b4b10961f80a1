"""Best-effort helpers for pulling locality hints out of free-form addresses.

Addresses come back from the directories as a single formatted string such as
``"123 Main St, Phoenix, AZ 85001, USA"``. None of these helpers raise: when a
part cannot be found they return an empty string and the caller decides on
the fallback.
"""

from typing import List, Optional
from urllib.parse import urlparse


def _split(address: Optional[str]) -> List[str]:
    return [part.strip() for part in (address or "").split(",") if part.strip()]


def extract_locality(address: Optional[str]) -> str:
    """Return the city-like component used to phrase competitor searches."""
    parts = _split(address)
    if len(parts) >= 4:
        # "Street, City, State ZIP, Country"
        return parts[-3]
    if len(parts) == 3:
        # "Street, City, State ZIP"
        return parts[-2]
    if len(parts) == 2:
        # "City, State ZIP"
        return parts[0]
    return ""


def extract_state(address: Optional[str]) -> str:
    """State or region code that follows the locality, e.g. ``"AZ"``."""
    parts = _split(address)
    if not parts:
        return ""
    region = parts[-2] if len(parts) >= 4 else parts[-1]
    tokens = region.split()
    return tokens[0] if tokens else ""


def extract_domain(website: Optional[str]) -> str:
    """Host name of a website without the ``www.`` prefix."""
    if not website:
        return ""
    candidate = website if "://" in website else f"http://{website}"
    host = urlparse(candidate).hostname or ""
    if host.startswith("www."):
        host = host[4:]
    return host
