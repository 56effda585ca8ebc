"""Service-type catalog: the tags availability rules and bookings are scoped by."""

import logging
from typing import Optional

logger = logging.getLogger(__name__)

SERVICE_CATALOG: dict[str, dict] = {
    "plumbing": {
        "name": "Plumbing Service",
        "description": "Taps, toilets, pipes and hot water systems.",
        "typical_duration_minutes": 90,
    },
    "electrical": {
        "name": "Electrical Service",
        "description": "Repairs, installations, safety inspections and lighting.",
        "typical_duration_minutes": 120,
    },
    "hvac": {
        "name": "HVAC Service",
        "description": "Heating, ventilation and air conditioning maintenance.",
        "typical_duration_minutes": 120,
    },
    "cleaning": {
        "name": "Home Cleaning",
        "description": "Standard and deep cleaning of residential properties.",
        "typical_duration_minutes": 60,
    },
    "general handyman": {
        "name": "General Handyman",
        "description": "Furniture assembly, painting, door and window repairs.",
        "typical_duration_minutes": 60,
    },
    "lawn care": {
        "name": "Lawn Care",
        "description": "Mowing, edging, hedge trimming and green waste removal.",
        "typical_duration_minutes": 60,
    },
}

SERVICE_ALIASES: dict[str, str] = {
    "plumber": "plumbing", "pipes": "plumbing", "hot water": "plumbing",
    "electrician": "electrical", "wiring": "electrical", "lights": "electrical",
    "heating": "hvac", "cooling": "hvac", "air conditioning": "hvac", "aircon": "hvac",
    "cleaner": "cleaning", "deep clean": "cleaning", "house cleaning": "cleaning",
    "handyman": "general handyman", "painting": "general handyman",
    "gardening": "lawn care", "mowing": "lawn care", "lawn": "lawn care",
}


def match_service_type(query: str) -> Optional[str]:
    """Match free text to a catalog service type. Returns None if no match."""
    normalized = query.lower().strip()
    if normalized in SERVICE_CATALOG:
        return normalized
    if normalized in SERVICE_ALIASES:
        return SERVICE_ALIASES[normalized]
    for alias, service_type in SERVICE_ALIASES.items():
        if alias in normalized:
            return service_type
    return None


def normalize_service_type(value: Optional[str]) -> Optional[str]:
    """Canonical tag for scoping. Unknown tags pass through lower-cased.

    ``None`` and blank strings mean "no service-type restriction".
    """
    if value is None or not value.strip():
        return None
    matched = match_service_type(value)
    if matched is not None:
        return matched
    logger.debug("Service type %r not in catalog, using as-is", value)
    return value.lower().strip()


def get_all_service_types() -> list[dict]:
    """Return all catalog entries with basic info."""
    return [
        {"id": sid, "name": info["name"], "typical_duration_minutes": info["typical_duration_minutes"]}
        for sid, info in SERVICE_CATALOG.items()
    ]
