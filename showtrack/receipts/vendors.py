"""Match printed vendor names against known agricultural suppliers."""

from __future__ import annotations

import logging
import re
from difflib import SequenceMatcher

logger = logging.getLogger(__name__)

VENDORS_BY_CATEGORY: dict[str, tuple[str, ...]] = {
    "feed": (
        "Purina Mills",
        "Cargill",
        "ADM Alliance Nutrition",
        "Kent Feeds",
        "Local Feed Store",
        "Co-op Feed Mill",
        "Nutrena Feeds",
        "MoorMan's ShowTec",
        "Tractor Supply Co.",
        "Farm & Fleet",
        "Rural King",
        "Southern States",
        "Nutrena",
        "Jacoby Feed",
    ),
    "veterinary": (
        "Local Veterinarian",
        "Large Animal Clinic",
        "Mobile Vet Service",
        "Emergency Animal Hospital",
        "Livestock Health Services",
        "Ranch Veterinary Services",
        "Valley Vet",
        "Jeffers Pet",
        "PBS Animal Health",
    ),
    "equipment": (
        "Tractor Supply Co.",
        "Farm & Ranch Store",
        "Local Equipment Dealer",
        "Online Agricultural Supply",
        "Livestock Equipment Co.",
        "Feed Equipment Specialist",
        "Rural King",
        "Farm & Fleet",
        "Murdoch's Ranch & Home",
    ),
}

KNOWN_VENDORS: tuple[str, ...] = tuple(
    dict.fromkeys(v for names in VENDORS_BY_CATEGORY.values() for v in names)
)

_SUFFIXES = {"co", "company", "inc", "llc", "corp"}


def normalize_vendor(name: str) -> str:
    """Lowercase, drop punctuation, store numbers and company suffixes."""
    text = name.lower().replace("&", " and ")
    text = re.sub(r"[^a-z0-9 ]", "", text)
    tokens = [t for t in text.split() if not t.isdigit()]
    while tokens and tokens[-1] in _SUFFIXES:
        tokens.pop()
    return " ".join(tokens)


def _score(candidate: str, known: str) -> float:
    score = SequenceMatcher(None, candidate, known).ratio()
    # Partial containment ("tractor supply" inside "tractor supply 1234 waco")
    if candidate in known or known in candidate:
        partial = min(len(candidate), len(known)) / max(len(candidate), len(known))
        score = max(score, partial * 0.9)
    return score


def match_vendor(name: str, threshold: float = 0.8) -> str | None:
    """Return the best-matching known vendor, or None below *threshold*."""
    candidate = normalize_vendor(name or "")
    if not candidate:
        return None

    best_match = None
    best_score = 0.0
    for vendor in KNOWN_VENDORS:
        known = normalize_vendor(vendor)
        if known == candidate:
            return vendor
        score = _score(candidate, known)
        if score > best_score:
            best_score = score
            best_match = vendor

    if best_score >= threshold:
        logger.debug("Vendor %r matched %r (score %.3f)", name, best_match, best_score)
        return best_match
    return None


def canonical_vendor(name: str) -> str:
    """Known vendor name for *name*, or *name* unchanged."""
    return match_vendor(name) or name
