"""Expense category registry shared by the categorizer, suggestions and callers."""

from __future__ import annotations

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

FALLBACK_CATEGORY = "other"


@dataclass(frozen=True)
class CategoryInfo:
    id: str
    label: str
    subcategories: tuple[str, ...]
    tax_line: str  # Schedule F line
    is_deductible: bool
    keywords: tuple[str, ...]
    education_mapping: str = ""


# Order matters: the heuristic categorizer returns the first category
# whose keyword list matches.
_CATEGORY_LIST: tuple[CategoryInfo, ...] = (
    CategoryInfo(
        id="feed",
        label="Feed & Nutrition",
        subcategories=("Grain", "Hay/Forage", "Supplements", "Minerals", "Pasture Rent"),
        tax_line="Line 5 - Feed",
        is_deductible=True,
        keywords=(
            "feed", "grain", "hay", "alfalfa", "corn", "oats", "supplement",
            "mineral", "pellet", "range cube", "protein", "creep feed",
            "forage", "pasture", "timothy", "barley", "wheat", "milo",
            "sorghum", "grow", "grower", "developer", "finisher", "starter",
            "ration", "chow", "textured",
        ),
        education_mapping="Feed and Nutrition Management",
    ),
    CategoryInfo(
        id="veterinary",
        label="Veterinary & Health",
        subcategories=("Vaccinations", "Medications", "Vet Visits", "Health Testing", "Emergency Care"),
        tax_line="Line 6 - Veterinary",
        is_deductible=True,
        keywords=(
            "veterinary", "vet", "vaccine", "vaccination", "medication",
            "antibiotic", "treatment", "health", "medical", "doctor",
            "clinic", "surgery", "examination", "testing", "lab work",
            "prescription", "dewormer", "wormer", "penicillin",
        ),
        education_mapping="Animal Health Management",
    ),
    CategoryInfo(
        id="supplies",
        label="Supplies",
        subcategories=("Bedding", "Cleaning Supplies", "Show Supplies", "Grooming", "Tags/ID"),
        tax_line="Line 7 - Supplies",
        is_deductible=True,
        keywords=(
            "bedding", "shavings", "straw", "cleaning", "disinfectant",
            "soap", "shampoo", "grooming", "brush", "comb", "clippers",
            "ear tag", "identification", "supplies", "scoop", "halter",
            "muzzle", "show stick",
        ),
        education_mapping="Record Keeping and Business Management",
    ),
    CategoryInfo(
        id="equipment",
        label="Equipment",
        subcategories=("Feeders", "Waterers", "Fencing", "Gates", "Tools", "Scales"),
        tax_line="Line 13 - Equipment (Depreciation)",
        is_deductible=True,
        keywords=(
            "feeder", "waterer", "fence", "fencing", "gate", "panel",
            "scale", "tool", "equipment", "bucket", "trough", "post",
            "wire", "hardware", "shovel", "rake", "pitchfork",
        ),
        education_mapping="Agricultural Mechanics and Technology",
    ),
    CategoryInfo(
        id="transportation",
        label="Transportation",
        subcategories=("Fuel", "Vehicle Maintenance", "Trailer Rental", "Shipping", "Travel"),
        tax_line="Line 10 - Car and Truck Expenses",
        is_deductible=True,
        keywords=(
            "fuel", "gas", "gasoline", "diesel", "unleaded",
            "transportation", "shipping", "delivery", "freight", "trailer",
            "truck", "vehicle", "oil change", "tire", "travel",
        ),
        education_mapping="Marketing and Sales",
    ),
    CategoryInfo(
        id="show_entries",
        label="Show Entries & Competition",
        subcategories=("Entry Fees", "Premium Books", "Photography", "Awards", "Membership"),
        tax_line="Line 15 - Other Expenses",
        is_deductible=True,
        keywords=(
            "show", "competition", "entry fee", "premium", "fair",
            "exhibition", "contest", "judging", "award", "trophy", "ribbon",
            "membership", "registration", "photography", "picture",
        ),
        education_mapping="Leadership and Personal Development",
    ),
    CategoryInfo(
        id="labor",
        label="Labor",
        subcategories=("Hired Labor", "Contract Work", "Professional Training", "Consulting"),
        tax_line="Line 8 - Labor Hired",
        is_deductible=True,
        keywords=(
            "labor", "worker", "employee", "hired", "contract", "wages",
            "salary", "hourly",
        ),
        education_mapping="Agricultural Production Systems",
    ),
    CategoryInfo(
        id="insurance",
        label="Insurance",
        subcategories=("Livestock Insurance", "Property Insurance", "Liability Insurance", "Health Insurance"),
        tax_line="Line 15 - Other Expenses",
        is_deductible=True,
        keywords=("insurance", "coverage", "policy", "liability", "claim", "deductible"),
        education_mapping="Risk Management",
    ),
    CategoryInfo(
        id="utilities",
        label="Utilities",
        subcategories=("Electricity", "Water", "Phone", "Internet", "Propane/Gas"),
        tax_line="Line 15 - Other Expenses",
        is_deductible=True,
        keywords=(
            "electricity", "electric", "power", "water", "phone", "internet",
            "wifi", "propane", "utility", "utilities",
        ),
        education_mapping="Agricultural Production Systems",
    ),
    CategoryInfo(
        id="repairs_maintenance",
        label="Repairs & Maintenance",
        subcategories=("Facility Repairs", "Equipment Repairs", "Fence Repairs", "Building Maintenance"),
        tax_line="Line 11 - Repairs and Maintenance",
        is_deductible=True,
        keywords=(
            "repair", "maintenance", "fix", "parts", "replacement",
            "building", "facility", "barn", "shed", "roof", "plumbing",
            "electrical", "hvac", "ventilation",
        ),
        education_mapping="Agricultural Mechanics and Technology",
    ),
    CategoryInfo(
        id="professional_services",
        label="Professional Services",
        subcategories=("Accounting", "Legal", "Consulting", "Artificial Insemination", "Testing"),
        tax_line="Line 15 - Other Expenses",
        is_deductible=True,
        keywords=(
            "accounting", "legal", "consulting", "professional", "advice",
            "consultation", "artificial insemination", "breeding",
            "analysis", "audit", "bookkeeping",
        ),
        education_mapping="Record Keeping and Business Management",
    ),
    CategoryInfo(
        id="other",
        label="Other Expenses",
        subcategories=("Miscellaneous", "Unexpected", "One-time", "Research"),
        tax_line="Line 15 - Other Expenses",
        is_deductible=False,
        keywords=("miscellaneous", "misc", "unexpected", "research", "one-time", "various", "general"),
        education_mapping="Record Keeping and Business Management",
    ),
)

CATEGORIES: Mapping[str, CategoryInfo] = MappingProxyType(
    {c.id: c for c in _CATEGORY_LIST}
)

# Names other tools (and model services) commonly use for our categories
_CATEGORY_ALIASES: dict[str, str] = {
    "feed_supplies": "feed",
    "feed_nutrition": "feed",
    "feed_and_nutrition": "feed",
    "veterinary_health": "veterinary",
    "veterinary_and_health": "veterinary",
    "vet": "veterinary",
    "health": "veterinary",
    "facilities": "equipment",
    "fuel": "transportation",
    "repairs": "repairs_maintenance",
    "miscellaneous": "other",
}

# Feed product patterns → feed type, checked in order
FEED_TYPE_PATTERNS: tuple[tuple[str, tuple[re.Pattern[str], ...]], ...] = tuple(
    (feed_type, tuple(re.compile(p, re.IGNORECASE) for p in patterns))
    for feed_type, patterns in (
        ("grain", (r"corn", r"oats", r"barley", r"wheat", r"milo", r"sorghum")),
        ("pellets", (r"pellet", r"complete feed", r"range cubes?")),
        ("textured", (
            r"textured", r"sweet feed", r"mixed feed", r"show feed",
            r"performance feed", r"developer", r"grower", r"\bgrow\b", r"/dev\b",
        )),
        ("supplement", (
            r"supplement", r"protein tub", r"mineral block", r"salt block",
            r"vitamin", r"probiotic", r"creep feed",
        )),
        ("hay", (r"\bhay\b", r"alfalfa", r"timothy", r"bale", r"forage")),
    )
)

_KEYWORDS: dict[str, tuple[str, ...]] = {
    c.id: tuple(kw.lower() for kw in c.keywords) for c in _CATEGORY_LIST
}


def get_category(category_id: str) -> CategoryInfo:
    """Return registry info, falling back to the ``other`` category."""
    return CATEGORIES.get(category_id, CATEGORIES[FALLBACK_CATEGORY])


def normalize_category_id(value: object) -> str | None:
    """Map a raw category name onto a registry id.

    Returns None when the value is not a known category or alias.
    """
    if not isinstance(value, str):
        return None
    key = value.strip().lower().replace(" ", "_").replace("&", "and")
    if key in CATEGORIES:
        return key
    return _CATEGORY_ALIASES.get(key)


def match_category(text: str) -> str:
    """Return the first category with a keyword occurring anywhere in *text*.

    Matching is a case-insensitive substring test, so "MINERALIZED" hits
    "mineral" and "FEEDER" hits "feed".
    """
    lowered = text.lower()
    for category_id, keywords in _KEYWORDS.items():
        if any(kw in lowered for kw in keywords):
            return category_id
    return FALLBACK_CATEGORY


def match_subcategory(text: str, category_id: str) -> str:
    """Return the first subcategory named in *text*.

    Defaults to the category's first subcategory when none is named.
    """
    info = get_category(category_id)
    lowered = text.lower()
    for sub in info.subcategories:
        if sub.lower() in lowered:
            return sub
    return info.subcategories[0]


def match_feed_type(text: str) -> str | None:
    for feed_type, patterns in FEED_TYPE_PATTERNS:
        for pattern in patterns:
            if pattern.search(text):
                return feed_type
    return None


def category_choices() -> list[tuple[str, str]]:
    """(id, label) pairs in registry order, for manual category pickers."""
    return [(c.id, c.label) for c in _CATEGORY_LIST]
