"""Building-type labels mapped to BuildingCategory.

Callers label buildings in several ways: enum values ("shopping_mall"),
display names ("ShoppingMall", "Shopping Mall") or the Turkish names used
by field units ("Alışveriş Merkezi").  Labels not listed here map to
UNKNOWN, which carries the neutral 1.0 urgency multiplier.
"""

from __future__ import annotations

from ruptura.domain.enums import BuildingCategory

_ALIASES: dict[str, BuildingCategory] = {
    # English
    "hospital": BuildingCategory.HOSPITAL,
    "school": BuildingCategory.SCHOOL,
    "shopping mall": BuildingCategory.SHOPPING_MALL,
    "shopping_mall": BuildingCategory.SHOPPING_MALL,
    "shoppingmall": BuildingCategory.SHOPPING_MALL,
    "office": BuildingCategory.OFFICE,
    "residential": BuildingCategory.RESIDENTIAL,
    "industrial": BuildingCategory.INDUSTRIAL,
    "factory": BuildingCategory.INDUSTRIAL,
    "unknown": BuildingCategory.UNKNOWN,
    # Turkish
    "hastane": BuildingCategory.HOSPITAL,
    "okul": BuildingCategory.SCHOOL,
    "alışveriş merkezi": BuildingCategory.SHOPPING_MALL,
    "avm": BuildingCategory.SHOPPING_MALL,
    "ofis": BuildingCategory.OFFICE,
    "konut": BuildingCategory.RESIDENTIAL,
    "fabrika": BuildingCategory.INDUSTRIAL,
    "sanayi": BuildingCategory.INDUSTRIAL,
}


def resolve_category(name: BuildingCategory | str | None) -> BuildingCategory | None:
    """Map a building-type label to a category.

    Returns None when *name* is absent so the ledger default applies.
    """
    if name is None:
        return None
    if isinstance(name, BuildingCategory):
        return name
    key = " ".join(str(name).split()).casefold()
    if not key:
        return None
    return _ALIASES.get(key, BuildingCategory.UNKNOWN)
