# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Parsing of LL84 "list of all property uses" strings.

Benchmarking data reports a building's uses as a single string such as::

    "Office (264550.0), Retail Store (21700.0)"

Use names may themselves contain commas and parentheses, e.g.
``"Personal Services (Health/Beauty, Dry Cleaning, etc.) (500.0)"``, so a
plain comma split is not enough: each entry is matched as a name (allowing
parenthesised groups) followed by a numeric area in parentheses.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, Optional

logger = logging.getLogger(__name__)

_USE_ENTRY = re.compile(r"([^,()]+(?:\([^)]*\)[^,()]*)*)\s*\(([0-9.,]+)\)")

PROPERTY_USE_NORMALIZATIONS: Dict[str, str] = {
    "Multi-family Housing": "Multifamily Housing",
    "Multi-Family Housing": "Multifamily Housing",
    "MultiFamily Housing": "Multifamily Housing",
    "Preschool/Daycare": "Pre-school/Daycare",
    "K12 School": "K-12 School",
    "Personal Services (Health/Beauty, Dry Cleaning, etc.)": "Personal Services",
    # Generic "Other" is mapped to Office, which has limits for every period
    "Other": "Office",
}


def normalize_property_use(name: str) -> str:
    """Map an LL84 use name onto the name used by the emissions-limit table."""
    cleaned = name.strip()
    return PROPERTY_USE_NORMALIZATIONS.get(cleaned, cleaned)


def parse_property_use_breakdown(text: Optional[str]) -> Dict[str, float]:
    """
    Parse a property-use string into ``{use type: square feet}``.

    Names are normalized, duplicate uses are summed and entries with a
    non-positive area are dropped.

    Example:
        >>> parse_property_use_breakdown("Office (264550.0), Retail Store (21700.0)")
        {'Office': 264550.0, 'Retail Store': 21700.0}
    """
    if not text or not text.strip():
        return {}

    areas: Dict[str, float] = {}
    for match in _USE_ENTRY.finditer(text):
        raw_name, raw_area = match.group(1), match.group(2)
        try:
            area = float(raw_area.replace(",", ""))
        except ValueError:
            logger.warning(f"Invalid square footage in property use entry: {match.group(0)!r}")
            continue
        if area <= 0:
            continue
        name = normalize_property_use(raw_name)
        areas[name] = areas.get(name, 0.0) + area

    if not areas:
        logger.warning(f"Unable to parse any property use entries from {text!r}")
    return areas
