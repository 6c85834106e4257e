from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum
from typing import List, Optional


_NON_DIGIT_RE = re.compile(r"\D+")


class AssetType(StrEnum):
    BUILDING = "building"
    LAND = "land"
    UNIT = "unit"
    UNKNOWN = "unknown"


_PREFIX_TYPES = {
    "69": AssetType.BUILDING,
    "65": AssetType.LAND,
}


@dataclass(frozen=True)
class PermitClassification:
    asset_type: AssetType
    property_id: Optional[str]


def digits_only(value) -> str:
    if value is None:
        return ""
    return _NON_DIGIT_RE.sub("", str(value))


def classify_permit(permit_number: Optional[str]) -> PermitClassification:
    """Split a RERA permit number into its asset type and registry property id.

    The first two digits encode the asset type and are not part of the id.
    """
    digits = digits_only(permit_number)
    if len(digits) < 3:
        return PermitClassification(AssetType.UNKNOWN, None)
    asset_type = _PREFIX_TYPES.get(digits[:2])
    if asset_type is None:
        asset_type = AssetType.UNIT if digits.startswith("7") else AssetType.UNKNOWN
    return PermitClassification(asset_type, digits[2:])


def generate_candidate_ids(property_id: Optional[str]) -> List[str]:
    """Full id first, then one trailing zero stripped at a time."""
    current = digits_only(property_id)
    if not current:
        return []
    candidates = [current]
    while current.endswith("0"):
        current = current[:-1]
        if not current:
            break
        candidates.append(current)
    return candidates
