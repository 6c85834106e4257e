import pytest

from dubai_unit_finder.permits import AssetType, classify_permit, generate_candidate_ids


@pytest.mark.parametrize(
    "permit,asset_type,property_id",
    [
        ("6912345600", AssetType.BUILDING, "12345600"),
        ("65-8765-4300", AssetType.LAND, "87654300"),
        ("7123456789", AssetType.UNIT, "23456789"),
        ("1234567", AssetType.UNKNOWN, "34567"),
        ("69", AssetType.UNKNOWN, None),
        ("", AssetType.UNKNOWN, None),
        (None, AssetType.UNKNOWN, None),
    ],
)
def test_classify_permit(permit, asset_type, property_id):
    classification = classify_permit(permit)
    assert classification.asset_type is asset_type
    assert classification.property_id == property_id


def test_unit_prefix_and_shortest_classifiable_permit():
    assert classify_permit("7912").asset_type is AssetType.UNIT
    short = classify_permit("691")
    assert short.asset_type is AssetType.BUILDING
    assert short.property_id == "1"


def test_candidates_without_trailing_zero():
    assert generate_candidate_ids("123457") == ["123457"]


def test_candidates_strip_one_zero_at_a_time():
    assert generate_candidate_ids("123400") == ["123400", "12340", "1234"]


def test_candidates_never_empty_string():
    assert generate_candidate_ids("000") == ["000", "00", "0"]
    assert generate_candidate_ids("") == []
    assert generate_candidate_ids(None) == []
