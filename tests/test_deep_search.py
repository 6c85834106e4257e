import json

from dubai_unit_finder.extract.deep_search import (
    find_first_number_by_key,
    find_first_string_by_key,
    find_first_url_by_key,
    find_object_by_key,
    find_object_with_keys,
    get_value_at_path,
    iter_entries,
)


TREE = json.loads(
    """
    {
      "meta": {"name": 7, "items": [{"name": "first-in-list"}]},
      "name": "top-level-later",
      "broker": {"id": 1, "name": "Acme"},
      "images": [{"small": "/relative.jpg"}, {"small": "https://cdn.example/a.jpg"}],
      "count": true,
      "stats": {"count": 4}
    }
    """
)


def test_string_search_is_preorder_first_match():
    # meta.items[0].name is visited before the sibling "name" key at the top.
    assert find_first_string_by_key(TREE, "name") == "first-in-list"


def test_string_search_skips_non_string_values():
    tree = {"a": {"full_name": None}, "b": {"full_name": "Dubai"}}
    assert find_first_string_by_key(tree, "full_name") == "Dubai"


def test_number_search_ignores_booleans():
    assert find_first_number_by_key(TREE, "count") == 4
    assert find_first_number_by_key(TREE, "name") == 7


def test_object_search_returns_containers_only():
    assert find_object_by_key(TREE, "broker") == {"id": 1, "name": "Acme"}
    assert find_object_by_key(TREE, "name") is None
    assert find_object_by_key(TREE, "images") == TREE["images"]


def test_object_with_keys_checks_root_first():
    tree = {"lat": 1, "lon": 2, "child": {"lat": 3, "lon": 4}}
    assert find_object_with_keys(tree, ["lat", "lon"]) is tree
    assert find_object_with_keys({"x": [{"lat": 1}, {"lat": 5, "lon": 6}]}, ["lat", "lon"]) == {
        "lat": 5,
        "lon": 6,
    }
    assert find_object_with_keys(TREE, ["lat", "lon"]) is None


def test_url_search_requires_absolute_http_url():
    assert find_first_url_by_key(TREE, "small") == "https://cdn.example/a.jpg"
    assert find_first_url_by_key({"small": "ftp://x"}, "small") is None


def test_get_value_at_path_never_raises():
    assert get_value_at_path(TREE, ["images", 1, "small"]) == "https://cdn.example/a.jpg"
    assert get_value_at_path(TREE, ["images", 5, "small"]) is None
    assert get_value_at_path(TREE, ["images", -1]) is None
    assert get_value_at_path(TREE, ["broker", "name", "deeper"]) is None
    assert get_value_at_path(TREE, ["missing", "path"]) is None
    assert get_value_at_path(None, ["a"]) is None
    assert get_value_at_path(TREE, []) is TREE


def test_searches_tolerate_scalars_and_none():
    assert find_first_string_by_key(None, "x") is None
    assert find_first_number_by_key("text", "x") is None
    assert find_object_with_keys(42, ["x"]) is None


def test_deep_nesting_does_not_recurse():
    tree = {}
    node = tree
    for _ in range(5000):
        node["child"] = {}
        node = node["child"]
    node["target"] = "found"
    assert find_first_string_by_key(tree, "target") == "found"


def test_iteration_order_is_document_order():
    keys = [key for key, _ in iter_entries({"b": {"c": 1}, "a": [10, 20]})]
    assert keys == ["b", "c", "a", 0, 1]
