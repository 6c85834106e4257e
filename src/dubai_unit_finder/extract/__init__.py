from .deep_search import (  # noqa: F401
    find_first_number_by_key,
    find_first_string_by_key,
    find_first_url_by_key,
    find_object_by_key,
    find_object_with_keys,
    get_value_at_path,
)
