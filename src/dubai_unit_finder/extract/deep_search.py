"""Key-based searches over parsed JSON trees with no fixed schema.

All searches walk the tree depth-first in pre-order: dict entries in
insertion order (which is document order for `json.loads` output), list
items in index order. A dict entry is tested before its value is descended
into, so a match closer to the front of the document always wins over one
nested deeper inside a later sibling. Every search returns ``None`` when
nothing matches and never raises on malformed input.
"""

from __future__ import annotations

import math
import re
from typing import Any, Iterable, Iterator, Optional, Sequence, Tuple, Union


_ABSOLUTE_URL_RE = re.compile(r"^https?://", re.IGNORECASE)

PathKey = Union[str, int]


def _children(node: Any) -> Iterator[Tuple[Any, Any]]:
    if isinstance(node, dict):
        return iter(node.items())
    if isinstance(node, list):
        return iter(enumerate(node))
    return iter(())


def iter_entries(tree: Any) -> Iterator[Tuple[Any, Any]]:
    """Yield every ``(key, value)`` pair below `tree` in pre-order.

    List items are yielded with their integer index as the key. Iterative so
    deeply nested payloads cannot exhaust the recursion limit.
    """
    stack = [_children(tree)]
    while stack:
        try:
            key, value = next(stack[-1])
        except StopIteration:
            stack.pop()
            continue
        yield key, value
        if isinstance(value, (dict, list)):
            stack.append(_children(value))


def iter_objects(tree: Any) -> Iterator[dict]:
    """Yield `tree` itself (when it is a dict) and every nested dict, pre-order."""
    if isinstance(tree, dict):
        yield tree
    for _key, value in iter_entries(tree):
        if isinstance(value, dict):
            yield value


def is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value)


def is_absolute_url(value: Any) -> bool:
    return isinstance(value, str) and bool(_ABSOLUTE_URL_RE.match(value))


def _find_first(tree: Any, key_name: str, accept) -> Any:
    for key, value in iter_entries(tree):
        if key == key_name and accept(value):
            return value
    return None


def find_first_string_by_key(tree: Any, key_name: str) -> Optional[str]:
    return _find_first(tree, key_name, lambda v: isinstance(v, str))


def find_first_number_by_key(tree: Any, key_name: str) -> Optional[Union[int, float]]:
    return _find_first(tree, key_name, is_number)


def find_object_by_key(tree: Any, key_name: str) -> Optional[Union[dict, list]]:
    """First dict or list bound to `key_name`; scalar values are skipped."""
    return _find_first(tree, key_name, lambda v: isinstance(v, (dict, list)))


def find_object_with_keys(tree: Any, keys: Iterable[str]) -> Optional[dict]:
    wanted = list(keys)
    for node in iter_objects(tree):
        if all(k in node for k in wanted):
            return node
    return None


def find_first_url_by_key(tree: Any, key_name: str) -> Optional[str]:
    return _find_first(tree, key_name, is_absolute_url)


def get_value_at_path(tree: Any, path: Sequence[PathKey]) -> Any:
    current = tree
    for key in path:
        if current is None:
            return None
        if isinstance(current, dict):
            current = current.get(key)
        elif isinstance(current, list) and isinstance(key, int) and not isinstance(key, bool):
            if 0 <= key < len(current):
                current = current[key]
            else:
                return None
        else:
            return None
    return current
