"""
jsonsettings.tree
Get / has / set / delete a value inside a decoded JSON document by key path segments.
Only dict nodes are traversed; lists and scalars end the walk.
"""

from typing import Any, Sequence


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


def _lookup(root: Any, segments: Sequence[str]) -> Any:
    node = root
    for seg in segments:
        if not isinstance(node, dict) or seg not in node:
            return MISSING
        node = node[seg]
    return node


def get_value(root: Any, segments: Sequence[str], default: Any = None) -> Any:
    if not segments:
        return root
    found = _lookup(root, segments)
    return default if found is MISSING else found


def has_value(root: Any, segments: Sequence[str]) -> bool:
    # explicit None (JSON null) counts as present
    return _lookup(root, segments) is not MISSING


def set_value(root: Any, segments: Sequence[str], value: Any) -> Any:
    """
    Assign value at segments, creating (or replacing non-dict) intermediate
    nodes with empty dicts. Returns the root, which is a new object only when
    segments is empty or the old root was not a dict.
    """
    if not segments:
        return value
    if not isinstance(root, dict):
        root = {}
    node = root
    for seg in segments[:-1]:
        child = node.get(seg)
        if not isinstance(child, dict):
            child = {}
            node[seg] = child
        node = child
    node[segments[-1]] = value
    return root


def delete_value(root: Any, segments: Sequence[str]) -> Any:
    """Remove the key at segments if present; missing paths are a no-op."""
    if not segments:
        return root
    parent = _lookup(root, segments[:-1])
    if isinstance(parent, dict):
        parent.pop(segments[-1], None)
    return root
