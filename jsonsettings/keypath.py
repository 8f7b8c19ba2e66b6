"""
jsonsettings.keypath

A key path is the string form of dot notation: "foo.bar" addresses
doc["foo"]["bar"]. A literal dot inside a key is written as "\\." so
"foo\\.bar" addresses doc["foo.bar"].

Key paths may also be given as a list (or tuple) of key paths, e.g.
["foo", name] or [["foo", "bar"], "baz"], which flatten to one dotted string.
"""

from typing import Any, List

from .errors import ValidationError

DELIMITER = "."
ESCAPE = "\\"


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def is_key_path(value: Any) -> bool:
    """
    True for any string, or for a non-empty sequence whose last element
    is itself a key path. Earlier elements are not checked.
    """
    if isinstance(value, str):
        return True
    if _is_sequence(value) and len(value) > 0:
        return is_key_path(value[-1])
    return False


def flatten_key_path(value: Any) -> str:
    """
    flatten_key_path("foo.bar")              -> "foo.bar"
    flatten_key_path(["foo", "bar"])         -> "foo.bar"
    flatten_key_path([["foo", "bar"], "baz"]) -> "foo.bar.baz"

    Non-string leaves (only reachable through the loose validity rule) are
    written the way the historical join did: None -> "", True -> "true".
    """
    if _is_sequence(value):
        return DELIMITER.join(flatten_key_path(v) for v in value)
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def normalize_key_path(value: Any) -> str:
    if not is_key_path(value):
        raise ValidationError("The given key path was not valid: %r" % (value,))
    return flatten_key_path(value)


def split_key_path(path: str) -> List[str]:
    """
    Split a flattened key path on unescaped dots.
    "foo\\.bar.baz" -> ["foo.bar", "baz"]
    """
    segments: List[str] = []
    current: List[str] = []
    i = 0
    n = len(path)
    while i < n:
        ch = path[i]
        if ch == ESCAPE and i + 1 < n and path[i + 1] == DELIMITER:
            current.append(DELIMITER)
            i += 2
            continue
        if ch == DELIMITER:
            segments.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1
    segments.append("".join(current))
    return segments
