"""Path addressing into the profile document.

A path is a run of property names and ``[index]`` segments, e.g.
``summary``, ``experience[0].bullets[1]``, ``skills[0].items[2]``.

Resolution returns the container that holds the target together with the
final key, never the target itself, so the caller can assign, delete or
splice through the parent.
"""

import re
from typing import Any, NamedTuple

_SEGMENT = re.compile(r"([^\[.\]]+)|\[(\d+)\]")

Key = str | int


class ResolvedPath(NamedTuple):
    parent: dict[str, Any] | list[Any]
    key: Key


def parse_path(path: str) -> list[Key]:
    """Split a path into property names (str) and indexes (int).

    Characters that form no segment are ignored, so an empty or
    all-punctuation path yields an empty list.
    """
    parts: list[Key] = []
    for match in _SEGMENT.finditer(path or ""):
        name, index = match.groups()
        parts.append(name if name is not None else int(index))
    return parts


def _child(node: Any, key: Key) -> Any:
    if isinstance(node, dict):
        return node.get(str(key))
    if isinstance(node, list) and isinstance(key, int):
        return node[key] if key < len(node) else None
    return None


def resolve_path(document: Any, path: str) -> ResolvedPath | None:
    """Resolve ``path`` against ``document``.

    Returns None when the path has no segments, when any intermediate value
    is missing or not a container, or when the final segment cannot address
    the parent (a name on a list, or an index past the end of a list). An
    index equal to the list length is an append slot. Never raises and
    never creates structure.
    """
    parts = parse_path(path)
    if not parts:
        return None

    current = document
    for part in parts[:-1]:
        current = _child(current, part)
        if current is None:
            return None

    key = parts[-1]
    if isinstance(current, dict):
        return ResolvedPath(current, str(key))
    if isinstance(current, list) and isinstance(key, int) and key <= len(current):
        return ResolvedPath(current, key)
    return None


def get_path(document: Any, path: str) -> Any:
    """Return the value at ``path``, or None if it does not resolve."""
    resolved = resolve_path(document, path)
    if resolved is None:
        return None
    return _child(resolved.parent, resolved.key)
