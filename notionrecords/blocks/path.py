"""
Path navigation over JSON attribute trees.

A path is either a dotted string ("properties.title") or a sequence of
segments (["properties", "title"]). String segments address object keys,
integer segments address list positions.
"""

from typing import Any, Dict, List, Sequence, Union

PathSegment = Union[str, int]
Path = Union[str, Sequence[PathSegment]]


def split_path(path: Path) -> List[PathSegment]:
    """
    Normalize a path into a list of segments.

    Examples:
        split_path("properties.title")   # ["properties", "title"]
        split_path(["content", 0])       # ["content", 0]
        split_path("content.0")          # ["content", 0]
    """
    if isinstance(path, str):
        return [int(segment) if segment.isdigit() else segment
                for segment in path.split(".") if segment]
    return list(path)


def _dict_key(node: Dict[Any, Any], segment: PathSegment) -> PathSegment:
    # Record attributes come from JSON, so dict keys are always strings
    if isinstance(segment, int) and segment not in node:
        return str(segment)
    return segment


def get_path(tree: Any, path: Path, default: Any = None) -> Any:
    """
    Read the value at path, returning default when any segment is missing.
    """
    value = tree
    for segment in split_path(path):
        if isinstance(value, dict) and _dict_key(value, segment) in value:
            value = value[_dict_key(value, segment)]
        elif isinstance(value, list) and isinstance(segment, int) and -len(value) <= segment < len(value):
            value = value[segment]
        else:
            return default
    return value


def _container_for(segment: PathSegment) -> Union[Dict[str, Any], List[Any]]:
    return [] if isinstance(segment, int) else {}


def set_path(tree: Dict[str, Any], path: Path, value: Any) -> None:
    """
    Write value at path, creating intermediate containers as needed.

    Lists are padded with None when an integer segment points past their end.
    Scalars standing in the way are replaced by containers; existing lists
    and dicts are always kept.

    Raises:
        ValueError: If the path is empty
        TypeError: If a non-integer segment addresses a list
    """
    segments = split_path(path)
    if not segments:
        raise ValueError("Cannot set an empty path")

    node: Any = tree
    for segment, following in zip(segments, segments[1:]):
        child = _get_child(node, segment)
        if not isinstance(child, (dict, list)):
            child = _container_for(following)
            _put_child(node, segment, child)
        node = child

    _put_child(node, segments[-1], value)


def _get_child(node: Any, segment: PathSegment) -> Any:
    if isinstance(node, dict):
        return node.get(_dict_key(node, segment))
    if isinstance(segment, int) and -len(node) <= segment < len(node):
        return node[segment]
    return None


def _put_child(node: Any, segment: PathSegment, value: Any) -> None:
    if isinstance(node, dict):
        node[_dict_key(node, segment)] = value
        return
    if not isinstance(segment, int):
        raise TypeError(f"List segment must be an integer, got {segment!r}")
    if segment >= len(node):
        node.extend([None] * (segment + 1 - len(node)))
    node[segment] = value
