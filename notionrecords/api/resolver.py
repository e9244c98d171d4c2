"""
Record map resolution.

Read endpoints answer with record maps shaped as
``{table: {id: {"value": attributes, "role": ...}}}`` or, for
getRecordValues, with a ``results`` list aligned with the request list.
Missing tables or ids resolve to an empty attribute map, never an error;
callers decide whether empty means "not found".
"""

from typing import Any, Dict, List, Sequence, Union

from ..identifier import Identifier, canonical
from ..models import RecordRequest

RecordMap = Dict[str, Dict[str, Dict[str, Any]]]


def _lookup(entries: Dict[str, Any], record_id: Union[Identifier, str]) -> Dict[str, Any]:
    key = str(record_id)
    if key in entries:
        return entries[key]

    # Keys may come back undashed or in a different case
    wanted = canonical(record_id)
    for candidate, entry in entries.items():
        if canonical(candidate) == wanted:
            return entry
    return {}


def resolve_one(record_map: RecordMap, table: str, record_id: Union[Identifier, str]) -> Dict[str, Any]:
    """
    Extract the attributes of one record from a record map.

    Args:
        record_map: A {table: {id: {"value": attributes}}} mapping
        table: The table name, e.g. "block"
        record_id: The record identifier

    Returns:
        The record's attributes, or an empty dict when absent
    """
    entries = (record_map or {}).get(table) or {}
    entry = _lookup(entries, record_id)
    return entry.get("value") or {}


def resolve_many(response: Dict[str, Any], requests: Sequence[RecordRequest]) -> Dict[str, Dict[str, Any]]:
    """
    Pair a getRecordValues response with its ordered requests.

    Results are matched by position, then re-keyed by the canonical id of the
    request at that position.

    Args:
        response: The decoded response with a "results" list
        requests: The requests in the order they were sent

    Returns:
        Mapping of id -> result entry (empty dict for missing positions)
    """
    results = (response or {}).get("results") or []
    resolved: Dict[str, Dict[str, Any]] = {}

    for position, request in enumerate(requests):
        resolved[str(request.id)] = results[position] if position < len(results) and results[position] else {}

    return resolved


def record_ids(record_map: RecordMap, table: str) -> List[str]:
    """List the ids present for a table, in response order."""
    return list(((record_map or {}).get(table) or {}).keys())


def first_record(record_map: RecordMap, table: str) -> Dict[str, Any]:
    """Return the attributes of the first record in a table, or an empty dict."""
    for entry in ((record_map or {}).get(table) or {}).values():
        return entry.get("value") or {}
    return {}
