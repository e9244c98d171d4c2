"""
Operation and transaction models for notionrecords.

Every local mutation becomes a path-addressed "set" operation. Operations are
batched into either a submitTransaction body (record creation) or a
saveTransactions envelope (attribute updates).
"""

import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, Tuple, Union
from pydantic import BaseModel, Field

from ..identifier import Identifier

if TYPE_CHECKING:
    from ..blocks.base import Block

PathSegment = Union[str, int]

DATE_MARKER = "‣"
DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"


class Operation(BaseModel):
    """
    A single path-addressed mutation of one record.
    """

    target_id: str = Field(
        ...,
        description="Canonical id of the record being mutated"
    )

    table: str = Field(
        ...,
        description="Table of the record being mutated"
    )

    path: List[PathSegment] = Field(
        default_factory=list,
        description="Attribute path; empty for a whole-record set"
    )

    args: Any = Field(
        None,
        description="Operation payload, already in wire format"
    )

    command: str = "set"

    def to_wire(self) -> Dict[str, Any]:
        """Render the operation as the API expects it."""
        return {
            "id": self.target_id,
            "table": self.table,
            "path": list(self.path),
            "command": self.command,
            "args": self.args,
        }


class Transaction(BaseModel):
    """
    A batch of operations saved together in one space.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    space_id: str
    operations: List[Operation] = Field(default_factory=list)

    def to_wire(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "spaceId": self.space_id,
            "operations": [operation.to_wire() for operation in self.operations],
        }


def render_date(value: Union[date, datetime, Tuple[date, date]]) -> List[Any]:
    """
    Render a date, datetime or (start, end) range into date markup.

    Examples:
        render_date(date(2024, 1, 1))
        # [["‣", [["d", {"type": "date", "start_date": "2024-01-01"}]]]]
    """
    if isinstance(value, tuple):
        start, end = value
    else:
        start, end = value, None

    has_time = isinstance(start, datetime)
    details: Dict[str, Any] = {
        "type": "datetime" if has_time else "date",
        "start_date": start.strftime(DATE_FORMAT),
    }
    if has_time:
        details["start_time"] = start.strftime(TIME_FORMAT)

    if end is not None:
        details["type"] += "range"
        details["end_date"] = end.strftime(DATE_FORMAT)
        if isinstance(end, datetime):
            details["end_time"] = end.strftime(TIME_FORMAT)

    return [[DATE_MARKER, [["d", details]]]]


def _find_date_details(markup: Any) -> Optional[Dict[str, Any]]:
    if isinstance(markup, list):
        if len(markup) == 2 and markup[0] == "d" and isinstance(markup[1], dict):
            return markup[1]
        for item in markup:
            found = _find_date_details(item)
            if found:
                return found
    return None


def _parse_point(day: Optional[str], clock: Optional[str]) -> Optional[Union[date, datetime]]:
    if not day:
        return None
    if clock:
        return datetime.strptime(f"{day} {clock}", f"{DATE_FORMAT} {TIME_FORMAT}")
    return datetime.strptime(day, DATE_FORMAT).date()


def parse_date(markup: Any) -> Optional[Union[date, datetime, Tuple[Any, Any]]]:
    """
    Read a date, datetime or range back out of date markup.

    Returns None when the markup holds no date.
    """
    details = _find_date_details(markup)
    if not details:
        return None

    start = _parse_point(details.get("start_date"), details.get("start_time"))
    end = _parse_point(details.get("end_date"), details.get("end_time"))
    if end is not None:
        return start, end
    return start


def is_date_value(value: Any) -> bool:
    if isinstance(value, tuple):
        return len(value) == 2 and all(isinstance(item, date) for item in value)
    return isinstance(value, date)


def build_set_operation(block: "Block", path: Sequence[PathSegment], value: Any) -> Operation:
    """
    Build the "set" operation that writes value at path on block.

    Date values are rendered into date markup; everything else is sent as is.

    Args:
        block: The target record
        path: Attribute path, e.g. ["properties", "title"]
        value: The new value

    Returns:
        The operation, ready to be batched
    """
    if is_date_value(value):
        value = render_date(value)

    return Operation(
        target_id=str(block.id),
        table=block.table,
        path=list(path),
        args=value,
    )


def build_create_operation(table: str, record_id: Identifier, parent: "Block",
                           attributes: Dict[str, Any], user_id: str,
                           created_time: int) -> Operation:
    """
    Build the single whole-record operation that creates a record.

    The caller's attributes are merged with the bookkeeping fields; the
    bookkeeping fields win on conflict.
    """
    args = dict(attributes)
    args.update({
        "id": record_id.to_string(),
        "version": 1,
        "alive": True,
        "created_by": user_id,
        "created_time": created_time,
        "parent_id": str(parent.id),
        "parent_table": parent.table,
    })

    return Operation(
        target_id=record_id.to_string(),
        table=table,
        path=[],
        args=args,
    )


def build_submit_request(operations: Sequence[Operation]) -> Dict[str, Any]:
    """Body of a submitTransaction call."""
    return {"operations": [operation.to_wire() for operation in operations]}


def build_save_request(operations: Sequence[Operation], space_id: str) -> Dict[str, Any]:
    """Body of a saveTransactions call: one transaction holding every operation."""
    transaction = Transaction(space_id=space_id, operations=list(operations))
    return {
        "requestId": str(uuid.uuid4()),
        "transactions": [transaction.to_wire()],
    }
