"""
Schema-backed property views.

A collection schema maps property ids to ``{name, type, options?}``. Row
values are stored in the row's ``properties`` under the property id, as rich
text markup: a list of ``[text, formatting?]`` chunks.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from ..models.operations import is_date_value, parse_date

TITLE_PROPERTY = "title"

TEXT_TYPES = {"title", "text", "url", "email", "phone_number", "select"}


def flatten_text(value: Any) -> str:
    """
    Flatten rich text markup into plain text.

    Examples:
        flatten_text([["Hello ", [["b"]]], ["world"]])   # "Hello world"
        flatten_text("plain")                           # "plain"
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        parts = []
        for chunk in value:
            if isinstance(chunk, list) and chunk and isinstance(chunk[0], str):
                parts.append(chunk[0])
            elif isinstance(chunk, str):
                parts.append(chunk)
        return "".join(parts)
    return str(value)


def text_markup(value: Any) -> List[List[str]]:
    return [[str(value)]]


@dataclass
class Property:
    """
    One schema entry of a collection, bound to its property id.
    """
    property_id: str
    name: str
    type: str
    options: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_schema(cls, property_id: str, entry: Dict[str, Any]) -> "Property":
        return cls(
            property_id=property_id,
            name=entry.get("name", property_id),
            type=entry.get("type", "text"),
            options=entry.get("options") or [],
        )

    @property
    def path(self) -> List[str]:
        """The attribute path of this property on a row."""
        return ["properties", self.property_id]

    @property
    def option_values(self) -> List[str]:
        return [option.get("value") for option in self.options if "value" in option]

    def decode(self, raw: Any) -> Any:
        """
        Convert a stored value into a Python value.

        Args:
            raw: The value found at this property's path

        Returns:
            str, float/int, bool, list of str, date/datetime or the raw value
        """
        if raw is None:
            return None

        if self.type == "date":
            return parse_date(raw)
        if self.type == "checkbox":
            return flatten_text(raw) == "Yes"
        if self.type == "multi_select":
            text = flatten_text(raw)
            return [item for item in text.split(",") if item] if text else []
        if self.type == "number":
            text = flatten_text(raw)
            if not text:
                return None
            try:
                number = float(text)
            except ValueError:
                logging.warning(f"Non-numeric value {text!r} in number property {self.name}")
                return None
            return int(number) if number.is_integer() else number
        if self.type in TEXT_TYPES:
            return flatten_text(raw) or None

        return raw

    def encode(self, value: Any) -> Any:
        """
        Convert a Python value into the stored representation.

        Dates are returned unchanged; the operation builder renders them.
        Lists are assumed to be markup already, except for multi_select.
        """
        if value is None:
            return None

        if self.type == "date":
            if isinstance(value, str):
                return date.fromisoformat(value)
            return value
        if is_date_value(value):
            return value
        if self.type == "checkbox":
            return text_markup("Yes" if value else "No")
        if self.type == "multi_select" and isinstance(value, (list, tuple, set)):
            return text_markup(",".join(str(item) for item in value))
        if isinstance(value, list):
            return value
        if self.type == "number" or self.type in TEXT_TYPES or self.type == "multi_select":
            return text_markup(value)

        return value


TITLE = Property(property_id=TITLE_PROPERTY, name="Name", type="title")


def schema_properties(schema: Optional[Dict[str, Dict[str, Any]]]) -> Dict[str, Property]:
    """Build Property views for every schema entry, keyed by property id."""
    return {
        property_id: Property.from_schema(property_id, entry)
        for property_id, entry in (schema or {}).items()
    }
