"""
Record models for notionrecords.

These are the plain value objects the client exchanges with the API: record
requests for getRecordValues, and the read-only space and user records that
make up the session context.
"""

from typing import Any, Dict, Optional, Union
from pydantic import BaseModel, Field

from ..identifier import Identifier


class RecordRequest(BaseModel):
    """
    A single {table, id} entry of a getRecordValues request.
    """

    table: str = Field(
        ...,
        description="The table the record lives in (block, collection, space, ...)"
    )

    id: str = Field(
        ...,
        description="Canonical dashed identifier of the record"
    )

    @classmethod
    def for_record(cls, table: str, record_id: Union[Identifier, str]) -> "RecordRequest":
        """Build a request, canonicalizing the identifier (raises InvalidIdentifier)."""
        return cls(table=table, id=Identifier.parse(record_id).to_string())


class Record(BaseModel):
    """
    A read-only record with free-form attributes.
    """

    id: str = Field(
        ...,
        description="Canonical dashed identifier of the record"
    )

    attributes: Dict[str, Any] = Field(
        default_factory=dict,
        description="The raw attribute tree returned by the API"
    )

    table: str = "record"

    @property
    def name(self) -> Optional[str]:
        return self.attributes.get("name")

    @classmethod
    def from_attributes(cls, attributes: Dict[str, Any]) -> "Record":
        return cls(id=Identifier.parse(attributes["id"]).to_string(), attributes=attributes)


class Space(Record):
    """A workspace."""

    table: str = "space"


class User(Record):
    """A workspace member."""

    table: str = "notion_user"

    @property
    def email(self) -> Optional[str]:
        return self.attributes.get("email")

    @property
    def name(self) -> Optional[str]:
        given = self.attributes.get("given_name")
        family = self.attributes.get("family_name")
        full = " ".join(part for part in (given, family) if part)
        return full or self.attributes.get("name")


class SessionContext(BaseModel):
    """
    The space and user the client acts as, loaded once per client.
    """

    space: Space = Field(
        ...,
        description="The current space; stamps space ids on transactions and searches"
    )

    user: User = Field(
        ...,
        description="The current user; stamps created_by on new records"
    )
