"""
Identifier codec.

Every record in the workspace is named by a 128-bit token written as 32 hex
characters, with or without dashes. Identifiers are normalized to the dashed
lowercase form, which is used both in request payloads and in cache keys.
"""

import re
import uuid
from typing import Union

from .errors import InvalidIdentifier

_HEX_TOKEN = re.compile(r"^[0-9a-fA-F]{32}$")


class Identifier:
    """
    An immutable, canonicalized record identifier.

    Two identifiers are equal iff their canonical string forms match.
    """

    __slots__ = ("_uuid",)

    def __init__(self, value: uuid.UUID):
        object.__setattr__(self, "_uuid", value)

    def __setattr__(self, name, value):
        raise AttributeError("Identifier is immutable")

    @classmethod
    def parse(cls, raw: Union[str, "Identifier"]) -> "Identifier":
        """
        Parse a hex identifier, ignoring dashes and surrounding whitespace.

        Args:
            raw: A 32 hex character token, optionally dashed

        Returns:
            The parsed Identifier

        Raises:
            InvalidIdentifier: If raw is not a valid 128-bit hex token
        """
        if isinstance(raw, Identifier):
            return raw
        if not isinstance(raw, str):
            raise InvalidIdentifier(raw)

        compact = raw.strip().replace("-", "")
        if not _HEX_TOKEN.match(compact):
            raise InvalidIdentifier(raw)

        return cls(uuid.UUID(hex=compact))

    @classmethod
    def generate(cls) -> "Identifier":
        """Produce a fresh random identifier."""
        return cls(uuid.uuid4())

    @property
    def hex(self) -> str:
        return self._uuid.hex

    def to_string(self) -> str:
        return str(self._uuid)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"Identifier('{self}')"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Identifier):
            return self._uuid == other._uuid
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._uuid)


def parse(raw: Union[str, Identifier]) -> Identifier:
    return Identifier.parse(raw)


def to_string(identifier: Identifier) -> str:
    return identifier.to_string()


def generate() -> Identifier:
    return Identifier.generate()


def canonical(raw: Union[str, Identifier]) -> str:
    """Return the canonical string form of raw, or raw itself if it is not an identifier."""
    try:
        return Identifier.parse(raw).to_string()
    except InvalidIdentifier:
        return str(raw)
