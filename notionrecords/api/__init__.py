"""Remote API access: the request gateway and record map resolution."""

from .gateway import RequestGateway
from .resolver import resolve_one, resolve_many, record_ids, first_record

__all__ = ["RequestGateway", "resolve_one", "resolve_many", "record_ids", "first_record"]
