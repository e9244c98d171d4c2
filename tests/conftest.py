"""
Shared test helpers: an in-process fake of the workspace API.
"""

import json
from collections import Counter
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from notionrecords import NotionClient
from notionrecords.config import ConfigManager

SPACE_ID = "11111111-1111-4111-8111-111111111111"
USER_ID = "22222222-2222-4222-8222-222222222222"
PAGE_ID = "33333333-3333-4333-8333-333333333333"
CHILD_ID = "44444444-4444-4444-8444-444444444444"
COLLECTION_ID = "55555555-5555-4555-8555-555555555555"
ROW_ID = "66666666-6666-4666-8666-666666666666"
VIEW_ID = "77777777-7777-4777-8777-777777777777"

USER_CONTENT = {
    "recordMap": {
        "space": {SPACE_ID: {"role": "editor", "value": {"id": SPACE_ID, "name": "Team"}}},
        "notion_user": {USER_ID: {"role": "reader", "value": {
            "id": USER_ID, "email": "ada@example.com", "given_name": "Ada", "family_name": "Lovelace"}}},
    }
}

SCHEMA = {
    "title": {"name": "Name", "type": "title"},
    "p1": {"name": "Due", "type": "date"},
    "p2": {"name": "Status", "type": "select", "options": [{"id": "o1", "value": "Done"}]},
    "p3": {"name": "Estimate", "type": "number"},
}


def record(value: Dict[str, Any], role: str = "editor") -> Dict[str, Any]:
    return {"role": role, "value": value}


class FakeWorkspace:
    """
    Routes POSTs to canned responses and records every request.

    Responses are either dicts or callables taking the decoded body.
    """

    def __init__(self):
        self.responses: Dict[str, Any] = {
            "loadUserContent": USER_CONTENT,
            "submitTransaction": {},
            "saveTransactions": {},
        }
        self.requests: List[Dict[str, Any]] = []
        self.calls: Counter = Counter()

    def respond(self, operation: str, response: Any) -> None:
        self.responses[operation] = response

    def bodies(self, operation: str) -> List[Dict[str, Any]]:
        return [r["body"] for r in self.requests if r["operation"] == operation]

    def handler(self, request: httpx.Request) -> httpx.Response:
        operation = request.url.path.rsplit("/", 1)[-1]
        body = json.loads(request.content or b"{}")
        self.requests.append({"operation": operation, "body": body, "cookies": request.headers.get("cookie", "")})
        self.calls[operation] += 1

        response = self.responses.get(operation)
        if response is None:
            return httpx.Response(404, json={"errorId": "not-found", "name": "ValidationError"})
        if isinstance(response, httpx.Response):
            return response
        if callable(response):
            response = response(body)
        return httpx.Response(200, json=response)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def workspace() -> FakeWorkspace:
    return FakeWorkspace()


@pytest.fixture
def settings(tmp_path) -> ConfigManager:
    return ConfigManager(str(tmp_path / "missing.yaml"), environ={})


@pytest.fixture
def make_client(workspace, settings) -> Callable[..., NotionClient]:
    clients = []

    def factory(cache_lifetime: Optional[int] = 0) -> NotionClient:
        client = NotionClient(
            token="secret-token",
            base_url="https://workspace.test/api/v3",
            cache_lifetime=cache_lifetime,
            cache_database=":memory:",
            transport=workspace.transport(),
            settings=settings,
        )
        clients.append(client)
        return client

    yield factory

    for client in clients:
        client.close()


def page_chunk(*entries: Dict[str, Any], collections: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Build a loadPageChunk response holding the given block values."""
    record_map: Dict[str, Any] = {"block": {entry["id"]: record(entry) for entry in entries}}
    if collections:
        record_map["collection"] = {key: record(value) for key, value in collections.items()}
    return {"recordMap": record_map, "cursor": {"stack": []}}
