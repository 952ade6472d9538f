# (C) 2025 Rodrigo Rodrigues da Silva <rodrigopitanga@posteo.net>
# SPDX-License-Identifier: GPL-3.0-or-later

import json
import random
import string
from datetime import datetime, timezone
from typing import Any, Dict, List, Sequence
import httpx
from gres.schemas import Occurrence, Note, Project, Resource, NoteKind, encode


def letters(n: int = 10) -> str:
    return "".join(random.choices(string.ascii_lowercase, k=n))


class MockEsTransport:
    """
    Replays prepared responses in order and records every request, so tests
    can assert on method, path and body of the N-th backend call.
    A prepared response is (status, body); body may be a dict/list (sent as
    JSON), str/bytes (sent raw), or None (empty body).
    """

    def __init__(self, *responses):
        self.prepared: List[Any] = list(responses)
        self.received: List[httpx.Request] = []

    def prepare(self, *responses) -> None:
        """Starts a new exchange: calls are counted from here on."""
        self.prepared = list(responses)
        self.received = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.received.append(request)
        n = len(self.received) - 1
        if n >= len(self.prepared):
            raise AssertionError(f"unexpected request #{n + 1}: {request.method} {request.url.path}")
        prepared = self.prepared[n]
        if isinstance(prepared, Exception):
            raise prepared
        status, body = prepared
        if body is None:
            return httpx.Response(status)
        if isinstance(body, (dict, list)):
            return httpx.Response(status, json=body)
        return httpx.Response(status, content=body if isinstance(body, bytes) else body.encode())

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler),
                            base_url="http://elasticsearch.test")

    # -------- assertions helpers --------
    def json_body(self, n: int) -> Dict[str, Any]:
        return json.loads(self.received[n].content)

    def call(self, n: int) -> tuple:
        r = self.received[n]
        return r.method, r.url.path


# -------- response builders --------

def search_response(*sources: Dict[str, Any], ids: Sequence[str] | None = None) -> Dict[str, Any]:
    hits = []
    for i, src in enumerate(sources):
        hit: Dict[str, Any] = {"_index": "idx", "_source": src}
        hit["_id"] = ids[i] if ids else letters(12)
        hits.append(hit)
    return {"took": random.randint(1, 10),
            "hits": {"total": {"value": len(hits)}, "hits": hits}}


def index_doc_response(doc_id: str, status: int = 201) -> Dict[str, Any]:
    return {"_id": doc_id, "_index": "idx", "result": "created", "status": status}


def index_doc_error(error_type: str = "mapper_parsing_exception", reason: str = "failed to parse") -> Dict[str, Any]:
    return {"error": {"type": error_type, "reason": reason}, "status": 400}


def bulk_response(n: int, failed: Sequence[int] = ()) -> Dict[str, Any]:
    items = []
    for i in range(n):
        if i in failed:
            items.append({"index": {"_id": letters(12), "status": 500,
                                    "error": {"type": letters(8), "reason": letters(8)}}})
        else:
            items.append({"index": {"_id": letters(12), "status": 201, "result": "created"}})
    return {"took": 3, "errors": bool(failed), "items": items}


def delete_response(deleted: int) -> Dict[str, Any]:
    return {"took": 2, "total": deleted, "deleted": deleted, "failures": []}


# -------- entities --------

def make_occurrence(name: str | None = None) -> Occurrence:
    return Occurrence(
        name=name,
        resource=Resource(uri=f"git://{letters(10)}"),
        note_name=f"projects/{letters(6)}/notes/{letters(6)}",
        kind=NoteKind.NOTE_KIND_UNSPECIFIED,
        remediation=letters(10),
        create_time=datetime.now(timezone.utc).replace(microsecond=0),
    )


def make_occurrences(n: int) -> List[Occurrence]:
    return [make_occurrence() for _ in range(n)]


def make_note(name: str | None = None) -> Note:
    return Note(name=name, short_description=letters(10), kind=NoteKind.BUILD)


def project_source(project_id: str) -> Dict[str, Any]:
    return encode(Project(name=f"projects/{project_id}"))


def parse_bulk_body(body: bytes) -> List[Dict[str, Any]]:
    text = body.decode("utf-8")
    assert text.endswith("\n"), "_bulk bodies must end with a newline"
    return [json.loads(line) for line in text[:-1].split("\n")]


def assert_index_mapping(body: Dict[str, Any]) -> None:
    mappings = body["mappings"]
    assert mappings["_meta"]["type"] == "grafeas"
    strings = mappings["dynamic_templates"][0]["strings"]
    assert strings["match_mapping_type"] == "string"
    assert strings["mapping"]["type"] == "keyword"
    assert strings["mapping"]["norms"] is False
