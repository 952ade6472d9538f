# (C) 2025 Rodrigo Rodrigues da Silva <rodrigopitanga@posteo.net>
# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations
import json
from typing import Any, Dict, Generic, List, Sequence, TypeVar
import httpx
from gres.context import Context
from gres.errors import InternalError, NotFoundError, PartialBatchFailure, StoreError
from gres.log import get_logger
from gres.schemas import Entity, encode, encode_json
from gres.stores.base import refresh_params
from gres.stores.envelopes import BulkResponse, IndexDocResponse, SearchHit, SearchResponse
from gres.stores.indices import IndexNames
from gres.stores.responses import perform, expect_success, decode_envelope, decode_source

log = get_logger("stores.documents")

E = TypeVar("E", bound=Entity)


class DocumentStore(Generic[E]):
    """
    Per-project documents (occurrences, notes) in `<prefix>-<project>-<collection>`.
    Ids are assigned by the backend; the canonical name is
    `projects/<project>/<collection>/<id>` and only the returned entity
    carries it.
    """
    collection: str = ""
    model: type[E]

    def __init__(self, client: httpx.Client, names: IndexNames,
                 refresh: Any = "true", page_size: int = 1000):
        self._client = client
        self._names = names
        self._refresh = refresh
        self._page_size = page_size

    def index(self, project_id: str) -> str:
        raise NotImplementedError

    def entity_name(self, project_id: str, doc_id: str) -> str:
        return f"projects/{project_id}/{self.collection}/{doc_id}"

    def _match_query(self, project_id: str, doc_id: str) -> Dict[str, Any]:
        return {"query": {"match": {"name": self.entity_name(project_id, doc_id)}}}

    def _from_hit(self, project_id: str, hit: SearchHit, action: str) -> E:
        entity = decode_source(self.model, hit.source, action)
        if not entity.name and hit.id:
            entity.name = self.entity_name(project_id, hit.id)
        return entity

    def _search(self, ctx: Context, project_id: str, body: Dict[str, Any], action: str) -> SearchResponse:
        resp = perform(self._client, ctx, "GET", f"/{self.index(project_id)}/_search", json=body)
        expect_success(resp, action)
        return decode_envelope(resp, SearchResponse, action)

    # -------- operations --------
    def get(self, ctx: Context, project_id: str, doc_id: str) -> E:
        name = self.entity_name(project_id, doc_id)
        action = f"getting {name}"
        found = self._search(ctx, project_id, self._match_query(project_id, doc_id), action)
        if not found.hits.hits:
            raise NotFoundError(f"{name} not found", name=name)
        return self._from_hit(project_id, found.hits.hits[0], action)

    def list(self, ctx: Context, project_id: str) -> List[E]:
        action = f"listing {self.collection} of projects/{project_id}"
        found = self._search(ctx, project_id, {"query": {"match_all": {}}, "size": self._page_size}, action)
        return [self._from_hit(project_id, hit, action) for hit in found.hits.hits]

    def create(self, ctx: Context, project_id: str, entity: E) -> E:
        action = f"creating {self.model.__name__.lower()} in projects/{project_id}"
        resp = perform(self._client, ctx, "POST", f"/{self.index(project_id)}/_doc",
                       json=encode(entity), params=refresh_params(self._refresh))
        expect_success(resp, action)
        result = decode_envelope(resp, IndexDocResponse, action)
        if result.error is not None:
            log.warning(f"{action}: {result.error.type}: {result.error.reason}")
            raise InternalError(f"{action}: {result.error.reason or result.error.type}",
                                type=result.error.type)
        if not result.id:
            raise InternalError(f"{action}: backend did not return a document id")
        created = entity.model_copy(update={"name": self.entity_name(project_id, result.id)})
        log.info(f"created {created.name}")
        return created

    def batch_create(self, ctx: Context, project_id: str,
                     entities: Sequence[E]) -> tuple[List[E], List[StoreError]]:
        """
        One _bulk call. Returns the entities whose item succeeded, in input
        order, plus at most one error for the whole batch.
        """
        if not entities:
            return [], []
        action = f"batch creating {len(entities)} {self.collection} in projects/{project_id}"

        control = json.dumps({"index": {"_index": self.index(project_id)}}, separators=(",", ":"))
        lines: List[str] = []
        for entity in entities:
            lines.append(control)
            lines.append(encode_json(entity))
        body = ("\n".join(lines) + "\n").encode("utf-8")

        try:
            resp = perform(self._client, ctx, "POST", "/_bulk", content=body,
                           headers={"Content-Type": "application/x-ndjson"},
                           params=refresh_params(self._refresh))
            expect_success(resp, action)
            bulk = decode_envelope(resp, BulkResponse, action)
            if len(bulk.items) != len(entities):
                raise InternalError(f"{action}: backend answered {len(bulk.items)} item(s)",
                                    submitted=len(entities), answered=len(bulk.items))
        except InternalError as e:
            return [], [e]

        created: List[E] = []
        failed = 0
        for entity, item in zip(entities, bulk.items):
            result = item.result
            if result is None or not result.succeeded:
                failed += 1
                if result is not None and result.error is not None:
                    log.debug(f"{action}: item failed: {result.error.type}: {result.error.reason}")
                continue
            created.append(entity.model_copy(update={"name": self.entity_name(project_id, result.id)}))

        if failed == 0:
            log.info(f"{action}: all created")
            return created, []
        log.warning(f"{action}: {failed} of {len(entities)} failed")
        if failed == len(entities):
            return created, [InternalError(f"{action}: all items failed",
                                           failed=failed, total=len(entities))]
        return created, [PartialBatchFailure(f"{action}: {failed} of {len(entities)} items failed",
                                             failed=failed, total=len(entities))]

    def delete(self, ctx: Context, project_id: str, doc_id: str) -> None:
        name = self.entity_name(project_id, doc_id)
        resp = perform(self._client, ctx, "POST", f"/{self.index(project_id)}/_delete_by_query",
                       json=self._match_query(project_id, doc_id),
                       params=refresh_params(self._refresh, delete_by_query=True))
        expect_success(resp, f"deleting {name}")
        log.info(f"deleted {name}")
