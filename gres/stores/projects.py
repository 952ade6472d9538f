# (C) 2025 Rodrigo Rodrigues da Silva <rodrigopitanga@posteo.net>
# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations
from typing import Any, Dict, List
import httpx
from gres.context import Context
from gres.errors import AlreadyExistsError, CompanionIndexError, InternalError, NotFoundError
from gres.log import get_logger
from gres.schemas import Project, encode
from gres.stores.base import refresh_params
from gres.stores.envelopes import DeleteByQueryResponse, SearchResponse
from gres.stores.indices import IndexNames, IndexProvisioner
from gres.stores.responses import perform, expect_success, decode_envelope, decode_source

log = get_logger("stores.projects")


def project_name(project_id: str) -> str:
    return f"projects/{project_id}"


class ProjectStore:
    """
    Project documents live in the shared `<prefix>-projects` index; each
    project owns an occurrences index and a notes index.
    """

    def __init__(self, client: httpx.Client, names: IndexNames,
                 provisioner: IndexProvisioner | None = None,
                 refresh: Any = "true", page_size: int = 1000):
        self._client = client
        self._names = names
        self._provisioner = provisioner or IndexProvisioner(client)
        self._refresh = refresh
        self._page_size = page_size

    @staticmethod
    def _term_query(project_id: str) -> Dict[str, Any]:
        return {"query": {"term": {"name": project_name(project_id)}}}

    def _search(self, ctx: Context, body: Dict[str, Any], action: str) -> SearchResponse:
        resp = perform(self._client, ctx, "GET", f"/{self._names.projects()}/_search", json=body)
        expect_success(resp, action)
        return decode_envelope(resp, SearchResponse, action)

    def create_project(self, ctx: Context, project_id: str, seed: Project | None = None) -> Project:
        name = project_name(project_id)
        action = f"creating project {name}"

        found = self._search(ctx, self._term_query(project_id), action)
        if found.hits.hits:
            log.debug(f"{action}: {len(found.hits.hits)} existing document(s)")
            raise AlreadyExistsError(f"project {name} already exists", project=name)

        project = (seed or Project()).model_copy(update={"name": name})
        resp = perform(self._client, ctx, "POST", f"/{self._names.projects()}/_doc",
                       json=encode(project), params=refresh_params(self._refresh))
        expect_success(resp, action)

        # no rollback: a failure below leaves the project document in place
        for index in self._names.tenant(project_id):
            try:
                self._provisioner.create(ctx, index)
            except InternalError as e:
                log.error(f"{action}: document written but index {index} was not created; "
                          f"project is left without its tenant indices")
                raise CompanionIndexError(
                    f"{action}: index {index} could not be created",
                    project=name, index=index, cause=e.message,
                ) from e

        log.info(f"created project {name}")
        return project

    def get_project(self, ctx: Context, project_id: str) -> Project:
        name = project_name(project_id)
        action = f"getting project {name}"
        found = self._search(ctx, self._term_query(project_id), action)
        if not found.hits.hits:
            raise NotFoundError(f"project {name} not found", project=name)
        return decode_source(Project, found.hits.hits[0].source, action)

    def list_projects(self, ctx: Context) -> List[Project]:
        action = "listing projects"
        found = self._search(ctx, {"query": {"match_all": {}}, "size": self._page_size}, action)
        return [decode_source(Project, hit.source, action) for hit in found.hits.hits]

    def delete_project(self, ctx: Context, project_id: str) -> None:
        name = project_name(project_id)
        action = f"deleting project {name}"
        resp = perform(self._client, ctx, "POST", f"/{self._names.projects()}/_delete_by_query",
                       json=self._term_query(project_id),
                       params=refresh_params(self._refresh, delete_by_query=True))
        expect_success(resp, action)
        result = decode_envelope(resp, DeleteByQueryResponse, action)
        if result.deleted == 0:
            raise NotFoundError(f"project {name} not found", project=name)

        self._provisioner.delete(ctx, *self._names.tenant(project_id))
        log.info(f"deleted project {name} ({result.deleted} document(s)) and its indices")
