# (C) 2025 Rodrigo Rodrigues da Silva <rodrigopitanga@posteo.net>
# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations
from typing import Any, Dict
import httpx
from gres.context import Context
from gres.errors import InternalError
from gres.log import get_logger
from gres.stores.responses import perform, expect_success

log = get_logger("stores.indices")

# Every lookup is an exact match on an identifying field, so strings are
# keywords without norms; nothing in these indices is full-text searchable.
INDEX_MAPPING: Dict[str, Any] = {
    "mappings": {
        "_meta": {"type": "grafeas"},
        "dynamic_templates": [
            {
                "strings": {
                    "match_mapping_type": "string",
                    "mapping": {"type": "keyword", "norms": False},
                }
            }
        ],
    }
}


class IndexNames:
    def __init__(self, prefix: str = "grafeas"):
        self.prefix = prefix

    def projects(self) -> str:
        return f"{self.prefix}-projects"

    def occurrences(self, project_id: str) -> str:
        return f"{self.prefix}-{project_id}-occurrences"

    def notes(self, project_id: str) -> str:
        return f"{self.prefix}-{project_id}-notes"

    def tenant(self, project_id: str) -> tuple[str, str]:
        return self.occurrences(project_id), self.notes(project_id)


class IndexProvisioner:
    def __init__(self, client: httpx.Client):
        self._client = client

    def exists(self, ctx: Context, index: str) -> bool:
        resp = perform(self._client, ctx, "HEAD", f"/{index}")
        if resp.status_code == 200:
            return True
        if resp.status_code == 404:
            return False
        log.warning(f"existence probe for {index} returned {resp.status_code}")
        raise InternalError(f"checking index {index}: unexpected status {resp.status_code}",
                            index=index, status=resp.status_code)

    def create(self, ctx: Context, index: str) -> None:
        resp = perform(self._client, ctx, "PUT", f"/{index}", json=INDEX_MAPPING)
        expect_success(resp, f"creating index {index}")
        log.info(f"created index {index}")

    def ensure(self, ctx: Context, index: str) -> None:
        if self.exists(ctx, index):
            log.debug(f"index {index} already exists")
            return
        self.create(ctx, index)

    def delete(self, ctx: Context, *indices: str) -> None:
        resp = perform(self._client, ctx, "DELETE", "/" + ",".join(indices))
        expect_success(resp, f"deleting indices {', '.join(indices)}")
        log.info(f"deleted indices {', '.join(indices)}")
