# (C) 2025 Rodrigo Rodrigues da Silva <rodrigopitanga@posteo.net>
# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations
from typing import Any, List, Sequence
import httpx
from gres.context import Context
from gres.errors import InternalError
from gres.log import get_logger
from gres.schemas import Project, Occurrence, Note
from gres.stores.base import BaseStore, BatchResult
from gres.stores.indices import IndexNames, IndexProvisioner
from gres.stores.notes import NoteStore
from gres.stores.occurrences import OccurrenceStore
from gres.stores.projects import ProjectStore

log = get_logger("stores")


class ElasticsearchStore(BaseStore):
    """
    Grafeas storage over Elasticsearch. The client is the only shared state;
    it is used concurrently by every operation without extra locking.
    """

    def __init__(self, client: httpx.Client, index_prefix: str = "grafeas",
                 refresh: Any = "true", page_size: int = 1000):
        self.client = client
        self.names = IndexNames(index_prefix)
        self.provisioner = IndexProvisioner(client)
        self.projects = ProjectStore(client, self.names, self.provisioner,
                                     refresh=refresh, page_size=page_size)
        self.occurrences = OccurrenceStore(client, self.names, refresh=refresh, page_size=page_size)
        self.notes = NoteStore(client, self.names, refresh=refresh, page_size=page_size)

    def initialize(self, ctx: Context) -> None:
        """Run once before serving: the shared projects index must exist."""
        self.provisioner.ensure(ctx, self.names.projects())
        log.info(f"elasticsearch storage ready ({self.names.projects()})")

    def ready(self, ctx: Context) -> bool:
        try:
            return self.provisioner.exists(ctx, self.names.projects())
        except InternalError:
            return False

    def close(self) -> None:
        self.client.close()

    # -------- projects --------
    def create_project(self, ctx: Context, project_id: str, seed: Project | None = None) -> Project:
        return self.projects.create_project(ctx, project_id, seed)

    def get_project(self, ctx: Context, project_id: str) -> Project:
        return self.projects.get_project(ctx, project_id)

    def list_projects(self, ctx: Context) -> List[Project]:
        return self.projects.list_projects(ctx)

    def delete_project(self, ctx: Context, project_id: str) -> None:
        self.projects.delete_project(ctx, project_id)

    # -------- occurrences --------
    def get_occurrence(self, ctx: Context, project_id: str, occurrence_id: str) -> Occurrence:
        return self.occurrences.get_occurrence(ctx, project_id, occurrence_id)

    def list_occurrences(self, ctx: Context, project_id: str) -> List[Occurrence]:
        return self.occurrences.list_occurrences(ctx, project_id)

    def create_occurrence(self, ctx: Context, project_id: str, user_id: str,
                          occurrence: Occurrence) -> Occurrence:
        return self.occurrences.create_occurrence(ctx, project_id, user_id, occurrence)

    def batch_create_occurrences(self, ctx: Context, project_id: str, user_id: str,
                                 occurrences: Sequence[Occurrence]) -> BatchResult:
        return self.occurrences.batch_create_occurrences(ctx, project_id, user_id, occurrences)

    def delete_occurrence(self, ctx: Context, project_id: str, occurrence_id: str) -> None:
        self.occurrences.delete_occurrence(ctx, project_id, occurrence_id)

    # -------- notes --------
    def get_note(self, ctx: Context, project_id: str, note_id: str) -> Note:
        return self.notes.get_note(ctx, project_id, note_id)

    def list_notes(self, ctx: Context, project_id: str) -> List[Note]:
        return self.notes.list_notes(ctx, project_id)

    def create_note(self, ctx: Context, project_id: str, user_id: str, note: Note) -> Note:
        return self.notes.create_note(ctx, project_id, user_id, note)

    def batch_create_notes(self, ctx: Context, project_id: str, user_id: str,
                           notes: Sequence[Note]) -> BatchResult:
        return self.notes.batch_create_notes(ctx, project_id, user_id, notes)

    def delete_note(self, ctx: Context, project_id: str, note_id: str) -> None:
        self.notes.delete_note(ctx, project_id, note_id)
