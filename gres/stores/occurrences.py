# (C) 2025 Rodrigo Rodrigues da Silva <rodrigopitanga@posteo.net>
# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations
from typing import List, Sequence
from gres.context import Context
from gres.errors import StoreError
from gres.schemas import Occurrence
from gres.stores.documents import DocumentStore


class OccurrenceStore(DocumentStore[Occurrence]):
    collection = "occurrences"
    model = Occurrence

    def index(self, project_id: str) -> str:
        return self._names.occurrences(project_id)

    def get_occurrence(self, ctx: Context, project_id: str, occurrence_id: str) -> Occurrence:
        return self.get(ctx, project_id, occurrence_id)

    def list_occurrences(self, ctx: Context, project_id: str) -> List[Occurrence]:
        return self.list(ctx, project_id)

    # user_id is accepted for interface parity; nothing is recorded for it
    def create_occurrence(self, ctx: Context, project_id: str, user_id: str,
                          occurrence: Occurrence) -> Occurrence:
        return self.create(ctx, project_id, occurrence)

    def batch_create_occurrences(self, ctx: Context, project_id: str, user_id: str,
                                 occurrences: Sequence[Occurrence]) -> tuple[List[Occurrence], List[StoreError]]:
        return self.batch_create(ctx, project_id, occurrences)

    def delete_occurrence(self, ctx: Context, project_id: str, occurrence_id: str) -> None:
        self.delete(ctx, project_id, occurrence_id)
