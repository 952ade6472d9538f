# (C) 2025 Rodrigo Rodrigues da Silva <rodrigopitanga@posteo.net>
# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations
from typing import List, Sequence
from gres.context import Context
from gres.errors import StoreError
from gres.schemas import Note
from gres.stores.documents import DocumentStore


class NoteStore(DocumentStore[Note]):
    collection = "notes"
    model = Note

    def index(self, project_id: str) -> str:
        return self._names.notes(project_id)

    def get_note(self, ctx: Context, project_id: str, note_id: str) -> Note:
        return self.get(ctx, project_id, note_id)

    def list_notes(self, ctx: Context, project_id: str) -> List[Note]:
        return self.list(ctx, project_id)

    def create_note(self, ctx: Context, project_id: str, user_id: str, note: Note) -> Note:
        return self.create(ctx, project_id, note)

    def batch_create_notes(self, ctx: Context, project_id: str, user_id: str,
                           notes: Sequence[Note]) -> tuple[List[Note], List[StoreError]]:
        return self.batch_create(ctx, project_id, notes)

    def delete_note(self, ctx: Context, project_id: str, note_id: str) -> None:
        self.delete(ctx, project_id, note_id)
