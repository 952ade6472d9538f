# (C) 2025 Rodrigo Rodrigues da Silva <rodrigopitanga@posteo.net>
# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Sequence
from gres.context import Context
from gres.errors import StoreError
from gres.schemas import Project, Occurrence, Note

BatchResult = tuple[List[Any], List[StoreError]]  # (created, errors)


def refresh_params(refresh: Any, *, delete_by_query: bool = False) -> Dict[str, str] | None:
    """Query params for writes; _delete_by_query only takes true/false."""
    if refresh is None or refresh is False or str(refresh).lower() == "false":
        return None
    value = "true" if refresh is True else str(refresh).lower()
    if delete_by_query and value != "true":
        value = "true"
    return {"refresh": value}


class BaseStore(ABC):
    @abstractmethod
    def initialize(self, ctx: Context) -> None: ...

    @abstractmethod
    def ready(self, ctx: Context) -> bool: ...

    def close(self) -> None:
        pass

    # -------- projects --------
    @abstractmethod
    def create_project(self, ctx: Context, project_id: str, seed: Project | None = None) -> Project: ...

    @abstractmethod
    def get_project(self, ctx: Context, project_id: str) -> Project: ...

    @abstractmethod
    def list_projects(self, ctx: Context) -> List[Project]: ...

    @abstractmethod
    def delete_project(self, ctx: Context, project_id: str) -> None: ...

    # -------- occurrences --------
    @abstractmethod
    def get_occurrence(self, ctx: Context, project_id: str, occurrence_id: str) -> Occurrence: ...

    @abstractmethod
    def list_occurrences(self, ctx: Context, project_id: str) -> List[Occurrence]: ...

    @abstractmethod
    def create_occurrence(self, ctx: Context, project_id: str, user_id: str,
                          occurrence: Occurrence) -> Occurrence: ...

    @abstractmethod
    def batch_create_occurrences(self, ctx: Context, project_id: str, user_id: str,
                                 occurrences: Sequence[Occurrence]) -> BatchResult: ...

    @abstractmethod
    def delete_occurrence(self, ctx: Context, project_id: str, occurrence_id: str) -> None: ...

    # -------- notes --------
    @abstractmethod
    def get_note(self, ctx: Context, project_id: str, note_id: str) -> Note: ...

    @abstractmethod
    def list_notes(self, ctx: Context, project_id: str) -> List[Note]: ...

    @abstractmethod
    def create_note(self, ctx: Context, project_id: str, user_id: str, note: Note) -> Note: ...

    @abstractmethod
    def batch_create_notes(self, ctx: Context, project_id: str, user_id: str,
                           notes: Sequence[Note]) -> BatchResult: ...

    @abstractmethod
    def delete_note(self, ctx: Context, project_id: str, note_id: str) -> None: ...
