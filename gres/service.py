# (C) 2025 Rodrigo Rodrigues da Silva <rodrigopitanga@posteo.net>
# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations
from typing import Any, Dict, Sequence
from gres.context import Context
from gres.metrics import inc as m_inc
from gres.schemas import Project, Occurrence, Note, encode

# Pure-ish service functions operating on a store adapter


def parse_project_name(name: str) -> str:
    """'projects/<id>' -> '<id>'"""
    prefix, _, project_id = (name or "").partition("/")
    if prefix != "projects" or not project_id or "/" in project_id:
        raise ValueError(f"invalid project name: {name!r}")
    return project_id

# -------- projects --------

def create_project(store, ctx: Context, project_id: str) -> Dict[str, Any]:
    project = store.create_project(ctx, project_id, Project())
    m_inc("projects_created_total", 1.0)
    return encode(project)

def get_project(store, ctx: Context, project_id: str) -> Dict[str, Any]:
    return encode(store.get_project(ctx, project_id))

def list_projects(store, ctx: Context) -> Dict[str, Any]:
    return {"projects": [encode(p) for p in store.list_projects(ctx)]}

def delete_project(store, ctx: Context, project_id: str) -> Dict[str, Any]:
    store.delete_project(ctx, project_id)
    m_inc("projects_deleted_total", 1.0)
    return {"ok": True, "deleted": f"projects/{project_id}"}

# -------- occurrences --------

def create_occurrence(store, ctx: Context, project_id: str, occurrence: Occurrence,
                      user_id: str = "") -> Dict[str, Any]:
    created = store.create_occurrence(ctx, project_id, user_id, occurrence)
    m_inc("occurrences_created_total", 1.0)
    return encode(created)

def batch_create_occurrences(store, ctx: Context, project_id: str,
                             occurrences: Sequence[Occurrence], user_id: str = "") -> Dict[str, Any]:
    created, errors = store.batch_create_occurrences(ctx, project_id, user_id, occurrences)
    m_inc("occurrences_created_total", float(len(created)))
    if errors and created:
        m_inc("batch_partial_failures_total", 1.0)
    return {
        "occurrences": [encode(o) for o in created],
        "errors": [e.to_dict() for e in errors],
    }

def get_occurrence(store, ctx: Context, project_id: str, occurrence_id: str) -> Dict[str, Any]:
    return encode(store.get_occurrence(ctx, project_id, occurrence_id))

def list_occurrences(store, ctx: Context, project_id: str) -> Dict[str, Any]:
    return {"occurrences": [encode(o) for o in store.list_occurrences(ctx, project_id)]}

def delete_occurrence(store, ctx: Context, project_id: str, occurrence_id: str) -> Dict[str, Any]:
    store.delete_occurrence(ctx, project_id, occurrence_id)
    m_inc("occurrences_deleted_total", 1.0)
    return {"ok": True, "deleted": f"projects/{project_id}/occurrences/{occurrence_id}"}

# -------- notes --------

def create_note(store, ctx: Context, project_id: str, note: Note, user_id: str = "") -> Dict[str, Any]:
    created = store.create_note(ctx, project_id, user_id, note)
    m_inc("notes_created_total", 1.0)
    return encode(created)

def batch_create_notes(store, ctx: Context, project_id: str,
                       notes: Sequence[Note], user_id: str = "") -> Dict[str, Any]:
    created, errors = store.batch_create_notes(ctx, project_id, user_id, notes)
    m_inc("notes_created_total", float(len(created)))
    if errors and created:
        m_inc("batch_partial_failures_total", 1.0)
    return {
        "notes": [encode(n) for n in created],
        "errors": [e.to_dict() for e in errors],
    }

def get_note(store, ctx: Context, project_id: str, note_id: str) -> Dict[str, Any]:
    return encode(store.get_note(ctx, project_id, note_id))

def list_notes(store, ctx: Context, project_id: str) -> Dict[str, Any]:
    return {"notes": [encode(n) for n in store.list_notes(ctx, project_id)]}

def delete_note(store, ctx: Context, project_id: str, note_id: str) -> Dict[str, Any]:
    store.delete_note(ctx, project_id, note_id)
    m_inc("notes_deleted_total", 1.0)
    return {"ok": True, "deleted": f"projects/{project_id}/notes/{note_id}"}
