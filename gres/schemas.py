# (C) 2025 Rodrigo Rodrigues da Silva <rodrigopitanga@posteo.net>
# SPDX-License-Identifier: GPL-3.0-or-later

"""Pydantic models for Grafeas entities and API request/response bodies."""

from __future__ import annotations
import json
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Literal, TypeVar
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class NoteKind(str, Enum):
    NOTE_KIND_UNSPECIFIED = "NOTE_KIND_UNSPECIFIED"
    VULNERABILITY = "VULNERABILITY"
    BUILD = "BUILD"
    IMAGE = "IMAGE"
    PACKAGE = "PACKAGE"
    DEPLOYMENT = "DEPLOYMENT"
    DISCOVERY = "DISCOVERY"
    ATTESTATION = "ATTESTATION"
    INTOTO = "INTOTO"


class Entity(BaseModel):
    """Canonical JSON shape: camelCase keys, unset fields omitted, unknown keys ignored."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Project(Entity):
    name: str | None = None


class Resource(Entity):
    uri: str | None = None
    name: str | None = None


class RelatedUrl(Entity):
    url: str | None = None
    label: str | None = None


class Occurrence(Entity):
    name: str | None = None
    resource: Resource | None = None
    note_name: str | None = None
    kind: NoteKind = NoteKind.NOTE_KIND_UNSPECIFIED
    remediation: str | None = None
    create_time: datetime | None = None
    update_time: datetime | None = None
    details: Dict[str, Any] | None = None


class Note(Entity):
    name: str | None = None
    short_description: str | None = None
    long_description: str | None = None
    kind: NoteKind = NoteKind.NOTE_KIND_UNSPECIFIED
    related_url: list[RelatedUrl] | None = None
    expiration_time: datetime | None = None
    create_time: datetime | None = None
    update_time: datetime | None = None
    related_note_names: list[str] | None = None
    details: Dict[str, Any] | None = None


E = TypeVar("E", bound=Entity)


def encode(entity: Entity) -> Dict[str, Any]:
    return entity.model_dump(mode="json", by_alias=True, exclude_none=True)


def encode_json(entity: Entity) -> str:
    # single line; bulk bodies are newline-delimited
    return json.dumps(encode(entity), separators=(",", ":"), ensure_ascii=False)


def decode(model: type[E], data: Dict[str, Any] | str | bytes) -> E:
    """Raises pydantic.ValidationError on malformed input."""
    if isinstance(data, (str, bytes)):
        return model.model_validate_json(data)
    return model.model_validate(data)


# ---------------- API bodies ----------------

class ErrorResponse(BaseModel):
    """API error envelope."""
    ok: Literal[False]
    code: str
    error: str
    details: dict[str, Any] | None = None


class BatchCreateOccurrencesBody(BaseModel):
    occurrences: list[Occurrence] = Field(default_factory=list)


class BatchCreateNotesBody(BaseModel):
    notes: list[Note] = Field(default_factory=list)
