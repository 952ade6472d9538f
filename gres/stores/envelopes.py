# (C) 2025 Rodrigo Rodrigues da Silva <rodrigopitanga@posteo.net>
# SPDX-License-Identifier: GPL-3.0-or-later

"""Typed views of the Elasticsearch response bodies the stores read."""

from __future__ import annotations
from typing import Any, Dict, List
from pydantic import BaseModel, ConfigDict, Field


class _Envelope(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class SearchTotal(_Envelope):
    value: int = 0


class SearchHit(_Envelope):
    index: str | None = Field(None, alias="_index")
    id: str | None = Field(None, alias="_id")
    source: Dict[str, Any] = Field(default_factory=dict, alias="_source")


class SearchHits(_Envelope):
    total: SearchTotal | None = None
    hits: List[SearchHit] = Field(default_factory=list)


class SearchResponse(_Envelope):
    took: int | None = None
    hits: SearchHits


class IndexDocError(_Envelope):
    type: str | None = None
    reason: str | None = None


class IndexDocResponse(_Envelope):
    """Body of POST /<index>/_doc, and of each bulk item."""
    id: str | None = Field(None, alias="_id")
    index: str | None = Field(None, alias="_index")
    result: str | None = None
    status: int | None = None
    error: IndexDocError | None = None

    @property
    def succeeded(self) -> bool:
        if self.error is not None or not self.id:
            return False
        return self.status is None or 200 <= self.status < 300


class BulkItem(_Envelope):
    index: IndexDocResponse | None = None
    create: IndexDocResponse | None = None

    @property
    def result(self) -> IndexDocResponse | None:
        return self.index or self.create


class BulkResponse(_Envelope):
    took: int | None = None
    errors: bool = False
    items: List[BulkItem] = Field(default_factory=list)


class DeleteByQueryResponse(_Envelope):
    took: int | None = None
    total: int | None = None
    deleted: int = 0
    failures: List[Dict[str, Any]] = Field(default_factory=list)
