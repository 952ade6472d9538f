# (C) 2025 Rodrigo Rodrigues da Silva <rodrigopitanga@posteo.net>
# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations
import httpx
from .base import BaseStore
from ..config import CFG, Config

def build_client(cfg: Config = CFG) -> httpx.Client:
    """One client per process; httpx.Client is safe to share across threads."""
    user = cfg.get("elasticsearch.username")
    password = cfg.get("elasticsearch.password")
    return httpx.Client(
        base_url=str(cfg.get("elasticsearch.url", "http://localhost:9200")).rstrip("/"),
        timeout=httpx.Timeout(float(cfg.get("elasticsearch.timeout_s", 10.0))),
        auth=(str(user), str(password or "")) if user else None,
        headers={"Accept": "application/json"},
    )

def get_store(cfg: Config = CFG, client: httpx.Client | None = None) -> BaseStore:
    stype = (cfg.get("storage.type", "elasticsearch") or "elasticsearch").lower()
    match stype:
        case "elasticsearch" | "es":
            from .elasticsearch_store import ElasticsearchStore
            return ElasticsearchStore(
                client or build_client(cfg),
                index_prefix=str(cfg.get("elasticsearch.index_prefix", "grafeas")),
                refresh=cfg.get("elasticsearch.refresh", "true"),
                page_size=int(cfg.get("elasticsearch.page_size", 1000)),
            )
        case _:
            raise RuntimeError(f"Unknown storage.type: {stype}")
