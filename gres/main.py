# (C) 2025 Rodrigo Rodrigues da Silva <rodrigopitanga@posteo.net>
# SPDX-License-Identifier: GPL-3.0-or-later

from contextlib import asynccontextmanager
from typing import Any, Dict, Optional
from fastapi import FastAPI, Depends, Request, HTTPException
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.concurrency import run_in_threadpool
import uvicorn
from . import log as ops_log
from .config import CFG
from .context import Context
from .errors import StoreError
from .metrics import inc, set_error, snapshot, to_prometheus
from .schemas import Project, Occurrence, Note, ErrorResponse, \
    BatchCreateOccurrencesBody, BatchCreateNotesBody
from .stores.factory import get_store
from .stores.base import BaseStore
from . import service as svc


VERSION = "0.1.0"

# Dependency injection builder

def build_app(cfg=CFG, store: Optional[BaseStore] = None) -> FastAPI:
    ops_log.configure(cfg.get("log.ops"))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # the projects index must exist before any project operation
        ctx = Context.with_timeout(float(cfg.get("server.request_timeout_s", 30.0)))
        await run_in_threadpool(app.state.store.initialize, ctx)
        yield
        app.state.store.close()
        ops_log.close()

    app = FastAPI(title="Grafeas storage on Elasticsearch", version=VERSION, lifespan=lifespan)
    app.state.cfg = cfg
    app.state.store = store or get_store(cfg)

    def current_store(request: Request) -> BaseStore:
        return request.app.state.store

    def request_ctx() -> Context:
        return Context.with_timeout(float(cfg.get("server.request_timeout_s", 30.0)))

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        if exc.status_code >= 500:
            set_error(f"{exc.kind.value}: {exc.message}")
        body = ErrorResponse(ok=False, code=exc.kind.value, error=exc.message,
                             details=exc.details or None)
        return JSONResponse(body.model_dump(), status_code=exc.status_code)

    # -------------------- Health --------------------

    def _readiness_check() -> Dict[str, Any]:
        details: Dict[str, Any] = {
            "storage": cfg.get("storage.type", "elasticsearch"),
            "elasticsearch": cfg.get("elasticsearch.url"),
            "index_prefix": cfg.get("elasticsearch.index_prefix", "grafeas"),
            "backend_ready": False,
        }
        try:
            details["backend_ready"] = bool(app.state.store.ready(request_ctx().child(5.0)))
        except StoreError as e:
            set_error(f"backend: {e.message}")
        details["ok"] = details["backend_ready"]
        details["version"] = VERSION
        return details

    @app.get("/health")
    def health():
        inc("requests_total")
        d = _readiness_check()
        status = "ready" if d.get("ok") else "degraded"
        return {"ok": d["ok"], "status": status, "version": VERSION}

    @app.get("/health/live")
    def health_live():
        inc("requests_total")
        return {"ok": True, "status": "live", "version": VERSION}

    @app.get("/health/ready")
    def health_ready():
        inc("requests_total")
        d = _readiness_check()
        return JSONResponse(d, status_code=200 if d.get("ok") else 503)

    @app.get("/health/metrics")
    def health_metrics():
        inc("requests_total")
        return snapshot({"version": VERSION, "storage": cfg.get("storage.type", "elasticsearch")})

    @app.get("/metrics")
    def metrics_prom():
        inc("requests_total")
        txt = to_prometheus(build={"version": VERSION, "storage": cfg.get("storage.type", "elasticsearch")})
        return PlainTextResponse(txt, media_type="text/plain; version=0.0.4")

    # ----------------- Projects ------------------

    @app.post("/v1beta1/projects")
    @ops_log.ops_event("create_project", project=None, name=lambda kw, _: kw["project"].name)
    def create_project(
        project: Project,
        ctx: Context = Depends(request_ctx),
        store: BaseStore = Depends(current_store),
    ):
        inc("requests_total")
        try:
            project_id = svc.parse_project_name(project.name or "")
        except ValueError as ve:
            raise HTTPException(status_code=400, detail=str(ve))
        return svc.create_project(store, ctx, project_id)

    @app.get("/v1beta1/projects")
    @ops_log.ops_event("list_projects", project=None)
    def list_projects(
        ctx: Context = Depends(request_ctx),
        store: BaseStore = Depends(current_store),
    ):
        inc("requests_total")
        return svc.list_projects(store, ctx)

    @app.get("/v1beta1/projects/{project_id}")
    @ops_log.ops_event("get_project")
    def get_project(
        project_id: str,
        ctx: Context = Depends(request_ctx),
        store: BaseStore = Depends(current_store),
    ):
        inc("requests_total")
        return svc.get_project(store, ctx, project_id)

    @app.delete("/v1beta1/projects/{project_id}")
    @ops_log.ops_event("delete_project")
    def delete_project(
        project_id: str,
        ctx: Context = Depends(request_ctx),
        store: BaseStore = Depends(current_store),
    ):
        inc("requests_total")
        return svc.delete_project(store, ctx, project_id)

    # ----------------- Occurrences ------------------

    @app.post("/v1beta1/projects/{project_id}/occurrences:batchCreate")
    @ops_log.ops_event("batch_create_occurrences",
                       count=lambda kw, _: len(kw["body"].occurrences))
    def batch_create_occurrences(
        project_id: str,
        body: BatchCreateOccurrencesBody,
        ctx: Context = Depends(request_ctx),
        store: BaseStore = Depends(current_store),
    ):
        inc("requests_total")
        out = svc.batch_create_occurrences(store, ctx, project_id, body.occurrences)
        if out["errors"] and not out["occurrences"]:
            return JSONResponse(out["errors"][0], status_code=500)
        return out

    @app.post("/v1beta1/projects/{project_id}/occurrences")
    @ops_log.ops_event("create_occurrence")
    def create_occurrence(
        project_id: str,
        occurrence: Occurrence,
        ctx: Context = Depends(request_ctx),
        store: BaseStore = Depends(current_store),
    ):
        inc("requests_total")
        return svc.create_occurrence(store, ctx, project_id, occurrence)

    @app.get("/v1beta1/projects/{project_id}/occurrences")
    @ops_log.ops_event("list_occurrences")
    def list_occurrences(
        project_id: str,
        ctx: Context = Depends(request_ctx),
        store: BaseStore = Depends(current_store),
    ):
        inc("requests_total")
        return svc.list_occurrences(store, ctx, project_id)

    @app.get("/v1beta1/projects/{project_id}/occurrences/{occurrence_id}")
    @ops_log.ops_event("get_occurrence")
    def get_occurrence(
        project_id: str,
        occurrence_id: str,
        ctx: Context = Depends(request_ctx),
        store: BaseStore = Depends(current_store),
    ):
        inc("requests_total")
        return svc.get_occurrence(store, ctx, project_id, occurrence_id)

    @app.delete("/v1beta1/projects/{project_id}/occurrences/{occurrence_id}")
    @ops_log.ops_event("delete_occurrence")
    def delete_occurrence(
        project_id: str,
        occurrence_id: str,
        ctx: Context = Depends(request_ctx),
        store: BaseStore = Depends(current_store),
    ):
        inc("requests_total")
        return svc.delete_occurrence(store, ctx, project_id, occurrence_id)

    # ----------------- Notes ------------------

    @app.post("/v1beta1/projects/{project_id}/notes:batchCreate")
    @ops_log.ops_event("batch_create_notes", count=lambda kw, _: len(kw["body"].notes))
    def batch_create_notes(
        project_id: str,
        body: BatchCreateNotesBody,
        ctx: Context = Depends(request_ctx),
        store: BaseStore = Depends(current_store),
    ):
        inc("requests_total")
        out = svc.batch_create_notes(store, ctx, project_id, body.notes)
        if out["errors"] and not out["notes"]:
            return JSONResponse(out["errors"][0], status_code=500)
        return out

    @app.post("/v1beta1/projects/{project_id}/notes")
    @ops_log.ops_event("create_note")
    def create_note(
        project_id: str,
        note: Note,
        ctx: Context = Depends(request_ctx),
        store: BaseStore = Depends(current_store),
    ):
        inc("requests_total")
        return svc.create_note(store, ctx, project_id, note)

    @app.get("/v1beta1/projects/{project_id}/notes")
    @ops_log.ops_event("list_notes")
    def list_notes(
        project_id: str,
        ctx: Context = Depends(request_ctx),
        store: BaseStore = Depends(current_store),
    ):
        inc("requests_total")
        return svc.list_notes(store, ctx, project_id)

    @app.get("/v1beta1/projects/{project_id}/notes/{note_id}")
    @ops_log.ops_event("get_note")
    def get_note(
        project_id: str,
        note_id: str,
        ctx: Context = Depends(request_ctx),
        store: BaseStore = Depends(current_store),
    ):
        inc("requests_total")
        return svc.get_note(store, ctx, project_id, note_id)

    @app.delete("/v1beta1/projects/{project_id}/notes/{note_id}")
    @ops_log.ops_event("delete_note")
    def delete_note(
        project_id: str,
        note_id: str,
        ctx: Context = Depends(request_ctx),
        store: BaseStore = Depends(current_store),
    ):
        inc("requests_total")
        return svc.delete_note(store, ctx, project_id, note_id)

    return app

def main_srv():
    """
    Server entrypoint. Bind and flags come from CFG (env overrides file).
    """
    uvicorn.run("gres.main:app",
                host=str(CFG.get("server.host", "127.0.0.1")),
                port=int(CFG.get("server.port", 8080)),
                workers=int(CFG.get("server.workers", 1)),
                log_level=str(CFG.get("server.log_level", "info")))

# Default app instance for `uvicorn gres.main:app`
app = build_app()

if __name__ == "__main__":
    main_srv()
