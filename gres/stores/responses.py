# (C) 2025 Rodrigo Rodrigues da Silva <rodrigopitanga@posteo.net>
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Single choke point between the stores and the backend client.

`perform` sends one request (honoring the caller's Context) and turns
transport failures into InternalError; the `expect_*`/`decode_*` helpers
classify what came back. Each response is classified here exactly once.
"""

from __future__ import annotations
from typing import Any, Dict, TypeVar
import httpx
from pydantic import BaseModel, ValidationError
from gres.context import Context
from gres.errors import InternalError
from gres.log import get_logger
from gres.schemas import Entity, decode

log = get_logger("stores")

M = TypeVar("M", bound=BaseModel)
E = TypeVar("E", bound=Entity)


def perform(client: httpx.Client, ctx: Context, method: str, path: str, *,
            json: Any = None, content: bytes | None = None,
            headers: Dict[str, str] | None = None,
            params: Dict[str, str] | None = None) -> httpx.Response:
    ctx.check()
    remaining = ctx.remaining()
    timeout = httpx.USE_CLIENT_DEFAULT if remaining is None else remaining
    try:
        resp = client.request(method, path, json=json, content=content,
                              headers=headers, params=params, timeout=timeout)
    except httpx.TimeoutException as e:
        log.warning(f"{method} {path} timed out: {e}")
        raise InternalError(f"{method} {path}: timed out", method=method, path=path) from e
    except httpx.HTTPError as e:
        log.warning(f"{method} {path} failed: {e}")
        raise InternalError(f"{method} {path}: {e}", method=method, path=path) from e
    log.debug(f"{method} {path} -> {resp.status_code}")
    return resp


def is_success(resp: httpx.Response) -> bool:
    return 200 <= resp.status_code < 300


def _reason(resp: httpx.Response) -> str | None:
    try:
        body = resp.json()
    except ValueError:
        return None
    err = body.get("error") if isinstance(body, dict) else None
    if isinstance(err, dict):
        return err.get("reason") or err.get("type")
    return err if isinstance(err, str) else None


def expect_success(resp: httpx.Response, action: str) -> httpx.Response:
    if not is_success(resp):
        reason = _reason(resp)
        log.warning(f"{action}: backend returned {resp.status_code} ({reason})")
        raise InternalError(f"{action}: unexpected status {resp.status_code}",
                            status=resp.status_code, reason=reason)
    return resp


def decode_envelope(resp: httpx.Response, model: type[M], action: str) -> M:
    try:
        return model.model_validate_json(resp.content)
    except ValidationError as e:
        log.warning(f"{action}: malformed backend response: {e.error_count()} error(s)")
        raise InternalError(f"{action}: malformed backend response") from e


def decode_source(model: type[E], source: Dict[str, Any], action: str) -> E:
    try:
        return decode(model, source)
    except ValidationError as e:
        log.warning(f"{action}: stored document does not decode as {model.__name__}")
        raise InternalError(f"{action}: malformed {model.__name__} document") from e
