# (C) 2025 Rodrigo Rodrigues da Silva <rodrigopitanga@posteo.net>
# SPDX-License-Identifier: GPL-3.0-or-later

import time
import httpx
import pytest
from gres.context import Context
from gres.errors import InternalError, NotFoundError, OperationCancelled
from gres.schemas import Project
from gres.stores.elasticsearch_store import ElasticsearchStore
from utils import search_response

def test_background_has_no_deadline():
    ctx = Context.background()
    assert ctx.remaining() is None
    ctx.check()

def test_expired_deadline():
    ctx = Context(deadline=time.monotonic() - 1)
    assert ctx.remaining() == 0.0
    with pytest.raises(OperationCancelled):
        ctx.check()

def test_child_shares_cancellation_and_tightens_deadline():
    parent = Context.with_timeout(60)
    child = parent.child(1)
    assert child.deadline <= parent.deadline
    parent.cancel()
    assert child.cancelled
    with pytest.raises(OperationCancelled):
        child.check()

def test_cancelled_context_sends_nothing(es, store):
    ctx = Context.background()
    ctx.cancel()
    with pytest.raises(InternalError):
        store.get_project(ctx, "abc")
    assert es.received == []

def _store_with(handler) -> ElasticsearchStore:
    client = httpx.Client(transport=httpx.MockTransport(handler),
                          base_url="http://elasticsearch.test")
    return ElasticsearchStore(client)

def test_cancel_between_calls_stops_the_operation():
    ctx = Context.background()
    calls = []

    def cancel_after_search(request):
        calls.append(request.method)
        ctx.cancel()
        return httpx.Response(200, json=search_response())

    with pytest.raises(OperationCancelled):
        _store_with(cancel_after_search).create_project(ctx, "abc", Project())
    assert calls == ["GET"]

def test_deadline_becomes_request_timeout():
    seen = {}

    def record(request):
        seen["timeout"] = request.extensions.get("timeout")
        return httpx.Response(200, json=search_response())

    with pytest.raises(NotFoundError):
        _store_with(record).get_project(Context.with_timeout(5), "abc")
    assert 0 < seen["timeout"]["read"] <= 5

def test_backend_timeout_is_internal(es, store):
    es.prepare(httpx.ReadTimeout("slow"))
    with pytest.raises(InternalError):
        store.get_project(Context.with_timeout(5), "abc")
