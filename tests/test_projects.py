# (C) 2025 Rodrigo Rodrigues da Silva <rodrigopitanga@posteo.net>
# SPDX-License-Identifier: GPL-3.0-or-later

import pytest
from gres.context import Context
from gres.errors import (AlreadyExistsError, CompanionIndexError, InternalError,
                         NotFoundError, StoreError)
from gres.schemas import Project, decode
from utils import (search_response, project_source, delete_response,
                   assert_index_mapping, letters)

ctx = Context.background()

# --- create ---

def test_create_project_checks_for_existing_document(es, store, project_id):
    es.prepare((200, search_response()), (201, None), (200, None), (200, None))
    store.create_project(ctx, project_id, Project())
    assert es.call(0) == ("GET", "/grafeas-projects/_search")
    assert es.json_body(0)["query"]["term"]["name"] == f"projects/{project_id}"

def test_create_project_writes_document_and_tenant_indices(es, store, project_id):
    es.prepare((200, search_response()), (201, None), (200, None), (200, None))
    project = store.create_project(ctx, project_id, Project())

    assert project.name == f"projects/{project_id}"
    assert es.call(1) == ("POST", "/grafeas-projects/_doc")
    assert decode(Project, es.received[1].content).name == f"projects/{project_id}"

    assert es.call(2) == ("PUT", f"/grafeas-{project_id}-occurrences")
    assert_index_mapping(es.json_body(2))
    assert es.call(3) == ("PUT", f"/grafeas-{project_id}-notes")
    assert_index_mapping(es.json_body(3))

def test_create_project_forces_canonical_name_over_seed(es, store, project_id):
    es.prepare((200, search_response()), (201, None), (200, None), (200, None))
    project = store.create_project(ctx, project_id, Project(name="projects/somethingelse"))
    assert project.name == f"projects/{project_id}"
    assert es.json_body(1)["name"] == f"projects/{project_id}"

def test_create_project_twice_is_already_exists_without_writes(es, store, project_id):
    es.prepare((200, search_response(project_source(project_id))))
    with pytest.raises(AlreadyExistsError) as ei:
        store.create_project(ctx, project_id, Project())
    assert ei.value.status_code == 409
    assert len(es.received) == 1

def test_create_project_search_failure_is_internal(es, store, project_id):
    es.prepare((400, None))
    with pytest.raises(InternalError):
        store.create_project(ctx, project_id, Project())
    assert len(es.received) == 1

def test_create_project_document_failure_skips_indices(es, store, project_id):
    es.prepare((200, search_response()), (400, None))
    with pytest.raises(InternalError) as ei:
        store.create_project(ctx, project_id, Project())
    assert not isinstance(ei.value, CompanionIndexError)
    assert len(es.received) == 2

def test_create_project_index_failure_leaves_document_behind(es, store, project_id):
    es.prepare((200, search_response()), (201, None), (400, None))
    with pytest.raises(CompanionIndexError) as ei:
        store.create_project(ctx, project_id, Project())
    err = ei.value
    assert isinstance(err, InternalError)
    assert err.project == f"projects/{project_id}"
    assert err.index == f"grafeas-{project_id}-occurrences"
    assert err.compensated is False
    # no compensating delete was attempted
    assert [r.method for r in es.received] == ["GET", "POST", "PUT"]

def test_create_then_get_returns_canonical_name(es, store, project_id):
    es.prepare((200, search_response()), (201, None), (200, None), (200, None),
               (200, search_response(project_source(project_id))))
    store.create_project(ctx, project_id)
    assert store.get_project(ctx, project_id).name == f"projects/{project_id}"

# --- get ---

def test_get_project_queries_by_name(es, store, project_id):
    es.prepare((200, search_response(project_source(project_id))))
    project = store.get_project(ctx, project_id)
    assert project.name == f"projects/{project_id}"
    assert es.call(0) == ("GET", "/grafeas-projects/_search")
    assert es.json_body(0)["query"]["term"]["name"] == f"projects/{project_id}"

def test_get_project_not_found(es, store, project_id):
    es.prepare((200, search_response()))
    with pytest.raises(NotFoundError):
        store.get_project(ctx, project_id)

@pytest.mark.parametrize("response", [(200, "bad object"), (400, None), (200, {"hits": "nope"})])
def test_get_project_bad_responses_are_internal(es, store, project_id, response):
    es.prepare(response)
    with pytest.raises(InternalError):
        store.get_project(ctx, project_id)

def test_get_project_undecodable_document_is_internal(es, store, project_id):
    es.prepare((200, search_response({"name": 42})))
    with pytest.raises(InternalError):
        store.get_project(ctx, project_id)

# --- list ---

def test_list_projects(es, store):
    ids = [letters(6) for _ in range(3)]
    es.prepare((200, search_response(*[project_source(i) for i in ids])))
    projects = store.list_projects(ctx)
    assert [p.name for p in projects] == [f"projects/{i}" for i in ids]
    body = es.json_body(0)
    assert body["query"] == {"match_all": {}}
    assert body["size"] == 1000

# --- delete ---

def test_delete_project_removes_document_then_indices(es, store, project_id):
    es.prepare((200, delete_response(1)), (200, {"acknowledged": True}))
    store.delete_project(ctx, project_id)
    assert es.call(0) == ("POST", "/grafeas-projects/_delete_by_query")
    assert es.json_body(0)["query"]["term"]["name"] == f"projects/{project_id}"
    assert es.call(1) == ("DELETE", f"/grafeas-{project_id}-occurrences,grafeas-{project_id}-notes")

def test_delete_project_index_failure_is_internal(es, store, project_id):
    es.prepare((200, delete_response(1)), (500, None))
    with pytest.raises(InternalError):
        store.delete_project(ctx, project_id)

def test_delete_missing_project_skips_index_delete(es, store, project_id):
    es.prepare((200, delete_response(0)))
    with pytest.raises(NotFoundError):
        store.delete_project(ctx, project_id)
    assert len(es.received) == 1

def test_delete_project_query_failure(es, store, project_id):
    es.prepare((500, None))
    with pytest.raises(StoreError):
        store.delete_project(ctx, project_id)
    assert len(es.received) == 1

def test_writes_carry_refresh_policy(es, store, project_id):
    es.prepare((200, search_response()), (201, None), (200, None), (200, None))
    store.create_project(ctx, project_id)
    assert es.received[1].url.params.get("refresh") == "true"
    assert "refresh" not in es.received[0].url.params

def test_list_then_delete_in_separate_exchanges(es, store):
    es.prepare((200, search_response(project_source("a"))))
    assert [p.name for p in store.list_projects(ctx)] == ["projects/a"]

    es.prepare((200, delete_response(1)), (200, {"acknowledged": True}))
    store.delete_project(ctx, "a")
    assert es.call(0) == ("POST", "/grafeas-projects/_delete_by_query")
    assert es.call(1) == ("DELETE", "/grafeas-a-occurrences,grafeas-a-notes")
