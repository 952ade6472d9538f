# (C) 2025 Rodrigo Rodrigues da Silva <rodrigopitanga@posteo.net>
# SPDX-License-Identifier: GPL-3.0-or-later

import json
import pytest
from gres import cli as grescli
from gres.schemas import encode
from utils import search_response, project_source, bulk_response, make_occurrence

@pytest.fixture
def cli_env(monkeypatch, store, es, tmp_path):
    monkeypatch.setattr(grescli, "store", store)
    return grescli, es, tmp_path

def _out(capsys):
    return json.loads(capsys.readouterr().out.strip().splitlines()[-1])

def test_cli_create_project_ensures_projects_index_first(cli_env, capsys):
    grescli, es, _ = cli_env
    es.prepare((200, None), (200, search_response()), (201, None), (200, None), (200, None))

    assert grescli.main_cli(["create-project", "acme"]) == 0

    assert es.call(0) == ("HEAD", "/grafeas-projects")
    assert es.call(3) == ("PUT", "/grafeas-acme-occurrences")
    assert _out(capsys) == {"name": "projects/acme"}

def test_cli_get_missing_project_exits_1(cli_env, capsys):
    grescli, es, _ = cli_env
    es.prepare((200, None), (200, search_response()))
    assert grescli.main_cli(["get-project", "ghost"]) == 1
    j = _out(capsys)
    assert j["ok"] is False and j["code"] == "not_found"

def test_cli_list_projects(cli_env, capsys):
    grescli, es, _ = cli_env
    es.prepare((200, None), (200, search_response(project_source("a"))))
    assert grescli.main_cli(["list-projects"]) == 0
    assert _out(capsys) == {"projects": [{"name": "projects/a"}]}

def test_cli_batch_create_from_file(cli_env, capsys):
    grescli, es, tmp_path = cli_env
    payload = tmp_path / "occ.json"
    payload.write_text(json.dumps({"occurrences": [encode(make_occurrence()) for _ in range(3)]}),
                       encoding="utf-8")
    es.prepare((200, None), (200, bulk_response(3, failed=[2])))

    assert grescli.main_cli(["batch-create-occurrences", "acme", str(payload)]) == 1

    j = _out(capsys)
    assert len(j["occurrences"]) == 2
    assert j["errors"][0]["code"] == "partial_batch_failure"

def test_cli_invalid_occurrence_file_exits_2(cli_env, capsys):
    grescli, es, tmp_path = cli_env
    payload = tmp_path / "bad.json"
    payload.write_text(json.dumps({"kind": "NOT_A_KIND"}), encoding="utf-8")
    es.prepare((200, None))
    assert grescli.main_cli(["create-occurrence", "acme", str(payload)]) == 2
    assert len(es.received) == 1

def test_cli_backend_down_at_startup(cli_env, capsys):
    grescli, es, _ = cli_env
    es.prepare((500, None))
    assert grescli.main_cli(["list-projects"]) == 1
    assert _out(capsys)["code"] == "internal"

def test_cli_uses_one_deadline_for_startup_and_command(cli_env, monkeypatch, capsys):
    grescli, es, _ = cli_env
    seen = []
    initialize = grescli.store.initialize
    list_projects = grescli.svc.list_projects

    def spy_initialize(ctx):
        seen.append(ctx)
        return initialize(ctx)

    def spy_list_projects(store, ctx):
        seen.append(ctx)
        return list_projects(store, ctx)

    monkeypatch.setattr(grescli.store, "initialize", spy_initialize)
    monkeypatch.setattr(grescli.svc, "list_projects", spy_list_projects)
    es.prepare((200, None), (200, search_response()))

    assert grescli.main_cli(["--timeout", "7", "list-projects"]) == 0
    assert len(seen) == 2 and seen[0] is seen[1]
    assert seen[0].remaining() <= 7
