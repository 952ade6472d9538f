# (C) 2025 Rodrigo Rodrigues da Silva <rodrigopitanga@posteo.net>
# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations
import argparse, json, pathlib, sys
from pydantic import ValidationError
from gres.config import get_cfg
from gres.context import Context
from gres.errors import StoreError
from gres.schemas import Occurrence, Note, decode
from gres.stores.factory import get_store
from gres import service as svc

store = get_store(get_cfg())

def _ctx(args) -> Context:
    return args.ctx

def _read_json(path: str):
    raw = sys.stdin.read() if path == "-" else pathlib.Path(path).read_text(encoding="utf-8")
    return json.loads(raw)

def _print(out) -> None:
    print(json.dumps(out, ensure_ascii=False))

def cmd_create_project(args):
    _print(svc.create_project(store, _ctx(args), args.project))

def cmd_get_project(args):
    _print(svc.get_project(store, _ctx(args), args.project))

def cmd_list_projects(args):
    _print(svc.list_projects(store, _ctx(args)))

def cmd_delete_project(args):
    _print(svc.delete_project(store, _ctx(args), args.project))

def cmd_create_occurrence(args):
    occurrence = decode(Occurrence, _read_json(args.file))
    _print(svc.create_occurrence(store, _ctx(args), args.project, occurrence))

def cmd_batch_create_occurrences(args):
    payload = _read_json(args.file)
    items = payload.get("occurrences", []) if isinstance(payload, dict) else payload
    occurrences = [decode(Occurrence, o) for o in items]
    out = svc.batch_create_occurrences(store, _ctx(args), args.project, occurrences)
    _print(out)
    return 1 if out["errors"] else 0

def cmd_get_occurrence(args):
    _print(svc.get_occurrence(store, _ctx(args), args.project, args.occurrence))

def cmd_list_occurrences(args):
    _print(svc.list_occurrences(store, _ctx(args), args.project))

def cmd_delete_occurrence(args):
    _print(svc.delete_occurrence(store, _ctx(args), args.project, args.occurrence))

def cmd_create_note(args):
    note = decode(Note, _read_json(args.file))
    _print(svc.create_note(store, _ctx(args), args.project, note))

def cmd_get_note(args):
    _print(svc.get_note(store, _ctx(args), args.project, args.note))

def cmd_list_notes(args):
    _print(svc.list_notes(store, _ctx(args), args.project))

def cmd_delete_note(args):
    _print(svc.delete_note(store, _ctx(args), args.project, args.note))

def main_cli(argv=None):
    p = argparse.ArgumentParser(prog="gresctl")
    p.add_argument("--timeout", type=float, default=30.0,
                   help="Deadline in seconds for the whole command")
    sub = p.add_subparsers(dest="cmd", required=True)

    def add(name, func, *positionals, file=False):
        sp = sub.add_parser(name)
        for pos in positionals:
            sp.add_argument(pos)
        if file:
            sp.add_argument("file", help="JSON file, or - for stdin")
        sp.set_defaults(func=func)
        return sp

    add("create-project", cmd_create_project, "project")
    add("get-project", cmd_get_project, "project")
    add("list-projects", cmd_list_projects)
    add("delete-project", cmd_delete_project, "project")

    add("create-occurrence", cmd_create_occurrence, "project", file=True)
    add("batch-create-occurrences", cmd_batch_create_occurrences, "project", file=True)
    add("get-occurrence", cmd_get_occurrence, "project", "occurrence")
    add("list-occurrences", cmd_list_occurrences, "project")
    add("delete-occurrence", cmd_delete_occurrence, "project", "occurrence")

    add("create-note", cmd_create_note, "project", file=True)
    add("get-note", cmd_get_note, "project", "note")
    add("list-notes", cmd_list_notes, "project")
    add("delete-note", cmd_delete_note, "project", "note")

    args = p.parse_args(argv)
    # one deadline for startup and the command
    args.ctx = Context.with_timeout(args.timeout)
    try:
        store.initialize(args.ctx)
        return args.func(args) or 0
    except StoreError as e:
        _print(e.to_dict())
        return 1
    except ValidationError as e:
        _print({"ok": False, "code": "invalid_argument", "error": str(e)})
        return 2

if __name__ == "__main__":
    raise SystemExit(main_cli())
