# (C) 2025 Rodrigo Rodrigues da Silva <rodrigopitanga@posteo.net>
# SPDX-License-Identifier: GPL-3.0-or-later

import pytest
from fastapi.testclient import TestClient
from gres.config import get_cfg, reload_cfg
from gres.main import build_app
from gres.stores.elasticsearch_store import ElasticsearchStore
from utils import MockEsTransport, letters

@pytest.fixture(autouse=True)
def _reset_cfg_between_tests(monkeypatch):
    for k in ("GRES_STORAGE__TYPE", "GRES_ELASTICSEARCH__INDEX_PREFIX",
              "GRES_ELASTICSEARCH__REFRESH", "GRES_LOG__OPS"):
        monkeypatch.delenv(k, raising=False)
    reload_cfg()
    cfg = get_cfg()
    cfg.set("storage.type", "elasticsearch")
    cfg.set("elasticsearch.index_prefix", "grafeas")
    cfg.set("elasticsearch.refresh", "true")
    cfg.set("log.ops", None)
    yield

@pytest.fixture()
def es():
    return MockEsTransport()

@pytest.fixture()
def store(es):
    return ElasticsearchStore(es.client(), index_prefix="grafeas")

@pytest.fixture()
def project_id():
    return letters(10)

@pytest.fixture()
def app(store):
    return build_app(get_cfg(), store=store)

@pytest.fixture()
def client(app):
    # no context manager: lifespan (projects index check) is not run
    return TestClient(app)

@pytest.fixture()
def cfg():
    return get_cfg()
