"""Shared fixtures: isolated app per test backed by a temp SQLite file."""

import pytest
from fastapi.testclient import TestClient

from household_finance.core.config import Settings
from household_finance.main import create_app

from helpers import register


@pytest.fixture
def settings(tmp_path):
    s = Settings(data_dir=tmp_path, db_filename="test.sqlite3")
    s.init_post_load()
    return s


@pytest.fixture
def app(settings):
    return create_app(settings_override=settings)


@pytest.fixture
def db(app):
    return app.state.db


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def owner_headers(client):
    return register(client, "owner@example.com")


@pytest.fixture
def household_id(client, owner_headers):
    resp = client.post("/households/", json={"name": "Casa"}, headers=owner_headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["id"]
