# tests/conftest.py

from __future__ import annotations

from pathlib import Path

import pytest
from flask import Flask
from flask.testing import FlaskClient

from app import create_app
from storage import DatabaseStorage, MemStorage, TaskStorage

from .helpers import make_config


@pytest.fixture()
def app(tmp_path: Path) -> Flask:
    """App on a throwaway SQLite file, one per test."""
    return create_app(make_config(tmp_path))


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    return app.test_client()


@pytest.fixture(params=["database", "memory"])
def storage(request: pytest.FixtureRequest, app: Flask):
    """
    Every storage test runs against both backends.

    DatabaseStorage needs an app context for the session, so we hold one open
    for the whole test.
    """
    if request.param == "memory":
        yield MemStorage()
        return
    with app.app_context():
        store: TaskStorage = DatabaseStorage()
        yield store
