"""
Fixtures for API tests: a Flask app wired to the in-memory stores.

The app is built once per session because the API blueprint is registered
on it; each test swaps in a fresh container.
"""

import pytest

from dropvault.app_factory import create_app
from dropvault.application.dependency_container import DependencyContainer
from dropvault.application.file_share_service import FileShareService
from dropvault.domain.file_lifecycle.value_objects import PolicyTable
from tests.fixtures.domain_fixtures import create_policy_table


def _container(engine, policy_table) -> DependencyContainer:
    container = DependencyContainer()
    container.register_singleton(PolicyTable, policy_table)
    if engine is not None:
        container.register_singleton(FileShareService, FileShareService(engine))
    return container


@pytest.fixture(scope="session")
def flask_app():
    app = create_app(container=_container(None, create_policy_table()))
    app.config["TESTING"] = True
    return app


@pytest.fixture
def app(flask_app, engine, policy_table, monkeypatch):
    monkeypatch.setattr(flask_app, "container", _container(engine, policy_table))
    monkeypatch.setitem(
        flask_app.config, "MAX_CONTENT_LENGTH", flask_app.config["MAX_CONTENT_LENGTH"]
    )
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def alice_headers():
    return {"X-User-Id": "user-1", "X-User-Name": "alice"}


@pytest.fixture
def bob_headers():
    return {"X-User-Id": "user-2", "X-User-Name": "bob"}
