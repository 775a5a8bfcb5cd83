"""
Pytest fixtures and configuration for tokenkeep tests
"""
import copy

import pytest
from sqlalchemy import event

from tokenkeep.app import create_app
from tokenkeep.constants import DEFAULT_SETTINGS
from tokenkeep.db import db


@pytest.fixture
def app_config():
    """App configuration for tests: in-memory database, default token settings"""
    settings = copy.deepcopy(DEFAULT_SETTINGS)
    settings['database']['uri'] = 'sqlite://'
    return {
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite://',
        'TOKENKEEP': settings,
    }


@pytest.fixture
def app(app_config):
    """Application with a fresh schema, inside an app context"""
    _app = create_app(app_config)
    with _app.app_context():
        yield _app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def query_counter(app):
    """Count SQL statements executed while the fixture is active"""
    statements = []

    def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement)

    event.listen(db.engine, "before_cursor_execute", _before_cursor_execute)
    yield statements
    event.remove(db.engine, "before_cursor_execute", _before_cursor_execute)


@pytest.fixture
def make_token(app):
    """Factory issuing tokens through the lifecycle manager"""
    from tokenkeep.services import TokenLifecycle

    def _make_token(app_name, display_name=None, enabled=True, actor="admin"):
        return TokenLifecycle.create_token(app_name, display_name or app_name.title(), enabled=enabled, actor=actor)

    return _make_token
