# tests/conftest.py

import pytest

from gymxp import create_app, db


@pytest.fixture
def app():
    app = create_app({
        "SECRET_KEY": "x" * 40,
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "SESSION_COOKIE_SECURE": False,
        "REVERSE_GEOCODE": False,
        "FIXED_TODAY": "2026-10-18",
    })
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()

