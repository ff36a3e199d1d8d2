"""
Pytest configuration and shared fixtures.

Provides a test application, database session, test client, user
factories, and a helper for signing a user in.  Uses the ``testing``
configuration, which points at an in-memory SQLite database that is
created fresh for every test function.
"""

import itertools

import pytest
from flask import g

from orgboard import create_app
from orgboard.extensions import db as _db
from orgboard.models.user import User
from orgboard.services import organization_service

TEST_PASSWORD = "correct-horse-battery"


@pytest.fixture(scope="function")
def app():
    """
    Create a Flask application configured for testing.

    An application context stays pushed for the whole test so that
    test code and the requests it makes share one database session.
    """
    app = create_app("testing")

    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="function")
def db_session(app):  # pylint: disable=redefined-outer-name,unused-argument
    """Provide the SQLAlchemy session bound to the test database."""
    yield _db.session


@pytest.fixture(scope="function")
def client(app):  # pylint: disable=redefined-outer-name
    """
    Provide a Flask test client for making HTTP requests.

    Usage in tests::

        def test_dashboard(client):
            response = client.get("/")
            assert response.status_code == 302
    """
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture(scope="function")
def make_user(db_session):  # pylint: disable=redefined-outer-name
    """
    Factory fixture that creates and commits users with unique emails.

    Usage::

        def test_something(make_user):
            alice = make_user(name="Alice")
    """
    sequence = itertools.count(1)

    def _make_user(name=None, email=None, password=TEST_PASSWORD, is_active=True):
        n = next(sequence)
        user = User(
            name=name or f"Person {n}",
            email=email or f"person{n}@example.com",
            is_active=is_active,
        )
        user.set_password(password)
        db_session.add(user)
        db_session.commit()
        return user

    return _make_user


@pytest.fixture(scope="function")
def user(make_user):  # pylint: disable=redefined-outer-name
    """A regular user; most tests make this user an organization admin."""
    return make_user(name="Org Admin")


@pytest.fixture(scope="function")
def other_user(make_user):  # pylint: disable=redefined-outer-name
    """A second user who is not the admin of anything."""
    return make_user(name="Someone Else")


@pytest.fixture(scope="function")
def make_organization(db_session):  # pylint: disable=redefined-outer-name,unused-argument
    """Factory fixture that creates an organization through the service."""

    def _make_organization(admin, name="corpo", homesite_url=None):
        return organization_service.create_organization(
            admin, name=name, homesite_url=homesite_url
        )

    return _make_organization


@pytest.fixture(scope="function")
def login(client):  # pylint: disable=redefined-outer-name
    """
    Sign a user in by writing Flask-Login's session keys directly.

    The cached ``g._login_user`` is dropped so that switching users
    inside one test takes effect on the next request.
    """

    def _login(user_to_login):
        with client.session_transaction() as sess:
            sess["_user_id"] = str(user_to_login.id)
            sess["_fresh"] = True
        g.pop("_login_user", None)

    return _login


@pytest.fixture(scope="function")
def password():
    """The password every ``make_user`` user is created with."""
    return TEST_PASSWORD
