import os
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault("SECRET_KEY", "test")
os.environ.setdefault("PEPPER", "test-pepper")

from app import create_app
from dao import ShowDao, TicketDao, UserDao
from entities import Role, User
from models import db


@pytest.fixture()
def app(tmp_path):
    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'unit.db'}",
            "HALL_ROWS": 2,
            "HALL_SEATS": 3,
            "TICKET_PRICE": 10,
        }
    )
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def services(app):
    return app.extensions["services"]


@pytest.fixture()
def engine(app):
    with app.app_context():
        return db.engine


@pytest.fixture()
def show_dao(engine):
    return ShowDao(engine)


@pytest.fixture()
def ticket_dao(engine):
    return TicketDao(engine)


@pytest.fixture()
def user_dao(engine):
    return UserDao(engine)


@pytest.fixture()
def make_user(services):
    def _make_user(email="user@example.com", password="Valid123!", roles=(Role.USER,)):
        user = User(firstname="Test", lastname="User", email=email, roles=set(roles))
        return services.users.register(user, password)

    return _make_user


@pytest.fixture()
def login_as(client):
    def _login_as(user):
        with client.session_transaction() as sess:
            sess["loggedUser"] = user.to_session()

    return _login_as
