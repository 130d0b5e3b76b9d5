"""
Shared fixtures: a fresh in-memory database per test, a test client, and
small factories for users, campgrounds and payment methods.
"""

from datetime import datetime, timedelta

import pytest

from app import create_app
from config import TestConfig
from models import db
from models.campground import Campground
from models.user import User
from security.password import hash_password
from security.principal import Principal
from services.payment_methods import add_payment_method


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    counter = {"n": 0}

    def _make(role="user", password="secret123", email=None):
        counter["n"] += 1
        n = counter["n"]
        user = User(
            name=f"User {n}",
            email=email or f"user{n}@example.com",
            tel=f"08{n:08d}",
            password_hash=hash_password(password),
            role=role,
        )
        db.session.add(user)
        db.session.commit()
        return user

    return _make


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def admin(make_user):
    return make_user(role="admin")


@pytest.fixture
def make_campground(app):
    counter = {"n": 0}

    def _make(price=1500.0, **overrides):
        counter["n"] += 1
        n = counter["n"]
        fields = {
            "name": f"Camp {n}",
            "address": f"{n} Forest Road",
            "district": "Mae Rim",
            "province": "Chiang Mai",
            "postalcode": "50180",
            "tel": f"05-{n:07d}",
            "region": "North",
            "price": price,
        }
        fields.update(overrides)
        campground = Campground(**fields)
        db.session.add(campground)
        db.session.commit()
        return campground

    return _make


@pytest.fixture
def campground(make_campground):
    return make_campground()


@pytest.fixture
def make_card(app):
    counter = {"n": 0}

    def _make(owner, card_number=None):
        counter["n"] += 1
        number = card_number or f"4000{counter['n']:012d}"
        return add_payment_method(Principal.from_user(owner), "credit_card", card_number=number)

    return _make


@pytest.fixture
def tomorrow():
    return datetime.utcnow() + timedelta(days=1)


@pytest.fixture
def login(client):
    def _login(user, password="secret123"):
        resp = client.post("/auth/login", json={"email": user.email, "password": password})
        assert resp.status_code == 200, resp.get_json()
        return {"Authorization": f"Bearer {resp.get_json()['token']}"}

    return _login
