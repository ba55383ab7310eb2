import os

# Must be set before the app imports its config
os.environ.setdefault("TOURPORTAL_BCRYPT_ROUNDS", "4")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tourportal.auth.security import create_token, hash_password
from tourportal.core.db import Base, get_db
from tourportal.main import app
from tourportal.models import Destination, Order, Review, Ticket, Tour, User

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)

PASSWORD = "secret123"


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def users(db):
    """One account per role plus a second plain user; returns ids by key."""
    accounts = {
        "admin": ("Admin", "admin@example.com", "ADMIN"),
        "manager": ("Manager", "manager@example.com", "MANAGER"),
        "user": ("User", "user@example.com", "USER"),
        "other": ("Other", "other@example.com", "USER"),
    }
    hashed = hash_password(PASSWORD)
    ids = {}
    for key, (name, email, role) in accounts.items():
        u = User(name=name, email=email, hashed_password=hashed, role=role)
        db.add(u)
        db.flush()
        ids[key] = u.id
    db.commit()
    return ids


@pytest.fixture
def auth(users):
    """auth("admin") -> Authorization header for that seeded account."""
    def _headers(key):
        return {"Authorization": f"Bearer {create_token({'sub': users[key]})}"}
    return _headers


def make_destination(db, slug="altai", name=None):
    d = Destination(
        slug=slug,
        name=name or slug.title(),
        description="A destination worth visiting.",
        image_url="https://example.com/d.jpg",
    )
    db.add(d)
    db.commit()
    db.refresh(d)
    return d


def make_tour(db, destination, slug="altai-trip", seats=10, price="1000.00"):
    t = Tour(
        slug=slug,
        title=slug.replace("-", " ").title(),
        destination_id=destination.id,
        price=Decimal(price),
        currency="RUB",
        image_url="https://example.com/t.jpg",
        short_description="Short description",
        full_description="Full description " * 4,
        available_seats=seats,
    )
    db.add(t)
    db.commit()
    db.refresh(t)
    return t


def make_order(db, user_id, tour, status="PENDING", quantity=1):
    o = Order(
        user_id=user_id,
        tour_id=tour.id,
        quantity=quantity,
        total_price=tour.price * quantity,
        status=status,
        contact_email="buyer@example.com",
    )
    db.add(o)
    db.commit()
    db.refresh(o)
    return o


def make_review(db, user_id, tour, approved=False, rating=5):
    r = Review(
        user_id=user_id,
        tour_id=tour.id,
        rating=rating,
        comment="Wonderful trip, would go again.",
        is_approved=approved,
    )
    db.add(r)
    db.commit()
    db.refresh(r)
    return r


def make_ticket(db, user_id, status="OPEN"):
    t = Ticket(user_id=user_id, subject="Question", message="When does it start?", status=status)
    db.add(t)
    db.commit()
    db.refresh(t)
    return t
