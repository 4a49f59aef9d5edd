import os

# must be set before anything from storefront is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["CLIENT_URL"] = "http://localhost:5173"

from contextlib import contextmanager
from decimal import Decimal

import pytest
import requests
from fastapi.testclient import TestClient

import storefront.data.models  # noqa: F401
from storefront.api.deps import get_lock_service, get_media_client, get_notifier
from storefront.data.database import Base, SessionLocal, engine
from storefront.data.models.product import ProductModel
from storefront.data.models.user import UserModel
from storefront.main import app
from storefront.utils.security import hash_password

PASSWORD = "secret123"


class FakeLockService:
    def __init__(self):
        self.acquired = []

    @contextmanager
    def cart_lock(self, user_id, ttl=None, wait=None):
        self.acquired.append(user_id)
        yield


class FakeNotifier:
    def __init__(self):
        self.verification = []
        self.otps = []

    def send_verification_email(self, email, token):
        self.verification.append((email, token))
        return True

    def send_otp_email(self, email, otp):
        self.otps.append((email, otp))
        return True


class FakeMedia:
    def __init__(self):
        self.uploaded = []
        self.destroyed = []
        self.fail_upload = False
        self.fail_destroy = False

    def upload(self, content, filename, content_type, folder):
        if self.fail_upload:
            raise requests.ConnectionError("image host down")
        public_id = f"{folder}/img{len(self.uploaded) + 1}"
        self.uploaded.append(public_id)
        return {"url": f"https://cdn.example.com/{public_id}.png", "public_id": public_id}

    def destroy(self, public_id):
        if self.fail_destroy:
            raise requests.ConnectionError("image host down")
        self.destroyed.append(public_id)
        return True


@pytest.fixture(autouse=True)
def tables():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def lock():
    return FakeLockService()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def media():
    return FakeMedia()


@pytest.fixture
def client(lock, notifier, media):
    app.dependency_overrides[get_lock_service] = lambda: lock
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_media_client] = lambda: media
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_user():
    def _make(email="jane@example.com", password=PASSWORD, role="user", verified=True, **fields):
        with SessionLocal() as s:
            user = UserModel(
                first_name=fields.pop("first_name", "Jane"),
                last_name=fields.pop("last_name", "Doe"),
                email=email,
                password=hash_password(password),
                is_verified=verified,
                role=role,
                **fields,
            )
            s.add(user)
            s.commit()
            return user.id

    return _make


@pytest.fixture
def login(client):
    def _login(email, password=PASSWORD):
        resp = client.post("/api/v1/user/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        return {"Authorization": f"Bearer {resp.json()['accessToken']}"}

    return _login


@pytest.fixture
def user_auth(make_user, login):
    user_id = make_user("jane@example.com")
    return user_id, login("jane@example.com")


@pytest.fixture
def admin_auth(make_user, login):
    admin_id = make_user("admin@example.com", role="admin", first_name="Ada")
    return admin_id, login("admin@example.com")


@pytest.fixture
def make_product():
    def _make(name="Phone", price="100.00", category="Mobile", brand="Acme", images=None):
        with SessionLocal() as s:
            product = ProductModel(
                product_name=name,
                product_desc=f"{name} description",
                product_price=Decimal(price),
                category=category,
                brand=brand,
                product_img=images or [],
            )
            s.add(product)
            s.commit()
            return product.id

    return _make
