"""
Shared fixtures for the user service tests.

Every test gets its own in-memory SQLite database. The RSA key pair is
generated once per session and written to a temporary directory.
"""
import os
import tempfile

# Keep the application's own engine and log files out of the working tree
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="user_service_logs_"))

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from user_platform.user_platform.user_service.auth import PasswordHasher, TokenService
from user_platform.user_platform.user_service.db import Base, get_db
from user_platform.user_platform.user_service.main import app
from user_platform.user_platform.user_service.repository import AccountStore
from user_platform.user_platform.user_service.routes.users import get_token_service
from user_platform.user_platform.user_service.validator import Validator
from user_platform.user_platform.user_service import models  # noqa: F401


@pytest.fixture
def engine():
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def store(db_session):
    return AccountStore(db_session)


@pytest.fixture
def validator(store):
    return Validator(store)


@pytest.fixture
def hasher():
    return PasswordHasher()


def write_key_pair(directory, key_size=2048):
    key = rsa.generate_private_key(public_exponent=65537, key_size=key_size)
    private_path = directory / "private.pem"
    public_path = directory / "public.pem"
    private_path.write_bytes(
        key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
    )
    public_path.write_bytes(
        key.public_key().public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
    )
    return str(private_path), str(public_path)


@pytest.fixture(scope="session")
def rsa_keys(tmp_path_factory):
    return write_key_pair(tmp_path_factory.mktemp("keys"))


@pytest.fixture
def token_service(rsa_keys):
    private_path, public_path = rsa_keys
    return TokenService(private_path, public_path)


@pytest.fixture
def client(session_factory, token_service):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_token_service] = lambda: token_service
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def register_user(client):
    def _register(phone_number="+6281234567890", full_name="Budi Santoso", password="P@ssw0rd"):
        resp = client.post(
            "/register",
            json={"phone_number": phone_number, "full_name": full_name, "password": password},
        )
        assert resp.status_code == 201, resp.json()
        return resp.json()["user_id"]

    return _register


@pytest.fixture
def login_token(client):
    def _login(phone_number="+6281234567890", password="P@ssw0rd"):
        resp = client.post("/login", json={"phone_number": phone_number, "password": password})
        assert resp.status_code == 200, resp.json()
        return resp.json()["token"]

    return _login
