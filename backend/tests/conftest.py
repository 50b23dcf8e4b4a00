import os
import tempfile

# Settings are read at import time, so the environment comes first
os.environ["TESTING"] = "true"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="recruiting-uploads-")
os.environ["FIRST_ADMIN_EMAIL"] = "admin@example.com"
os.environ["FIRST_ADMIN_PASSWORD"] = "admin-password"
os.environ.pop("SMTP_HOST", None)

import pytest
from fastapi.testclient import TestClient

from app.core.database import DatabaseManager, SessionLocal
from app.main import (
    PASSPORT_CONTENT_TYPES,
    PASSPORT_EXTENSIONS,
    QUIZ_EXTENSIONS,
    create_app,
)
from app.utils.file_storage import FileStorage

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin-password"
DEFAULT_PASSWORD = "secret-pass"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


class RecordingMailer:
    """Stands in for the SMTP mailer and keeps what would have been sent."""

    enabled = True

    def __init__(self):
        self.verifications = []
        self.resets = []
        self.closed = False

    def send_verification_email(self, email, code):
        self.verifications.append((email, code))
        return True

    def send_password_reset_email(self, email, token):
        self.resets.append((email, token))
        return True

    def close(self):
        self.closed = True

    def last_code(self, email):
        return [code for to, code in self.verifications if to == email][-1]

    def last_token(self, email):
        return [token for to, token in self.resets if to == email][-1]


@pytest.fixture(autouse=True)
def fresh_database():
    DatabaseManager.drop_all_tables()
    DatabaseManager.create_all_tables()
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def passport_storage(tmp_path):
    return FileStorage(
        tmp_path / "passports",
        allowed_extensions=PASSPORT_EXTENSIONS,
        allowed_content_types=PASSPORT_CONTENT_TYPES,
        max_bytes=1024,
    )


@pytest.fixture
def quiz_storage(tmp_path):
    return FileStorage(
        tmp_path / "quiz",
        allowed_extensions=QUIZ_EXTENSIONS,
        max_bytes=1024,
    )


@pytest.fixture
def client(mailer, passport_storage, quiz_storage):
    app = create_app(
        mailer=mailer,
        passport_storage=passport_storage,
        quiz_storage=quiz_storage,
    )
    with TestClient(app) as test_client:
        yield test_client


def register(client, email, role="driver", password=DEFAULT_PASSWORD, name="Test User", phone="555-0100"):
    return client.post("/api/auth/register", json={
        "email": email,
        "phone": phone,
        "name": name,
        "password": password,
        "role": role,
    })


@pytest.fixture
def make_user(client, mailer):
    """Register (and by default verify) a user; returns the user id."""

    def _make_user(email, role="driver", password=DEFAULT_PASSWORD, verify=True):
        response = register(client, email, role=role, password=password)
        assert response.status_code == 201, response.text
        if verify:
            verified = client.post("/api/auth/verify-email", json={
                "email": email,
                "code": mailer.last_code(email),
            })
            assert verified.status_code == 200, verified.text
        return response.json()["userId"]

    return _make_user


@pytest.fixture
def login(client):
    """Log in and return bearer headers."""

    def _login(email, password=DEFAULT_PASSWORD):
        response = client.post("/api/auth/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _login


@pytest.fixture
def user_headers(make_user, login):
    make_user("driver@example.com")
    return login("driver@example.com")


@pytest.fixture
def admin_headers(login):
    return login(ADMIN_EMAIL, ADMIN_PASSWORD)
