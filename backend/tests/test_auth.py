import time
from concurrent.futures import ThreadPoolExecutor

from fastapi.testclient import TestClient

from conftest import ADMIN_EMAIL, DEFAULT_PASSWORD, RecordingMailer, register

from app.main import create_app
from app.models.user import PasswordResetToken, User, VerificationCode


class SlowMailer(RecordingMailer):
    def __init__(self, delay):
        super().__init__()
        self.delay = delay

    def send_verification_email(self, email, code):
        time.sleep(self.delay)
        return super().send_verification_email(email, code)


def test_register_creates_unverified_user_and_sends_code(client, mailer, db):
    response = register(client, "new@example.com", role="welder")

    assert response.status_code == 201
    user_id = response.json()["userId"]

    user = db.get(User, user_id)
    assert user.role == "welder"
    assert user.is_verified is False
    assert user.password_hash != DEFAULT_PASSWORD

    code = mailer.last_code("new@example.com")
    assert len(code) == 6 and code.isdigit()
    assert db.query(VerificationCode).filter_by(user_id=user_id).count() == 1


def test_register_duplicate_email_creates_no_row(client, db):
    assert register(client, "dup@example.com").status_code == 201

    response = register(client, "dup@example.com", role="student")

    assert response.status_code == 400
    assert response.json()["detail"] == "Email already registered"
    assert db.query(User).filter_by(email="dup@example.com").count() == 1


def test_register_rejects_admin_and_unknown_roles(client):
    for role in ("admin", "pilot"):
        response = register(client, f"{role}@example.com", role=role)
        assert response.status_code == 400
        assert "Role must be driver, welder, or student" in response.json()["detail"]


def test_register_requires_fields(client):
    response = client.post("/api/auth/register", json={"email": "x@example.com", "role": "driver"})
    assert response.status_code == 400


def test_login_does_not_reveal_which_part_was_wrong(client, make_user):
    make_user("known@example.com")

    unknown = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "whatever"})
    wrong = client.post("/api/auth/login", json={"email": "known@example.com", "password": "wrong"})

    assert unknown.status_code == wrong.status_code == 401
    assert unknown.json() == wrong.json()


def test_login_unverified_account_is_forbidden(client, make_user):
    make_user("pending@example.com", verify=False)

    response = client.post("/api/auth/login", json={"email": "pending@example.com", "password": DEFAULT_PASSWORD})

    assert response.status_code == 403


def test_login_returns_token_and_user_without_hash(client, make_user):
    user_id = make_user("driver@example.com")

    response = client.post("/api/auth/login", json={"email": "driver@example.com", "password": DEFAULT_PASSWORD})

    body = response.json()
    assert response.status_code == 200
    assert body["token"]
    assert body["user"]["id"] == user_id
    assert body["user"]["role"] == "driver"
    assert "password_hash" not in body["user"]


def test_verify_email_rejects_wrong_code_then_accepts_right_one(client, mailer, db):
    register(client, "verify@example.com")
    code = mailer.last_code("verify@example.com")
    wrong = "000000" if code != "000000" else "111111"

    bad = client.post("/api/auth/verify-email", json={"email": "verify@example.com", "code": wrong})
    assert bad.status_code == 400
    assert bad.json()["detail"] == "Invalid verification code."

    good = client.post("/api/auth/verify-email", json={"email": "verify@example.com", "code": code})
    assert good.status_code == 200

    user = db.query(User).filter_by(email="verify@example.com").one()
    assert user.is_verified is True
    assert db.query(VerificationCode).filter_by(user_id=user.id).count() == 0


def test_verify_email_code_cannot_be_reused(client, mailer):
    register(client, "once@example.com")
    code = mailer.last_code("once@example.com")

    first = client.post("/api/auth/verify-email", json={"email": "once@example.com", "code": code})
    second = client.post("/api/auth/verify-email", json={"email": "once@example.com", "code": code})

    assert first.status_code == 200
    assert second.status_code == 400


def test_forgot_password_response_is_generic(client, mailer, make_user):
    make_user("forgetful@example.com")

    known = client.post("/api/auth/forgot-password", json={"email": "forgetful@example.com"})
    unknown = client.post("/api/auth/forgot-password", json={"email": "ghost@example.com"})

    assert known.status_code == unknown.status_code == 200
    assert known.json() == unknown.json()
    assert [to for to, _ in mailer.resets] == ["forgetful@example.com"]
    assert len(mailer.last_token("forgetful@example.com")) == 64


def test_reset_password_token_is_single_use(client, mailer, make_user, db):
    make_user("reset@example.com")
    client.post("/api/auth/forgot-password", json={"email": "reset@example.com"})
    token = mailer.last_token("reset@example.com")

    first = client.post("/api/auth/reset-password", json={"token": token, "newPassword": "brand-new"})
    assert first.status_code == 200
    assert db.query(PasswordResetToken).count() == 0

    login = client.post("/api/auth/login", json={"email": "reset@example.com", "password": "brand-new"})
    assert login.status_code == 200

    again = client.post("/api/auth/reset-password", json={"token": token, "newPassword": "other"})
    assert again.status_code == 400


def test_reset_password_unknown_token(client):
    response = client.post("/api/auth/reset-password", json={"token": "deadbeef", "newPassword": "x"})
    assert response.status_code == 400


def test_admin_reset_user_password(client, make_user, admin_headers):
    user_id = make_user("locked@example.com")

    response = client.post(
        "/api/auth/admin/reset-user-password",
        json={"userId": user_id, "newPassword": "set-by-admin"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json()["user"]["id"] == user_id
    login = client.post("/api/auth/login", json={"email": "locked@example.com", "password": "set-by-admin"})
    assert login.status_code == 200


def test_admin_reset_user_password_unknown_user(client, admin_headers):
    response = client.post(
        "/api/auth/admin/reset-user-password",
        json={"userId": 9999, "newPassword": "x"},
        headers=admin_headers,
    )
    assert response.status_code == 404


def test_non_admin_cannot_reset_other_passwords(client, make_user, user_headers):
    other = make_user("other@example.com")

    response = client.post(
        "/api/auth/admin/reset-user-password",
        json={"userId": other, "newPassword": "x"},
        headers=user_headers,
    )
    assert response.status_code == 403


def test_register_verify_login_then_admin_route_is_forbidden(client, mailer):
    assert register(client, "flow@example.com", role="student").status_code == 201
    verified = client.post("/api/auth/verify-email", json={
        "email": "flow@example.com",
        "code": mailer.last_code("flow@example.com"),
    })
    assert verified.status_code == 200
    token = client.post(
        "/api/auth/login", json={"email": "flow@example.com", "password": DEFAULT_PASSWORD}
    ).json()["token"]

    response = client.get("/api/users/admin/stats", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 403


def test_protected_route_requires_valid_token(client):
    missing = client.get("/api/users/me")
    garbage = client.get("/api/users/me", headers={"Authorization": "Bearer not-a-jwt"})

    assert missing.status_code == 401
    assert garbage.status_code == 401
    assert garbage.headers["www-authenticate"] == "Bearer"


def test_seeded_admin_can_log_in(client):
    response = client.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": "admin-password"})
    assert response.status_code == 200
    assert response.json()["user"]["role"] == "admin"


def test_slow_mail_delivery_does_not_hold_up_other_requests(passport_storage, quiz_storage):
    mailer = SlowMailer(delay=1.0)
    app = create_app(mailer=mailer, passport_storage=passport_storage, quiz_storage=quiz_storage)

    with TestClient(app) as client, ThreadPoolExecutor(max_workers=1) as pool:
        pending = pool.submit(register, client, "slow@example.com")
        time.sleep(0.1)
        started = time.monotonic()
        health = client.get("/health")
        elapsed = time.monotonic() - started
        registered = pending.result()

    assert health.status_code == 200
    assert elapsed < 0.5
    assert registered.status_code == 201
    assert mailer.last_code("slow@example.com")
