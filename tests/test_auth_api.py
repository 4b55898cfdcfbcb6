"""
Tests for the /auth endpoints.
"""
from datetime import timedelta

from app.core.config import AUTH_RATE_LIMIT
from app.core.security import create_access_token
from app.db.models.user import User
from app.services import user_service


def register(client, email="carol@example.com", password="testpass123", name="Carol"):
    return client.post("/auth/register", json={"name": name, "email": email, "password": password})


def test_register_success(client, db):
    response = register(client)

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    user = body["data"]["user"]
    assert user["email"] == "carol@example.com"
    assert user["name"] == "Carol"
    assert "password" not in user and "passwordHash" not in user
    assert body["data"]["token"]

    stored = db.query(User).filter(User.email == "carol@example.com").first()
    assert stored is not None
    assert stored.password_hash != "testpass123"


def test_register_duplicate_email_returns_409(client, test_user):
    response = register(client, email="ALICE@example.com")

    assert response.status_code == 409
    assert response.json() == {"success": False, "message": "Email already registered"}


def test_register_validation_errors_are_listed(client):
    response = client.post("/auth/register", json={"name": "", "email": "not-an-email", "password": "123"})

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Validation error"
    assert {e["field"] for e in body["errors"]} == {"name", "email", "password"}


def test_register_password_over_72_bytes(client):
    response = register(client, password="🚀" * 19)
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "password"


def test_register_password_exactly_72_bytes(client):
    response = register(client, password="🚀" * 18)
    assert response.status_code == 201


def test_login_success(client, test_user):
    response = client.post("/auth/login", json={"email": "Alice@Example.com", "password": "testpass123"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["user"]["id"] == test_user.id
    assert data["token"]


def test_login_token_works_for_protected_routes(client, test_user):
    token = client.post(
        "/auth/login", json={"email": "alice@example.com", "password": "testpass123"}
    ).json()["data"]["token"]

    response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    assert response.json()["data"]["user"]["email"] == "alice@example.com"


def test_login_wrong_password_and_unknown_email_look_the_same(client, test_user):
    wrong_password = client.post("/auth/login", json={"email": "alice@example.com", "password": "wrongpass"})
    unknown_email = client.post("/auth/login", json={"email": "nobody@example.com", "password": "testpass123"})

    assert wrong_password.status_code == 401
    assert unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json()


def test_login_is_rate_limited(client, test_user):
    for _ in range(AUTH_RATE_LIMIT):
        client.post("/auth/login", json={"email": "alice@example.com", "password": "wrongpass"})

    response = client.post("/auth/login", json={"email": "alice@example.com", "password": "testpass123"})
    assert response.status_code == 429
    assert response.json()["success"] is False


def test_forgot_password_same_response_for_unknown_email(client, test_user):
    known = client.post("/auth/forgot-password", json={"email": "alice@example.com"})
    unknown = client.post("/auth/forgot-password", json={"email": "nobody@example.com"})

    assert known.status_code == 200
    assert unknown.status_code == 200
    assert known.json() == unknown.json()


def test_forgot_then_reset_password(client, db, test_user):
    client.post("/auth/forgot-password", json={"email": "alice@example.com"})
    db.expire_all()
    code = user_service.find_by_email(db, "alice@example.com").password_reset_otp
    assert code and len(code) == 6

    response = client.post(
        "/auth/reset-password",
        json={"email": "alice@example.com", "otp": code, "newPassword": "brandnew123"},
    )
    assert response.status_code == 200

    login = client.post("/auth/login", json={"email": "alice@example.com", "password": "brandnew123"})
    assert login.status_code == 200

    reused = client.post(
        "/auth/reset-password",
        json={"email": "alice@example.com", "otp": code, "newPassword": "another123"},
    )
    assert reused.status_code == 400


def test_reset_password_expired_code(client, db, test_user):
    user_service.generate_reset_code(db, test_user.id)
    db.refresh(test_user)
    code = test_user.password_reset_otp
    test_user.password_reset_expires = test_user.password_reset_expires - timedelta(minutes=16)
    db.commit()

    response = client.post(
        "/auth/reset-password",
        json={"email": "alice@example.com", "otp": code, "newPassword": "brandnew123"},
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid or expired OTP"


def test_reset_password_bad_otp_format(client, test_user):
    response = client.post(
        "/auth/reset-password",
        json={"email": "alice@example.com", "otp": "12ab", "newPassword": "brandnew123"},
    )
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "otp"


def test_reset_password_rejects_non_ascii_digit_otp(client, db, test_user):
    user_service.generate_reset_code(db, test_user.id)

    response = client.post(
        "/auth/reset-password",
        json={"email": "alice@example.com", "otp": "\u0661\u0662\u0663\u0664\u0665\u0666", "newPassword": "brandnew123"},
    )
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "otp"


def test_change_password(client, auth_headers):
    wrong = client.post(
        "/auth/change-password",
        json={"currentPassword": "wrongpass", "newPassword": "brandnew123"},
        headers=auth_headers,
    )
    assert wrong.status_code == 401

    ok = client.post(
        "/auth/change-password",
        json={"currentPassword": "testpass123", "newPassword": "brandnew123"},
        headers=auth_headers,
    )
    assert ok.status_code == 200

    login = client.post("/auth/login", json={"email": "alice@example.com", "password": "brandnew123"})
    assert login.status_code == 200


def test_change_password_requires_token(client):
    response = client.post(
        "/auth/change-password",
        json={"currentPassword": "testpass123", "newPassword": "brandnew123"},
    )
    assert response.status_code == 401


def test_update_profile(client, auth_headers):
    response = client.put(
        "/auth/profile",
        json={"name": "Alice Smith", "avatar": "https://example.com/alice.png"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    user = response.json()["data"]["user"]
    assert user["name"] == "Alice Smith"
    assert user["avatar"] == "https://example.com/alice.png"


def test_logout_acknowledges(client, auth_headers):
    response = client.post("/auth/logout", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["success"] is True


def test_delete_account(client, auth_headers, application_fields):
    client.post("/applications", json=application_fields, headers=auth_headers)

    response = client.delete("/auth/account", headers=auth_headers)
    assert response.status_code == 200

    # The token now points at a user that no longer exists
    assert client.get("/auth/me", headers=auth_headers).status_code == 401
    login = client.post("/auth/login", json={"email": "alice@example.com", "password": "testpass123"})
    assert login.status_code == 401


def test_missing_token(client):
    response = client.get("/auth/me")
    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "Access denied. No token provided."}


def test_invalid_token(client):
    response = client.get("/auth/me", headers={"Authorization": "Bearer invalid_token"})
    assert response.status_code == 401
    assert response.json()["message"] == "Token is not valid"


def test_expired_token(client, test_user):
    token = create_access_token(test_user.id, expires_delta=timedelta(seconds=-5))
    response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["message"] == "Token has expired"
