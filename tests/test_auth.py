import asyncio

from sqlalchemy import update

from conftest import ADMIN_EMAIL, ADMIN_PASSWORD
from nainzaka.db import async_session_maker
from nainzaka.models import AdminUser
from nainzaka.settings import settings


def _login(client, username, password):
    return client.post("/api/admin/login", data={"username": username, "password": password})


def test_login_returns_token_and_admin(client):
    res = _login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    assert res.status_code == 200
    body = res.json()
    assert body["token_type"] == "bearer"
    assert body["access_token"]
    assert body["admin"]["email"] == ADMIN_EMAIL


def test_login_email_is_case_insensitive(client):
    assert _login(client, "  Admin@Nainzaka.com ", ADMIN_PASSWORD).status_code == 200


def test_login_error_codes(client):
    cases = [
        ("not-an-email", ADMIN_PASSWORD, 400, "auth/invalid-email"),
        ("nobody@nainzaka.com", ADMIN_PASSWORD, 401, "auth/user-not-found"),
        (ADMIN_EMAIL, "wrong-password", 401, "auth/wrong-password"),
    ]
    for username, password, status_code, code in cases:
        res = _login(client, username, password)
        assert res.status_code == status_code, username
        detail = res.json()["detail"]
        assert detail["code"] == code
        assert detail["message"]


def test_me_requires_token(client, admin_headers):
    assert client.get("/api/admin/me").status_code == 401
    assert client.get("/api/admin/me", headers={"Authorization": "Bearer garbage"}).status_code == 401

    res = client.get("/api/admin/me", headers=admin_headers)
    assert res.status_code == 200
    assert res.json()["email"] == ADMIN_EMAIL


def test_logout_revokes_issued_tokens(client, admin_headers):
    assert client.post("/api/admin/logout", headers=admin_headers).status_code == 200
    assert client.get("/api/admin/me", headers=admin_headers).status_code == 401
    assert client.get("/api/admin/dashboard", headers=admin_headers).status_code == 401

    token = _login(client, ADMIN_EMAIL, ADMIN_PASSWORD).json()["access_token"]
    res = client.get("/api/admin/me", headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 200


def test_admin_routes_are_gated(client):
    assert client.get("/api/admin/dashboard").status_code == 401
    assert client.get("/api/admin/products/anything").status_code == 401
    assert client.delete("/api/admin/products/anything").status_code == 401
    res = client.post(
        "/api/admin/products/generate-description", json={"name": "Glow Serum"}
    )
    assert res.status_code == 401


def _set_admin_active(active):
    async def update_admin():
        async with async_session_maker() as session:
            await session.execute(
                update(AdminUser).where(AdminUser.email == ADMIN_EMAIL).values(is_active=active)
            )
            await session.commit()

    asyncio.run(update_admin())


def test_disabled_admin_cannot_sign_in_or_use_old_tokens(client, admin_headers):
    _set_admin_active(False)

    res = _login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    assert res.status_code == 403
    assert res.json()["detail"]["code"] == "auth/user-disabled"

    assert client.get("/api/admin/me", headers=admin_headers).status_code == 401
    assert client.get("/api/admin/dashboard", headers=admin_headers).status_code == 401

    _set_admin_active(True)
    assert client.get("/api/admin/me", headers=admin_headers).status_code == 200


def test_repeated_failures_lock_the_account(client):
    for _ in range(settings.LOGIN_MAX_ATTEMPTS):
        assert _login(client, ADMIN_EMAIL, "wrong-password").status_code == 401

    res = _login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    assert res.status_code == 429
    assert res.json()["detail"] == {
        "code": "auth/too-many-requests",
        "message": "Too many failed attempts. Please try again later.",
    }


def test_successful_sign_in_clears_failures(client):
    for _ in range(settings.LOGIN_MAX_ATTEMPTS - 1):
        _login(client, ADMIN_EMAIL, "wrong-password")
    assert _login(client, ADMIN_EMAIL, ADMIN_PASSWORD).status_code == 200
    assert _login(client, ADMIN_EMAIL, "wrong-password").status_code == 401
    assert _login(client, ADMIN_EMAIL, ADMIN_PASSWORD).status_code == 200
