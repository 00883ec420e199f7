# tests/test_auth.py

import pytest

from app.modules.auth.models import User, UserRole

TEST_PASSWORD = "Test123!"


@pytest.fixture
def admin(make_user):
    return make_user(email="admin@example.com", role=UserRole.ACCOUNT_MANAGER.value)


def test_signup_starts_on_free_tier(client):
    response = client.post(
        "/api/auth/signup",
        json={"email": "newuser@example.com", "password": "NewPass123!", "full_name": "New User"}
    )
    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "newuser@example.com"
    assert data["role"] == "client"
    assert data["subscription_tier"] == "free"
    assert data["subscription_status"] is None
    assert data["is_pro"] is False

def test_signup_duplicate_email(client, user):
    response = client.post("/api/auth/signup", json={"email": user.email, "password": "AnotherPass123!"})
    assert response.status_code == 400
    assert "already registered" in response.json()["detail"]

def test_login_returns_subscription(client, pro_user):
    response = client.post("/api/auth/login", json={"email": pro_user.email, "password": TEST_PASSWORD})
    assert response.status_code == 200
    data = response.json()
    assert data["access_token"]
    assert data["token_type"] == "bearer"
    assert data["user"]["subscription_tier"] == "pro"
    assert data["user"]["is_pro"] is True

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {data['access_token']}"})
    assert me.json()["is_pro"] is True

def test_login_wrong_password(client, user):
    response = client.post("/api/auth/login", json={"email": user.email, "password": "WrongPassword123!"})
    assert response.status_code == 401

def test_me_reflects_current_subscription(client, user, auth_headers, db_session):
    assert client.get("/api/auth/me", headers=auth_headers).json()["is_pro"] is False

    # Tier changes apply to tokens issued before the change
    user.subscription_tier = "pro"
    user.subscription_status = "ACTIVE"
    db_session.commit()

    data = client.get("/api/auth/me", headers=auth_headers).json()
    assert data["subscription_tier"] == "pro"
    assert data["is_pro"] is True

def test_me_no_token(client):
    assert client.get("/api/auth/me").status_code == 401

def test_admin_upgrades_user_to_pro(client, user, admin, headers_for, db_session):
    response = client.patch(
        f"/api/auth/users/{user.id}/subscription",
        headers=headers_for(admin),
        json={"subscription_tier": "pro", "subscription_status": "ACTIVE"}
    )
    assert response.status_code == 200
    assert response.json()["is_pro"] is True

    db_session.expire_all()
    assert db_session.get(User, user.id).is_pro is True

def test_cancelled_pro_is_not_pro(client, pro_user, admin, headers_for):
    response = client.patch(
        f"/api/auth/users/{pro_user.id}/subscription",
        headers=headers_for(admin),
        json={"subscription_status": "CANCELLED"}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["subscription_tier"] == "pro"
    assert data["subscription_status"] == "CANCELLED"
    assert data["is_pro"] is False

def test_unknown_tier_is_rejected(client, user, admin, headers_for):
    response = client.patch(
        f"/api/auth/users/{user.id}/subscription",
        headers=headers_for(admin),
        json={"subscription_tier": "enterprise"}
    )
    assert response.status_code == 422

def test_subscription_update_unknown_user(client, admin, headers_for):
    response = client.patch(
        "/api/auth/users/99999/subscription",
        headers=headers_for(admin),
        json={"subscription_tier": "pro"}
    )
    assert response.status_code == 404

def test_clients_cannot_change_subscriptions(client, user, auth_headers, db_session):
    response = client.patch(
        f"/api/auth/users/{user.id}/subscription",
        headers=auth_headers,
        json={"subscription_tier": "pro", "subscription_status": "ACTIVE"}
    )
    assert response.status_code == 403

    db_session.expire_all()
    assert db_session.get(User, user.id).subscription_tier == "free"
