# tests/test_keywords.py

import pytest

from app.modules.keywords import services
from app.modules.keywords.models import Keyword


def add(client, headers, text):
    return client.post("/api/keywords/", json={"text": text}, headers=headers)


def test_add_keyword_is_normalized(client, auth_headers):
    response = add(client, auth_headers, "  Road Works ")

    assert response.status_code == 200
    data = response.json()
    assert data["text"] == "road works"
    assert data["isActive"] is True
    assert "id" in data

def test_add_empty_keyword(client, auth_headers):
    response = add(client, auth_headers, "   ")
    assert response.status_code == 400

def test_list_keywords_newest_first(client, auth_headers):
    for text in ["one", "two", "three"]:
        add(client, auth_headers, text)

    response = client.get("/api/keywords/", headers=auth_headers)

    assert response.status_code == 200
    assert [k["text"] for k in response.json()] == ["three", "two", "one"]

def test_keywords_require_auth(client):
    assert client.get("/api/keywords/").status_code == 401

def test_re_adding_reactivates(client, auth_headers, db_session):
    keyword_id = add(client, auth_headers, "road").json()["id"]
    client.patch(f"/api/keywords/{keyword_id}", json={"isActive": False}, headers=auth_headers)

    response = add(client, auth_headers, "ROAD")

    assert response.status_code == 200
    assert response.json()["id"] == keyword_id
    assert response.json()["isActive"] is True
    assert db_session.query(Keyword).count() == 1

def test_free_tier_cap_counts_inactive_keywords(client, auth_headers):
    ids = [add(client, auth_headers, f"kw{n}").json()["id"] for n in range(5)]
    client.patch(f"/api/keywords/{ids[0]}", json={"isActive": False}, headers=auth_headers)

    response = add(client, auth_headers, "one more")
    assert response.status_code == 400
    assert "Free tier limited to 5 keywords" in response.json()["detail"]

    # Re-adding an existing keyword is not blocked by the cap
    assert add(client, auth_headers, "kw0").status_code == 200

def test_pro_users_are_not_capped(client, pro_user, headers_for):
    headers = headers_for(pro_user)
    for n in range(7):
        assert add(client, headers, f"kw{n}").status_code == 200

def test_rename_keyword(client, auth_headers):
    road_id = add(client, auth_headers, "road").json()["id"]
    add(client, auth_headers, "bridge")

    response = client.patch(f"/api/keywords/{road_id}", json={"text": "Tunnel"}, headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["text"] == "tunnel"

    clash = client.patch(f"/api/keywords/{road_id}", json={"text": "bridge"}, headers=auth_headers)
    assert clash.status_code == 400

def test_keywords_are_owner_only(client, auth_headers, make_user, headers_for):
    keyword_id = add(client, auth_headers, "road").json()["id"]
    other = headers_for(make_user(email="other@example.com"))

    assert client.patch(f"/api/keywords/{keyword_id}", json={"isActive": False}, headers=other).status_code == 404
    assert client.delete(f"/api/keywords/{keyword_id}", headers=other).status_code == 404
    assert client.get("/api/keywords/", headers=other).json() == []

def test_delete_keyword(client, auth_headers):
    keyword_id = add(client, auth_headers, "road").json()["id"]

    assert client.delete(f"/api/keywords/{keyword_id}", headers=auth_headers).status_code == 204
    assert client.delete(f"/api/keywords/{keyword_id}", headers=auth_headers).status_code == 404

def test_service_active_only_filter(db_session, user):
    services.add_keyword(db_session, user, "road")
    bridge = services.add_keyword(db_session, user, "bridge")
    services.update_keyword(db_session, user.id, bridge.id, is_active=False)

    active = services.get_user_keywords(db_session, user.id, active_only=True)
    assert [k.text for k in active] == ["road"]

def test_service_limit_error_is_a_value_error(db_session, user):
    for n in range(5):
        services.add_keyword(db_session, user, f"kw{n}")

    with pytest.raises(services.KeywordLimitError):
        services.add_keyword(db_session, user, "kw5")
    assert issubclass(services.KeywordLimitError, ValueError)
