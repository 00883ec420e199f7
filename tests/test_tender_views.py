# tests/test_tender_views.py

import pytest

from app.modules.tenders import services
from app.modules.tenders.models import Tender, TenderVersion, TenderView

TENDER_ID = "unit_id=A.1&job_number=J1"


@pytest.fixture
def tender(db_session, user):
    """A tender with a bidding and an award version, visible to `user`"""
    tender = Tender(id=TENDER_ID, tags=["road"])
    db_session.add(tender)
    db_session.add_all([
        TenderVersion(
            tender_id=TENDER_ID, date=20240101, type="招標公告", category="bidding",
            data={"date": 20240101, "brief": {"type": "招標公告", "title": "道路改善工程"}},
            details=None
        ),
        TenderVersion(
            tender_id=TENDER_ID, date=20240301, type="決標公告", category="awarded",
            data={
                "date": 20240301,
                "brief": {"type": "決標公告", "title": "道路改善工程(決標)"},
                "detail": {"決標資料:總決標金額": "500,000"}
            },
            details=None
        ),
    ])
    db_session.add(TenderView(user_id=user.id, tender_id=TENDER_ID))
    db_session.commit()
    return tender


def test_list_views_groups_versions_newest_first(client, auth_headers, tender):
    response = client.get("/api/tenders/views", headers=auth_headers)

    assert response.status_code == 200
    groups = response.json()
    assert len(groups) == 1
    group = groups[0]
    assert group["tender"]["id"] == TENDER_ID
    assert group["tender"]["unitId"] == "A.1"
    assert group["tender"]["jobNumber"] == "J1"
    assert group["tender"]["title"] == "道路改善工程(決標)"
    assert group["tender"]["date"] == "20240301"
    assert group["tender"]["tags"] == ["road"]
    assert group["relatedTenders"] == []
    assert [v["date"] for v in group["versions"]] == ["20240301", "20240101"]

    awarded = group["versions"][0]
    assert awarded["category"] == "awarded"
    # Rebuilt from the raw record when not stored
    assert awarded["details"]["category"] == "awarded"
    assert awarded["details"]["totalAmount"] == "500,000"

def test_archive_moves_tender_out_of_inbox(client, auth_headers, tender):
    response = client.post(
        "/api/tenders/archive",
        json={"tenderId": TENDER_ID, "isArchived": True},
        headers=auth_headers
    )
    assert response.status_code == 200
    assert response.json()["isArchived"] is True

    inbox = client.get("/api/tenders/views?archived=false", headers=auth_headers).json()
    archive = client.get("/api/tenders/views?archived=true", headers=auth_headers).json()
    assert inbox == []
    assert [g["tender"]["id"] for g in archive] == [TENDER_ID]
    assert archive[0]["tender"]["isArchived"] is True

def test_highlight(client, auth_headers, tender, db_session):
    response = client.post(
        "/api/tenders/highlight",
        json={"tenderId": TENDER_ID, "isHighlighted": True},
        headers=auth_headers
    )
    assert response.status_code == 200
    assert response.json()["isHighlighted"] is True

    db_session.expire_all()
    assert db_session.query(TenderView).one().is_highlighted is True

def test_archive_without_view_is_404(client, tender, make_user, headers_for):
    other = headers_for(make_user(email="other@example.com"))

    response = client.post(
        "/api/tenders/archive",
        json={"tenderId": TENDER_ID, "isArchived": True},
        headers=other
    )
    assert response.status_code == 404

    # A tender without a view is invisible
    assert client.get("/api/tenders/views", headers=other).json() == []

def test_views_require_auth(client):
    assert client.get("/api/tenders/views").status_code == 401

def test_serialize_version_uses_stored_details(db_session, tender):
    version = db_session.query(TenderVersion).filter(TenderVersion.date == 20240101).one()
    version.details = {"category": "bidding", "agency_name": "臺北市政府"}
    db_session.commit()

    serialized = services.serialize_version(version)
    assert serialized.details.agency_name == "臺北市政府"
    assert serialized.date == "20240101"

def test_deleting_tender_cascades(db_session, tender):
    db_session.delete(db_session.get(Tender, TENDER_ID))
    db_session.commit()

    assert db_session.query(TenderVersion).count() == 0
    assert db_session.query(TenderView).count() == 0
