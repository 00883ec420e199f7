# tests/test_cleanup.py

import json
import pytest
from contextlib import contextmanager
from unittest.mock import patch

from app.modules.keywords.models import Keyword
from app.modules.tenders.models import Tender, TenderVersion, TenderView
from app.modules.tenders.services import delete_orphaned_tenders


@pytest.fixture
def tenders(db_session, user):
    db_session.add_all([
        Keyword(user_id=user.id, text="road", is_active=True),
        Keyword(user_id=user.id, text="bridge", is_active=False),
        Tender(id="unit_id=A&job_number=1", tags=["Road"]),
        Tender(id="unit_id=A&job_number=2", tags=["bridge"]),
        Tender(id="unit_id=A&job_number=3", tags=[]),
    ])
    db_session.commit()
    db_session.add_all([
        TenderVersion(tender_id="unit_id=A&job_number=2", date=20240101, type="招標公告",
                      category="bidding", data={}),
        TenderView(user_id=user.id, tender_id="unit_id=A&job_number=2"),
    ])
    db_session.commit()


def test_dry_run_reports_without_deleting(db_session, tenders):
    report = delete_orphaned_tenders(db_session, dry_run=True)

    assert report["total_keywords"] == 1
    assert report["total_tenders"] == 3
    assert report["dry_run"] is True
    orphaned = {o["id"]: o for o in report["orphaned"]}
    assert set(orphaned) == {"unit_id=A&job_number=2", "unit_id=A&job_number=3"}
    assert orphaned["unit_id=A&job_number=2"]["version_count"] == 1
    assert orphaned["unit_id=A&job_number=2"]["view_count"] == 1
    assert db_session.query(Tender).count() == 3

def test_deletes_orphans_with_their_versions_and_views(db_session, tenders):
    delete_orphaned_tenders(db_session)

    db_session.expire_all()
    assert [t.id for t in db_session.query(Tender).all()] == ["unit_id=A&job_number=1"]
    assert db_session.query(TenderVersion).count() == 0
    assert db_session.query(TenderView).count() == 0

def test_cleanup_script_writes_report(db_session, session_factory, tenders, tmp_path):
    from scripts import cleanup_orphaned_tenders as script

    @contextmanager
    def test_scope():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    report_path = tmp_path / "report.json"
    with patch.object(script, "session_scope", test_scope):
        script.main(["--dry-run", "--report", str(report_path)])

    written = json.loads(report_path.read_text(encoding="utf-8"))
    assert len(written["orphaned"]) == 2
    assert db_session.query(Tender).count() == 3
