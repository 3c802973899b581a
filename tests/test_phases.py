from datetime import date

from services.phases import (
    PHASE_KEYS,
    build_timeline,
    estimated_date,
    phase_index,
    phase_status,
    progress_percent,
)


def test_phase_order():
    assert PHASE_KEYS[0] == "DOCUMENT_COLLECTION"
    assert PHASE_KEYS[-1] == "ENROLLMENT"
    assert len(PHASE_KEYS) == 10
    assert phase_index("NOT_A_PHASE") == -1


def test_phase_status():
    assert phase_status("INTERVIEW", "OFFER_RECEIVED") == "completed"
    assert phase_status("INTERVIEW", "INTERVIEW") == "current"
    assert phase_status("INTERVIEW", "ENROLLMENT") == "pending"


def test_estimated_date_two_weeks_per_phase():
    today = date(2024, 1, 1)
    assert estimated_date("DOCUMENT_COLLECTION", "DOCUMENT_COLLECTION", today) is None
    assert estimated_date("DOCUMENT_COLLECTION", "UNIVERSITY_SHORTLISTING", today) == date(2024, 1, 15)
    assert estimated_date("DOCUMENT_COLLECTION", "OFFER_RECEIVED", today) == date(2024, 2, 12)


def test_progress_percent():
    assert progress_percent("DOCUMENT_COLLECTION") == 10
    assert progress_percent("ENROLLMENT") == 100
    assert progress_percent(None) == 0


def test_build_timeline():
    timeline = build_timeline("APPLICATION_SUBMISSION", today=date(2024, 1, 1))
    assert [t["status"] for t in timeline[:4]] == ["completed", "completed", "current", "pending"]
    assert timeline[2]["estimated_date"] is None
    assert timeline[3]["estimated_date"] == "2024-01-15"
