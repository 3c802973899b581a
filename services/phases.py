from datetime import date, timedelta
from typing import Optional, List, Dict, Any

# Stages of a student's application journey, in display order
PHASES = [
    {"key": "DOCUMENT_COLLECTION", "label": "Document Collection", "color": "#2196f3",
     "description": "Initial document gathering phase"},
    {"key": "UNIVERSITY_SHORTLISTING", "label": "University Shortlisting", "color": "#ff9800",
     "description": "Researching and selecting universities"},
    {"key": "APPLICATION_SUBMISSION", "label": "Application Submission", "color": "#9c27b0",
     "description": "Submitting applications to universities"},
    {"key": "OFFER_RECEIVED", "label": "Offer Received", "color": "#4caf50",
     "description": "University offer received"},
    {"key": "INITIAL_PAYMENT", "label": "Initial Payment", "color": "#795548",
     "description": "Making initial payments"},
    {"key": "INTERVIEW", "label": "Interview", "color": "#607d8b",
     "description": "University interview process"},
    {"key": "FINANCIAL_TB_TEST", "label": "Financial & TB Test", "color": "#ff5722",
     "description": "Financial documents and medical tests"},
    {"key": "CAS_VISA", "label": "CAS Process", "color": "#8bc34a",
     "description": "CAS letter and visa preparation"},
    {"key": "VISA_APPLICATION", "label": "Visa Process", "color": "#ffc107",
     "description": "Submitting visa process"},
    {"key": "ENROLLMENT", "label": "Enrollment", "color": "#03a9f4",
     "description": "Final enrollment at university"},
]

PHASE_KEYS = [p["key"] for p in PHASES]
WEEKS_PER_PHASE = 2


def phase_index(key: Optional[str]) -> int:
    try:
        return PHASE_KEYS.index(key)
    except ValueError:
        return -1


def get_phase(key: str) -> Optional[Dict[str, Any]]:
    idx = phase_index(key)
    return PHASES[idx] if idx >= 0 else None


def phase_status(current_phase: Optional[str], key: str) -> str:
    current_idx = phase_index(current_phase)
    idx = phase_index(key)
    if idx < current_idx:
        return "completed"
    if idx == current_idx:
        return "current"
    return "pending"


def estimated_date(current_phase: Optional[str], key: str, today: Optional[date] = None) -> Optional[date]:
    current_idx = phase_index(current_phase)
    idx = phase_index(key)
    if idx <= current_idx:
        return None
    today = today or date.today()
    return today + timedelta(weeks=(idx - current_idx) * WEEKS_PER_PHASE)


def progress_percent(current_phase: Optional[str]) -> int:
    idx = phase_index(current_phase)
    if idx < 0:
        return 0
    return round((idx + 1) * 100 / len(PHASES))


def build_timeline(current_phase: Optional[str], today: Optional[date] = None) -> List[Dict[str, Any]]:
    timeline = []
    for phase in PHASES:
        eta = estimated_date(current_phase, phase["key"], today)
        timeline.append({
            "key": phase["key"],
            "label": phase["label"],
            "description": phase["description"],
            "color": phase["color"],
            "status": phase_status(current_phase, phase["key"]),
            "estimated_date": eta.isoformat() if eta else None,
        })
    return timeline
