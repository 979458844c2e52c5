"""Application constants.

Contains snapshot storage keys, record defaults, legacy stage aliases,
search tuning and the demo seed used when no local snapshot exists.
"""

from typing import Any

from ats.models.enums import Stage

# ---------------------------------------------------------------------------
# Snapshot storage keys
# ---------------------------------------------------------------------------
STATE_STORAGE_KEY: str = "internal-ats-state-v1"
VIEWS_STORAGE_KEY: str = "internal-ats-views-v1"

# ---------------------------------------------------------------------------
# Record defaults
# ---------------------------------------------------------------------------
DEFAULT_CANDIDATE_NAME: str = "New Candidate"
DEFAULT_RESUME_NAME: str = "resume"
DEFAULT_JD_NAME: str = "JD"
LOCAL_BLOB_PREFIX: str = "blob:ats/"

# ---------------------------------------------------------------------------
# Stage normalization
# Older boards stored free-form stage names; these map onto the fixed columns.
# Keys are lowercase.
# ---------------------------------------------------------------------------
LEGACY_STAGE_ALIASES: dict[str, Stage] = {
    "applied": Stage.first_round,
    "interview stage 1": Stage.first_round,
    "screening": Stage.second_round,
    "interview stage 2": Stage.second_round,
    "offer": Stage.final_round,
    "interview": Stage.final_round,
}

# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------
SEARCH_THRESHOLD: float = 0.65
SEARCH_FIELDS: tuple[str, ...] = ("name", "email", "tags", "notes")

# ---------------------------------------------------------------------------
# Demo seed (one job, three candidates)
# ---------------------------------------------------------------------------
SEED_JOB: dict[str, Any] = {
    "title": "Frontend Engineer",
    "department": "Product",
    "location": "Bengaluru, IN",
}

SEED_CANDIDATES: list[dict[str, Any]] = [
    {
        "name": "Aarav Sharma",
        "email": "aarav@example.com",
        "tags": ["React", "TypeScript"],
        "score": 82,
        "notes": "Good projects.",
        "stage": Stage.second_round.value,
    },
    {
        "name": "Sara Khan",
        "email": "sara@example.com",
        "tags": ["UI/UX", "Next.js"],
        "score": 76,
        "stage": Stage.first_round.value,
    },
    {
        "name": "Rohit Verma",
        "email": "rohit@example.com",
        "tags": ["Tailwind", "Vite"],
        "score": 68,
        "stage": Stage.sourced.value,
    },
]
