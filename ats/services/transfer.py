"""JSON backup / restore and CSV export.

The JSON document has the same shape as the local snapshot.  Import is
all-or-nothing: the document is fully parsed before the store is touched.
CSV is a projection of the currently filtered candidate list.
"""

from __future__ import annotations

import csv
import io
import logging
import re
import time
from collections.abc import Sequence

from ats.core.errors import ParseFailure, ValidationFailure
from ats.models.candidate import Candidate, normalize_stage
from ats.models.enums import PersistMode
from ats.models.state import ATSState
from ats.services.session import ATSSession
from ats.storage.mappers import dump_state_document, parse_state_document

logger = logging.getLogger(__name__)

CSV_COLUMNS: list[str] = ["id", "name", "email", "phone", "tags", "score", "stage", "appliedAt"]


def _millis() -> int:
    return int(time.time() * 1000)


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------

def export_state_json(state: ATSState) -> str:
    return dump_state_document(state)


def parse_state_json(raw: str | bytes) -> ATSState:
    """Parse an exported document; raises ``ParseFailure``."""
    return parse_state_document(raw)


def import_state_json(session: ATSSession, raw: str | bytes) -> str:
    """Replace the whole board with an exported document.

    Only available on the local backend.  On a parse failure the current
    state is kept.
    """
    if session.mode != PersistMode.local:
        raise session.fail(ValidationFailure("JSON import is only available in local mode"))
    try:
        state = parse_state_json(raw)
    except ParseFailure as exc:
        raise session.fail(ParseFailure("Import failed: invalid JSON", exc)) from exc
    logger.info("state_imported", extra={"jobs": len(state.jobs)})
    return session.replace_state(state, "State imported")


def json_filename() -> str:
    return f"ats_state_{_millis()}.json"


# ---------------------------------------------------------------------------
# CSV
# ---------------------------------------------------------------------------

def candidate_csv_row(candidate: Candidate) -> list[str]:
    return [
        candidate.id,
        candidate.name,
        candidate.email or "",
        candidate.phone or "",
        "|".join(candidate.tags),
        str(candidate.score) if candidate.score is not None else "",
        normalize_stage(candidate.stage).value,
        candidate.applied_at.isoformat(),
    ]


def export_candidates_csv(candidates: Sequence[Candidate]) -> str:
    """Every field quoted, embedded quotes doubled, one line per candidate."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    for candidate in candidates:
        writer.writerow(candidate_csv_row(candidate))
    return buffer.getvalue()


def csv_filename(job_title: str) -> str:
    slug = re.sub(r"\s+", "_", job_title.strip())
    return f"candidates_{slug}_{_millis()}.csv"
