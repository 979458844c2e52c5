"""Filter / search engine for the board.

Pure functions from ``(candidates, query, filters)`` to the ordered,
filtered list and from that list to the six stage columns.  Nothing here
mutates its inputs; the grouped copies carry the normalized stage while the
stored records keep whatever stage string they had.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date, datetime, time, timedelta, timezone
from difflib import SequenceMatcher

from ats.core.constants import SEARCH_FIELDS, SEARCH_THRESHOLD
from ats.models.candidate import Candidate, normalize_stage
from ats.models.enums import Stage
from ats.models.filters import BoardView, CandidateFilters, StageColumn
from ats.models.job import Job


# ---------------------------------------------------------------------------
# Text search
# ---------------------------------------------------------------------------

def _searchable_texts(candidate: Candidate) -> list[str]:
    texts: list[str] = []
    for field in SEARCH_FIELDS:
        value = getattr(candidate, field)
        if isinstance(value, list):
            texts.extend(value)
        elif value:
            texts.append(value)
    return [t.lower() for t in texts if t]


def match_score(query: str, text: str) -> float:
    """Similarity of *query* to *text* in ``[0, 1]``.

    A substring hit scores 1.0.  Otherwise the best ``SequenceMatcher`` ratio
    against the whole text and against every run of words as long as the
    query, so a typo in one word of a long note still matches.
    """
    if not query or not text:
        return 0.0
    if query in text:
        return 1.0
    best = SequenceMatcher(None, query, text).ratio()
    words = text.split()
    width = max(1, len(query.split()))
    for start in range(len(words)):
        window = " ".join(words[start:start + width])
        best = max(best, SequenceMatcher(None, query, window).ratio())
        if best == 1.0:
            break
    return best


def candidate_match_score(query: str, candidate: Candidate) -> float:
    q = query.strip().lower()
    return max((match_score(q, text) for text in _searchable_texts(candidate)), default=0.0)


def search_candidates(
    candidates: Sequence[Candidate],
    query: str,
    threshold: float = SEARCH_THRESHOLD,
) -> list[Candidate]:
    """Fuzzy search over name, email, tags and notes, best match first.

    A blank query returns the list unchanged.
    """
    if not query or not query.strip():
        return list(candidates)
    scored = [(candidate_match_score(query, c), index, c) for index, c in enumerate(candidates)]
    hits = [entry for entry in scored if entry[0] >= threshold]
    hits.sort(key=lambda entry: (-entry[0], entry[1]))
    return [c for _, _, c in hits]


# ---------------------------------------------------------------------------
# Structured filters
# ---------------------------------------------------------------------------

def has_all_tags(candidate: Candidate, required: Sequence[str]) -> bool:
    have = {t.lower() for t in candidate.tags}
    return all(t.lower() in have for t in required)


def _day_start(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def apply_filters(candidates: Sequence[Candidate], filters: CandidateFilters) -> list[Candidate]:
    """Tags (all required), score bounds, applied-date window.

    A candidate without a score fails any score bound that is set.  The
    date window is padded by one day on each side.
    """
    result = list(candidates)
    if filters.tags:
        result = [c for c in result if has_all_tags(c, filters.tags)]
    if filters.score_min is not None:
        result = [c for c in result if c.score is not None and c.score >= filters.score_min]
    if filters.score_max is not None:
        result = [c for c in result if c.score is not None and c.score <= filters.score_max]
    if filters.applied_from is not None:
        lower = _day_start(filters.applied_from) - timedelta(days=1)
        result = [c for c in result if c.applied_at > lower]
    if filters.applied_to is not None:
        upper = _day_start(filters.applied_to) + timedelta(days=1)
        result = [c for c in result if c.applied_at < upper]
    return result


def filter_candidates(
    candidates: Sequence[Candidate],
    query: str = "",
    filters: CandidateFilters | None = None,
) -> list[Candidate]:
    """Text search followed by the structured filters."""
    result = search_candidates(candidates, query)
    if filters is not None and not filters.is_empty:
        result = apply_filters(result, filters)
    return result


# ---------------------------------------------------------------------------
# Grouping
# ---------------------------------------------------------------------------

def group_by_stage(candidates: Sequence[Candidate]) -> dict[Stage, list[Candidate]]:
    """Partition into the six columns, in stage order, keeping relative order."""
    groups: dict[Stage, list[Candidate]] = {stage: [] for stage in Stage}
    for candidate in candidates:
        stage = normalize_stage(candidate.stage)
        groups[stage].append(candidate.model_copy(update={"stage": stage.value}))
    return groups


def blind_label(candidate_id: str) -> str:
    """Stand-in name shown when names are hidden for bias reduction."""
    return f"Candidate {candidate_id[-4:]}"


def build_board(
    job: Job | None,
    query: str = "",
    filters: CandidateFilters | None = None,
    wip_limits: Mapping[Stage, int | None] | None = None,
    blind: bool = False,
) -> BoardView:
    """Derive the board for *job*; ``None`` yields an empty "no jobs" board.

    With *blind* set, card names are replaced by ``blind_label``.  Search
    still runs against the real names.
    """
    filters = filters or CandidateFilters()
    if job is None:
        return BoardView(query=query, filters=filters, blind=blind)

    filtered = filter_candidates(job.candidates, query, filters)
    limits = wip_limits or {}
    columns: list[StageColumn] = []
    for stage, members in group_by_stage(filtered).items():
        if blind:
            members = [m.model_copy(update={"name": blind_label(m.id)}) for m in members]
        limit = None if stage.is_terminal else limits.get(stage)
        columns.append(
            StageColumn(
                stage=stage,
                count=len(members),
                wip_limit=limit,
                over_limit=limit is not None and len(members) > limit,
                candidates=members,
            )
        )
    return BoardView(
        job_id=job.id,
        job_title=job.title,
        query=query,
        filters=filters,
        columns=columns,
        total=len(job.candidates),
        filtered=len(filtered),
        blind=blind,
    )
