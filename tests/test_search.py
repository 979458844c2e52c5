"""Unit tests for fuzzy search, structured filters and stage grouping."""

from datetime import date, datetime, timezone

from ats.models.candidate import Candidate
from ats.models.enums import Stage
from ats.models.filters import CandidateFilters
from ats.models.job import Job
from ats.services.search import (
    apply_filters,
    build_board,
    filter_candidates,
    group_by_stage,
    match_score,
    search_candidates,
)


def _candidates() -> list[Candidate]:
    return [
        Candidate(
            id="c1",
            name="Aarav Sharma",
            email="aarav@example.com",
            tags=["React", "TypeScript"],
            score=82,
            notes="Good projects.",
            stage="Interview: Second Round",
            applied_at=datetime(2024, 3, 10, 12, tzinfo=timezone.utc),
        ),
        Candidate(
            id="c2",
            name="Sara Khan",
            email="sara@example.com",
            tags=["React", "UI/UX"],
            score=76,
            stage="Applied",
            applied_at=datetime(2024, 3, 15, 8, tzinfo=timezone.utc),
        ),
        Candidate(
            id="c3",
            name="Rohit Verma",
            tags=["Tailwind"],
            score=None,
            stage="Sourced",
            applied_at=datetime(2024, 4, 1, 8, tzinfo=timezone.utc),
        ),
    ]


class TestFuzzySearch:

    def test_blank_query_is_identity(self) -> None:
        candidates = _candidates()
        assert search_candidates(candidates, "   ") == candidates

    def test_substring_match(self) -> None:
        assert [c.id for c in search_candidates(_candidates(), "rohit")] == ["c3"]

    def test_typo_still_matches(self) -> None:
        assert "c1" in [c.id for c in search_candidates(_candidates(), "Sharmaa")]

    def test_searches_tags_and_notes(self) -> None:
        assert [c.id for c in search_candidates(_candidates(), "tailwind")] == ["c3"]
        assert [c.id for c in search_candidates(_candidates(), "projects")] == ["c1"]

    def test_unrelated_query_matches_nothing(self) -> None:
        assert search_candidates(_candidates(), "kubernetes") == []

    def test_match_score_range(self) -> None:
        assert match_score("abc", "xxabcxx") == 1.0
        assert 0.0 <= match_score("abc", "zzz") < 1.0
        assert match_score("", "abc") == 0.0


class TestStructuredFilters:

    def test_tag_filter_is_conjunctive(self) -> None:
        result = apply_filters(_candidates(), CandidateFilters(tags=["react", "TypeScript"]))
        assert [c.id for c in result] == ["c1"]

    def test_score_bounds_exclude_unscored(self) -> None:
        result = apply_filters(_candidates(), CandidateFilters(score_min=70))
        assert [c.id for c in result] == ["c1", "c2"]
        result = apply_filters(_candidates(), CandidateFilters(score_max=80))
        assert [c.id for c in result] == ["c2"]

    def test_date_window(self) -> None:
        filters = CandidateFilters(applied_from=date(2024, 3, 12), applied_to=date(2024, 3, 31))
        assert [c.id for c in apply_filters(_candidates(), filters)] == ["c2"]

    def test_date_window_lower_pad(self) -> None:
        """The day before ``applied_from`` still counts."""
        candidates = [
            Candidate(id="inside", applied_at=datetime(2024, 3, 11, 12, tzinfo=timezone.utc)),
            Candidate(id="edge", applied_at=datetime(2024, 3, 11, tzinfo=timezone.utc)),
            Candidate(id="before", applied_at=datetime(2024, 3, 10, 23, 59, tzinfo=timezone.utc)),
        ]
        filters = CandidateFilters(applied_from=date(2024, 3, 12))
        assert [c.id for c in apply_filters(candidates, filters)] == ["inside"]

    def test_date_window_includes_last_day(self) -> None:
        candidates = [
            Candidate(id="late", applied_at=datetime(2024, 3, 31, 23, tzinfo=timezone.utc)),
            Candidate(id="next", applied_at=datetime(2024, 4, 1, tzinfo=timezone.utc)),
        ]
        filters = CandidateFilters(applied_to=date(2024, 3, 31))
        assert [c.id for c in apply_filters(candidates, filters)] == ["late"]

    def test_search_then_filter(self) -> None:
        result = filter_candidates(_candidates(), "example.com", CandidateFilters(score_min=80))
        assert [c.id for c in result] == ["c1"]


class TestGrouping:

    def test_group_has_all_stages_in_order(self) -> None:
        groups = group_by_stage(_candidates())
        assert list(groups) == list(Stage)
        assert [c.id for c in groups[Stage.first_round]] == ["c2"]
        assert groups[Stage.first_round][0].stage == "Interview: First Round"
        assert groups[Stage.hired] == []

    def test_grouping_does_not_mutate_input(self) -> None:
        candidates = _candidates()
        group_by_stage(candidates)
        assert candidates[1].stage == "Applied"

    def test_build_board_counts_and_limits(self) -> None:
        job = Job(id="j1", title="Frontend Engineer", candidates=_candidates())
        limits = {Stage.sourced: 0, Stage.hired: 0}
        board = build_board(job, "", CandidateFilters(), limits)
        assert board.total == 3
        assert board.filtered == 3
        assert board.column(Stage.sourced).over_limit
        assert board.column(Stage.sourced).wip_limit == 0
        # terminal stages are never capped
        assert board.column(Stage.hired).wip_limit is None
        assert board.over_limit_stages == [Stage.sourced]

    def test_no_job_gives_empty_board(self) -> None:
        board = build_board(None)
        assert not board.has_job
        assert board.columns == []

    def test_blind_board_hides_names(self) -> None:
        candidate = Candidate(id="cand-7f3a91", name="Sara Khan", stage="Applied")
        job = Job(id="j1", title="Frontend Engineer", candidates=[candidate])

        board = build_board(job, "sara", blind=True)

        assert board.blind
        assert board.filtered == 1
        [card] = board.column(Stage.first_round).candidates
        assert card.name == "Candidate 3a91"
        assert job.candidates[0].name == "Sara Khan"
