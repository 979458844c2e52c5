"""Unit tests for the stage transition controller on the seeded board."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from ats.core.errors import TransportFailure
from ats.models.enums import PersistMode, Stage
from ats.services.session import ATSSession
from ats.services.transitions import StageTransitionController, resolve_target_stage
from ats.storage.local import LocalAdapter


def _find(session: ATSSession, name: str) -> tuple[str, str]:
    job = session.selected_job()
    assert job is not None
    for candidate in job.candidates:
        if candidate.name == name:
            return job.id, candidate.id
    raise AssertionError(name)


class TestStageTransitions:

    @pytest.mark.asyncio
    async def test_move_seed_candidate_to_hired(self, session: ATSSession) -> None:
        """Rohit Verma leaves Sourced empty and fills Hired."""
        job_id, rohit = _find(session, "Rohit Verma")
        controller = StageTransitionController(session)

        result = await controller.move(job_id, rohit, "Hired")

        assert result.moved
        assert result.from_stage is Stage.sourced
        assert result.to_stage is Stage.hired
        assert result.notice == "Moved to Hired"
        board = session.board()
        assert board.column(Stage.sourced).count == 0
        assert board.column(Stage.hired).count == 1
        assert session.local.state.find_job(job_id).find_candidate(rohit).stage == "Hired"

    @pytest.mark.asyncio
    async def test_move_is_idempotent(self, session: ATSSession) -> None:
        job_id, aarav = _find(session, "Aarav Sharma")
        controller = StageTransitionController(session)

        first = await controller.move(job_id, aarav, "Rejected")
        before = session.store.get_state()
        second = await controller.move(job_id, aarav, "Rejected")

        assert first.moved
        assert not second.moved
        assert second.reason == "same_stage"
        assert session.store.get_state() == before

    @pytest.mark.asyncio
    async def test_drop_on_card_uses_its_column(self, session: ATSSession) -> None:
        job_id, rohit = _find(session, "Rohit Verma")
        _, sara = _find(session, "Sara Khan")

        result = await StageTransitionController(session).move(job_id, rohit, sara)

        assert result.moved
        assert result.to_stage is Stage.first_round

    @pytest.mark.asyncio
    async def test_unresolved_drop_is_ignored(self, session: ATSSession) -> None:
        job_id, rohit = _find(session, "Rohit Verma")
        before = session.store.get_state()
        controller = StageTransitionController(session)

        assert (await controller.move(job_id, rohit, "Nowhere")).reason == "unresolved"
        assert (await controller.move(job_id, "ghost", "Hired")).reason == "unresolved"
        assert (await controller.move("no-job", rohit, "Hired")).reason == "unresolved"
        assert session.store.get_state() == before

    @pytest.mark.asyncio
    async def test_wip_limit_is_advisory(self, session: ATSSession) -> None:
        session.wip_limits = {Stage.first_round: 1}
        job_id, rohit = _find(session, "Rohit Verma")

        result = await StageTransitionController(session).move(job_id, rohit, Stage.first_round)

        assert result.moved
        assert result.over_limit == [Stage.first_round]

    @pytest.mark.asyncio
    async def test_adapter_failure_leaves_store_unchanged(self, session: ATSSession) -> None:
        job_id, rohit = _find(session, "Rohit Verma")
        before = session.store.get_state()
        session.adapter.update_candidate = AsyncMock(  # type: ignore[method-assign]
            side_effect=TransportFailure("Update candidate failed: timeout")
        )

        with pytest.raises(TransportFailure):
            await StageTransitionController(session).move(job_id, rohit, "Hired")

        assert session.store.get_state() == before
        assert session.last_notice == "Update candidate failed: timeout"

    def test_resolve_target_stage(self, session: ATSSession) -> None:
        job = session.selected_job()
        assert resolve_target_stage(job, "Interview: Final round") is Stage.final_round
        assert resolve_target_stage(job, "unknown") is None

    @pytest.mark.asyncio
    async def test_move_across_backend_switch_is_superseded(
        self, local_adapter: LocalAdapter
    ) -> None:
        """A move still in flight when the backend switches reports no success."""
        gate = asyncio.Event()
        remote = MagicMock()
        remote.mode = PersistMode.remote
        remote.load_all = AsyncMock(return_value=local_adapter.state)

        async def _slow_update(*args, **kwargs):  # type: ignore[no-untyped-def]
            await gate.wait()

        remote.update_candidate = AsyncMock(side_effect=_slow_update)
        session = ATSSession(local_adapter, remote_factory=lambda: remote)
        await session.switch_backend(PersistMode.remote)
        job_id, rohit = _find(session, "Rohit Verma")
        controller = StageTransitionController(session)

        pending = asyncio.ensure_future(controller.move(job_id, rohit, "Hired"))
        while not remote.update_candidate.await_count:
            await asyncio.sleep(0)
        await session.switch_backend(PersistMode.local)
        gate.set()
        result = await pending

        assert result.moved is False
        assert result.reason == "superseded"
        assert not any(n.startswith("Moved to") for n in session.notices)
        assert session.store.find_candidate(job_id, rohit).stage == "Sourced"
