"""Saved view presets (named query + filter combinations).

Presets are stored as one JSON list under ``VIEWS_STORAGE_KEY`` next to the
local board snapshot, independent of the active backend.
"""

from __future__ import annotations

import logging
from uuid import uuid4

from pydantic import TypeAdapter, ValidationError

from ats.core.constants import VIEWS_STORAGE_KEY
from ats.core.errors import NotFoundFailure, ValidationFailure
from ats.models.filters import CandidateFilters, ViewPreset
from ats.storage.snapshots import SnapshotFiles

logger = logging.getLogger(__name__)

_PRESET_LIST = TypeAdapter(list[ViewPreset])


class ViewPresetStore:
    """CRUD over saved view presets."""

    def __init__(self, snapshots: SnapshotFiles) -> None:
        self._snapshots = snapshots
        self._presets = self._load()

    def _load(self) -> list[ViewPreset]:
        raw = self._snapshots.read(VIEWS_STORAGE_KEY)
        if raw is None:
            return []
        try:
            return _PRESET_LIST.validate_json(raw)
        except ValidationError:
            logger.warning("view_presets_unreadable_starting_empty")
            return []

    def _save(self) -> None:
        document = _PRESET_LIST.dump_json(self._presets, by_alias=True, indent=2)
        self._snapshots.write(VIEWS_STORAGE_KEY, document.decode("utf-8"))

    def list_presets(self) -> list[ViewPreset]:
        return [p.model_copy(deep=True) for p in self._presets]

    def get_preset(self, preset_id: str) -> ViewPreset:
        for preset in self._presets:
            if preset.id == preset_id:
                return preset.model_copy(deep=True)
        raise NotFoundFailure(f"View not found: {preset_id}")

    def save_preset(self, name: str, filters: CandidateFilters, query: str = "") -> ViewPreset:
        name = name.strip()
        if not name:
            raise ValidationFailure("View name is required")
        preset = ViewPreset(
            id=uuid4().hex[:8],
            name=name,
            filters=filters.model_copy(deep=True),
            query=query,
        )
        self._presets.append(preset)
        self._save()
        logger.info("view_preset_saved", extra={"preset_id": preset.id, "preset_name": name})
        return preset.model_copy(deep=True)

    def delete_preset(self, preset_id: str) -> None:
        remaining = [p for p in self._presets if p.id != preset_id]
        if len(remaining) == len(self._presets):
            raise NotFoundFailure(f"View not found: {preset_id}")
        self._presets = remaining
        self._save()
