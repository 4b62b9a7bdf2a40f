from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import pytest

from studyplan.repository import ScheduleRepository
from studyplan.sync import InMemorySnapshotStore, JsonFileSnapshotStore, SnapshotSync


class _FailingStore(InMemorySnapshotStore):
    async def save_snapshot(self, user_id: str, document: dict[str, Any]) -> None:
        raise ConnectionError("remote unavailable")

    async def load_snapshot(self, user_id: str) -> dict[str, Any] | None:
        raise ConnectionError("remote unavailable")


class _SlowStore(InMemorySnapshotStore):
    def __init__(self) -> None:
        super().__init__()
        self.active = 0
        self.max_active = 0

    async def save_snapshot(self, user_id: str, document: dict[str, Any]) -> None:
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        await asyncio.sleep(0.02)
        await super().save_snapshot(user_id, document)
        self.active -= 1


def test_mutations_are_debounced_into_one_save() -> None:
    store = InMemorySnapshotStore()
    repository = ScheduleRepository()

    async def scenario() -> SnapshotSync:
        sync = SnapshotSync(user_id="u1", store=store, repository=repository, debounce_seconds=0.01)
        sync.attach()
        repository.add_subject("math", "Math")
        repository.enroll_subject("math", "2026-09")
        repository.toggle_day("math", "2026-09", "2026-09-01")
        await asyncio.sleep(0.1)
        await sync.wait_idle()
        return sync

    sync = asyncio.run(scenario())

    assert store.save_count == 1
    assert sync.dirty is False
    saved = store.documents["u1"]["subjects"][0]
    assert saved["schedules"]["2026-09"]["plannedDays"] == ["2026-09-01"]


def test_mutation_without_running_loop_only_marks_dirty() -> None:
    store = InMemorySnapshotStore()
    repository = ScheduleRepository()
    sync = SnapshotSync(user_id="u1", store=store, repository=repository)
    sync.attach()

    repository.add_subject("math")

    assert sync.dirty is True
    assert store.save_count == 0
    assert asyncio.run(sync.flush()) is True
    assert store.save_count == 1


def test_failed_save_is_not_raised_and_keeps_snapshot_dirty() -> None:
    repository = ScheduleRepository()
    repository.add_subject("math")
    sync = SnapshotSync(user_id="u1", store=_FailingStore(), repository=repository)

    assert asyncio.run(sync.flush()) is False
    assert sync.dirty is True
    assert repository.get_subject("math") is not None


def test_load_replaces_content_and_keeps_listeners() -> None:
    store = InMemorySnapshotStore({"u1": {"subjects": [{"id": "bio", "title": "Biology"}], "activeScheduleMonths": ["2026-09"]}})
    repository = ScheduleRepository()
    actions: list[str] = []
    repository.subscribe(actions.append)
    sync = SnapshotSync(user_id="u1", store=store, repository=repository)

    assert asyncio.run(sync.load()) is True
    assert [subject.id for subject in repository.subjects] == ["bio"]
    assert repository.active_months == ["2026-09"]
    assert actions == []

    repository.enroll_subject("bio", "2026-09")
    assert actions == ["enroll_subject"]


def test_load_failures_are_logged_not_raised() -> None:
    repository = ScheduleRepository()
    repository.add_subject("math")

    assert asyncio.run(SnapshotSync(user_id="u1", store=_FailingStore(), repository=repository).load()) is False
    assert asyncio.run(SnapshotSync(user_id="nobody", store=InMemorySnapshotStore(), repository=repository).load()) is False
    assert repository.get_subject("math") is not None


def test_json_file_store_round_trip(tmp_path: Path) -> None:
    store = JsonFileSnapshotStore(tmp_path / "snapshots")
    document = {"subjects": [], "activeScheduleMonths": ["2026-09"]}

    asyncio.run(store.save_snapshot("user-1", document))

    path = tmp_path / "snapshots" / "user-1.json"
    assert json.loads(path.read_text(encoding="utf-8")) == document
    assert asyncio.run(store.load_snapshot("user-1")) == document
    assert asyncio.run(store.load_snapshot("user-2")) is None


def test_json_file_store_rejects_path_like_user_ids(tmp_path: Path) -> None:
    store = JsonFileSnapshotStore(tmp_path)
    with pytest.raises(ValueError):
        store.path_for("../escape")
    with pytest.raises(ValueError):
        store.path_for("")


def test_concurrent_flushes_never_overlap() -> None:
    store = _SlowStore()
    repository = ScheduleRepository()
    repository.add_subject("math")
    sync = SnapshotSync(user_id="u1", store=store, repository=repository)

    async def scenario() -> list[bool]:
        return await asyncio.gather(sync.flush(), sync.flush())

    assert asyncio.run(scenario()) == [True, True]
    assert store.max_active == 1
    assert store.save_count == 2


def test_wait_idle_waits_for_every_debounced_save() -> None:
    store = _SlowStore()
    repository = ScheduleRepository()

    async def scenario() -> None:
        sync = SnapshotSync(user_id="u1", store=store, repository=repository, debounce_seconds=0.005)
        sync.attach()
        repository.add_subject("math")
        await asyncio.sleep(0.01)
        repository.add_subject("bio")
        await asyncio.sleep(0.01)
        await sync.wait_idle()

    asyncio.run(scenario())

    assert store.max_active == 1
    assert store.save_count == 2
    assert [subject["id"] for subject in store.documents["u1"]["subjects"]] == ["math", "bio"]
