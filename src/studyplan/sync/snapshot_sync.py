"""Debounced persistence of a schedule repository.

The local repository is authoritative: a failed save is logged and the
snapshot stays dirty until the next change or an explicit ``flush``.
"""

from __future__ import annotations

import asyncio
from typing import Callable

from loguru import logger

from studyplan.repository import ScheduleRepository

from .stores import SnapshotStore

DEFAULT_SYNC_DEBOUNCE_SECONDS = 2.0


class SnapshotSync:
    def __init__(
        self,
        *,
        user_id: str,
        store: SnapshotStore,
        repository: ScheduleRepository,
        debounce_seconds: float = DEFAULT_SYNC_DEBOUNCE_SECONDS,
    ) -> None:
        self.user_id = user_id
        self.store = store
        self.repository = repository
        self.debounce_seconds = max(0.0, float(debounce_seconds))
        self.dirty = False
        self._timer: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task[bool]] = set()
        self._save_lock = asyncio.Lock()
        self._unsubscribe: Callable[[], None] | None = None

    def attach(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self.repository.subscribe(self._on_change)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._cancel_timer()

    def _on_change(self, action: str) -> None:
        logger.debug(f"Snapshot of {self.user_id} changed by {action}")
        self.dirty = True
        self.schedule_save()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def schedule_save(self) -> None:
        """(Re)arm the debounce timer; without a running loop only the dirty flag is kept."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._cancel_timer()
        self._timer = loop.call_later(self.debounce_seconds, self._start_save)

    def _start_save(self) -> None:
        self._timer = None
        task = asyncio.ensure_future(self.flush())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def flush(self) -> bool:
        """Save the current document now. Returns False when the store failed.

        Saves run one at a time; a flush issued during a save waits for it and
        then writes the newer document.
        """
        self._cancel_timer()
        async with self._save_lock:
            document = self.repository.to_document()
            self.dirty = False
            try:
                await self.store.save_snapshot(self.user_id, document)
            except Exception as exc:
                self.dirty = True
                logger.error(f"Failed to save snapshot for {self.user_id}: {exc}")
                return False
        logger.info(f"Saved snapshot for {self.user_id}")
        return True

    async def wait_idle(self) -> None:
        """Wait for every in-flight debounced save."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def load(self) -> bool:
        """Replace the repository content with the stored document.

        Returns False when nothing was stored or loading failed.
        """
        try:
            document = await self.store.load_snapshot(self.user_id)
            if document is None:
                logger.info(f"No stored snapshot for {self.user_id}")
                return False
            self.repository.replace_from_document(document)
        except Exception as exc:
            logger.error(f"Failed to load snapshot for {self.user_id}: {exc}")
            return False
        self.dirty = False
        logger.info(f"Loaded snapshot for {self.user_id}")
        return True
