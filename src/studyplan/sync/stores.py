"""Remote snapshot stores keyed by user id."""

from __future__ import annotations

import asyncio
import re
from copy import deepcopy
from pathlib import Path
from typing import Any, Protocol

from studyplan.io import read_json, write_json

_USER_ID_RE = re.compile(r"^[A-Za-z0-9_-][A-Za-z0-9_.-]*$")


class SnapshotStore(Protocol):
    async def load_snapshot(self, user_id: str) -> dict[str, Any] | None: ...

    async def save_snapshot(self, user_id: str, document: dict[str, Any]) -> None: ...


class InMemorySnapshotStore:
    """Process-local store; documents are copied on the way in and out."""

    def __init__(self, documents: dict[str, dict[str, Any]] | None = None) -> None:
        self.documents: dict[str, dict[str, Any]] = deepcopy(documents or {})
        self.save_count = 0

    async def load_snapshot(self, user_id: str) -> dict[str, Any] | None:
        document = self.documents.get(user_id)
        return deepcopy(document) if document is not None else None

    async def save_snapshot(self, user_id: str, document: dict[str, Any]) -> None:
        self.documents[user_id] = deepcopy(document)
        self.save_count += 1


class JsonFileSnapshotStore:
    """One ``<user_id>.json`` file per user under ``root``."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def path_for(self, user_id: str) -> Path:
        if not isinstance(user_id, str) or not _USER_ID_RE.match(user_id):
            raise ValueError(f"Invalid user id for file store: {user_id!r}")
        return self.root / f"{user_id}.json"

    async def load_snapshot(self, user_id: str) -> dict[str, Any] | None:
        path = self.path_for(user_id)
        if not path.exists():
            return None
        return await asyncio.to_thread(read_json, path)

    async def save_snapshot(self, user_id: str, document: dict[str, Any]) -> None:
        await asyncio.to_thread(write_json, self.path_for(user_id), document)
