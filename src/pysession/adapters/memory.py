# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""In-memory session store with lazy TTL expiry."""

from __future__ import annotations

import json
import time
from typing import Any

from pysession.events import StoreEvents
from pysession.ports.outbound import SessionRecord


class MemorySessionStore(StoreEvents):
    """Process-local store keeping JSON snapshots of session records.

    Suitable for development, testing, and single-process applications.
    Expiry is derived from the record's ``cookie.max_age`` at write time and
    checked lazily on read: expired entries read as absent and are evicted.
    Records without ``max_age`` never expire here.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, tuple[str, float | None]] = {}

    async def get(self, session_id: str) -> SessionRecord | None:
        """Return the stored record, or ``None`` if missing or expired."""
        entry = self._sessions.get(session_id)
        if entry is None:
            return None

        raw, expires_at = entry
        if _expired(expires_at):
            del self._sessions[session_id]
            return None

        return json.loads(raw)

    async def set(self, session_id: str, record: SessionRecord) -> None:
        self._sessions[session_id] = (json.dumps(record), _expiry_of(record))

    async def touch(self, session_id: str, record: SessionRecord) -> None:
        """Refresh cookie and expiry of a live entry; absent ids are ignored."""
        stored = await self.get(session_id)
        if stored is None:
            return
        stored["cookie"] = record.get("cookie", stored.get("cookie"))
        await self.set(session_id, stored)

    async def destroy(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    async def all(self) -> list[SessionRecord]:
        """All live records in the order they were first written."""
        records: list[SessionRecord] = []
        for session_id, (raw, expires_at) in list(self._sessions.items()):
            if _expired(expires_at):
                del self._sessions[session_id]
                continue
            records.append(json.loads(raw))
        return records

    async def clear(self) -> None:
        self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)


def _expiry_of(record: SessionRecord) -> float | None:
    cookie: Any = record.get("cookie") or {}
    max_age = cookie.get("max_age")
    if max_age is None:
        return None
    return time.time() + max_age


def _expired(expires_at: float | None) -> bool:
    return expires_at is not None and time.time() >= expires_at
