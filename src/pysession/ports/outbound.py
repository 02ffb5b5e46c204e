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
"""Session store protocols."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

# Persisted form of a session: data keys plus a "cookie" dict.
SessionRecord = dict[str, Any]


@runtime_checkable
class SessionStore(Protocol):
    """Asynchronous session persistence contract.

    Any object with these coroutine methods is a store; callback-style
    implementations are normalized by :func:`pysession.store_adapter.adapt_store`.
    Stores may additionally provide ``touch(session_id, record)`` to refresh a
    record's TTL, and ``on(event, listener)`` to publish readiness.
    """

    async def get(self, session_id: str) -> SessionRecord | None: ...

    async def set(self, session_id: str, record: SessionRecord) -> None: ...

    async def destroy(self, session_id: str) -> None: ...


@runtime_checkable
class TouchableSessionStore(SessionStore, Protocol):
    """Store that can extend a record's lifetime without rewriting it."""

    async def touch(self, session_id: str, record: SessionRecord) -> None: ...
