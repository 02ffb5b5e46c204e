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
"""Request/response boundary protocols.

The server framework supplies objects satisfying these; the ASGI
implementation lives in :mod:`pysession.adapters.starlette`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pysession.session import Session


@runtime_checkable
class RequestContext(Protocol):
    """Incoming side: cookie lookup plus slots for the bound session and store."""

    session: Session | None
    session_store: Any

    def get_cookie(self, name: str) -> str | None: ...


@runtime_checkable
class ResponseContext(Protocol):
    """Outgoing side: header mutation and a single finalization operation."""

    @property
    def headers_sent(self) -> bool: ...

    def set_header(self, name: str, value: str) -> None: ...

    async def end(self) -> None: ...
