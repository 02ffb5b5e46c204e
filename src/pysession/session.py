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
"""Session — per-request mutable session state and its commit decision."""

from __future__ import annotations

import inspect
import json
from collections.abc import Iterator, MutableMapping
from typing import TYPE_CHECKING, Any

import structlog

from pysession.cookie import CookieAttributes
from pysession.ports.outbound import SessionRecord

if TYPE_CHECKING:
    from pysession.options import SessionOptions
    from pysession.ports.boundary import RequestContext, ResponseContext

logger = structlog.get_logger(__name__)

COOKIE_KEY = "cookie"


def _serialize(data: dict[str, Any]) -> str:
    return json.dumps(data, sort_keys=True, default=repr)


class Session(MutableMapping[str, Any]):
    """Session data for one request, backed by ``options.store``.

    Behaves as a mapping over the application's data. ``id``, ``cookie`` and
    ``is_new`` are reserved and never part of the data; the key ``"cookie"``
    cannot be assigned.

    Attributes:
        cookie: The cookie attributes owned by this session.
    """

    def __init__(
        self,
        request: RequestContext,
        response: ResponseContext,
        record: SessionRecord | None,
        options: SessionOptions,
        *,
        session_id: str | None = None,
    ) -> None:
        self._request = request
        self._response = response
        self._options = options

        if record is not None:
            if session_id is None:
                raise ValueError("session_id is required when hydrating a stored record")
            self._id = session_id
            self._data: dict[str, Any] = {k: v for k, v in record.items() if k != COOKIE_KEY}
            stored_cookie = record.get(COOKIE_KEY)
            self.cookie = CookieAttributes.from_dict(stored_cookie) if stored_cookie else options.cookie.copy()
            self._is_new = False
        else:
            self._id = options.genid()
            self._data = {}
            self.cookie = options.cookie.copy()
            self._is_new = True

        self._snapshot = _serialize(self._data)
        # set by the first commit that wrote to the store or emitted the cookie
        self._persisted = False
        self._cookie_emitted = False

    @property
    def id(self) -> str:
        return self._id

    @property
    def is_new(self) -> bool:
        """``True`` if no stored record existed for this request's id."""
        return self._is_new

    @property
    def data(self) -> dict[str, Any]:
        return self._data

    # -- mapping ------------------------------------------------------------

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        if key == COOKIE_KEY:
            raise KeyError(f"'{COOKIE_KEY}' is reserved for cookie attributes")
        self._data[key] = value

    def __delitem__(self, key: str) -> None:
        del self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Session(id={self._id!r}, is_new={self._is_new}, data={self._data!r})"

    # -- persistence --------------------------------------------------------

    def to_record(self) -> SessionRecord:
        """Persisted form: the data plus the cookie attributes."""
        return {**self._data, COOKIE_KEY: self.cookie.to_dict()}

    async def touch(self) -> None:
        """Extend the session lifetime without rewriting its data.

        A no-op against stores without ``touch``.
        """
        self.cookie.reset_expires()
        touch = getattr(self._options.store, "touch", None)
        if callable(touch):
            await touch(self._id, self.to_record())

    async def save(self) -> None:
        self.cookie.reset_expires()
        await self._options.store.set(self._id, self.to_record())

    async def destroy(self) -> None:
        """Remove the session from the store and unbind it from the request."""
        self._request.session = None
        await self._options.store.destroy(self._id)
        logger.debug("session_destroyed", session_id=self._id)

    def _should_touch(self) -> bool:
        touch_after = int(self._options.touch_after)
        if touch_after < 0 or self.cookie.max_age is None:
            return False
        remaining = self.cookie.remaining_ms()
        if remaining is None:
            return False
        # time elapsed since expiry was last reset
        return self.cookie.max_age * 1000 - remaining >= touch_after

    async def commit(self) -> None:
        """Persist or touch as needed, then emit the cookie when warranted.

        Saves when the data differs from its last persisted state; otherwise
        touches when ``touch_after`` has elapsed since the last expiry reset.
        The cookie is set for new sessions, and for touched sessions when
        ``rolling`` is on. Calling it again in the same request only saves
        changes made since. Store errors propagate.
        """
        saved = touched = False

        if _serialize(self._data) != self._snapshot:
            await self.save()
            self._snapshot = _serialize(self._data)
            saved = True
            logger.debug("session_saved", session_id=self._id)
        elif not self._persisted and self._should_touch():
            await self.touch()
            touched = True
            logger.debug("session_touched", session_id=self._id)

        if saved or touched:
            self._persisted = True
        if not ((self._options.rolling and touched) or (self._is_new and not self._cookie_emitted)):
            return
        if self._response.headers_sent:
            logger.debug("session_cookie_skipped", session_id=self._id, saved=saved)
            return

        value: Any = self._id
        if self._options.encode is not None:
            value = self._options.encode(self._id)
            if inspect.isawaitable(value):
                value = await value
        self._response.set_header("Set-Cookie", self.cookie.serialize(self._options.name, value))
        self._cookie_emitted = True
