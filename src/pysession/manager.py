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
"""SessionManager — resolves, binds and finalizes sessions per request.

Per request the manager moves through: resolve the id from the cookie,
look the record up, bind a :class:`Session` to the request, then wrap the
response's ``end`` so the first finalization commits before the response
is flushed and later ones do nothing.
"""

from __future__ import annotations

import dataclasses
import inspect
import weakref
from collections.abc import Awaitable, Callable
from typing import Any

import structlog

from pysession.adapters.memory import MemorySessionStore
from pysession.core.config import Config
from pysession.events import StoreReadiness
from pysession.logging.structlog_adapter import StructlogAdapter
from pysession.options import SessionOptions
from pysession.ports.boundary import RequestContext, ResponseContext
from pysession.session import Session
from pysession.store_adapter import adapt_store

logger = structlog.get_logger(__name__)


class SessionManager:
    """Coordinates sessions between a request/response pair and the store.

    The ``store_ready`` flag starts ``True`` and follows the store's
    readiness events. It is advisory: while ``False`` requests pass through
    without a session rather than hitting a store known to be down.
    Managers sharing a store may share one *readiness* tracker.
    """

    def __init__(
        self,
        options: SessionOptions | None = None,
        *,
        readiness: StoreReadiness | None = None,
        **option_kwargs: Any,
    ) -> None:
        if options is None:
            options = SessionOptions(**option_kwargs)
        elif option_kwargs:
            options = dataclasses.replace(options, **option_kwargs)

        raw_store = options.store
        self._options = dataclasses.replace(options, store=adapt_store(raw_store))
        self._readiness = readiness if readiness is not None else _watch(raw_store)

    @classmethod
    def from_config(cls, config: Config, **overrides: Any) -> SessionManager:
        """Configure logging from ``pysession.logging`` and build a manager
        from ``pysession.session``; *overrides* are passed to
        :meth:`SessionOptions.from_config`.
        """
        StructlogAdapter().configure(config)
        return cls(SessionOptions.from_config(config, **overrides))

    @property
    def options(self) -> SessionOptions:
        return self._options

    @property
    def store(self) -> Any:
        return self._options.store

    @property
    def store_ready(self) -> bool:
        return self._readiness.ready

    async def apply(self, request: RequestContext, response: ResponseContext) -> Session | None:
        """Bind a session to *request* and guard *response* finalization.

        Returns the bound session, or ``None`` when the store is unavailable.
        A request that already carries a session is returned untouched.
        """
        existing = getattr(request, "session", None)
        if existing is not None:
            return existing

        if not self.store_ready:
            logger.debug("session_skipped_store_unavailable")
            return None

        request.session_store = self.store

        session_id = await self._resolve_id(request)
        record = await self.store.get(session_id) if session_id else None
        if record is not None:
            session = Session(request, response, record, self._options, session_id=session_id)
            logger.debug("session_resolved", session_id=session_id)
        else:
            session = Session(request, response, None, self._options)
            logger.debug("session_created", session_id=session.id)

        request.session = session
        guard = FinalizationGuard(response.end, request, commit=self._options.auto_commit)
        response.end = guard  # type: ignore[method-assign]
        return session

    async def _resolve_id(self, request: RequestContext) -> str | None:
        raw = request.get_cookie(self._options.name)
        if not raw:
            return None
        decode = self._options.decode
        if decode is None:
            return raw
        try:
            decoded = decode(raw)
            if inspect.isawaitable(decoded):
                decoded = await decoded
        except Exception as exc:
            logger.debug("session_id_decode_failed", error=str(exc))
            return None
        if not decoded:
            logger.debug("session_id_decode_failed", error="decoder rejected identifier")
            return None
        return str(decoded)


class FinalizationGuard:
    """One-shot wrapper around a response's finalize operation.

    The first call commits the request's bound session (when *commit* is set
    and a session is still bound) and then runs the original finalizer.
    Every later call returns without doing anything.
    """

    def __init__(
        self,
        finalize: Callable[..., Awaitable[Any]],
        request: RequestContext,
        *,
        commit: bool = True,
    ) -> None:
        self._finalize = finalize
        self._request = request
        self._commit = commit
        self._finalized = False

    @property
    def finalized(self) -> bool:
        return self._finalized

    async def __call__(self, *args: Any, **kwargs: Any) -> Any:
        if self._finalized:
            return None
        self._finalized = True

        session = getattr(self._request, "session", None)
        if self._commit and session is not None:
            await session.commit()
        return await self._finalize(*args, **kwargs)


def _watch(store: Any) -> StoreReadiness:
    if isinstance(store, MemorySessionStore):
        logger.warning("memory_store_in_use", detail="MemorySessionStore is not meant for production")
    return StoreReadiness(store)


# State shared by apply_session calls: the store used when none is named,
# and one readiness tracker per store.
_default_store: MemorySessionStore | None = None
_readiness_by_store: weakref.WeakKeyDictionary[Any, StoreReadiness] = weakref.WeakKeyDictionary()


def _shared_default_store() -> MemorySessionStore:
    global _default_store
    if _default_store is None:
        _default_store = MemorySessionStore()
    return _default_store


async def apply_session(
    request: RequestContext,
    response: ResponseContext,
    options: SessionOptions | None = None,
    **option_kwargs: Any,
) -> Session | None:
    """Apply sessions to a single request without keeping a manager around.

    Calls that name no store share one process-wide
    :class:`MemorySessionStore`. Each store is subscribed to once, however
    many requests go through here.
    """
    if options is None and "store" not in option_kwargs:
        option_kwargs["store"] = _shared_default_store()
    store = option_kwargs["store"] if "store" in option_kwargs else options.store

    readiness = _readiness_by_store.get(store)
    if readiness is None:
        readiness = _readiness_by_store[store] = _watch(store)
    return await SessionManager(options, readiness=readiness, **option_kwargs).apply(request, response)
