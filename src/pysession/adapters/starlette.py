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
"""SessionMiddleware — pure ASGI binding of sessions to Starlette requests.

The session is exposed as ``request.state.session`` and the store as
``request.state.session_store``. Finalization is the ``http.response.start``
message: it is held back until the session has committed, then sent with
any ``Set-Cookie`` header the commit produced.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from starlette.datastructures import MutableHeaders
from starlette.requests import HTTPConnection
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from pysession.core.config import Config
from pysession.manager import SessionManager
from pysession.options import SessionOptions

if TYPE_CHECKING:
    from pysession.session import Session


class AsgiRequestContext:
    """RequestContext over an ASGI scope; slots live in ``scope["state"]``."""

    def __init__(self, scope: Scope) -> None:
        self._connection = HTTPConnection(scope)
        self._state: dict[str, Any] = scope.setdefault("state", {})

    def get_cookie(self, name: str) -> str | None:
        return self._connection.cookies.get(name)

    @property
    def session(self) -> Session | None:
        return self._state.get("session")

    @session.setter
    def session(self, value: Session | None) -> None:
        self._state["session"] = value

    @property
    def session_store(self) -> Any:
        return self._state.get("session_store")

    @session_store.setter
    def session_store(self, value: Any) -> None:
        self._state["session_store"] = value


class AsgiResponseContext:
    """ResponseContext over an ASGI ``send`` callable.

    Use :meth:`send` as the downstream app's ``send``. Headers set through
    :meth:`set_header` replace earlier values of the same name set here and
    are appended to the application's own headers.

    Calling :meth:`end` before the application has started its response
    records the request; the start message is then sent as soon as it arrives.
    """

    def __init__(self, send: Send) -> None:
        self._send = send
        self._start: Message | None = None
        self._headers: list[tuple[str, str]] = []
        self._headers_sent = False
        self._end_requested = False

    @property
    def headers_sent(self) -> bool:
        return self._headers_sent

    def set_header(self, name: str, value: str) -> None:
        self._headers = [(k, v) for k, v in self._headers if k.lower() != name.lower()]
        self._headers.append((name, value))

    async def end(self) -> None:
        """Flush the held ``http.response.start`` message."""
        if self._start is None:
            self._end_requested = True
            return
        await self._flush(self._start)

    async def _flush(self, start: Message) -> None:
        headers = MutableHeaders(raw=list(start.get("headers", [])))
        for name, value in self._headers:
            headers.append(name, value)
        self._headers_sent = True
        await self._send({**start, "headers": headers.raw})

    async def send(self, message: Message) -> None:
        if message["type"] == "http.response.start":
            self._start = message
            if not self._end_requested:
                await self.end()
            elif not self._headers_sent:
                # end() already ran before the application started its response
                await self._flush(message)
            return
        await self._send(message)


class SessionMiddleware:
    """ASGI middleware applying a :class:`SessionManager` to every HTTP request.

    Usage::

        app = Starlette(
            routes=routes,
            middleware=[Middleware(SessionMiddleware, rolling=True, touch_after="1h")],
        )

    With *config*, options and logging are read from the ``pysession``
    section and *option_kwargs* act as overrides. The session id is bound as
    ``session_id`` in structlog's context variables while the app runs.
    """

    def __init__(
        self,
        app: ASGIApp,
        options: SessionOptions | None = None,
        manager: SessionManager | None = None,
        config: Config | None = None,
        **option_kwargs: Any,
    ) -> None:
        self.app = app
        if manager is None:
            if config is not None:
                manager = SessionManager.from_config(config, **option_kwargs)
            else:
                manager = SessionManager(options, **option_kwargs)
        self.manager = manager

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = AsgiRequestContext(scope)
        response = AsgiResponseContext(send)
        session = await self.manager.apply(request, response)
        if session is None:
            await self.app(scope, receive, response.send)
            return
        with structlog.contextvars.bound_contextvars(session_id=session.id):
            await self.app(scope, receive, response.send)
