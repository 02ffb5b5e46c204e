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
"""Store readiness signals."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

AVAILABLE = "available"
UNAVAILABLE = "unavailable"

# Names emitted by callback-era stores for the same two states.
LEGACY_AVAILABLE = "connect"
LEGACY_UNAVAILABLE = "disconnect"

Listener = Callable[[], Any]


class StoreEvents:
    """Minimal event emitter that stores mix in to publish readiness.

    Listeners are plain callables invoked synchronously, in subscription
    order. Subclasses need not call ``__init__``; the listener table is
    created on first use.
    """

    @property
    def _listeners(self) -> dict[str, list[Listener]]:
        return self.__dict__.setdefault("_store_listeners", {})

    def on(self, event: str, listener: Listener) -> None:
        """Subscribe *listener* to *event*."""
        self._listeners.setdefault(event, []).append(listener)

    def off(self, event: str, listener: Listener) -> None:
        """Unsubscribe *listener*; unknown listeners are ignored."""
        listeners = self._listeners.get(event, [])
        if listener in listeners:
            listeners.remove(listener)

    def emit(self, event: str) -> bool:
        """Invoke every listener of *event*. Returns ``True`` if any was called."""
        listeners = list(self._listeners.get(event, []))
        for listener in listeners:
            listener()
        return bool(listeners)


class StoreReadiness:
    """Advisory availability flag that follows one store's readiness events.

    Starts available; stores without ``on`` never change it. The tracker
    holds no reference to the store, only the store holds its listeners.
    """

    def __init__(self, store: Any) -> None:
        self.ready = True
        self._store_name = type(store).__name__
        on = getattr(store, "on", None)
        if callable(on):
            for event in (UNAVAILABLE, LEGACY_UNAVAILABLE):
                on(event, self._mark_unavailable)
            for event in (AVAILABLE, LEGACY_AVAILABLE):
                on(event, self._mark_available)

    def _mark_unavailable(self) -> None:
        self.ready = False
        logger.warning("store_unavailable", store=self._store_name)

    def _mark_available(self) -> None:
        self.ready = True
        logger.info("store_available", store=self._store_name)
