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
"""Normalizes heterogeneous store implementations into the async store contract.

Three operation shapes are accepted:

* coroutine functions: used unchanged;
* callback functions taking one positional argument more than the contract
  (``get(session_id, callback)``), where ``callback(error, result=None)``
  reports completion;
* plain functions returning a value or an awaitable.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from typing import Any

import structlog

from pysession.kernel.exceptions import InvalidStoreException, StoreFailureException

logger = structlog.get_logger(__name__)

# operation name -> number of contract arguments
_REQUIRED = {"get": 1, "set": 2, "destroy": 1}
_OPTIONAL = {"touch": 2, "all": 0}


def adapt_store(store: Any) -> Any:
    """Return *store* itself if every operation is a coroutine function,
    otherwise an :class:`AdaptedSessionStore` wrapping it.

    Raises:
        InvalidStoreException: if ``get``, ``set`` or ``destroy`` is missing.
    """
    missing = [name for name in _REQUIRED if not callable(getattr(store, name, None))]
    if missing:
        raise InvalidStoreException(
            f"{type(store).__name__} is not a session store",
            context={"missing": missing},
        )

    operations = _present_operations(store)
    if all(inspect.iscoroutinefunction(getattr(store, name)) for name in operations):
        return store

    logger.debug("session_store_adapted", store=type(store).__name__)
    return AdaptedSessionStore(store)


class AdaptedSessionStore:
    """Async facade over a callback- or sync-style store.

    ``touch`` and ``all`` exist only when the wrapped store has them. Any other
    attribute (``on``, ``emit``, custom helpers) is looked up on the wrapped store.
    """

    def __init__(self, store: Any) -> None:
        self.wrapped = store
        for name in _present_operations(store):
            setattr(self, name, _to_async(getattr(store, name), {**_REQUIRED, **_OPTIONAL}[name]))

    def __getattr__(self, name: str) -> Any:
        return getattr(self.__dict__["wrapped"], name)

    def __repr__(self) -> str:
        return f"AdaptedSessionStore({self.wrapped!r})"


def _present_operations(store: Any) -> list[str]:
    return [*_REQUIRED, *(name for name in _OPTIONAL if callable(getattr(store, name, None)))]


def _positional_arity(func: Callable[..., Any]) -> int:
    try:
        params = inspect.signature(func).parameters.values()
    except (TypeError, ValueError):
        return 0
    return sum(
        1 for p in params if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    )


def _to_async(func: Callable[..., Any], arity: int) -> Callable[..., Awaitable[Any]]:
    if inspect.iscoroutinefunction(func):
        return func
    if _positional_arity(func) > arity:
        return _from_callback(func)

    async def call_sync(*args: Any) -> Any:
        result = func(*args)
        if inspect.isawaitable(result):
            return await result
        return result

    return call_sync


def _from_callback(func: Callable[..., Any]) -> Callable[..., Awaitable[Any]]:
    async def call_with_callback(*args: Any) -> Any:
        loop = asyncio.get_running_loop()
        future: asyncio.Future[Any] = loop.create_future()

        def settle(error: Any = None, result: Any = None) -> None:
            if future.done():
                return
            if error is None:
                future.set_result(result)
            elif isinstance(error, BaseException):
                future.set_exception(error)
            else:
                operation = getattr(func, "__name__", repr(func))
                future.set_exception(StoreFailureException(str(error), context={"operation": operation}))

        def callback(error: Any = None, result: Any = None) -> None:
            loop.call_soon_threadsafe(settle, error, result)

        func(*args, callback)
        return await future

    return call_with_callback
