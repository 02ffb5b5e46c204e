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
"""SessionOptions — per-manager session settings."""

from __future__ import annotations

import re
import secrets
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from pysession.adapters.memory import MemorySessionStore
from pysession.config.properties import SessionProperties
from pysession.cookie import CookieAttributes
from pysession.core.config import Config
from pysession.kernel.exceptions import SessionConfigurationException

_DURATION_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*(ms|s|m|h|d)?\s*$", re.IGNORECASE)
_UNIT_MS = {"ms": 1, "s": 1000, "m": 60_000, "h": 3_600_000, "d": 86_400_000}

Encoder = Callable[[str], "str | Awaitable[str]"]
Decoder = Callable[[str], "str | None | Awaitable[str | None]"]


def generate_session_id() -> str:
    return secrets.token_urlsafe(16)


def parse_duration(value: int | float | str) -> int:
    """Convert ``touch_after`` input to milliseconds.

    Numbers are milliseconds already; strings accept an optional unit suffix
    (``ms``, ``s``, ``m``, ``h``, ``d``), e.g. ``"30s"`` or ``"1h"``.
    """
    if isinstance(value, bool):
        raise SessionConfigurationException(f"Invalid duration: {value!r}")
    if isinstance(value, int | float):
        return int(value)
    match = _DURATION_RE.match(value)
    if match is None:
        raise SessionConfigurationException(f"Invalid duration: {value!r}", context={"value": value})
    amount, unit = match.groups()
    return int(float(amount) * _UNIT_MS[(unit or "ms").lower()])


@dataclass
class SessionOptions:
    """Settings shared by every request a :class:`SessionManager` handles.

    Attributes:
        name: Cookie name carrying the session id.
        cookie: Default cookie attributes for new sessions (a dict is accepted).
        genid: Session id generator.
        store: Session store; a fresh :class:`MemorySessionStore` when omitted.
        touch_after: Minimum milliseconds between touch-driven store writes.
            ``-1`` never touches, ``0`` touches on every request.
        rolling: Re-emit the cookie whenever the session was touched.
        auto_commit: Commit automatically when the response is finalized.
        encode: Transform applied to the id before it is written to the cookie.
        decode: Inverse of ``encode``; returning ``None`` or raising means "no id".
    """

    name: str = "sid"
    cookie: CookieAttributes = field(default_factory=CookieAttributes)
    genid: Callable[[], str] = generate_session_id
    store: Any = None
    touch_after: int | str = 0
    rolling: bool = False
    auto_commit: bool = True
    encode: Encoder | None = None
    decode: Decoder | None = None

    def __post_init__(self) -> None:
        self.touch_after = parse_duration(self.touch_after)
        if self.touch_after < -1:
            raise SessionConfigurationException(
                "touch_after must be -1 (never), 0 (always) or a positive number of milliseconds",
                context={"touch_after": self.touch_after},
            )
        if isinstance(self.cookie, dict):
            self.cookie = CookieAttributes(**self.cookie)
        if self.store is None:
            self.store = MemorySessionStore()

    @classmethod
    def from_config(cls, config: Config, **overrides: Any) -> SessionOptions:
        """Build options from the ``pysession.session`` section.

        Callables (``store``, ``genid``, ``encode``, ``decode``) are not
        configurable from files and are passed through *overrides*.
        """
        props = config.bind(SessionProperties)
        cookie = {str(k).replace("-", "_"): v for k, v in props.cookie.items()}
        if isinstance(cookie.get("max_age"), str):
            cookie["max_age"] = int(cookie["max_age"])
        kwargs: dict[str, Any] = {
            "name": props.cookie_name,
            "cookie": CookieAttributes(**cookie),
            "touch_after": props.touch_after,
            "rolling": props.rolling,
            "auto_commit": props.auto_commit,
        }
        kwargs.update(overrides)
        return cls(**kwargs)
