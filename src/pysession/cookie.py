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
"""CookieAttributes — scope and expiry metadata of the session cookie."""

from __future__ import annotations

import time
from datetime import UTC, datetime
from email.utils import format_datetime
from http.cookies import SimpleCookie
from typing import Any, Literal

SameSite = Literal["lax", "strict", "none"]


class CookieAttributes:
    """Holds the attributes rendered into ``Set-Cookie``.

    ``max_age`` is in seconds; ``None`` makes a browser-session cookie with no
    ``Expires``/``Max-Age``. ``expires`` is an aware UTC datetime derived from
    ``max_age`` whenever :meth:`reset_expires` runs.
    """

    def __init__(
        self,
        *,
        path: str | None = "/",
        domain: str | None = None,
        secure: bool = False,
        http_only: bool = True,
        same_site: SameSite | None = None,
        max_age: int | None = None,
        expires: datetime | str | float | None = None,
    ) -> None:
        self.path = path
        self.domain = domain
        self.secure = secure
        self.http_only = http_only
        self.same_site = same_site
        self.max_age = max_age
        if expires is not None:
            self.expires: datetime | None = _to_datetime(expires)
        else:
            self.expires = None
            self.reset_expires()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CookieAttributes:
        """Rebuild attributes from a persisted record, keeping its ``expires``."""
        return cls(
            path=data.get("path", "/"),
            domain=data.get("domain"),
            secure=bool(data.get("secure", False)),
            http_only=bool(data.get("http_only", True)),
            same_site=data.get("same_site"),
            max_age=data.get("max_age"),
            expires=data.get("expires"),
        )

    def copy(self) -> CookieAttributes:
        """Fresh attributes with the same scope; ``expires`` is recomputed."""
        return CookieAttributes(
            path=self.path,
            domain=self.domain,
            secure=self.secure,
            http_only=self.http_only,
            same_site=self.same_site,
            max_age=self.max_age,
        )

    def reset_expires(self) -> None:
        if self.max_age is not None:
            self.expires = datetime.fromtimestamp(time.time() + self.max_age, tz=UTC)

    def remaining_ms(self) -> float | None:
        """Milliseconds until ``expires``, or ``None`` for a browser-session cookie."""
        if self.expires is None:
            return None
        return (self.expires.timestamp() - time.time()) * 1000

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe form stored alongside session data."""
        return {
            "path": self.path,
            "domain": self.domain,
            "secure": self.secure,
            "http_only": self.http_only,
            "same_site": self.same_site,
            "max_age": self.max_age,
            "expires": self.expires.isoformat() if self.expires is not None else None,
        }

    def serialize(self, name: str, value: str) -> str:
        """Render a ``Set-Cookie`` header value for *name* = *value*."""
        cookie: SimpleCookie = SimpleCookie()
        cookie[name] = value
        morsel = cookie[name]
        if self.path is not None:
            morsel["path"] = self.path
        if self.domain is not None:
            morsel["domain"] = self.domain
        if self.max_age is not None:
            if self.expires is not None:
                morsel["expires"] = format_datetime(self.expires, usegmt=True)
            morsel["max-age"] = self.max_age
        if self.http_only:
            morsel["httponly"] = True
        if self.secure:
            morsel["secure"] = True
        if self.same_site is not None:
            morsel["samesite"] = self.same_site.capitalize()
        return morsel.OutputString()

    def __repr__(self) -> str:
        return f"CookieAttributes(max_age={self.max_age!r}, expires={self.expires!r}, path={self.path!r})"


def _to_datetime(value: datetime | str | float) -> datetime:
    """Accept the shapes JSON-backed stores hand back for ``expires``."""
    if isinstance(value, datetime):
        return value.astimezone(UTC) if value.tzinfo is not None else value.replace(tzinfo=UTC)
    if isinstance(value, str):
        return _to_datetime(datetime.fromisoformat(value))
    # epoch milliseconds when too large to be seconds
    seconds = value / 1000 if value > 1e11 else value
    return datetime.fromtimestamp(seconds, tz=UTC)
