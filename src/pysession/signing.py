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
"""HMAC-signed session identifiers for the ``encode``/``decode`` options."""

from __future__ import annotations

import base64
import hashlib
import hmac
from collections.abc import Callable

_PREFIX = "s:"


def sign(value: str, secret: str) -> str:
    """Append an HMAC-SHA256 signature: ``<value>.<urlsafe-b64 digest>``."""
    digest = hmac.new(secret.encode(), value.encode(), hashlib.sha256).digest()
    return f"{value}.{base64.urlsafe_b64encode(digest).rstrip(b'=').decode()}"


def unsign(signed: str, secret: str) -> str | None:
    """Return the original value, or ``None`` if the signature does not match."""
    value, sep, _ = signed.rpartition(".")
    if not sep or not value:
        return None
    return value if hmac.compare_digest(sign(value, secret), signed) else None


def signed_codec(secret: str) -> tuple[Callable[[str], str], Callable[[str], str | None]]:
    """Build an ``(encode, decode)`` pair producing ``s:<id>.<signature>`` cookies."""

    def encode(session_id: str) -> str:
        return _PREFIX + sign(session_id, secret)

    def decode(raw: str) -> str | None:
        if not raw.startswith(_PREFIX):
            return None
        return unsign(raw[len(_PREFIX):], secret)

    return encode, decode
