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
"""Shared fakes for session tests: boundary objects and a controllable clock."""

from __future__ import annotations

import logging
from unittest.mock import patch

import pytest
import structlog

START = 1_700_000_000.0


class FakeRequest:
    """RequestContext with a plain cookie dict."""

    def __init__(self, cookies: dict[str, str] | None = None) -> None:
        self.cookies = dict(cookies or {})
        self.session = None
        self.session_store = None

    def get_cookie(self, name: str) -> str | None:
        return self.cookies.get(name)


class FakeResponse:
    """ResponseContext recording headers and finalization calls."""

    def __init__(self) -> None:
        self.headers: dict[str, str] = {}
        self.headers_sent = False
        self.end_calls = 0

    def set_header(self, name: str, value: str) -> None:
        self.headers[name] = value

    async def end(self) -> None:
        self.end_calls += 1
        self.headers_sent = True


class FakeClock:
    def __init__(self, now: float = START) -> None:
        self.now = now

    def time(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    """Replace wall-clock reads in the cookie and memory-store modules."""
    fake = FakeClock()
    with patch("pysession.cookie.time", fake), patch("pysession.adapters.memory.time", fake):
        yield fake


@pytest.fixture
def make_request():
    return FakeRequest


@pytest.fixture
def make_response():
    return FakeResponse


@pytest.fixture
def restore_logging():
    """Undo structlog and ``pysession`` logger changes made by a test."""
    logger = logging.getLogger("pysession")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    structlog.reset_defaults()
    logger.handlers = handlers
    logger.setLevel(level)
    logger.propagate = propagate
