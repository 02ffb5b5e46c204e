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
"""Tests for Session — hydration, mapping behaviour and the commit decision."""

from __future__ import annotations

from datetime import datetime
from unittest.mock import MagicMock

import pytest

from pysession.adapters.memory import MemorySessionStore
from pysession.cookie import CookieAttributes
from pysession.options import SessionOptions
from pysession.session import Session


def _options(**kwargs) -> SessionOptions:
    kwargs.setdefault("genid", lambda: "generated-id")
    kwargs.setdefault("store", MemorySessionStore())
    return SessionOptions(**kwargs)


class _StoreSpec:
    async def get(self, session_id): ...

    async def set(self, session_id, record): ...

    async def destroy(self, session_id): ...

    async def touch(self, session_id, record): ...


class _UntouchableStoreSpec:
    async def get(self, session_id): ...

    async def set(self, session_id, record): ...

    async def destroy(self, session_id): ...


def _spy_store(spec=_StoreSpec) -> MagicMock:
    return MagicMock(spec=spec)


class TestConstruction:
    def test_new_session(self, make_request, make_response):
        session = Session(make_request(), make_response(), None, _options())
        assert session.id == "generated-id"
        assert session.is_new is True
        assert dict(session) == {}

    def test_hydrated_session(self, make_request, make_response):
        record = {"views": 2, "cookie": {"path": "/", "max_age": 60, "expires": "2030-01-01T00:00:00+00:00"}}
        session = Session(make_request(), make_response(), record, _options(), session_id="abc")
        assert session.id == "abc"
        assert session.is_new is False
        assert session["views"] == 2
        assert "cookie" not in session
        assert isinstance(session.cookie.expires, datetime)
        assert session.cookie.max_age == 60

    def test_hydrating_requires_id(self, make_request, make_response):
        with pytest.raises(ValueError):
            Session(make_request(), make_response(), {"views": 1}, _options())

    def test_record_without_cookie_uses_defaults(self, make_request, make_response):
        options = _options(cookie=CookieAttributes(max_age=30))
        session = Session(make_request(), make_response(), {"views": 1}, options, session_id="abc")
        assert session.cookie.max_age == 30
        assert session.cookie is not options.cookie

    def test_cookie_key_is_reserved(self, make_request, make_response):
        session = Session(make_request(), make_response(), None, _options())
        with pytest.raises(KeyError):
            session["cookie"] = "nope"

    def test_to_record_includes_cookie(self, make_request, make_response):
        session = Session(make_request(), make_response(), None, _options())
        session["user"] = "a"
        record = session.to_record()
        assert record["user"] == "a"
        assert record["cookie"]["path"] == "/"


class TestCommitSave:
    async def test_unchanged_existing_session_does_not_write(self, make_request, make_response):
        store = _spy_store()
        response = make_response()
        session = Session(make_request(), response, {"views": 1}, _options(store=store), session_id="abc")
        await session.commit()
        store.set.assert_not_awaited()
        store.touch.assert_not_awaited()
        assert response.headers == {}

    async def test_mutation_writes_once(self, make_request, make_response):
        store = _spy_store()
        session = Session(make_request(), make_response(), {"views": 1}, _options(store=store), session_id="abc")
        session["views"] = 2
        await session.commit()
        store.set.assert_awaited_once()
        sid, record = store.set.await_args.args
        assert sid == "abc"
        assert record["views"] == 2

    async def test_mutation_reverted_is_not_a_change(self, make_request, make_response):
        store = _spy_store()
        session = Session(make_request(), make_response(), {"views": 1}, _options(store=store), session_id="abc")
        session["views"] = 5
        session["views"] = 1
        await session.commit()
        store.set.assert_not_awaited()

    async def test_deletion_is_a_change(self, make_request, make_response):
        store = _spy_store()
        session = Session(make_request(), make_response(), {"views": 1}, _options(store=store), session_id="abc")
        del session["views"]
        await session.commit()
        store.set.assert_awaited_once()

    async def test_cookie_changes_are_not_data_changes(self, make_request, make_response):
        store = _spy_store()
        session = Session(make_request(), make_response(), {"views": 1}, _options(store=store), session_id="abc")
        session.cookie.max_age = 999
        session.cookie.domain = "example.com"
        await session.commit()
        store.set.assert_not_awaited()

    async def test_store_error_propagates(self, make_request, make_response):
        store = _spy_store()
        store.set.side_effect = ConnectionError("down")
        session = Session(make_request(), make_response(), None, _options(store=store))
        session["views"] = 1
        with pytest.raises(ConnectionError):
            await session.commit()


class TestCommitCookie:
    async def test_new_session_always_sets_cookie(self, make_request, make_response):
        response = make_response()
        session = Session(make_request(), response, None, _options())
        await session.commit()
        assert response.headers["Set-Cookie"].startswith("sid=generated-id;")

    async def test_cookie_skipped_when_headers_sent(self, make_request, make_response):
        response = make_response()
        response.headers_sent = True
        session = Session(make_request(), response, None, _options())
        session["views"] = 1
        await session.commit()
        assert response.headers == {}

    async def test_encode_applied_to_cookie_value(self, make_request, make_response):
        response = make_response()
        session = Session(make_request(), response, None, _options(encode=lambda sid: f"enc-{sid}"))
        await session.commit()
        assert response.headers["Set-Cookie"].startswith("sid=enc-generated-id;")

    async def test_async_encode(self, make_request, make_response):
        async def encode(sid):
            return sid.upper()

        response = make_response()
        session = Session(make_request(), response, None, _options(encode=encode, name="app"))
        await session.commit()
        assert response.headers["Set-Cookie"].startswith("app=GENERATED-ID;")

    async def test_saved_existing_session_without_rolling_sets_no_cookie(self, make_request, make_response):
        response = make_response()
        session = Session(make_request(), response, {"views": 1}, _options(rolling=True), session_id="abc")
        session["views"] = 2
        await session.commit()
        assert response.headers == {}


def _existing(options, make_request, make_response, max_age=60):
    """An existing session whose expiry was reset at the current fake time."""
    cookie = CookieAttributes(max_age=max_age).to_dict()
    response = make_response()
    session = Session(make_request(), response, {"views": 1, "cookie": cookie}, options, session_id="abc")
    return session, response


class TestCommitTouch:
    async def test_touch_disabled_with_minus_one(self, clock, make_request, make_response):
        store = _spy_store()
        options = _options(store=store, touch_after=-1, rolling=True)
        session, response = _existing(options, make_request, make_response)
        clock.advance(59)
        await session.commit()
        store.touch.assert_not_awaited()
        assert response.headers == {}

    async def test_touch_every_request_with_zero(self, clock, make_request, make_response):
        store = _spy_store()
        session, _ = _existing(_options(store=store, touch_after=0), make_request, make_response)
        await session.commit()
        store.touch.assert_awaited_once()

    async def test_no_touch_before_threshold(self, clock, make_request, make_response):
        store = _spy_store()
        session, _ = _existing(_options(store=store, touch_after=10_000), make_request, make_response)
        clock.advance(9)
        await session.commit()
        store.touch.assert_not_awaited()

    async def test_touch_once_threshold_elapsed(self, clock, make_request, make_response):
        store = _spy_store()
        session, response = _existing(_options(store=store, touch_after=10_000), make_request, make_response)
        old_expires = session.cookie.expires
        clock.advance(10)
        await session.commit()
        store.touch.assert_awaited_once()
        assert session.cookie.expires > old_expires
        store.set.assert_not_awaited()
        # rolling is off
        assert response.headers == {}

    async def test_rolling_touch_emits_cookie(self, clock, make_request, make_response):
        options = _options(touch_after=10_000, rolling=True)
        session, response = _existing(options, make_request, make_response)
        clock.advance(10)
        await session.commit()
        assert "Max-Age=60" in response.headers["Set-Cookie"]

    async def test_save_wins_over_touch(self, clock, make_request, make_response):
        store = _spy_store()
        session, _ = _existing(_options(store=store, touch_after=0), make_request, make_response)
        session["views"] = 2
        await session.commit()
        store.set.assert_awaited_once()
        store.touch.assert_not_awaited()

    async def test_no_touch_without_max_age(self, clock, make_request, make_response):
        store = _spy_store()
        options = _options(store=store, touch_after=0)
        session = Session(make_request(), make_response(), {"views": 1}, options, session_id="abc")
        await session.commit()
        store.touch.assert_not_awaited()

    async def test_store_without_touch_degrades_to_noop(self, clock, make_request, make_response):
        store = _spy_store(_UntouchableStoreSpec)
        options = _options(store=store, touch_after=0, rolling=True)
        session, response = _existing(options, make_request, make_response)
        await session.commit()
        store.set.assert_not_awaited()
        assert "Set-Cookie" in response.headers

    async def test_default_threshold_touches_every_request(self, clock, make_request, make_response):
        store = _spy_store()
        session, _ = _existing(_options(store=store), make_request, make_response)
        await session.commit()
        store.touch.assert_awaited_once()
        store.set.assert_not_awaited()


class TestRepeatedCommit:
    async def test_second_commit_without_changes_writes_nothing(self, clock, make_request, make_response):
        store = _spy_store()
        session, _ = _existing(_options(store=store, touch_after=0), make_request, make_response)
        session["views"] = 2
        await session.commit()
        await session.commit()
        store.set.assert_awaited_once()
        store.touch.assert_not_awaited()

    async def test_changes_after_commit_are_saved(self, clock, make_request, make_response):
        store = _spy_store()
        session, _ = _existing(_options(store=store), make_request, make_response)
        session["views"] = 2
        await session.commit()
        session["views"] = 3
        await session.commit()
        assert store.set.await_count == 2
        assert store.set.await_args.args[1]["views"] == 3

    async def test_new_session_cookie_set_once(self, make_request, make_response):
        response = make_response()
        response.set_header = MagicMock(wraps=response.set_header)
        session = Session(make_request(), response, None, _options())
        session["views"] = 1
        await session.commit()
        await session.commit()
        response.set_header.assert_called_once()
        assert response.headers["Set-Cookie"].startswith("sid=generated-id;")


class TestDestroy:
    async def test_destroy_unbinds_and_removes(self, make_request, make_response):
        store = MemorySessionStore()
        request = make_request()
        session = Session(request, make_response(), None, _options(store=store))
        request.session = session
        session["views"] = 1
        await session.save()
        await session.destroy()
        assert request.session is None
        assert await store.get(session.id) is None
