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
"""pysession — server-side HTTP sessions with pluggable stores.

Import concrete store and boundary types from the adapter package::

    from pysession.adapters.memory import MemorySessionStore
    from pysession.adapters.starlette import SessionMiddleware
"""

from pysession.cookie import CookieAttributes
from pysession.events import AVAILABLE, UNAVAILABLE, StoreEvents, StoreReadiness
from pysession.manager import FinalizationGuard, SessionManager, apply_session
from pysession.options import SessionOptions
from pysession.ports.outbound import SessionStore
from pysession.session import Session
from pysession.store_adapter import AdaptedSessionStore, adapt_store

__all__ = [
    "AVAILABLE",
    "AdaptedSessionStore",
    "CookieAttributes",
    "FinalizationGuard",
    "Session",
    "SessionManager",
    "SessionOptions",
    "SessionStore",
    "StoreEvents",
    "StoreReadiness",
    "UNAVAILABLE",
    "adapt_store",
    "apply_session",
]
