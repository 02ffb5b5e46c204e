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
"""Session configuration properties."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pysession.core.config import config_properties


@config_properties(prefix="pysession.session")
@dataclass
class SessionProperties:
    """Configuration for session handling (pysession.session.*).

    ``touch_after`` is either milliseconds or a duration string such as ``"1h"``.
    ``cookie`` keys: path, domain, secure, http-only, same-site, max-age (seconds).
    """

    cookie_name: str = "sid"
    touch_after: int | str = 0
    rolling: bool = False
    auto_commit: bool = True
    cookie: dict[str, Any] = field(default_factory=lambda: {"path": "/", "http-only": True})
