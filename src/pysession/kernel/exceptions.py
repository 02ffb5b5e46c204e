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
"""Unified exception hierarchy for pysession.

All library exceptions inherit from SessionException so callers can catch
every session error in one place, or a specific subclass for targeted handling.

Categories:
- SessionConfigurationException: invalid session options
- InfrastructureException: the backing store failed or is unusable
"""

from __future__ import annotations

# =============================================================================
# Base Exception
# =============================================================================


class SessionException(Exception):
    """Base exception for all pysession errors.

    Carries an optional error code and context dict for structured error data.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "SESSION_CONFIG").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Configuration Exceptions
# =============================================================================


class SessionConfigurationException(SessionException):
    """Session options are malformed (bad duration, bad threshold, ...)."""

    def __init__(self, message: str, context: dict | None = None) -> None:
        super().__init__(message, code="SESSION_CONFIG", context=context)


# =============================================================================
# Infrastructure Exceptions
# =============================================================================


class InfrastructureException(SessionException):
    """Failures of the session store or its transport."""


class StoreFailureException(InfrastructureException):
    """A store operation reported an error through its callback."""


class InvalidStoreException(InfrastructureException):
    """The object given as a store does not satisfy the store contract."""
