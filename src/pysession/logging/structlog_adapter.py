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
"""StructlogAdapter — renders pysession's structlog events through stdlib logging."""

from __future__ import annotations

import logging
import sys

import structlog

from pysession.config.properties import LoggingProperties
from pysession.core.config import Config

LOGGER_NAME = "pysession"


class StructlogAdapter:
    """Configures structlog and the ``pysession`` logger.

    Session lifecycle events (``session_saved``, ``session_touched``, ...) are
    emitted at DEBUG, store readiness changes at WARNING/INFO. While
    :class:`~pysession.adapters.starlette.SessionMiddleware` handles a request,
    the session id is bound in structlog's context variables and rendered with
    every event, the application's own included.
    """

    def __init__(self) -> None:
        self._level: str = "INFO"
        self._format: str = "console"

    def configure(self, config: Config) -> None:
        """Configure output from the ``pysession.logging`` section."""
        props = config.bind(LoggingProperties)
        self._level = props.level.upper()
        self._format = props.format.lower()

        structlog.configure(
            processors=self._processors(),
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=False,
        )
        self._install_handler()

    def _processors(self) -> list[structlog.types.Processor]:
        processors: list[structlog.types.Processor] = [
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
        ]
        if self._format == "json":
            processors.append(structlog.processors.JSONRenderer())
        else:
            processors.append(structlog.dev.ConsoleRenderer())
        return processors

    def _install_handler(self) -> None:
        # one handler per process, replaced on reconfiguration
        logger = logging.getLogger(LOGGER_NAME)
        for handler in [h for h in logger.handlers if h.get_name() == LOGGER_NAME]:
            logger.removeHandler(handler)

        handler = logging.StreamHandler(sys.stdout)
        handler.set_name(LOGGER_NAME)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
        logger.setLevel(getattr(logging, self._level, logging.INFO))
        logger.propagate = False
