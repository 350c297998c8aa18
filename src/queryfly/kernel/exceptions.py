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
"""Exception hierarchy for queryfly.

Every error raised by queryfly itself inherits from QueryFlyException.
Errors raised by a query backend (SQLAlchemy, the database driver,
``asyncio.CancelledError``) are never wrapped and reach the caller as-is.

Categories:
- BusinessException: violations of a terminal operation's contract or
  of the order in which a query may be composed
- InfrastructureException: misconfigured query backends
"""

from __future__ import annotations

from typing import Any


class QueryFlyException(Exception):
    """Base exception for all queryfly errors.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "SEQUENCE_EMPTY").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict[str, Any] = context if context is not None else {}


# =============================================================================
# Business Exceptions
# =============================================================================


class BusinessException(QueryFlyException):
    """The requested operation contradicts the shape of the data."""


class InvalidOperationException(BusinessException):
    """An operation is invalid for the current state of a sequence or query.

    Raised when a sequence has zero or several elements where that is not
    allowed (``SEQUENCE_EMPTY``, ``NO_MATCH``, ``MORE_THAN_ONE_ELEMENT``,
    ``MORE_THAN_ONE_MATCH``), and when a query is composed in an order its
    backend cannot honour (``WINDOWED_QUERY``, ``UNORDERED``).
    """


class ConflictException(BusinessException):
    """Operation conflicts with data already collected."""


class DuplicateKeyException(ConflictException):
    """Two elements produced the same key while building a mapping."""

    def __init__(self, key: Any) -> None:
        super().__init__(
            f"An item with the same key has already been added. Key: {key!r}",
            code="DUPLICATE_KEY",
            context={"key": key},
        )
        self.key = key


# =============================================================================
# Infrastructure Exceptions
# =============================================================================


class InfrastructureException(QueryFlyException):
    """A query backend is missing something it needs to execute."""
