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
"""Deferred queries.

A :class:`Queryable` describes a retrieval without running it.  Composition
steps return new queries; nothing touches the data until the query is
turned into an :class:`~queryfly.data.async_enumerable.AsyncEnumerable` and
a terminal operation awaits it.

Every backend shares the same skip/take window semantics (see
:class:`Window`).  Filtering, projection and ordering take whatever the
backend understands: plain callables for :class:`InMemoryQueryable`, SQL
expressions for the SQLAlchemy backend.
"""

from __future__ import annotations

import itertools
from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator, AsyncIterator, Callable, Iterable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from queryfly.data.async_enumerable import AsyncEnumerable
from queryfly.kernel.exceptions import InvalidOperationException

T = TypeVar("T")
U = TypeVar("U")

Step = Callable[[Iterable[Any]], Iterable[Any]]


@dataclass(frozen=True)
class Window:
    """An offset/limit window built from successive skip and take calls.

    A negative skip counts as zero and a take below one selects nothing.
    Skips accumulate, and a skip after a take shrinks the remaining limit.
    """

    offset: int = 0
    limit: int | None = None

    def skip(self, count: int) -> Window:
        count = max(count, 0)
        limit = None if self.limit is None else max(self.limit - count, 0)
        return Window(self.offset + count, limit)

    def take(self, count: int) -> Window:
        count = max(count, 0)
        return Window(self.offset, count if self.limit is None else min(self.limit, count))

    @property
    def is_bounded(self) -> bool:
        return self.offset > 0 or self.limit is not None


class Queryable(ABC, Generic[T]):
    """Base class for deferred queries."""

    @abstractmethod
    def skip(self, count: int) -> Queryable[T]:
        """Bypass the first *count* elements."""

    @abstractmethod
    def take(self, count: int) -> Queryable[T]:
        """Keep at most *count* elements."""

    @abstractmethod
    def to_async_enumerable(self) -> AsyncEnumerable[T]:
        """Return an async sequence that runs this query when enumerated."""

    def __aiter__(self) -> AsyncIterator[T]:
        return aiter(self.to_async_enumerable())


@dataclass(frozen=True)
class _Sort:
    keys: tuple[tuple[Callable[[Any], Any], bool], ...]

    def __call__(self, items: Iterable[Any]) -> list[Any]:
        result = list(items)
        # list.sort is stable, so sorting by the least significant key first
        # leaves the primary key in charge.
        for key, descending in reversed(self.keys):
            result.sort(key=key, reverse=descending)
        return result


class InMemoryQueryable(Queryable[T]):
    """Deferred query over any Python iterable.

    Usage::

        query = InMemoryQueryable(users).where(lambda u: u.active).order_by(lambda u: u.name)
        page = await to_paged_list_async(query, 0, 20)
    """

    def __init__(self, source: Iterable[T], steps: tuple[Step, ...] = ()) -> None:
        self._source = source
        self._steps = steps

    def _then(self, step: Step) -> InMemoryQueryable[Any]:
        return InMemoryQueryable(self._source, self._steps + (step,))

    def where(self, predicate: Callable[[T], bool]) -> InMemoryQueryable[T]:
        return self._then(lambda items: filter(predicate, items))

    def select(self, selector: Callable[[T], U]) -> InMemoryQueryable[U]:
        return self._then(lambda items: map(selector, items))

    def order_by(self, key: Callable[[T], Any], descending: bool = False) -> InMemoryQueryable[T]:
        """Sort by *key*, replacing any ordering applied by the previous step."""
        return self._then(_Sort(((key, descending),)))

    def then_by(self, key: Callable[[T], Any], descending: bool = False) -> InMemoryQueryable[T]:
        """Add a secondary sort key to the ordering applied just before."""
        last = self._steps[-1] if self._steps else None
        if not isinstance(last, _Sort):
            raise InvalidOperationException("then_by must directly follow order_by or then_by", code="UNORDERED")
        return InMemoryQueryable(self._source, self._steps[:-1] + (_Sort(last.keys + ((key, descending),)),))

    def skip(self, count: int) -> InMemoryQueryable[T]:
        return self._then(lambda items: itertools.islice(items, max(count, 0), None))

    def take(self, count: int) -> InMemoryQueryable[T]:
        return self._then(lambda items: itertools.islice(items, max(count, 0)))

    def to_async_enumerable(self) -> AsyncEnumerable[T]:
        async def _generate() -> AsyncGenerator[T, None]:
            items: Iterable[Any] = self._source
            for step in self._steps:
                items = step(items)
            for item in items:
                yield item

        return AsyncEnumerable(_generate)
