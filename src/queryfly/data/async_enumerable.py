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
"""Asynchronous sequence execution.

:class:`AsyncEnumerable` wraps a factory of async generators and provides
the terminal operations every query backend shares: existence checks,
counting, element retrieval, sums and materialization.  Each terminal
operation enumerates the source once.  Operations that stop early close the
underlying generator so backends release cursors immediately.

Usage::

    numbers = AsyncEnumerable.from_iterable(range(1, 26))

    await numbers.count(lambda n: n % 2 == 0)   # 12
    await numbers.first(lambda n: n > 20)       # 21
    await numbers.to_dict(lambda n: n, str)     # {1: "1", 2: "2", ...}
"""

from __future__ import annotations

from collections.abc import (
    AsyncGenerator,
    AsyncIterator,
    Callable,
    Hashable,
    Iterable,
    Iterator,
    MutableMapping,
)
from contextlib import aclosing
from decimal import Decimal
from typing import Any, Generic, TypeVar

from queryfly.kernel.exceptions import DuplicateKeyException, InvalidOperationException

T = TypeVar("T")
K = TypeVar("K")
V = TypeVar("V")

Predicate = Callable[[Any], bool]

_SUM_KINDS: tuple[type, ...] = (int, float, Decimal)


class ComparerDict(MutableMapping[K, V]):
    """Mapping whose key equality is defined by a key-normalizing callable.

    Keys that normalize to the same value are the same key.  The first
    original key seen is the one reported by iteration.

    Usage::

        headers = ComparerDict(str.casefold)
        headers["Content-Type"] = "text/plain"
        headers["content-type"]  # "text/plain"
    """

    def __init__(self, comparer: Callable[[K], Hashable]) -> None:
        self._comparer = comparer
        self._entries: dict[Hashable, tuple[K, V]] = {}

    def __getitem__(self, key: K) -> V:
        try:
            return self._entries[self._comparer(key)][1]
        except KeyError:
            raise KeyError(key) from None

    def __setitem__(self, key: K, value: V) -> None:
        normalized = self._comparer(key)
        existing = self._entries.get(normalized)
        self._entries[normalized] = (existing[0] if existing is not None else key, value)

    def __delitem__(self, key: K) -> None:
        try:
            del self._entries[self._comparer(key)]
        except KeyError:
            raise KeyError(key) from None

    def __iter__(self) -> Iterator[K]:
        return (key for key, _ in self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict(self.items())!r})"


class AsyncEnumerable(Generic[T]):
    """A re-enumerable asynchronous sequence.

    Args:
        factory: Zero-argument callable returning a fresh async generator
            each time the sequence is enumerated.
    """

    def __init__(self, factory: Callable[[], AsyncGenerator[T, None]]) -> None:
        self._factory = factory

    @classmethod
    def from_iterable(cls, iterable: Iterable[T]) -> AsyncEnumerable[T]:
        """Lift a synchronous iterable into an async sequence."""

        async def _generate() -> AsyncGenerator[T, None]:
            for item in iterable:
                yield item

        return cls(_generate)

    def __aiter__(self) -> AsyncIterator[T]:
        return self._factory()

    async def _matching(self, predicate: Predicate | None) -> AsyncGenerator[T, None]:
        async with aclosing(self._factory()) as source:
            async for item in source:
                if predicate is None or predicate(item):
                    yield item

    # ------------------------------------------------------------------
    # Existence and counting
    # ------------------------------------------------------------------

    async def any(self, predicate: Predicate | None = None) -> bool:
        """Whether at least one element satisfies *predicate*."""
        async with aclosing(self._matching(predicate)) as items:
            async for _ in items:
                return True
        return False

    async def count(self, predicate: Predicate | None = None) -> int:
        """Number of elements satisfying *predicate*."""
        total = 0
        async with aclosing(self._matching(predicate)) as items:
            async for _ in items:
                total += 1
        return total

    # ------------------------------------------------------------------
    # Element retrieval
    # ------------------------------------------------------------------

    async def first(self, predicate: Predicate | None = None) -> T:
        """First element satisfying *predicate*.

        Raises:
            InvalidOperationException: If no element matches.
        """
        async with aclosing(self._matching(predicate)) as items:
            async for item in items:
                return item
        raise _no_element(predicate)

    async def first_or_default(self, predicate: Predicate | None = None, default: Any = None) -> Any:
        """First element satisfying *predicate*, or *default* if none does."""
        async with aclosing(self._matching(predicate)) as items:
            async for item in items:
                return item
        return default

    async def single(self, predicate: Predicate | None = None) -> T:
        """The only element satisfying *predicate*.

        Raises:
            InvalidOperationException: If no element or more than one matches.
        """
        found, item = await self._single(predicate)
        if not found:
            raise _no_element(predicate)
        return item

    async def single_or_default(self, predicate: Predicate | None = None, default: Any = None) -> Any:
        """The only element satisfying *predicate*, or *default* if none does.

        Raises:
            InvalidOperationException: If more than one element matches.
        """
        found, item = await self._single(predicate)
        return item if found else default

    async def _single(self, predicate: Predicate | None) -> tuple[bool, Any]:
        found = False
        result: Any = None
        async with aclosing(self._matching(predicate)) as items:
            async for item in items:
                if found:
                    raise _more_than_one(predicate)
                found, result = True, item
        return found, result

    # ------------------------------------------------------------------
    # Aggregation
    # ------------------------------------------------------------------

    async def sum(self, selector: Callable[[T], Any], kind: type = int) -> Any:
        """Sum of ``selector(item)`` over the sequence, as a ``kind`` value.

        ``None`` projections are skipped.  An empty sequence, or one that
        projects only ``None``, sums to ``kind()``: ``0``, ``0.0`` or
        ``Decimal("0")``.

        Each projection must already be representable as *kind* without
        loss: ``int`` accepts ints only, ``Decimal`` accepts ``Decimal`` and
        ints, ``float`` accepts any of the three.

        Args:
            selector: Projection from element to number.
            kind: Numeric result type, one of ``int``, ``float``, ``Decimal``.

        Raises:
            TypeError: If a projection cannot be summed as *kind*.
        """
        if kind not in _SUM_KINDS:
            raise ValueError(f"Unsupported sum kind {kind!r}; expected one of int, float, Decimal")
        total = kind()
        async with aclosing(self._matching(None)) as items:
            async for item in items:
                value = selector(item)
                if value is not None:
                    total += _as_kind(value, kind)
        return total

    # ------------------------------------------------------------------
    # Materialization
    # ------------------------------------------------------------------

    async def to_list(self) -> list[T]:
        return [item async for item in self]

    async def to_array(self) -> tuple[T, ...]:
        return tuple(await self.to_list())

    async def to_dict(
        self,
        key_selector: Callable[[T], K],
        element_selector: Callable[[T], V] | None = None,
        comparer: Callable[[K], Hashable] | None = None,
    ) -> MutableMapping[K, Any]:
        """Drain the sequence into a mapping.

        Args:
            key_selector: Extracts the key of each element.
            element_selector: Extracts the value; the element itself if omitted.
            comparer: Key-normalizing callable defining key equality.  When
                given, the result is a :class:`ComparerDict`.

        Raises:
            DuplicateKeyException: If two elements produce equal keys.
        """
        result: MutableMapping[K, Any] = {} if comparer is None else ComparerDict(comparer)
        async with aclosing(self._matching(None)) as items:
            async for item in items:
                key = key_selector(item)
                if key in result:
                    raise DuplicateKeyException(key)
                result[key] = item if element_selector is None else element_selector(item)
        return result


def _no_element(predicate: Predicate | None) -> InvalidOperationException:
    if predicate is None:
        return InvalidOperationException("Sequence contains no elements", code="SEQUENCE_EMPTY")
    return InvalidOperationException("Sequence contains no matching element", code="NO_MATCH")


def _more_than_one(predicate: Predicate | None) -> InvalidOperationException:
    if predicate is None:
        return InvalidOperationException("Sequence contains more than one element", code="MORE_THAN_ONE_ELEMENT")
    return InvalidOperationException("Sequence contains more than one matching element", code="MORE_THAN_ONE_MATCH")


def _as_kind(value: Any, kind: type) -> Any:
    # bool is an int subclass but never a quantity
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise TypeError(f"Cannot sum {type(value).__name__} value {value!r} as {kind.__name__}")
    if kind is float:
        return float(value)
    if kind is Decimal and isinstance(value, int):
        return Decimal(value)
    if type(value) is kind:
        return value
    raise TypeError(f"Cannot sum {type(value).__name__} value {value!r} as {kind.__name__}")
