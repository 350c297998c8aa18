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
"""Async terminal operations for deferred queries.

Each function takes a :class:`~queryfly.data.queryable.Queryable`, runs it
through its async sequence and awaits one terminal operation.  Failures
raised by the query backend propagate unchanged.

Usage::

    from queryfly.data.extensions import count_async, first_or_default_async, to_paged_list_async

    total = await count_async(query, lambda o: o.total > 100)
    newest = await first_or_default_async(query.order_by(Order.created_at.desc()))
    page = await to_paged_list_async(query, page_index=0, page_size=25)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Hashable, MutableMapping
from typing import Any, TypeVar

from queryfly.data.async_enumerable import Predicate
from queryfly.data.page import PagedList
from queryfly.data.queryable import Queryable

T = TypeVar("T")
K = TypeVar("K")
V = TypeVar("V")

logger = logging.getLogger(__name__)


async def any_async(source: Queryable[T], predicate: Predicate | None = None) -> bool:
    """Whether any element of *source* satisfies *predicate* (or exists at all)."""
    return await source.to_async_enumerable().any(predicate)


async def count_async(source: Queryable[T], predicate: Predicate | None = None) -> int:
    """Number of elements of *source* satisfying *predicate*."""
    return await source.to_async_enumerable().count(predicate)


async def first_async(source: Queryable[T], predicate: Predicate | None = None) -> T:
    """First matching element; raises ``InvalidOperationException`` if there is none."""
    return await source.to_async_enumerable().first(predicate)


async def first_or_default_async(source: Queryable[T], predicate: Predicate | None = None) -> T | None:
    """First matching element, or ``None``."""
    return await source.to_async_enumerable().first_or_default(predicate)


async def single_async(source: Queryable[T], predicate: Predicate | None = None) -> T:
    """The only matching element; raises ``InvalidOperationException`` on zero or several."""
    return await source.to_async_enumerable().single(predicate)


async def single_or_default_async(source: Queryable[T], predicate: Predicate | None = None) -> T | None:
    """The only matching element or ``None``; raises ``InvalidOperationException`` on several."""
    return await source.to_async_enumerable().single_or_default(predicate)


async def sum_async(source: Queryable[T], selector: Callable[[T], Any], kind: type = int) -> Any:
    """Sum of ``selector(item)``; see :meth:`AsyncEnumerable.sum` for ``kind`` and ``None`` handling."""
    return await source.to_async_enumerable().sum(selector, kind)


async def to_array_async(source: Queryable[T]) -> tuple[T, ...]:
    return await source.to_async_enumerable().to_array()


async def to_list_async(source: Queryable[T]) -> list[T]:
    return await source.to_async_enumerable().to_list()


async def to_dict_async(
    source: Queryable[T],
    key_selector: Callable[[T], K],
    element_selector: Callable[[T], V] | None = None,
    comparer: Callable[[K], Hashable] | None = None,
) -> MutableMapping[K, Any]:
    """Load *source* into a mapping; raises ``DuplicateKeyException`` on colliding keys."""
    return await source.to_async_enumerable().to_dict(key_selector, element_selector, comparer)


async def to_paged_list_async(
    source: Queryable[T] | None,
    page_index: int,
    page_size: int,
    get_only_total_count: bool = False,
) -> PagedList[T]:
    """Load one page of *source* together with the total element count.

    The count and the page are two separate reads; a store mutated between
    them may report a total that does not match the page.

    Args:
        source: Query to paginate.  ``None`` yields an empty page without
            running anything.
        page_index: 0-based page number.  Pages past the end come back empty
            with the correct total.
        page_size: Maximum number of items on the page.
        get_only_total_count: Skip loading items and return only the total.
    """
    if source is None:
        return PagedList([], page_index, page_size, 0)

    total = await count_async(source)

    items: list[T] = []
    if get_only_total_count:
        logger.debug("Counted %d items; page load skipped", total)
    else:
        offset = page_index * page_size
        logger.debug("Loading page %d (offset=%d, size=%d) of %d items", page_index, offset, page_size, total)
        items = await to_list_async(source.skip(offset).take(page_size))

    return PagedList(items, page_index, page_size, total)
