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
"""Paginated result set returned by ``to_paged_list_async``."""

from __future__ import annotations

import math
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class PagedList(Generic[T]):
    """One page of a query result plus the size of the whole result.

    Attributes:
        items: The items on this page (empty when only the count was loaded).
        page_index: Requested page number (0-based).
        page_size: Requested maximum items per page.
        total_count: Number of items across all pages.
    """

    items: list[T]
    page_index: int
    page_size: int
    total_count: int

    @classmethod
    def of(
        cls,
        source: Sequence[T],
        page_index: int,
        page_size: int,
        total_count: int | None = None,
    ) -> PagedList[T]:
        """Build a page from already-loaded data.

        With *total_count* given, *source* is taken to be the page itself.
        Without it, *source* is the full data set: the page is sliced out of
        it and ``len(source)`` becomes the total.
        """
        if total_count is not None:
            return cls(list(source), page_index, page_size, total_count)
        start = max(page_index * page_size, 0)
        return cls(list(source[start : start + max(page_size, 0)]), page_index, page_size, len(source))

    @property
    def total_pages(self) -> int:
        """Total number of pages; a page size below 1 counts as 1."""
        if self.total_count <= 0:
            return 0
        return math.ceil(self.total_count / max(self.page_size, 1))

    @property
    def has_previous_page(self) -> bool:
        return self.page_index > 0

    @property
    def has_next_page(self) -> bool:
        return self.page_index + 1 < self.total_pages

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def map(self, func: Callable[[T], U]) -> PagedList[U]:
        """Transform items using a mapping function, preserving pagination metadata."""
        return PagedList(
            items=[func(item) for item in self.items],
            page_index=self.page_index,
            page_size=self.page_size,
            total_count=self.total_count,
        )
