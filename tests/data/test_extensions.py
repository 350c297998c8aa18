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
"""Tests for the async terminal operations on deferred queries."""

import asyncio
import logging
from collections.abc import AsyncGenerator
from decimal import Decimal

import pytest

from queryfly.data.async_enumerable import AsyncEnumerable
from queryfly.data.extensions import (
    any_async,
    count_async,
    first_async,
    first_or_default_async,
    single_async,
    single_or_default_async,
    sum_async,
    to_array_async,
    to_dict_async,
    to_list_async,
    to_paged_list_async,
)
from queryfly.data.page import PagedList
from queryfly.data.queryable import InMemoryQueryable, Queryable
from queryfly.kernel.exceptions import DuplicateKeyException, InvalidOperationException


class BackendDown(Exception):
    pass


class FailingQueryable(Queryable[int]):
    """Query whose backend fails on enumeration."""

    def __init__(self, error: BaseException) -> None:
        self.error = error

    def skip(self, count: int) -> "FailingQueryable":
        return self

    def take(self, count: int) -> "FailingQueryable":
        return self

    def to_async_enumerable(self) -> AsyncEnumerable[int]:
        async def _generate() -> AsyncGenerator[int, None]:
            raise self.error
            yield  # pragma: no cover

        return AsyncEnumerable(_generate)


class CountingQueryable(InMemoryQueryable[int]):
    """In-memory query that records each enumeration."""

    def __init__(self, source, steps=(), log=None) -> None:
        super().__init__(source, steps)
        self.log = log if log is not None else []

    def _then(self, step):
        return CountingQueryable(self._source, self._steps + (step,), self.log)

    def to_async_enumerable(self) -> AsyncEnumerable[int]:
        self.log.append(len(self._steps))
        return super().to_async_enumerable()


@pytest.fixture
def one_to_25() -> InMemoryQueryable[int]:
    return InMemoryQueryable(range(1, 26))


class TestExistenceAndCounting:
    @pytest.mark.asyncio
    async def test_count_matches_materialized_length(self, one_to_25):
        assert await count_async(one_to_25) == len(await to_list_async(one_to_25))

    @pytest.mark.asyncio
    async def test_any_iff_count_positive(self, one_to_25):
        for predicate in (None, lambda n: n > 24, lambda n: n > 25):
            assert await any_async(one_to_25, predicate) == (await count_async(one_to_25, predicate) > 0)

    @pytest.mark.asyncio
    async def test_empty_source(self):
        empty = InMemoryQueryable([])
        assert await any_async(empty) is False
        assert await count_async(empty) == 0


class TestElementRetrieval:
    @pytest.mark.asyncio
    async def test_first(self, one_to_25):
        assert await first_async(one_to_25) == 1
        assert await first_async(one_to_25, lambda n: n > 20) == 21

    @pytest.mark.asyncio
    async def test_first_on_empty_raises(self):
        with pytest.raises(InvalidOperationException):
            await first_async(InMemoryQueryable([]))

    @pytest.mark.asyncio
    async def test_first_or_default_on_empty_returns_none(self):
        assert await first_or_default_async(InMemoryQueryable([])) is None
        assert await first_or_default_async(InMemoryQueryable([1]), lambda n: n > 1) is None

    @pytest.mark.asyncio
    async def test_single_with_exactly_one_match(self, one_to_25):
        assert await single_async(one_to_25, lambda n: n == 13) == 13

    @pytest.mark.asyncio
    async def test_single_with_zero_or_many_matches_raises(self, one_to_25):
        with pytest.raises(InvalidOperationException):
            await single_async(one_to_25, lambda n: n > 100)
        with pytest.raises(InvalidOperationException):
            await single_async(one_to_25, lambda n: n > 23)

    @pytest.mark.asyncio
    async def test_single_or_default(self, one_to_25):
        assert await single_or_default_async(one_to_25, lambda n: n > 100) is None
        assert await single_or_default_async(one_to_25, lambda n: n == 5) == 5
        with pytest.raises(InvalidOperationException):
            await single_or_default_async(one_to_25)


class TestSum:
    @pytest.mark.asyncio
    async def test_int_sum(self, one_to_25):
        assert await sum_async(one_to_25, lambda n: n) == 325

    @pytest.mark.asyncio
    async def test_empty_non_nullable_sum_is_zero(self):
        assert await sum_async(InMemoryQueryable([]), lambda n: n) == 0
        assert await sum_async(InMemoryQueryable([]), lambda n: n, kind=Decimal) == Decimal("0")

    @pytest.mark.asyncio
    async def test_nullable_decimal_sum(self):
        prices = InMemoryQueryable([{"price": Decimal("9.99")}, {"price": None}, {"price": Decimal("0.01")}])
        assert await sum_async(prices, lambda row: row["price"], kind=Decimal) == Decimal("10.00")

    @pytest.mark.asyncio
    async def test_nullable_float_sum(self):
        ratings = InMemoryQueryable([4.5, None, 3.5])
        assert await sum_async(ratings, lambda r: r, kind=float) == 8.0

    @pytest.mark.asyncio
    async def test_kind_is_enforced(self, one_to_25):
        with pytest.raises(TypeError):
            await sum_async(one_to_25, lambda n: 1.5)
        assert await sum_async(one_to_25, lambda n: 1.5, kind=float) == 37.5


class TestMaterialization:
    @pytest.mark.asyncio
    async def test_to_array(self):
        assert await to_array_async(InMemoryQueryable([3, 2, 1])) == (3, 2, 1)

    @pytest.mark.asyncio
    async def test_to_list(self, one_to_25):
        assert await to_list_async(one_to_25.where(lambda n: n <= 3)) == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_to_dict(self):
        users = InMemoryQueryable([("u1", "Ada"), ("u2", "Grace")])
        assert await to_dict_async(users, lambda u: u[0], lambda u: u[1]) == {"u1": "Ada", "u2": "Grace"}

    @pytest.mark.asyncio
    async def test_to_dict_duplicate_keys_raise(self):
        users = InMemoryQueryable([("u1", "Ada"), ("u1", "Grace")])
        with pytest.raises(DuplicateKeyException):
            await to_dict_async(users, lambda u: u[0], lambda u: u[1])

    @pytest.mark.asyncio
    async def test_to_dict_with_comparer(self):
        emails = InMemoryQueryable(["Ada@Example.com", "grace@example.com"])
        result = await to_dict_async(emails, lambda e: e, lambda e: e.split("@")[0], comparer=str.lower)
        assert result["ada@example.com"] == "Ada"


class TestPagination:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("page_index", "expected"),
        [
            (0, list(range(1, 11))),
            (1, list(range(11, 21))),
            (2, list(range(21, 26))),
            (3, []),
        ],
    )
    async def test_pages_of_one_to_25(self, one_to_25, page_index, expected):
        page = await to_paged_list_async(one_to_25, page_index, 10)
        assert page.items == expected
        assert page.total_count == 25
        assert page.page_index == page_index
        assert page.page_size == 10

    @pytest.mark.asyncio
    async def test_concatenated_pages_reproduce_full_list(self, one_to_25):
        pages = [await to_paged_list_async(one_to_25, i, 7) for i in range(4)]
        assert [n for page in pages for n in page] == await to_list_async(one_to_25)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("page_index", [0, 1, 99])
    async def test_only_total_count(self, one_to_25, page_index):
        page = await to_paged_list_async(one_to_25, page_index, 10, get_only_total_count=True)
        assert page.items == []
        assert page.total_count == await count_async(one_to_25)

    @pytest.mark.asyncio
    async def test_only_total_count_runs_single_query(self):
        query = CountingQueryable(range(5))
        await to_paged_list_async(query, 0, 2, get_only_total_count=True)
        assert query.log == [0]

    @pytest.mark.asyncio
    async def test_count_runs_before_windowed_fetch(self):
        query = CountingQueryable(range(5))
        page = await to_paged_list_async(query, 1, 2)
        assert page.items == [2, 3]
        assert query.log == [0, 2]

    @pytest.mark.asyncio
    async def test_none_source_returns_empty_page(self):
        page = await to_paged_list_async(None, 0, 10)
        assert page == PagedList([], 0, 10, 0)

    @pytest.mark.asyncio
    async def test_unbounded_page_size(self, one_to_25):
        page = await to_paged_list_async(one_to_25, 0, 10_000)
        assert len(page) == 25
        assert page.total_pages == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("page_index", "page_size", "expected"),
        [
            (-1, 10, list(range(1, 11))),
            (-3, 5, [1, 2, 3, 4, 5]),
            (0, 0, []),
            (2, 0, []),
            (1, -5, []),
        ],
    )
    async def test_invalid_window_follows_skip_take(self, one_to_25, page_index, page_size, expected):
        page = await to_paged_list_async(one_to_25, page_index, page_size)
        assert page.items == expected
        assert page.total_count == 25
        assert (page.page_index, page.page_size) == (page_index, page_size)

    @pytest.mark.asyncio
    async def test_logs_window(self, one_to_25, caplog: pytest.LogCaptureFixture):
        caplog.set_level(logging.DEBUG, logger="queryfly.data.extensions")
        await to_paged_list_async(one_to_25, 2, 10)
        assert "offset=20" in caplog.text


class TestFailurePropagation:
    @pytest.mark.asyncio
    async def test_backend_error_is_not_wrapped(self):
        error = BackendDown("connection lost")
        with pytest.raises(BackendDown) as exc_info:
            await count_async(FailingQueryable(error))
        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_pagination_propagates_backend_error(self):
        with pytest.raises(BackendDown):
            await to_paged_list_async(FailingQueryable(BackendDown()), 0, 10)

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self):
        with pytest.raises(asyncio.CancelledError):
            await first_or_default_async(FailingQueryable(asyncio.CancelledError()))
