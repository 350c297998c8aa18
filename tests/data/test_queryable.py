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
"""Tests for deferred in-memory queries and skip/take windows."""

from dataclasses import dataclass

import pytest

from queryfly.data.queryable import InMemoryQueryable, Window
from queryfly.kernel.exceptions import InvalidOperationException


@dataclass
class Product:
    name: str
    category: str
    price: int


PRODUCTS = [
    Product("lamp", "home", 30),
    Product("desk", "office", 120),
    Product("chair", "office", 80),
    Product("rug", "home", 30),
]


class TestWindow:
    def test_defaults_unbounded(self):
        assert Window() == Window(offset=0, limit=None)
        assert Window().is_bounded is False

    def test_skips_accumulate(self):
        assert Window().skip(5).skip(3) == Window(offset=8, limit=None)

    def test_take_after_skip(self):
        assert Window().skip(10).take(5) == Window(offset=10, limit=5)

    def test_skip_after_take_shrinks_limit(self):
        assert Window().take(5).skip(2) == Window(offset=2, limit=3)
        assert Window().take(5).skip(9) == Window(offset=9, limit=0)

    def test_take_keeps_smallest_limit(self):
        assert Window().take(5).take(10) == Window(offset=0, limit=5)

    def test_negative_values_clamp(self):
        assert Window().skip(-4) == Window(offset=0, limit=None)
        assert Window().take(-1) == Window(offset=0, limit=0)


class TestInMemoryQueryable:
    @pytest.mark.asyncio
    async def test_enumerates_source(self):
        assert [n async for n in InMemoryQueryable([1, 2, 3])] == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_where_and_select(self):
        query = InMemoryQueryable(PRODUCTS).where(lambda p: p.category == "office").select(lambda p: p.name)
        assert await query.to_async_enumerable().to_list() == ["desk", "chair"]

    @pytest.mark.asyncio
    async def test_composition_does_not_mutate(self):
        base = InMemoryQueryable(PRODUCTS)
        base.where(lambda p: p.price > 100)
        assert await base.to_async_enumerable().count() == 4

    @pytest.mark.asyncio
    async def test_order_by_is_stable(self):
        query = InMemoryQueryable(PRODUCTS).order_by(lambda p: p.price).select(lambda p: p.name)
        assert await query.to_async_enumerable().to_list() == ["lamp", "rug", "chair", "desk"]

    @pytest.mark.asyncio
    async def test_order_by_descending(self):
        query = InMemoryQueryable([3, 1, 2]).order_by(lambda n: n, descending=True)
        assert await query.to_async_enumerable().to_list() == [3, 2, 1]

    @pytest.mark.asyncio
    async def test_then_by(self):
        query = (
            InMemoryQueryable(PRODUCTS)
            .order_by(lambda p: p.category)
            .then_by(lambda p: p.price, descending=True)
            .select(lambda p: p.name)
        )
        assert await query.to_async_enumerable().to_list() == ["lamp", "rug", "desk", "chair"]

    def test_then_by_without_order_by_raises(self):
        with pytest.raises(InvalidOperationException) as exc_info:
            InMemoryQueryable(PRODUCTS).then_by(lambda p: p.price)
        assert exc_info.value.code == "UNORDERED"

    @pytest.mark.asyncio
    async def test_skip_and_take(self):
        query = InMemoryQueryable(range(1, 26)).skip(10).take(10)
        assert await query.to_async_enumerable().to_list() == list(range(11, 21))

    @pytest.mark.asyncio
    async def test_negative_skip_and_non_positive_take(self):
        assert await InMemoryQueryable([1, 2]).skip(-3).to_async_enumerable().to_list() == [1, 2]
        assert await InMemoryQueryable([1, 2]).take(0).to_async_enumerable().to_list() == []
        assert await InMemoryQueryable([1, 2]).take(-1).to_async_enumerable().to_list() == []

    @pytest.mark.asyncio
    async def test_filter_after_window(self):
        query = InMemoryQueryable(range(10)).take(5).where(lambda n: n % 2 == 0)
        assert await query.to_async_enumerable().to_list() == [0, 2, 4]
