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
"""queryfly data — deferred queries and their async terminal operations.

Framework-agnostic pieces (Queryable, AsyncEnumerable, PagedList and the
async adapter functions) are exported directly, as is the SQLAlchemy
backend.
"""

from queryfly.data.async_enumerable import AsyncEnumerable, ComparerDict
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
from queryfly.data.queryable import InMemoryQueryable, Queryable, Window
from queryfly.data.relational.sqlalchemy import SqlAlchemyQueryable

__all__ = [
    "AsyncEnumerable",
    "ComparerDict",
    "InMemoryQueryable",
    "PagedList",
    "Queryable",
    "SqlAlchemyQueryable",
    "Window",
    "any_async",
    "count_async",
    "first_async",
    "first_or_default_async",
    "single_async",
    "single_or_default_async",
    "sum_async",
    "to_array_async",
    "to_dict_async",
    "to_list_async",
    "to_paged_list_async",
]
