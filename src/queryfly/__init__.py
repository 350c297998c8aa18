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
"""queryfly — async terminal operations and pagination for deferred queries."""

from queryfly.config.properties import DataProperties, LoggingProperties
from queryfly.core.config import Config, config_properties
from queryfly.data import (
    AsyncEnumerable,
    ComparerDict,
    InMemoryQueryable,
    PagedList,
    Queryable,
    SqlAlchemyQueryable,
    Window,
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
from queryfly.kernel.exceptions import (
    BusinessException,
    ConflictException,
    DuplicateKeyException,
    InfrastructureException,
    InvalidOperationException,
    QueryFlyException,
)
from queryfly.logging import LoggingPort, StructlogAdapter

__version__ = "0.1.0"

__all__ = [
    # Data
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
    # Errors
    "BusinessException",
    "ConflictException",
    "DuplicateKeyException",
    "InfrastructureException",
    "InvalidOperationException",
    "QueryFlyException",
    # Configuration and logging
    "Config",
    "DataProperties",
    "LoggingPort",
    "LoggingProperties",
    "StructlogAdapter",
    "config_properties",
]
