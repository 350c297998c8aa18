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
"""Deferred queries over SQLAlchemy 2.0 async sessions.

:class:`SqlAlchemyQueryable` composes a ``Select`` statement and streams
its rows through ``AsyncSession.stream`` when enumerated.  Terminal
predicates passed to the async adapter run in Python on the streamed rows;
only ``where``/``order_by``/``select`` and the skip/take window reach SQL.

Usage::

    query = (
        SqlAlchemyQueryable.for_entity(Order, session)
        .where(Order.status == "open")
        .order_by(Order.created_at.desc())
    )
    page = await to_paged_list_async(query, page_index=2, page_size=50)
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from typing import Any, TypeVar

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from queryfly.config.properties.data import DataProperties
from queryfly.core.config import Config
from queryfly.data.async_enumerable import AsyncEnumerable
from queryfly.data.queryable import Queryable, Window
from queryfly.kernel.exceptions import InfrastructureException, InvalidOperationException

T = TypeVar("T")

logger = logging.getLogger(__name__)


class SqlAlchemyQueryable(Queryable[T]):
    """Deferred query backed by a SQLAlchemy ``Select``.

    Args:
        statement: The statement to run.
        session: Session used to stream results.
        stream_batch_size: Rows fetched per round-trip while streaming.
        window: Offset/limit applied on top of *statement*.
    """

    def __init__(
        self,
        statement: Select[Any],
        session: AsyncSession | None,
        *,
        stream_batch_size: int = DataProperties.stream_batch_size,
        window: Window | None = None,
    ) -> None:
        self._statement = statement
        self._session = session
        self._stream_batch_size = stream_batch_size
        self._window = window or Window()

    @classmethod
    def for_entity(
        cls,
        model: type[T],
        session: AsyncSession | None,
        properties: DataProperties | Config | None = None,
    ) -> SqlAlchemyQueryable[T]:
        """Query every row of *model*.

        *properties* may be bound ``DataProperties`` or a ``Config`` to bind
        them from.  When omitted, the packaged defaults are bound, so
        ``QUERYFLY_DATA_STREAM_BATCH_SIZE`` still applies.
        """
        if properties is None:
            properties = Config.from_defaults()
        if isinstance(properties, Config):
            properties = properties.bind(DataProperties)
        return cls(select(model), session, stream_batch_size=properties.stream_batch_size)

    def _replace(self, statement: Select[Any] | None = None, window: Window | None = None) -> SqlAlchemyQueryable[Any]:
        return SqlAlchemyQueryable(
            statement if statement is not None else self._statement,
            self._session,
            stream_batch_size=self._stream_batch_size,
            window=window or self._window,
        )

    def _require_unbounded(self, operation: str) -> None:
        if self._window.is_bounded:
            raise InvalidOperationException(
                f"{operation} cannot be applied after skip/take on a SQL query",
                code="WINDOWED_QUERY",
                context={"operation": operation},
            )

    def _require_session(self) -> AsyncSession:
        if self._session is None:
            raise InfrastructureException("No AsyncSession configured for this query", code="NO_SESSION")
        return self._session

    def where(self, *clauses: Any) -> SqlAlchemyQueryable[T]:
        self._require_unbounded("where")
        return self._replace(statement=self._statement.where(*clauses))

    def order_by(self, *clauses: Any) -> SqlAlchemyQueryable[T]:
        self._require_unbounded("order_by")
        return self._replace(statement=self._statement.order_by(*clauses))

    def select(self, *columns: Any) -> SqlAlchemyQueryable[Any]:
        """Project onto *columns*; one column yields scalars, several yield rows."""
        return self._replace(statement=self._statement.with_only_columns(*columns, maintain_column_froms=True))

    def skip(self, count: int) -> SqlAlchemyQueryable[T]:
        return self._replace(window=self._window.skip(count))

    def take(self, count: int) -> SqlAlchemyQueryable[T]:
        return self._replace(window=self._window.take(count))

    @property
    def statement(self) -> Select[Any]:
        """The statement with the skip/take window applied."""
        stmt = self._statement
        if self._window.offset:
            stmt = stmt.offset(self._window.offset)
        if self._window.limit is not None:
            stmt = stmt.limit(self._window.limit)
        return stmt

    def to_async_enumerable(self) -> AsyncEnumerable[T]:
        return AsyncEnumerable(self._stream)

    async def _stream(self) -> AsyncGenerator[Any, None]:
        session = self._require_session()
        stmt = self.statement.execution_options(yield_per=self._stream_batch_size)
        logger.debug("Streaming query (batch size %d): %s", self._stream_batch_size, stmt)
        result = await session.stream(stmt)
        rows = result.scalars() if len(stmt.column_descriptions) == 1 else result
        try:
            async for row in rows:
                yield row
        finally:
            await result.close()
