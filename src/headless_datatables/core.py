import logging
from collections.abc import Collection, Mapping
from typing import Any, Optional, Sequence, Type

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from .config import DEFAULT_OPTIONS, DataTablesOptions
from .database import DatabaseBackend, SQLAlchemyBackend
from .diagnostics import Diagnostics
from .exceptions import ConfigurationError, UnsupportedSourceKind
from .memory import ListProcessor
from .query import QueryProcessor
from .schema import TableRequest, TableResult

logger = logging.getLogger(__name__)


def is_finite_collection(source: Any) -> bool:
    return isinstance(source, Collection) and not isinstance(source, (str, bytes, bytearray, Mapping))


class DataTables:
    def __init__(
        self,
        db_session: Optional[AsyncSession] = None,
        model: Optional[Type] = None,
        base_statement: Optional[Select] = None,
        db_backend: Optional[DatabaseBackend] = None,
        options: Optional[DataTablesOptions] = None,
    ):
        """
        Initializes the DataTables processor.

        Args:
            db_session: SQLAlchemy AsyncSession, needed only for select statements.
            model: The SQLAlchemy model ``process`` selects from when no statement is given.
            base_statement: Statement ``process`` starts from instead of ``select(model)``.
            db_backend: Replaces the default ``SQLAlchemyBackend`` around ``db_session``.
            options: Fallback order and date formats; defaults when omitted.
        """
        self.model = model
        self.base_statement = base_statement
        self.options = options or DEFAULT_OPTIONS
        if db_backend is None and db_session is not None:
            self.db_backend = SQLAlchemyBackend(db_session)
        else:
            self.db_backend = db_backend

    async def get_query(self) -> Select:
        if self.base_statement is not None:
            return self.base_statement
        if self.model is None:
            raise ConfigurationError("DataTables needs a model or a base statement to build a query")
        return select(self.model)

    async def get_data(
        self,
        request: TableRequest,
        source: Any,
        searchable_columns: Optional[Sequence[str]] = None,
        record_type: Optional[Type] = None,
        diagnostics: Optional[Diagnostics] = None,
    ) -> TableResult:
        """
        Route the request to the processor matching the shape of ``source``.

        A finite collection (list, tuple, ...) is processed in memory; a
        ``Select`` statement is processed in the database.
        """
        if isinstance(source, Select):
            if self.db_backend is None:
                raise ConfigurationError("A database session or backend is required to process a select statement")
            logger.debug("Processing draw %s as a database query", request.draw)
            processor = QueryProcessor(self.db_backend, self.options)
            return await processor.process(request, source, searchable_columns, diagnostics)

        if is_finite_collection(source):
            logger.debug("Processing draw %s as an in-memory list of %d rows", request.draw, len(source))
            return ListProcessor(self.options).process(
                request, source, record_type, searchable_columns, diagnostics
            )

        raise UnsupportedSourceKind(source)

    async def process(self, request_data: TableRequest) -> TableResult:
        """
        Processes the DataTables request against the configured model or statement.
        """
        stmt = await self.get_query()
        return await self.get_data(request_data, stmt)
