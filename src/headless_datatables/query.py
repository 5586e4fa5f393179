import logging
from typing import Optional, Sequence

from sqlalchemy import Select

from .config import DEFAULT_OPTIONS, DataTablesOptions
from .database import DatabaseBackend
from .diagnostics import Diagnostics
from .ordering import build_order
from .predicates import build_request_predicate
from .registry import resolve
from .schema import TableRequest, TableResult
from .utils import filter_statement, mapped_class, order_statement, statement_entity

logger = logging.getLogger(__name__)


class QueryProcessor:
    """
    Pages, filters and sorts a SQLAlchemy select statement.

    Everything is pushed into the statement; the database is hit three
    times, in this order: total count, filtered count, page.
    """

    def __init__(self, db_backend: DatabaseBackend, options: Optional[DataTablesOptions] = None):
        self.db_backend = db_backend
        self.options = options or DEFAULT_OPTIONS

    async def process(
        self,
        request: TableRequest,
        stmt: Select,
        searchable_columns: Optional[Sequence[str]] = None,
        diagnostics: Optional[Diagnostics] = None,
    ) -> TableResult:
        if diagnostics is None:
            diagnostics = Diagnostics()
        model = statement_entity(stmt)
        registry = resolve(mapped_class(model))

        # Built before touching the database so a bad search column fails fast.
        predicate = build_request_predicate(
            registry, request, searchable_columns, self.options, diagnostics
        )
        filtered_stmt = filter_statement(stmt, predicate, model, self.db_backend.dialect_name)

        # -- Total Records (Unfiltered) --
        records_total = await self.db_backend.get_total_records(stmt)

        # -- Count After Filtering --
        records_filtered = await self.db_backend.get_filtered_records(filtered_stmt)

        # -- Apply Ordering --
        keys = build_order(registry, request, diagnostics, self.options)
        paged_stmt = order_statement(filtered_stmt, keys, model, diagnostics)

        # -- Apply Pagination --
        paged_stmt = paged_stmt.offset(request.start)
        if request.stop is not None:
            paged_stmt = paged_stmt.limit(request.length)

        data = await self.db_backend.execute_query(paged_stmt)

        return TableResult(
            draw=request.draw,
            rows=data,
            total_records=records_total,
            filtered_records=records_filtered,
        )
