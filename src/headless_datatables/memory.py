import logging
from typing import Any, Collection, Optional, Sequence

from .config import DEFAULT_OPTIONS, DataTablesOptions
from .diagnostics import Diagnostics
from .expressions import sort_rows
from .ordering import build_order
from .predicates import build_request_predicate
from .registry import resolve
from .schema import TableRequest, TableResult

logger = logging.getLogger(__name__)


class ListProcessor:
    """Pages, filters and sorts records that are already in memory."""

    def __init__(self, options: Optional[DataTablesOptions] = None):
        self.options = options or DEFAULT_OPTIONS

    def process(
        self,
        request: TableRequest,
        rows: Collection[Any],
        record_type: Optional[type] = None,
        searchable_columns: Optional[Sequence[str]] = None,
        diagnostics: Optional[Diagnostics] = None,
    ) -> TableResult:
        if diagnostics is None:
            diagnostics = Diagnostics()
        records = list(rows)

        try:
            if record_type is None and records:
                record_type = type(records[0])
            registry = resolve(record_type)

            predicate = build_request_predicate(
                registry, request, searchable_columns, self.options, diagnostics
            )
            filtered = [record for record in records if predicate.evaluate(record)]

            keys = build_order(registry, request, diagnostics, self.options)
            ordered = sort_rows(filtered, keys)
            page = ordered[request.start:request.stop]
        except Exception:
            logger.exception("An error occurred while processing table request draw=%s", request.draw)
            raise

        return TableResult(
            draw=request.draw,
            rows=page,
            total_records=len(records),
            filtered_records=len(filtered),
        )
