import logging
from typing import Optional, Tuple

from .config import DEFAULT_OPTIONS, DataTablesOptions
from .diagnostics import Diagnostics
from .enum import SortDirection
from .expressions import OrderKey
from .registry import ColumnRegistry
from .schema import TableRequest

logger = logging.getLogger(__name__)


def build_order(
    registry: ColumnRegistry,
    request: TableRequest,
    diagnostics: Optional[Diagnostics] = None,
    options: DataTablesOptions = DEFAULT_OPTIONS,
) -> Tuple[OrderKey, ...]:
    """
    Turn the request's order entries into order keys, in priority order.

    Entries that cannot be used are skipped and reported to ``diagnostics``.
    When nothing usable is left the fallback column (first name, then id) is
    used, followed by the primary key, so paging stays deterministic.
    """
    if diagnostics is None:
        diagnostics = Diagnostics()

    keys = []
    for entry in request.order:
        if not 0 <= entry.column < len(request.columns):
            diagnostics.record(
                "order_index_out_of_range",
                f"Order column index {entry.column} is outside the {len(request.columns)} requested columns",
            )
            continue

        column = request.columns[entry.column]
        name = column.field_name
        if not column.orderable:
            diagnostics.record(
                "order_column_not_orderable",
                f"Column {entry.column} ('{name}') is not orderable",
                column=name,
            )
            continue

        accessor = registry.get(name)
        if accessor is None:
            diagnostics.record(
                "order_column_unresolved",
                f"Skipping invalid or virtual column for sorting: '{name}'",
                column=name,
            )
            continue

        keys.append(OrderKey(accessor, entry.direction))

    if keys:
        return tuple(keys)

    fallback = registry.fallback_order(options.fallback_order)
    if fallback is None:
        logger.debug("No usable order and no fallback column; keeping source order")
        return ()
    logger.debug("Applying fallback order on '%s'", fallback.name)
    keys = [OrderKey(fallback, SortDirection.ASCENDING)]
    # Primary key breaks ties so equal fallback values still page the same way.
    for name in registry.primary_key:
        accessor = registry.get(name)
        if accessor is not None and accessor.name != fallback.name:
            keys.append(OrderKey(accessor, SortDirection.ASCENDING))
    return tuple(keys)
