from datetime import date, datetime
from typing import Iterable, List, Optional, Sequence

from .config import DEFAULT_OPTIONS, DataTablesOptions
from .diagnostics import Diagnostics
from .enum import ValueKind
from .expressions import TRUE, Contains, DateEquals, Or, Predicate
from .registry import ColumnRegistry, FieldAccessor
from .schema import TableRequest


DATE_KINDS = (ValueKind.DATE, ValueKind.NULLABLE_DATE)


def parse_date(term: str, formats: Iterable[str] = ()) -> Optional[date]:
    """Parse a search term as a calendar day, or return None."""
    term = term.strip()
    try:
        return date.fromisoformat(term)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(term).date()
    except ValueError:
        pass
    for fmt in formats:
        try:
            return datetime.strptime(term, fmt).date()
        except ValueError:
            continue
    return None


def conditions_for(accessor: FieldAccessor, term: str, day: Optional[date]) -> List[Predicate]:
    if accessor.kind is ValueKind.TEXT:
        return [Contains(variant, term) for variant in accessor.search_variants()]
    if accessor.kind in DATE_KINDS and day is not None:
        return [DateEquals(accessor, day)]
    return []


def build_global_predicate(
    registry: ColumnRegistry,
    columns: Sequence[str],
    term: Optional[str],
    options: DataTablesOptions = DEFAULT_OPTIONS,
    diagnostics: Optional[Diagnostics] = None,
) -> Predicate:
    """
    OR together a match of ``term`` against every searchable column.

    An empty term filters nothing. A term with no column able to match it
    filters everything out.
    """
    term = (term or "").strip()
    if not term:
        return TRUE

    day = parse_date(term, options.date_formats)
    conditions = []
    seen = set()
    for name in columns:
        accessor = registry.get(name)
        if accessor is None:
            if diagnostics is not None:
                diagnostics.record(
                    "search_column_unresolved",
                    f"Search column '{name}' does not match any field",
                    column=name,
                )
            continue
        if accessor.name in seen:
            continue
        seen.add(accessor.name)
        conditions.extend(conditions_for(accessor, term, day))

    return Or.of(*conditions)


def build_column_predicate(
    registry: ColumnRegistry,
    column: str,
    term: Optional[str],
    options: DataTablesOptions = DEFAULT_OPTIONS,
    diagnostics: Optional[Diagnostics] = None,
) -> Predicate:
    return build_global_predicate(registry, [column], term, options, diagnostics)


def build_request_predicate(
    registry: ColumnRegistry,
    request: TableRequest,
    searchable_columns: Optional[Sequence[str]] = None,
    options: DataTablesOptions = DEFAULT_OPTIONS,
    diagnostics: Optional[Diagnostics] = None,
) -> Predicate:
    """Global search AND each per-column search of the request."""
    if searchable_columns is None:
        searchable_columns = request.searchable_columns()

    predicate = build_global_predicate(
        registry, searchable_columns, request.global_search, options, diagnostics
    )
    for column in request.columns:
        if not (column.searchable and column.field_name and column.column_search):
            continue
        predicate = predicate & build_column_predicate(
            registry, column.field_name, column.column_search, options, diagnostics
        )
    return predicate
