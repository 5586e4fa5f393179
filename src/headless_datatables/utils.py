from typing import Any, Optional, Sequence

from sqlalchemy import Date, Select, String, and_, cast, false, func, or_, true
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.sql.elements import ColumnElement

from .diagnostics import Diagnostics
from .exceptions import PredicateConstructionError
from .expressions import And, Constant, Contains, DateEquals, Or, OrderKey, Predicate
from .registry import FieldAccessor


def statement_entity(stmt: Select) -> Optional[type]:
    """The mapped class a select statement returns rows of."""
    descriptions = stmt.column_descriptions
    if not descriptions:
        return None
    return descriptions[0].get("entity")


def mapped_class(entity: Any) -> Optional[type]:
    """The plain mapped class behind an entity, unwrapping ``aliased()`` entities."""
    if entity is None:
        return None
    insp = sa_inspect(entity, raiseerr=False)
    if insp is not None and getattr(insp, "is_aliased_class", False):
        return insp.mapper.class_
    return entity


def column_expression(accessor: FieldAccessor, model: Any) -> ColumnElement:
    """
    Translate an accessor to a SQL expression on ``model``.

    Virtual columns become a space-joined concatenation of their components,
    with NULL components treated as empty.
    """
    if accessor.components:
        if len(accessor.components) == 1:
            return column_expression(accessor.components[0], model)
        parts = [func.coalesce(column_expression(component, model), "") for component in accessor.components]
        joined = parts[0]
        for part in parts[1:]:
            joined = joined + accessor.separator + part
        return func.trim(joined, type_=String)

    column_attr = getattr(model, accessor.name, None)
    if column_attr is None or not hasattr(column_attr, "__clause_element__"):
        raise PredicateConstructionError(
            accessor.name,
            f"'{getattr(model, '__name__', model)}' has no SQL column named '{accessor.name}'",
        )
    return column_attr


def day_of(column_attr: ColumnElement, dialect_name: Optional[str] = None) -> ColumnElement:
    """The calendar day of a datetime column; SQLite stores datetimes as text and needs ``date()``."""
    if dialect_name == "sqlite":
        return func.date(column_attr, type_=Date)
    return cast(column_attr, Date)


def build_condition(predicate: Predicate, model: Any, dialect_name: Optional[str] = None) -> ColumnElement:
    """
    Build a SQLAlchemy filter condition from a predicate tree.
    Text matches use a case-insensitive LIKE, dates compare the day only.
    """
    if isinstance(predicate, Constant):
        return true() if predicate.value else false()

    if isinstance(predicate, And):
        return and_(*[build_condition(item, model, dialect_name) for item in predicate.items])

    if isinstance(predicate, Or):
        return or_(*[build_condition(item, model, dialect_name) for item in predicate.items])

    if isinstance(predicate, Contains):
        column_attr = column_expression(predicate.accessor, model)
        return and_(column_attr.is_not(None), column_attr.icontains(predicate.term, autoescape=True))

    if isinstance(predicate, DateEquals):
        column_attr = column_expression(predicate.accessor, model)
        day_only = day_of(column_attr, dialect_name) if predicate.accessor.is_datetime else column_attr
        return and_(column_attr.is_not(None), day_only == predicate.day)

    raise PredicateConstructionError(repr(predicate), "unsupported predicate type")


def filter_statement(stmt: Select, predicate: Predicate, model: Any, dialect_name: Optional[str] = None) -> Select:
    if isinstance(predicate, Constant) and predicate.value:
        return stmt
    return stmt.where(build_condition(predicate, model, dialect_name))


def order_statement(
    stmt: Select,
    keys: Sequence[OrderKey],
    model: Any,
    diagnostics: Diagnostics,
) -> Select:
    """
    Apply order keys, replacing any ORDER BY already on the statement.

    A key that cannot be translated is reported and skipped; when none can
    be translated the statement keeps its own ordering.
    """
    clauses = []
    for key in keys:
        try:
            order_col = column_expression(key.accessor, model)
        except PredicateConstructionError as exc:
            diagnostics.record("order_column_untranslatable", str(exc), column=key.accessor.name)
            continue
        clauses.append(order_col.desc() if key.descending else order_col.asc())
    if not clauses:
        return stmt
    return stmt.order_by(None).order_by(*clauses)
