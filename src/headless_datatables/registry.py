import dataclasses
import functools
import itertools
import logging
import types
import typing
from datetime import date, datetime
from enum import Enum as PyEnum
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, Tuple, Type

from pydantic import BaseModel
from sqlalchemy import Date, DateTime, Enum, String
from sqlalchemy import inspect as sa_inspect

from .enum import ValueKind

logger = logging.getLogger(__name__)


def column_key(name: str) -> str:
    """Lookup key for a column name: case-insensitive, underscores ignored."""
    return name.replace("_", "").lower()


@dataclasses.dataclass(frozen=True)
class VirtualColumn:
    """
    A computed column built from other fields of the record.

    ``parts`` is a sequence of groups; each group lists interchangeable field
    names in order of preference. Every combination of the present fields is
    searched, the preferred one is used for sorting.
    """

    name: str
    parts: Tuple[Tuple[str, ...], ...]
    separator: str = " "


# The single place computed columns are defined.
VIRTUAL_COLUMNS: Tuple[VirtualColumn, ...] = (
    VirtualColumn("fullName", (("firstName",), ("lastName", "surname"))),
)


@dataclasses.dataclass(frozen=True)
class FieldAccessor:
    name: str
    kind: ValueKind
    python_type: Optional[type] = None
    components: Tuple["FieldAccessor", ...] = ()
    variants: Tuple["FieldAccessor", ...] = ()
    separator: str = " "

    @property
    def is_virtual(self) -> bool:
        return bool(self.components)

    @property
    def is_datetime(self) -> bool:
        return self.python_type is not None and issubclass(self.python_type, datetime)

    def read(self, record: Any) -> Any:
        if self.components:
            return self.combine(component.read(record) for component in self.components)
        return getattr(record, self.name)

    def combine(self, values: Iterable[Any]) -> str:
        return self.separator.join(str(value) for value in values if value is not None and value != "")

    def search_variants(self) -> Tuple["FieldAccessor", ...]:
        """Accessors a text search must try; a virtual column expands to each pairing."""
        return self.variants or (self,)


@dataclasses.dataclass(frozen=True)
class ColumnRegistry:
    record_type: Optional[type]
    fields: Mapping[str, FieldAccessor]
    virtuals: Mapping[str, FieldAccessor]
    primary_key: Tuple[str, ...] = ()

    def get(self, name: Optional[str]) -> Optional[FieldAccessor]:
        """Resolve a column name; ``None`` means the column should be skipped."""
        if not name or not name.strip():
            return None
        key = column_key(name.strip())
        accessor = self.fields.get(key)
        if accessor is None:
            accessor = self.virtuals.get(key)
        return accessor

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None

    def fallback_order(self, candidates: Iterable[str]) -> Optional[FieldAccessor]:
        for name in candidates:
            accessor = self.fields.get(column_key(name))
            if accessor is not None:
                return accessor
        for name in self.primary_key:
            accessor = self.fields.get(column_key(name))
            if accessor is not None:
                return accessor
        return None


def _kind_for_python(annotation: Any) -> Tuple[ValueKind, Optional[type]]:
    nullable = False
    if typing.get_origin(annotation) in (typing.Union, types.UnionType):
        args = typing.get_args(annotation)
        concrete = [arg for arg in args if arg is not type(None)]
        nullable = len(concrete) != len(args)
        if len(concrete) != 1:
            return ValueKind.OTHER, None
        annotation = concrete[0]

    if not isinstance(annotation, type):
        return ValueKind.OTHER, None
    if issubclass(annotation, str) and not issubclass(annotation, PyEnum):
        return ValueKind.TEXT, annotation
    if issubclass(annotation, date):
        return (ValueKind.NULLABLE_DATE if nullable else ValueKind.DATE), annotation
    return ValueKind.OTHER, annotation


def _kind_for_column(column) -> Tuple[ValueKind, Optional[type]]:
    column_type = column.type
    if isinstance(column_type, String) and not isinstance(column_type, Enum):
        return ValueKind.TEXT, str
    if isinstance(column_type, (DateTime, Date)):
        python_type = datetime if isinstance(column_type, DateTime) else date
        kind = ValueKind.NULLABLE_DATE if column.nullable else ValueKind.DATE
        return kind, python_type
    try:
        return ValueKind.OTHER, column_type.python_type
    except NotImplementedError:
        return ValueKind.OTHER, None


def _mapped_fields(record_type: type):
    mapper = sa_inspect(record_type, raiseerr=False)
    if getattr(mapper, "is_aliased_class", False):
        mapper = mapper.mapper
    if mapper is None or not hasattr(mapper, "column_attrs"):
        return None

    fields = []
    for attr in mapper.column_attrs:
        kind, python_type = _kind_for_column(attr.columns[0])
        fields.append(FieldAccessor(attr.key, kind, python_type))
    primary_key = tuple(mapper.get_property_by_column(column).key for column in mapper.primary_key)
    return fields, primary_key


def _annotated_fields(record_type: type):
    if issubclass(record_type, BaseModel):
        hints = {name: info.annotation for name, info in record_type.model_fields.items()}
    else:
        try:
            hints = typing.get_type_hints(record_type)
        except (NameError, TypeError):
            # Unresolvable forward references; fall back to the raw annotations.
            hints = dict(getattr(record_type, "__annotations__", {}))

    fields = []
    for name, annotation in hints.items():
        if name.startswith("_") or typing.get_origin(annotation) is typing.ClassVar:
            continue
        kind, python_type = _kind_for_python(annotation)
        fields.append(FieldAccessor(name, kind, python_type))
    return fields, ()


def _build_virtual(column: VirtualColumn, fields: Mapping[str, FieldAccessor]) -> Optional[FieldAccessor]:
    groups = []
    for group in column.parts:
        present = [fields[column_key(name)] for name in group if column_key(name) in fields]
        if present:
            groups.append(present)
    if not groups:
        return None

    variants = tuple(
        FieldAccessor(column.name, ValueKind.TEXT, str, components=tuple(combo), separator=column.separator)
        for combo in itertools.product(*groups)
    )
    preferred = variants[0]
    return dataclasses.replace(preferred, variants=variants)


@functools.lru_cache(maxsize=None)
def resolve(record_type: Optional[Type]) -> ColumnRegistry:
    """
    Build the column registry for a record type.

    Results are cached per type and never mutated afterwards, so concurrent
    readers share them without locking. Two threads racing on the first call
    simply build equal registries.
    """
    if record_type is None:
        return ColumnRegistry(None, MappingProxyType({}), MappingProxyType({}))

    discovered = _mapped_fields(record_type)
    if discovered is None:
        discovered = _annotated_fields(record_type)
    field_list, primary_key = discovered

    fields = {column_key(accessor.name): accessor for accessor in field_list}
    virtuals = {}
    for column in VIRTUAL_COLUMNS:
        key = column_key(column.name)
        if key in fields:
            continue
        accessor = _build_virtual(column, fields)
        if accessor is not None:
            virtuals[key] = accessor

    logger.debug(
        "Registered %d fields and %d virtual columns for %s",
        len(fields),
        len(virtuals),
        getattr(record_type, "__qualname__", record_type),
    )
    return ColumnRegistry(
        record_type,
        MappingProxyType(fields),
        MappingProxyType(virtuals),
        primary_key,
    )
