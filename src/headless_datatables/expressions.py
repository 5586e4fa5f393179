"""
Predicate and ordering value objects.

The builders produce these nodes; each execution strategy interprets them.
In-memory processing calls ``evaluate``/``sort_rows`` directly, the query
processor translates them to SQLAlchemy clauses (see ``utils``).
"""
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable, List, Sequence, Tuple

from .enum import SortDirection
from .registry import FieldAccessor


class Predicate:
    def evaluate(self, record: Any) -> bool:
        raise NotImplementedError

    def __and__(self, other: "Predicate") -> "Predicate":
        return And.of(self, other)

    def __or__(self, other: "Predicate") -> "Predicate":
        return Or.of(self, other)


@dataclass(frozen=True)
class Constant(Predicate):
    value: bool

    def evaluate(self, record: Any) -> bool:
        return self.value


TRUE = Constant(True)
FALSE = Constant(False)


@dataclass(frozen=True)
class Contains(Predicate):
    """Case-insensitive substring match; ``None`` never matches."""

    accessor: FieldAccessor
    term: str

    def __post_init__(self):
        object.__setattr__(self, "term", self.term.lower())

    def evaluate(self, record: Any) -> bool:
        value = self.accessor.read(record)
        if value is None:
            return False
        return self.term in str(value).lower()


@dataclass(frozen=True)
class DateEquals(Predicate):
    """Equality on the calendar day, ignoring any time of day."""

    accessor: FieldAccessor
    day: date

    def evaluate(self, record: Any) -> bool:
        value = self.accessor.read(record)
        if value is None:
            return False
        if isinstance(value, datetime):
            value = value.date()
        return value == self.day


@dataclass(frozen=True)
class And(Predicate):
    items: Tuple[Predicate, ...]

    @classmethod
    def of(cls, *items: Predicate) -> Predicate:
        kept = []
        for item in items:
            if isinstance(item, Constant):
                if not item.value:
                    return FALSE
                continue
            kept.extend(item.items if isinstance(item, And) else (item,))
        if not kept:
            return TRUE
        if len(kept) == 1:
            return kept[0]
        return cls(tuple(kept))

    def evaluate(self, record: Any) -> bool:
        return all(item.evaluate(record) for item in self.items)


@dataclass(frozen=True)
class Or(Predicate):
    items: Tuple[Predicate, ...]

    @classmethod
    def of(cls, *items: Predicate) -> Predicate:
        kept = []
        for item in items:
            if isinstance(item, Constant):
                if item.value:
                    return TRUE
                continue
            kept.extend(item.items if isinstance(item, Or) else (item,))
        # No condition at all means nothing can match.
        if not kept:
            return FALSE
        if len(kept) == 1:
            return kept[0]
        return cls(tuple(kept))

    def evaluate(self, record: Any) -> bool:
        return any(item.evaluate(record) for item in self.items)


@dataclass(frozen=True)
class OrderKey:
    accessor: FieldAccessor
    direction: SortDirection = SortDirection.ASCENDING

    @property
    def descending(self) -> bool:
        return self.direction is SortDirection.DESCENDING

    def sort_key(self, record: Any):
        value = self.accessor.read(record)
        # None sorts first ascending and last descending.
        return (value is not None, value)


def sort_rows(rows: Iterable[Any], keys: Sequence[OrderKey]) -> List[Any]:
    """Stable sort by ``keys`` in priority order; no keys keeps encounter order."""
    ordered = list(rows)
    for key in reversed(keys):
        ordered.sort(key=key.sort_key, reverse=key.descending)
    return ordered
