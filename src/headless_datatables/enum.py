from enum import Enum


class ValueKind(str, Enum):
    TEXT = "text"
    DATE = "date"
    NULLABLE_DATE = "nullable_date"
    OTHER = "other"


class SortDirection(str, Enum):
    ASCENDING = "asc"
    DESCENDING = "desc"

    @classmethod
    def parse(cls, token: str | None) -> "SortDirection":
        # Anything that is not "asc" sorts descending.
        if token is None or token.strip().lower() == cls.ASCENDING.value:
            return cls.ASCENDING
        return cls.DESCENDING
