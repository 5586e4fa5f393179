# headless_datatables/schema.py
from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .enum import SortDirection

T = TypeVar("T")


class WireModel(BaseModel):
    """Frozen model whose incoming keys are matched case-insensitively."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def match_keys(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        known = {}
        for name, info in cls.model_fields.items():
            known[name.lower()] = name
            if info.alias:
                known[info.alias.lower()] = name
        return {known.get(str(key).lower(), key): value for key, value in data.items()}


class SearchSpec(WireModel):
    value: Optional[str] = ""
    regex: bool = False

    @property
    def term(self) -> str:
        return (self.value or "").strip()


class ColumnSpec(WireModel):
    # DataTables.js sends both flags for every column and defaults them to true.
    data: Optional[str] = None
    name: Optional[str] = None
    searchable: bool = True
    orderable: bool = True
    search: SearchSpec = SearchSpec()

    @field_validator("search", mode="before")
    @classmethod
    def coerce_search(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, str):
            return {"value": value}
        return value

    @field_validator("data", "name", mode="before")
    @classmethod
    def stringify(cls, value: Any) -> Any:
        # `data` may be a numeric array index for non-object rows.
        return None if value is None else str(value)

    @property
    def field_name(self) -> Optional[str]:
        """The record field this column maps to, ``data`` first, then ``name``."""
        for candidate in (self.data, self.name):
            if candidate and candidate.strip():
                return candidate.strip()
        return None

    @property
    def column_search(self) -> str:
        return self.search.term


class OrderSpec(WireModel):
    column: int
    dir: Optional[str] = SortDirection.ASCENDING.value

    @property
    def direction(self) -> SortDirection:
        return SortDirection.parse(self.dir)


class TableRequest(WireModel):
    draw: int = 1
    start: int = 0
    length: int = 10
    search: SearchSpec = SearchSpec()
    columns: List[ColumnSpec] = []
    order: List[OrderSpec] = []

    @field_validator("search", mode="before")
    @classmethod
    def coerce_search(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, str):
            return {"value": value}
        return value

    @field_validator("start", mode="before")
    @classmethod
    def clamp_start(cls, value: Any) -> Any:
        if value is None:
            return 0
        return max(int(value), 0)

    @property
    def global_search(self) -> str:
        return self.search.term

    @property
    def stop(self) -> Optional[int]:
        """End of the page window; ``None`` when a negative length asks for every row."""
        if self.length < 0:
            return None
        return self.start + self.length

    def searchable_columns(self) -> list[str]:
        return [
            column.field_name
            for column in self.columns
            if column.searchable and column.field_name
        ]


class TableResult(BaseModel, Generic[T]):
    model_config = ConfigDict(
        frozen=True, populate_by_name=True, arbitrary_types_allowed=True
    )

    draw: int
    rows: List[T] = Field(default_factory=list, alias="data")
    total_records: int = Field(alias="recordsTotal")
    filtered_records: int = Field(alias="recordsFiltered")
