# headless_datatables/__init__.py
from .config import DataTablesOptions
from .core import DataTables
from .database import DatabaseBackend, SQLAlchemyBackend
from .diagnostics import Diagnostic, Diagnostics
from .enum import SortDirection, ValueKind
from .exceptions import (
    ConfigurationError,
    DataTablesError,
    PredicateConstructionError,
    SourceEvaluationError,
    UnsupportedSourceKind,
)
from .memory import ListProcessor
from .query import QueryProcessor
from .registry import VIRTUAL_COLUMNS, ColumnRegistry, FieldAccessor, resolve
from .schema import ColumnSpec, OrderSpec, SearchSpec, TableRequest, TableResult
from .transform import number_rows
from .utils import build_condition

__version__ = "0.2.0"

__all__ = [
    "DataTables",
    "DataTablesOptions",
    "DatabaseBackend",
    "SQLAlchemyBackend",
    "ListProcessor",
    "QueryProcessor",
    "TableRequest",
    "TableResult",
    "ColumnSpec",
    "OrderSpec",
    "SearchSpec",
    "SortDirection",
    "ValueKind",
    "ColumnRegistry",
    "FieldAccessor",
    "VIRTUAL_COLUMNS",
    "resolve",
    "Diagnostic",
    "Diagnostics",
    "DataTablesError",
    "ConfigurationError",
    "UnsupportedSourceKind",
    "PredicateConstructionError",
    "SourceEvaluationError",
    "number_rows",
    "build_condition",
]
