class DataTablesError(Exception):
    """Base class for every error raised by headless_datatables."""


class ConfigurationError(DataTablesError):
    pass


class UnsupportedSourceKind(DataTablesError):
    def __init__(self, source):
        self.source_type = type(source)
        super().__init__(
            f"Unsupported source type: {self.source_type.__module__}.{self.source_type.__qualname__}. "
            "Expected a finite collection of records or a sqlalchemy Select statement."
        )


class PredicateConstructionError(DataTablesError):
    def __init__(self, column: str, reason: str):
        self.column = column
        super().__init__(f"Cannot build a search condition for column '{column}': {reason}")


class SourceEvaluationError(DataTablesError):
    def __init__(self, stage: str, original: Exception):
        self.stage = stage
        self.original = original
        super().__init__(f"Query failed while {stage}: {original}")
