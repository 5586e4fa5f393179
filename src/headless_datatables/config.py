from typing import Tuple

from pydantic import BaseModel, ConfigDict


class DataTablesOptions(BaseModel):
    """Processor settings shared by the list and query processors."""

    model_config = ConfigDict(frozen=True)

    # Columns tried, in order, when a request carries no usable sort.
    fallback_order: Tuple[str, ...] = ("firstName", "id")
    # Extra strptime formats accepted for date search terms, after ISO 8601.
    date_formats: Tuple[str, ...] = ()


DEFAULT_OPTIONS = DataTablesOptions()
