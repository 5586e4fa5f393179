from typing import Any, Callable, Iterable, List, TypeVar

from pydantic import BaseModel

from .schema import TableRequest

T = TypeVar("T")
V = TypeVar("V")


def number_rows(
    rows: Iterable[T],
    request: TableRequest,
    transform: Callable[[T], V],
    counter_field: str = "counter",
) -> List[V]:
    """
    Map page rows to view models, numbering them from ``request.start + 1``.

    The running number is written to ``counter_field`` on view models that
    have it; other view models are returned as ``transform`` built them.
    """
    numbered = []
    for counter, row in enumerate(rows, start=request.start + 1):
        view = transform(row)
        numbered.append(_with_counter(view, counter_field, counter))
    return numbered


def _with_counter(view: Any, counter_field: str, counter: int) -> Any:
    if isinstance(view, BaseModel):
        if counter_field in type(view).model_fields:
            return view.model_copy(update={counter_field: counter})
        return view
    if hasattr(view, counter_field):
        setattr(view, counter_field, counter)
    return view
