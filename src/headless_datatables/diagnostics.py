import logging
from dataclasses import dataclass, field
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Diagnostic:
    code: str
    message: str
    column: Optional[str] = None


@dataclass
class Diagnostics:
    """
    Collects non-fatal problems found while building a query.

    Nothing recorded here fails the request; every entry is also logged at
    WARNING so callers that never inspect the sink still see it.
    """

    entries: list[Diagnostic] = field(default_factory=list)

    def record(self, code: str, message: str, column: Optional[str] = None) -> None:
        self.entries.append(Diagnostic(code, message, column))
        logger.warning("%s: %s", code, message)

    def codes(self) -> list[str]:
        return [entry.code for entry in self.entries]

    def __len__(self) -> int:
        return len(self.entries)
