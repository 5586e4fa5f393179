# headless_datatables/database.py
import logging
from typing import Any, List, Optional

from sqlalchemy import Select, func, select
from sqlalchemy.exc import SQLAlchemyError

from .exceptions import SourceEvaluationError

logger = logging.getLogger(__name__)


class DatabaseBackend:
    def __init__(self, db_session: Any):
        self.db_session = db_session

    @property
    def dialect_name(self) -> Optional[str]:
        """Name of the SQL dialect statements run on, when known"""
        return None

    async def get_total_records(self, stmt) -> int:
        """Count the records of the unfiltered statement"""
        raise NotImplementedError

    async def get_filtered_records(self, stmt) -> int:
        """Count the records left after search filters"""
        raise NotImplementedError

    async def execute_query(self, stmt) -> List[Any]:
        """Execute the final, paged statement"""
        raise NotImplementedError


class SQLAlchemyBackend(DatabaseBackend):
    """Runs statements on an ``AsyncSession``; database errors become ``SourceEvaluationError``."""

    @property
    def dialect_name(self) -> Optional[str]:
        return self.db_session.get_bind().dialect.name

    async def get_total_records(self, stmt: Select) -> int:
        return await self._count(stmt, "counting total records")

    async def get_filtered_records(self, stmt: Select) -> int:
        return await self._count(stmt, "counting filtered records")

    async def execute_query(self, stmt: Select) -> List[Any]:
        try:
            result = await self.db_session.execute(stmt)
        except SQLAlchemyError as exc:
            logger.exception("Failed to load the requested page")
            raise SourceEvaluationError("loading the page", exc) from exc
        return list(result.scalars().all())

    async def _count(self, stmt: Select, stage: str) -> int:
        count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        try:
            result = await self.db_session.execute(count_stmt)
        except SQLAlchemyError as exc:
            logger.exception("Failed while %s", stage)
            raise SourceEvaluationError(stage, exc) from exc
        return result.scalar_one()
