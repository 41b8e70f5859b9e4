"""
Base service layer for unified database operations over the ORM tables
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Type

from pydantic import BaseModel
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from database.connection import get_session_factory
from utils.helpers import utc_now

logger = logging.getLogger(__name__)

NOT_FOUND = "RESOURCE_NOT_FOUND"
CONSTRAINT_VIOLATION = "CONSTRAINT_VIOLATION"
EXECUTION_ERROR = "EXECUTION_ERROR"


@dataclass
class ServiceResult:
    """Result from service operation"""
    success: bool
    data: Optional[List[Any]] = None
    count: int = 0
    error: Optional[str] = None
    error_type: Optional[str] = None

    @property
    def is_not_found(self) -> bool:
        return self.error_type == NOT_FOUND

    @property
    def record(self) -> Optional[Any]:
        """First record of a successful single-record operation"""
        return self.data[0] if self.success and self.data else None


class BaseService:
    """Base service that maps one ORM table onto a record schema"""

    def __init__(
        self,
        resource_name: str,
        table: Type,
        record_schema: Type[BaseModel],
        session_factory: Optional[Callable[[], async_sessionmaker]] = None
    ):
        self.resource_name = resource_name
        self.table = table
        self.record_schema = record_schema
        self._session_factory = session_factory or get_session_factory
        self.columns = [column.name for column in table.__table__.columns]
        logger.info(f"BaseService initialized for resource: {resource_name}")

    def session(self) -> AsyncSession:
        return self._session_factory()()

    def to_record(self, row: Any) -> BaseModel:
        """
        Convert an ORM row to the record schema

        Stored rows are trusted as-is: field rules apply to writes only, so a
        row written under older rules still reads back.
        """
        return self.record_schema.model_construct(
            **{name: getattr(row, name) for name in self.columns}
        )

    def _failure(self, operation: str, exc: Exception) -> ServiceResult:
        if isinstance(exc, IntegrityError):
            logger.warning(f"{operation} on {self.resource_name} violated a constraint: {exc.orig}")
            return ServiceResult(
                success=False,
                error=f"Constraint violation on {self.resource_name}",
                error_type=CONSTRAINT_VIOLATION
            )
        logger.error(f"{operation} operation failed for {self.resource_name}: {exc}", exc_info=True)
        return ServiceResult(success=False, error=str(exc), error_type=EXECUTION_ERROR)

    def _not_found(self, record_id: Any) -> ServiceResult:
        return ServiceResult(
            success=False,
            error=f"Record not found with ID: {record_id}",
            error_type=NOT_FOUND
        )

    def _filter(self, field_name: str, condition: Any):
        column = getattr(self.table, field_name)
        if isinstance(condition, dict):
            # Advanced filter: {"op": "contains", "value": "test"}
            op = condition.get("op", "=")
            value = condition.get("value")
        else:
            # Simple filter: field_name: value (defaults to equality)
            op = "="
            value = condition

        if op == "=":
            return column.is_(None) if value is None else column == value
        if op == "contains":
            return column.contains(value, autoescape=True)
        raise ValueError(f"Unsupported filter operator: {op}")

    def _order(self, ordering: Dict[str, str]):
        column = getattr(self.table, ordering["field"])
        return column.desc() if ordering.get("dir", "asc") == "desc" else column.asc()

    async def create(self, data: Dict[str, Any]) -> ServiceResult:
        """
        Create a new record

        Args:
            data: Dictionary of field values to insert

        Returns:
            ServiceResult with the created record, including id and timestamps
        """
        try:
            async with self.session() as session:
                async with session.begin():
                    now = utc_now()
                    row = self.table(**data, created_at=now, updated_at=now)
                    session.add(row)
                    await session.flush()
                    record = self.to_record(row)
            return ServiceResult(success=True, data=[record], count=1)
        except Exception as e:
            return self._failure("Create", e)

    async def read(
        self,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[List[Dict[str, str]]] = None,
        limit: Optional[int] = None,
        offset: int = 0
    ) -> ServiceResult:
        """
        Read records with filtering and ordering

        Args:
            filters: {field_name: value} or {field_name: {"op": "contains", "value": value}}
            order_by: List of orderings [{"field": "created_at", "dir": "desc"}]
            limit: Maximum number of records to return
            offset: Number of records to skip

        Returns:
            ServiceResult with matched records
        """
        try:
            query = select(self.table)
            for field_name, condition in (filters or {}).items():
                query = query.where(self._filter(field_name, condition))
            for ordering in order_by or []:
                query = query.order_by(self._order(ordering))
            if limit is not None:
                query = query.limit(limit)
            if offset:
                query = query.offset(offset)

            async with self.session() as session:
                rows = (await session.execute(query)).scalars().all()
                records = [self.to_record(row) for row in rows]

            return ServiceResult(success=True, data=records, count=len(records))
        except Exception as e:
            return self._failure("Read", e)

    async def get_by_id(self, record_id: int) -> ServiceResult:
        """
        Get a single record by primary key

        Returns:
            ServiceResult with the record, or a RESOURCE_NOT_FOUND failure
        """
        try:
            async with self.session() as session:
                row = await session.get(self.table, record_id)
                if row is None:
                    return self._not_found(record_id)
                record = self.to_record(row)
            return ServiceResult(success=True, data=[record], count=1)
        except Exception as e:
            return self._failure("Read", e)

    async def get_by_field(self, field_name: str, value: Any, limit: int = 100) -> ServiceResult:
        """Get records by specific field value"""
        return await self.read(filters={field_name: value}, limit=limit)

    async def update(self, record_id: int, data: Dict[str, Any]) -> ServiceResult:
        """
        Update a record, always refreshing updated_at

        Args:
            record_id: Primary key value of record to update
            data: Dictionary of field values to update

        Returns:
            ServiceResult with the updated record, or a RESOURCE_NOT_FOUND failure
        """
        values = {key: value for key, value in data.items() if key not in ("id", "created_at", "updated_at")}
        values["updated_at"] = utc_now()
        try:
            async with self.session() as session:
                async with session.begin():
                    result = await session.execute(
                        update(self.table).where(self.table.id == record_id).values(**values)
                    )
                    if result.rowcount == 0:
                        return self._not_found(record_id)
                    row = await session.get(self.table, record_id, populate_existing=True)
                    record = self.to_record(row)
            return ServiceResult(success=True, data=[record], count=1)
        except Exception as e:
            return self._failure("Update", e)

    async def delete(self, record_id: int) -> ServiceResult:
        """
        Delete a record by primary key

        Returns:
            ServiceResult with the deleted record, or a RESOURCE_NOT_FOUND failure
        """
        try:
            async with self.session() as session:
                async with session.begin():
                    row = await session.get(self.table, record_id)
                    if row is None:
                        return self._not_found(record_id)
                    record = self.to_record(row)
                    await self._before_delete(session, record_id)
                    await session.execute(delete(self.table).where(self.table.id == record_id))
            return ServiceResult(success=True, data=[record], count=1)
        except Exception as e:
            return self._failure("Delete", e)

    async def _before_delete(self, session: AsyncSession, record_id: int):
        """Hook for dependent-row handling inside the delete transaction"""

    async def count(self) -> int:
        async with self.session() as session:
            return (await session.execute(select(func.count()).select_from(self.table))).scalar_one()
