from typing import List, Optional
from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from ..models.database import get_record_model
from ..models.records import CastError, Record, RecordKind, normalize_number
from ..utils.monitoring import track_record_created, track_store_error

logger = structlog.get_logger()


class RecordStoreError(Exception):
    """A store operation failed. Carries the kind's static failure message."""

    def __init__(self, kind: RecordKind, operation: str, cause: Optional[Exception] = None):
        self.kind = kind
        self.operation = operation
        self.cause = cause
        message = kind.failed_message if operation == "create" else kind.list_failed_message
        super().__init__(message)

    @property
    def message(self) -> str:
        return str(self)


class RecordStore:
    """
    Generic list/create access to one kind's collection.

    Every call performs exactly one store operation on the given session.
    Nothing is validated beyond the kind's schema typing: there is no
    uniqueness check on key fields and no check that referenced donors,
    recipients or hospitals exist.
    """

    def __init__(self, session: AsyncSession, kind: RecordKind):
        self.session = session
        self.kind = kind
        self.model = get_record_model(kind)

    def to_record(self, row) -> Record:
        """Turn a stored row into a plain record, leaving out absent fields."""
        record = {"_id": row.record_id}
        for name in self.kind.field_names:
            value = getattr(row, name)
            if value is not None:
                record[name] = normalize_number(value)
        return record

    async def list(self) -> List[Record]:
        """Return every stored record of the kind in insertion order."""
        try:
            result = await self.session.execute(
                select(self.model).order_by(self.model.seq)
            )
            rows = result.scalars().all()
        except SQLAlchemyError as e:
            track_store_error(self.kind.name, "list")
            logger.error("Failed to list records", kind=self.kind.name, error=str(e))
            raise RecordStoreError(self.kind, "list", e) from e

        return [self.to_record(row) for row in rows]

    async def create(self, fields: Record) -> Record:
        """
        Store a field mapping after casting it against the kind's schema.

        Args:
            fields: Submitted field mapping, stored verbatim apart from casting

        Returns:
            Record: The stored record including its generated ``_id``

        Raises:
            RecordStoreError: the mapping could not be cast or the store failed
        """
        try:
            values = self.kind.cast(fields)
        except CastError as e:
            track_store_error(self.kind.name, "create")
            logger.error("Failed to cast record", kind=self.kind.name, field=e.field, error=str(e))
            raise RecordStoreError(self.kind, "create", e) from e

        row = self.model(**values)
        try:
            self.session.add(row)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            track_store_error(self.kind.name, "create")
            logger.error("Failed to store record", kind=self.kind.name, error=str(e))
            raise RecordStoreError(self.kind, "create", e) from e

        track_record_created(self.kind.name)
        logger.info(
            "Record stored",
            kind=self.kind.name,
            record_id=row.record_id,
            key=values.get(self.kind.key_field)
        )
        return self.to_record(row)

    async def count(self) -> int:
        """Return the number of stored records of the kind."""
        try:
            result = await self.session.execute(
                select(func.count()).select_from(self.model)
            )
        except SQLAlchemyError as e:
            track_store_error(self.kind.name, "count")
            logger.error("Failed to count records", kind=self.kind.name, error=str(e))
            raise RecordStoreError(self.kind, "count", e) from e
        return result.scalar() or 0
