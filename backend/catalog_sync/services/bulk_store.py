"""
Bulk persistence helpers used by the sync services.

Inserts go through INSERT ... ON CONFLICT DO NOTHING so a batch never fails
on rows another run already stored. Rows are never updated.
"""
import logging
from typing import Any, Dict, List, Set

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import PersistenceError

logger = logging.getLogger(__name__)

_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def skip_duplicates_insert(session: AsyncSession, model, key_column: str):
    dialect = session.get_bind().dialect.name
    insert = _DIALECT_INSERTS.get(dialect)
    if insert is None:
        raise PersistenceError(f"Skip-duplicates insert is not supported on '{dialect}'")
    return insert(model.__table__).on_conflict_do_nothing(index_elements=[key_column])


async def fetch_existing_keys(session: AsyncSession, column) -> Set[Any]:
    try:
        result = await session.execute(select(column))
    except SQLAlchemyError as e:
        raise PersistenceError(f"Failed to load existing keys for {column}: {e}") from e
    return set(result.scalars().all())


async def insert_skip_duplicates(
    session: AsyncSession,
    model,
    key_column: str,
    rows: List[Dict[str, Any]],
    batch_size: int,
) -> int:
    """
    Insert rows in chunks of `batch_size`, committing after each chunk.

    Returns:
        Number of rows inserted (the chunk size when the driver cannot report it)
    """
    if not rows:
        return 0

    stmt = skip_duplicates_insert(session, model, key_column)
    inserted = 0
    for start in range(0, len(rows), batch_size):
        batch = rows[start:start + batch_size]
        try:
            result = await session.execute(stmt, batch)
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            raise PersistenceError(
                f"Batch insert into {model.__tablename__} failed at row {start}: {e}"
            ) from e

        rowcount = result.rowcount
        inserted += rowcount if rowcount is not None and rowcount >= 0 else len(batch)

        if start > 0 and start % (batch_size * 10) == 0:
            logger.info(f"[STORE] Inserted {inserted}/{len(rows)} into {model.__tablename__}")

    return inserted
