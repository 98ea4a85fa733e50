"""Per-project mutual exclusion for score recomputation.

On PostgreSQL the session takes a transaction-scoped advisory lock keyed by
project id, which serializes recomputation across API workers and the sweep
process; it is released by the commit or rollback that ends the unit of work.
Within one process an asyncio.Lock per project is taken first, so concurrent
requests queue in memory instead of holding connections while they wait.
Other dialects (SQLite in tests and local runs) only get the in-process lock.
"""

import asyncio
import logging
import weakref
from contextlib import asynccontextmanager
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

# entries disappear once no coroutine holds or waits on the lock
_project_locks: "weakref.WeakValueDictionary[int, asyncio.Lock]" = weakref.WeakValueDictionary()

def _lock_for(project_id: int) -> asyncio.Lock:
    lock = _project_locks.get(project_id)
    if lock is None:
        lock = asyncio.Lock()
        _project_locks[project_id] = lock
    return lock

def _supports_advisory_locks(db: AsyncSession) -> bool:
    return db.get_bind().dialect.name == "postgresql"

async def _acquire_advisory_lock(db: AsyncSession, project_id: int) -> None:
    await db.execute(select(func.pg_advisory_xact_lock(project_id)))
    logger.debug("Advisory lock taken for project %s", project_id)

@asynccontextmanager
async def project_lock(db: AsyncSession, project_id: int):
    """Hold the project's lock for the body; the body must end its transaction."""
    lock = _lock_for(project_id)
    if lock.locked():
        logger.info("Waiting for running recomputation of project %s", project_id)
    async with lock:
        if _supports_advisory_locks(db):
            await _acquire_advisory_lock(db, project_id)
        yield
