"""PgQueuer initialization for the video converter worker.

This module handles PgQueuer setup with an asyncpg connection pool. Workers
claim jobs atomically via FOR UPDATE SKIP LOCKED, so any number of worker
processes can consume the same entrypoint without double-claiming a job.

Architecture Pattern:
    - asyncpg pool: shared by PgQueuer and the confirmation publisher
    - QueueManager: schema installation (idempotent)
    - Entrypoint registration: see video_converter.entrypoints

Usage:
    from video_converter.queue import initialize_pgqueuer

    pgq, pool = await initialize_pgqueuer(config.database_url)
    await pgq.run()

References:
    - PgQueuer Documentation: https://pgqueuer.readthedocs.io/
"""

import asyncpg
from pgqueuer import PgQueuer
from pgqueuer.db import AsyncpgPoolDriver
from pgqueuer.qm import QueueManager
from pgqueuer.queries import Queries

from video_converter.utils.logging import get_logger

log = get_logger(__name__)

POOL_MIN_SIZE = 1
POOL_MAX_SIZE = 5
POOL_ACQUIRE_TIMEOUT = 30


async def initialize_pgqueuer(database_url: str) -> tuple[PgQueuer, asyncpg.Pool]:
    """Create the asyncpg pool, install the PgQueuer schema, build PgQueuer.

    Args:
        database_url: PostgreSQL URL, plain or SQLAlchemy driver-qualified

    Returns:
        tuple[PgQueuer, asyncpg.Pool]: Configured PgQueuer and its pool

    Raises:
        ValueError: If database_url is empty
        asyncpg.PostgresError: If database connection fails
    """
    if not database_url:
        raise ValueError("database URL is required")

    # asyncpg wants the plain scheme, not SQLAlchemy's driver-qualified one
    database_url = database_url.replace("postgresql+asyncpg://", "postgresql://", 1)

    log.info(
        "initializing_asyncpg_pool",
        min_size=POOL_MIN_SIZE,
        max_size=POOL_MAX_SIZE,
        timeout=POOL_ACQUIRE_TIMEOUT,
    )

    pool = await asyncpg.create_pool(
        dsn=database_url,
        min_size=POOL_MIN_SIZE,
        max_size=POOL_MAX_SIZE,
        timeout=POOL_ACQUIRE_TIMEOUT,
    )

    driver = AsyncpgPoolDriver(pool)

    log.info("installing_pgqueuer_schema")
    qm = QueueManager(driver)
    try:
        await qm.queries.install()
    except asyncpg.DuplicateObjectError:
        log.info("pgqueuer_schema_already_installed")
    else:
        log.info("pgqueuer_schema_installed")

    pgq = PgQueuer(driver)
    log.info("pgqueuer_initialized")

    return pgq, pool


def create_queries(pool: asyncpg.Pool) -> Queries:
    """Create a PgQueuer query interface for enqueueing jobs on pool."""
    return Queries(AsyncpgPoolDriver(pool))
