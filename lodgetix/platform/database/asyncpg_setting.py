import asyncio

import asyncpg

from lodgetix.platform.config.core_setting import settings
from lodgetix.platform.logging.loguru_io import Logger


# Global connection pools per event loop
asyncpg_pools: dict[int, asyncpg.Pool] = {}


def asyncpg_dsn() -> str:
    return settings.DATABASE_URL_ASYNC.replace('postgresql+asyncpg://', 'postgresql://')


async def get_asyncpg_pool() -> asyncpg.Pool:
    """Pool bound to the running event loop, created on first use"""
    loop_id = id(asyncio.get_running_loop())

    if (pool := asyncpg_pools.get(loop_id)) is not None:
        return pool

    pool = await asyncpg.create_pool(
        asyncpg_dsn(),
        min_size=settings.ASYNCPG_POOL_MIN_SIZE,
        max_size=settings.ASYNCPG_POOL_MAX_SIZE,
        command_timeout=settings.ASYNCPG_POOL_COMMAND_TIMEOUT,
        max_inactive_connection_lifetime=settings.ASYNCPG_POOL_MAX_INACTIVE_LIFETIME,
        timeout=settings.ASYNCPG_POOL_TIMEOUT,
        max_queries=settings.ASYNCPG_POOL_MAX_QUERIES,
    )
    asyncpg_pools[loop_id] = pool
    Logger.base.info(
        f'🔗 [ASYNCPG] Pool created (min={settings.ASYNCPG_POOL_MIN_SIZE}, '
        f'max={settings.ASYNCPG_POOL_MAX_SIZE})'
    )
    return pool


async def close_asyncpg_pool() -> None:
    """Close the pool of the current event loop; other loops keep theirs"""
    loop_id = id(asyncio.get_running_loop())
    if (pool := asyncpg_pools.pop(loop_id, None)) is not None:
        await pool.close()
        Logger.base.info('🔗 [ASYNCPG] Pool closed')
