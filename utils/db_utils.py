import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

import asyncpg
from fastapi import Request
from sqlalchemy.orm import declarative_base

from utils.errors import StoreError, StoreUnavailable

logger = logging.getLogger(__name__)

Base = declarative_base()


def describe_store_error(e: Exception) -> Dict[str, Any]:
    """JSON-safe summary of a driver error, echoed back as ``details``."""
    details = {"type": type(e).__name__, "message": str(e)}
    sqlstate = getattr(e, "sqlstate", None)
    if sqlstate:
        details["code"] = sqlstate
    constraint = getattr(e, "constraint_name", None)
    if constraint:
        details["constraint"] = constraint
    return details


class Database:
    """
    Persistence gateway over an asyncpg pool.

    Every call checks a connection out of the pool for the duration of that one
    statement. Driver failures surface as StoreError; timeouts and connectivity
    problems as StoreUnavailable.
    """

    def __init__(
        self,
        dsn: str,
        min_size: int = 1,
        max_size: int = 5,
        command_timeout: float = 10.0,
    ):
        self.dsn = dsn
        self.min_size = min_size
        self.max_size = max_size
        self.command_timeout = command_timeout
        self.pool: Optional[asyncpg.Pool] = None

    @classmethod
    def from_settings(cls, settings) -> "Database":
        return cls(
            settings.dsn(),
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            command_timeout=settings.db_command_timeout,
        )

    async def connect(self) -> None:
        if self.pool is not None:
            return
        try:
            self.pool = await asyncpg.create_pool(
                dsn=self.dsn,
                min_size=self.min_size,
                max_size=self.max_size,
                command_timeout=self.command_timeout,
            )
        except (OSError, asyncio.TimeoutError, asyncpg.PostgresError, asyncpg.InterfaceError) as e:
            raise StoreUnavailable(
                "Não foi possível conectar ao banco de dados.",
                details=describe_store_error(e),
            ) from e
        logger.info(f"Connection pool ready (min={self.min_size}, max={self.max_size})")

    async def close(self) -> None:
        if self.pool is None:
            return
        await self.pool.close()
        self.pool = None
        logger.info("Connection pool closed")

    @asynccontextmanager
    async def _connection(self):
        if self.pool is None:
            raise StoreUnavailable("Banco de dados não inicializado.")
        try:
            async with self.pool.acquire(timeout=self.command_timeout) as conn:
                yield conn
        except StoreError:
            raise
        except asyncio.TimeoutError as e:
            logger.warning("Store call timed out")
            raise StoreUnavailable(
                "Tempo esgotado ao acessar o banco de dados.",
                details={"type": "TimeoutError", "message": f"exceeded {self.command_timeout}s"},
            ) from e
        except (OSError, asyncpg.InterfaceError, asyncpg.CannotConnectNowError) as e:
            logger.warning(f"Store unavailable: {e}")
            raise StoreUnavailable(
                "Banco de dados indisponível.", details=describe_store_error(e)
            ) from e
        except asyncpg.PostgresError as e:
            logger.warning(f"Store error [{getattr(e, 'sqlstate', '?')}]: {e}")
            raise StoreError("Erro no banco de dados.", details=describe_store_error(e)) from e

    async def fetch(self, query: str, *args) -> List[Dict[str, Any]]:
        async with self._connection() as conn:
            rows = await conn.fetch(query, *args, timeout=self.command_timeout)
        return [dict(row) for row in rows]

    async def fetchrow(self, query: str, *args) -> Optional[Dict[str, Any]]:
        async with self._connection() as conn:
            row = await conn.fetchrow(query, *args, timeout=self.command_timeout)
        return dict(row) if row is not None else None

    async def fetchval(self, query: str, *args) -> Any:
        async with self._connection() as conn:
            return await conn.fetchval(query, *args, timeout=self.command_timeout)

    async def execute(self, query: str, *args) -> str:
        """Run a statement and return the command tag, e.g. ``DELETE 0``."""
        async with self._connection() as conn:
            return await conn.execute(query, *args, timeout=self.command_timeout)

    async def healthcheck(self):
        try:
            await self.fetchval("SELECT 1")
            return True, None
        except StoreError as e:
            return False, e.message


def get_db(request: Request) -> Database:
    return request.app.state.db
