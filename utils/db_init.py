import asyncio
import logging
from typing import List

import asyncpg
from sqlalchemy.dialects import postgresql
from sqlalchemy.schema import CreateTable

from auth.local.models import Usuario
from funcionarios.models import Cargo, Funcionario
from utils.db_utils import describe_store_error
from utils.errors import StoreUnavailable

logger = logging.getLogger(__name__)

# Dependency order: funcionarios -> cargos, usuarios -> funcionarios
CORE_TABLES = [Cargo.__table__, Funcionario.__table__, Usuario.__table__]


def create_table_statements() -> List[str]:
    dialect = postgresql.dialect()
    return [
        str(CreateTable(table, if_not_exists=True).compile(dialect=dialect)).strip()
        for table in CORE_TABLES
    ]


async def _connect(settings, database: str) -> asyncpg.Connection:
    return await asyncpg.connect(
        host=settings.db_host,
        port=settings.db_port,
        user=settings.db_user,
        password=settings.db_password,
        database=database,
        timeout=settings.db_command_timeout,
    )


async def ensure_database(conn: asyncpg.Connection, db_name: str) -> bool:
    """Create ``db_name`` if missing. Returns True when it was created here."""
    exists = await conn.fetchval("SELECT 1 FROM pg_database WHERE datname = $1", db_name)
    if exists:
        return False
    try:
        # Identifiers cannot be bound; db_name is validated by Settings.
        await conn.execute(f'CREATE DATABASE "{db_name}"')
    except asyncpg.DuplicateDatabaseError:
        # Another process won the race
        return False
    return True


async def ensure_core_tables(conn: asyncpg.Connection) -> None:
    for statement in create_table_statements():
        await conn.execute(statement)


async def ensure_schema(settings) -> None:
    """
    Make sure the application database and its tables exist.

    Connects through the maintenance database, creates ``settings.db_name`` if
    absent, then reconnects to it and creates cargos, funcionarios and usuarios
    if they are missing. Never drops or alters anything, so it is safe to run
    on every startup. Raises StoreUnavailable on any failure.
    """
    conn = None
    try:
        conn = await _connect(settings, settings.db_maintenance_name)
        created = await ensure_database(conn, settings.db_name)
        logger.info(
            f"✅ Database '{settings.db_name}' {'created' if created else 'verified'}."
        )
        await conn.close()

        conn = await _connect(settings, settings.db_name)
        await ensure_core_tables(conn)
        logger.info("✅ Tables verified/created successfully.")
    except (OSError, asyncio.TimeoutError, asyncpg.PostgresError, asyncpg.InterfaceError) as e:
        logger.error(f"❌ Error initializing database: {e}")
        raise StoreUnavailable(
            "Erro ao inicializar banco de dados.", details=describe_store_error(e)
        ) from e
    finally:
        if conn is not None and not conn.is_closed():
            await conn.close()
