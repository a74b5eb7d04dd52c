# create_cargo.py - Cargos have no HTTP endpoint; run this to add them.
#   python ADMIN_ACCOUNT/create_cargo.py "Gerente de Vendas" "Analista"
import argparse
import asyncio
import logging
import os
import sys
from typing import List

# Add project root to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from utils.config import load_settings
from utils.db_init import ensure_schema
from utils.db_utils import Database

logger = logging.getLogger(__name__)


async def create_cargos(db: Database, nomes: List[str]) -> List[dict]:
    """Insert each cargo unless one with the same name exists. Returns the created rows."""
    created = []
    for nome in nomes:
        nome = nome.strip()
        if not nome:
            continue
        existing = await db.fetchrow("SELECT id FROM cargos WHERE nome = $1", nome)
        if existing:
            logger.info(f"Cargo '{nome}' already exists (id={existing['id']}), skipped")
            continue
        row = await db.fetchrow("INSERT INTO cargos (nome) VALUES ($1) RETURNING id, nome", nome)
        logger.info(f"✅ Cargo '{nome}' created (id={row['id']})")
        created.append(row)
    return created


async def main(nomes: List[str]) -> None:
    settings = load_settings()
    await ensure_schema(settings)

    db = Database.from_settings(settings)
    await db.connect()
    try:
        await create_cargos(db, nomes)
    finally:
        await db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    parser = argparse.ArgumentParser(description="Create cargos (job roles).")
    parser.add_argument("nomes", nargs="+", help="cargo names")
    args = parser.parse_args()
    asyncio.run(main(args.nomes))
