from typing import Any, Dict, List, Optional

from utils.db_utils import Database

SELECT_WITH_CARGO = """
    SELECT f.id, f.nome, c.nome AS cargo
    FROM funcionarios f
    LEFT JOIN cargos c ON f.cargo_id = c.id
"""


async def create_funcionario(db: Database, nome: str, cargo_id: int) -> Dict[str, Any]:
    return await db.fetchrow(
        "INSERT INTO funcionarios (nome, cargo_id) VALUES ($1, $2) RETURNING id, nome, cargo_id",
        nome, cargo_id
    )


async def list_funcionarios(db: Database) -> List[Dict[str, Any]]:
    return await db.fetch(SELECT_WITH_CARGO + " ORDER BY f.id")


async def get_funcionario(db: Database, funcionario_id: int) -> Optional[Dict[str, Any]]:
    return await db.fetchrow(SELECT_WITH_CARGO + " WHERE f.id = $1", funcionario_id)


async def update_funcionario(db: Database, funcionario_id: int, nome: Optional[str], cargo_id: Optional[int]) -> None:
    # Unconditional; an unknown id updates zero rows and still succeeds
    await db.execute(
        "UPDATE funcionarios SET nome = $1, cargo_id = $2 WHERE id = $3",
        nome, cargo_id, funcionario_id
    )


async def delete_funcionario(db: Database, funcionario_id: int) -> None:
    await db.execute("DELETE FROM funcionarios WHERE id = $1", funcionario_id)
