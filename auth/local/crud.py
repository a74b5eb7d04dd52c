from typing import Any, Dict, List, Optional

from utils.db_utils import Database


async def get_user_by_email(db: Database, email: str) -> Optional[Dict[str, Any]]:
    return await db.fetchrow(
        "SELECT id, email, senha, funcionario_id FROM usuarios WHERE email = $1", email
    )


async def create_user(db: Database, email: str, hashed_password: str, funcionario_id: int) -> Dict[str, Any]:
    """Insert a user whose password is already hashed. Returns {id, email}."""
    return await db.fetchrow(
        """
        INSERT INTO usuarios (email, senha, funcionario_id)
        VALUES ($1, $2, $3)
        RETURNING id, email
        """,
        email, hashed_password, funcionario_id
    )


async def list_users(db: Database) -> List[Dict[str, Any]]:
    return await db.fetch(
        """
        SELECT u.id, u.email, f.nome AS funcionario
        FROM usuarios u
        LEFT JOIN funcionarios f ON u.funcionario_id = f.id
        ORDER BY u.id
        """
    )


async def delete_user(db: Database, user_id: int) -> None:
    # No existence check: deleting an unknown id still succeeds
    await db.execute("DELETE FROM usuarios WHERE id = $1", user_id)
