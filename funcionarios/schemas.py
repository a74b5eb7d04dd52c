from typing import Optional

from pydantic import BaseModel

class FuncionarioInput(BaseModel):
    nome: Optional[str] = None
    cargo_id: Optional[int] = None

class FuncionarioCreated(BaseModel):
    id: int
    nome: str
    cargo_id: int

class FuncionarioOut(BaseModel):
    id: int
    nome: str
    cargo: Optional[str] = None  # null when the funcionario has no cargo
