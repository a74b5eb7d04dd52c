from typing import Optional

from pydantic import BaseModel, field_validator
from pydantic.networks import validate_email

class UsuarioCreate(BaseModel):
    email: Optional[str] = None
    senha: Optional[str] = None
    funcionario_id: Optional[int] = None

    @field_validator("email")
    @classmethod
    def email_is_well_formed(cls, v: Optional[str]) -> Optional[str]:
        # Validate only; stored as typed so login can match it exactly
        if v:
            validate_email(v)
        return v

class UsuarioLogin(BaseModel):
    email: Optional[str] = None
    senha: Optional[str] = None

class UsuarioOut(BaseModel):
    id: int
    email: str

class UsuarioListItem(BaseModel):
    id: int
    email: str
    funcionario: Optional[str] = None  # null when the funcionario was removed

class LoginResponse(BaseModel):
    token: str
    usuario: UsuarioOut

class MessageResponse(BaseModel):
    message: str

class TokenData(BaseModel):
    id: int
    funcionario_id: Optional[int] = None
