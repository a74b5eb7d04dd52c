import logging
from datetime import timedelta
from typing import List

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool

from auth.local import crud
from auth.local.dependencies import get_current_user
from auth.local.schemas import (
    LoginResponse,
    MessageResponse,
    UsuarioCreate,
    UsuarioListItem,
    UsuarioLogin,
    UsuarioOut,
)
from auth.local.utils import create_access_token, hash_password, verify_password
from utils.config import Settings, get_settings
from utils.db_utils import Database, get_db
from utils.errors import MissingFieldsError, StoreError, Unauthorized

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/usuarios", tags=["Usuários"])


# ✅ Registration (no token required)
@router.post(
    "",
    status_code=201,
    response_model=UsuarioOut,
    summary="Cria um novo usuário (registro)",
    responses={
        400: {"description": "Campos obrigatórios faltando."},
        500: {"description": "Email duplicado ou erro no banco."},
    },
)
async def create_user(
    payload: UsuarioCreate,
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    if not payload.email or not payload.senha or not payload.funcionario_id:
        raise MissingFieldsError("Preencha todos os campos obrigatórios.")

    try:
        hashed = await run_in_threadpool(hash_password, payload.senha, settings.bcrypt_rounds)
        user = await crud.create_user(db, payload.email, hashed, payload.funcionario_id)
    except StoreError as e:
        raise e.with_message("Erro ao criar usuário.") from e

    logger.info(f"User {user['id']} registered")
    return user


# ✅ Login -> JWT
@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Autentica um usuário e retorna um token JWT",
    responses={401: {"description": "Usuário não encontrado ou senha incorreta."}},
)
async def login(
    payload: UsuarioLogin,
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    try:
        user = await crud.get_user_by_email(db, payload.email) if payload.email else None
    except StoreError as e:
        raise e.with_message("Erro ao realizar login.") from e

    if user is None:
        raise Unauthorized("Usuário não encontrado")

    valid = await run_in_threadpool(verify_password, payload.senha or "", user["senha"])
    if not valid:
        raise Unauthorized("Senha inválida")

    token = create_access_token(
        {"id": user["id"], "funcionario_id": user["funcionario_id"]},
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expires_delta=timedelta(minutes=settings.access_token_expire_minutes),
    )
    return {"token": token, "usuario": {"id": user["id"], "email": user["email"]}}


@router.get(
    "",
    response_model=List[UsuarioListItem],
    summary="Lista todos os usuários registrados",
    responses={401: {"description": "Token ausente, inválido ou expirado."}},
)
async def list_users(db: Database = Depends(get_db), _=Depends(get_current_user)):
    try:
        return await crud.list_users(db)
    except StoreError as e:
        raise e.with_message("Erro ao buscar usuários.") from e


@router.delete(
    "/{user_id}",
    response_model=MessageResponse,
    summary="Exclui um usuário pelo ID",
    responses={401: {"description": "Token ausente, inválido ou expirado."}},
)
async def delete_user(user_id: int, db: Database = Depends(get_db), _=Depends(get_current_user)):
    try:
        await crud.delete_user(db, user_id)
    except StoreError as e:
        raise e.with_message("Erro ao excluir usuário.") from e
    return {"message": "Usuário excluído com sucesso."}
