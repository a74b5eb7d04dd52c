from typing import List

from fastapi import APIRouter, Depends

from auth.local.dependencies import get_current_user
from auth.local.schemas import MessageResponse
from funcionarios import crud
from funcionarios.schemas import FuncionarioCreated, FuncionarioInput, FuncionarioOut
from utils.db_utils import Database, get_db
from utils.errors import MissingFieldsError, NotFound, StoreError

router = APIRouter(prefix="/api/funcionarios", tags=["Funcionários"])

ERROR_RESPONSES = {
    401: {"description": "Token ausente, inválido ou expirado."},
    500: {"description": "Erro interno do servidor."},
}


# ✅ Create
@router.post(
    "",
    status_code=201,
    response_model=FuncionarioCreated,
    summary="Cria um novo funcionário",
    responses={400: {"description": "Nome ou cargo_id faltando."}, **ERROR_RESPONSES},
)
async def create_funcionario(
    payload: FuncionarioInput,
    db: Database = Depends(get_db),
    _=Depends(get_current_user),
):
    if not payload.nome or not payload.cargo_id:
        raise MissingFieldsError("Nome e cargo são obrigatórios.")

    try:
        row = await crud.create_funcionario(db, payload.nome, payload.cargo_id)
    except StoreError as e:
        raise e.with_message("Erro ao criar funcionário.") from e
    return row


@router.get(
    "",
    response_model=List[FuncionarioOut],
    summary="Lista todos os funcionários com seus respectivos cargos",
    responses=ERROR_RESPONSES,
)
async def list_funcionarios(db: Database = Depends(get_db), _=Depends(get_current_user)):
    try:
        return await crud.list_funcionarios(db)
    except StoreError as e:
        raise e.with_message("Erro ao buscar funcionários.") from e


@router.get(
    "/{funcionario_id}",
    response_model=FuncionarioOut,
    summary="Busca um funcionário específico pelo ID",
    responses={404: {"description": "Funcionário não encontrado."}, **ERROR_RESPONSES},
)
async def get_funcionario(
    funcionario_id: int,
    db: Database = Depends(get_db),
    _=Depends(get_current_user),
):
    try:
        row = await crud.get_funcionario(db, funcionario_id)
    except StoreError as e:
        raise e.with_message("Erro ao buscar funcionário.") from e
    if row is None:
        raise NotFound("Funcionário não encontrado")
    return row


@router.put(
    "/{funcionario_id}",
    response_model=MessageResponse,
    summary="Atualiza um funcionário existente pelo ID",
    responses=ERROR_RESPONSES,
)
async def update_funcionario(
    funcionario_id: int,
    payload: FuncionarioInput,
    db: Database = Depends(get_db),
    _=Depends(get_current_user),
):
    try:
        await crud.update_funcionario(db, funcionario_id, payload.nome, payload.cargo_id)
    except StoreError as e:
        raise e.with_message("Erro ao atualizar funcionário.") from e
    return {"message": "Funcionário atualizado com sucesso."}


@router.delete(
    "/{funcionario_id}",
    response_model=MessageResponse,
    summary="Exclui um funcionário pelo ID",
    responses=ERROR_RESPONSES,
)
async def delete_funcionario(
    funcionario_id: int,
    db: Database = Depends(get_db),
    _=Depends(get_current_user),
):
    try:
        await crud.delete_funcionario(db, funcionario_id)
    except StoreError as e:
        raise e.with_message("Erro ao excluir funcionário.") from e
    return {"message": "Funcionário excluído com sucesso."}
