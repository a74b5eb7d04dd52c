import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from auth.local.schemas import TokenData
from auth.local.utils import decode_access_token
from utils.config import Settings, get_settings
from utils.errors import InvalidToken, Unauthorized

logger = logging.getLogger(__name__)

# auto_error=False so a missing header goes through our own 401 body
bearer_scheme = HTTPBearer(auto_error=False, scheme_name="bearerAuth", bearerFormat="JWT")


# ✅ Reads the token from "Authorization: Bearer <token>"
async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> TokenData:
    if credentials is None or not credentials.credentials:
        raise Unauthorized("Token não fornecido.")

    try:
        payload = decode_access_token(
            credentials.credentials, settings.jwt_secret, settings.jwt_algorithm
        )
    except InvalidToken as e:
        logger.info(f"Rejected token on {request.method} {request.url.path}: {e}")
        raise Unauthorized("Token inválido ou expirado.")

    user = TokenData(id=payload["id"], funcionario_id=payload.get("funcionario_id"))
    request.state.user = user
    return user
