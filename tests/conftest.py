import os
import sys
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

# Add project root to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from auth.local.utils import create_access_token
from main import create_app
from utils.config import Settings
from utils.db_utils import Database


@pytest.fixture
def settings():
    return Settings(db_name="gestao_test", jwt_secret="test-secret", bcrypt_rounds=4)


@pytest.fixture
def db():
    return AsyncMock(spec=Database)


@pytest.fixture
def client(settings, db):
    # No context manager: the lifespan (bootstrap + pool) does not run
    return TestClient(create_app(settings, db))


@pytest.fixture
def auth_headers(settings):
    token = create_access_token({"id": 1, "funcionario_id": 10}, settings.jwt_secret)
    return {"Authorization": f"Bearer {token}"}
