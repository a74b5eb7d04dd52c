import logging
import os
import re
from typing import Optional
from urllib.parse import quote

from dotenv import load_dotenv
from fastapi import Request
from pydantic import BaseModel, ValidationError, field_validator

IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_$]*$")

# Environment variable -> Settings field
ENV_VARS = {
    "DB_HOST": "db_host",
    "DB_PORT": "db_port",
    "DB_USER": "db_user",
    "DB_PASSWORD": "db_password",
    "DB_NAME": "db_name",
    "DB_MAINTENANCE_NAME": "db_maintenance_name",
    "DB_POOL_MIN_SIZE": "db_pool_min_size",
    "DB_POOL_MAX_SIZE": "db_pool_max_size",
    "DB_COMMAND_TIMEOUT": "db_command_timeout",
    "JWT_SECRET": "jwt_secret",
    "JWT_ALGORITHM": "jwt_algorithm",
    "ACCESS_TOKEN_EXPIRE_MINUTES": "access_token_expire_minutes",
    "BCRYPT_ROUNDS": "bcrypt_rounds",
    "PORT": "port",
    "BOOTSTRAP_STRICT": "bootstrap_strict",
    "EXPOSE_ERROR_DETAILS": "expose_error_details",
    "LOG_LEVEL": "log_level",
}


class ConfigError(Exception):
    pass


class Settings(BaseModel):
    # Database
    db_host: str = "localhost"
    db_port: int = 5432
    db_user: str = "postgres"
    db_password: str = ""
    db_name: str
    db_maintenance_name: str = "postgres"
    db_pool_min_size: int = 1
    db_pool_max_size: int = 5
    db_command_timeout: float = 10.0

    # Auth
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    bcrypt_rounds: int = 10

    # Server
    port: int = 3000
    bootstrap_strict: bool = True
    expose_error_details: bool = True
    log_level: str = "INFO"

    @field_validator("db_name", "db_maintenance_name")
    @classmethod
    def database_name_is_identifier(cls, v: str) -> str:
        if not IDENTIFIER_RE.match(v):
            raise ValueError("must be a plain SQL identifier")
        return v

    @field_validator("jwt_secret")
    @classmethod
    def secret_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v

    @field_validator("bcrypt_rounds")
    @classmethod
    def rounds_in_bcrypt_range(cls, v: int) -> int:
        if not 4 <= v <= 31:
            raise ValueError("must be between 4 and 31")
        return v

    @field_validator("log_level")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level '{v}'")
        return level

    def dsn(self, database: Optional[str] = None) -> str:
        """asyncpg DSN for ``database`` (the application database by default)."""
        return (
            f"postgresql://{quote(self.db_user, safe='')}:{quote(self.db_password, safe='')}"
            f"@{self.db_host}:{self.db_port}/{database or self.db_name}"
        )


def load_settings(env_file: Optional[str] = None) -> Settings:
    """
    Load .env (if present) and build the validated Settings.
    Raises ConfigError naming every invalid or missing variable.
    """
    load_dotenv(env_file)

    values = {}
    for env_name, field in ENV_VARS.items():
        raw = os.getenv(env_name)
        if raw is not None and raw != "":
            values[field] = raw
        elif raw == "" and field == "db_password":
            values[field] = raw

    try:
        return Settings(**values)
    except ValidationError as e:
        field_to_env = {v: k for k, v in ENV_VARS.items()}
        problems = []
        for err in e.errors():
            field = err["loc"][0] if err["loc"] else "?"
            problems.append(f"{field_to_env.get(field, field)}: {err['msg']}")
        raise ConfigError("Invalid configuration -> " + "; ".join(problems)) from e


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
