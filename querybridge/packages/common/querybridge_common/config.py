from typing import Literal

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(".env", "querybridge/.env"), env_ignore_empty=True, extra="ignore"
    )
    ENVIRONMENT: Literal["local", "staging", "development", "production"] = "local"

    # primary warehouse
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = ""
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DB: str = ""
    SQLALCHEMY_POOL_SIZE: int = 5
    SQLALCHEMY_MAX_OVERFLOW: int = 10
    SQLALCHEMY_POOL_TIMEOUT: int = 30

    QUERY_WORKER_MAX_THREADS: int = 1000
    QUERY_WORKER_QUEUE_SIZE: int = 0
    QUERY_WORKER_KEEP_ALIVE: float = 60.0
    QUERY_WORKER_THREAD_PREFIX: str = "jdbc-query-executor"
    QUERY_FETCH_SIZE: int = 1000

    FEDERATION_SQL_DIALECT: str = "postgres"
    PROJECT_TIME_COLUMN: str = "_time"
    USER_STORAGE_BACKEND: Literal["postgresql", "none"] = "none"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def user_storage_is_postgresql(self) -> bool:
        return self.USER_STORAGE_BACKEND == "postgresql"


settings = Settings()
