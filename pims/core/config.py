# pims/core/config.py

import os
from typing import Any

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

# 프로젝트의 루트 디렉토리 경로를 계산합니다.
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


class Settings(BaseSettings):
    """
    애플리케이션의 모든 설정을 정의하는 Pydantic BaseSettings 모델입니다.
    환경 변수 및 .env 파일에서 값을 자동으로 로드합니다.
    """

    # --- Pydantic Settings 설정 ---
    model_config = SettingsConfigDict(
        env_file=os.path.join(BASE_DIR, '.env'),  # 프로젝트 루트의 .env 파일
        env_file_encoding='utf-8',
        extra='ignore',                      # 모델에 없는 변수는 무시
        case_sensitive=True
    )

    # --- 애플리케이션 기본 설정 ---
    APP_NAME: str = "PIMS Inventory Core"
    APP_VERSION: str = "0.1.0"
    APP_ENV: str = Field("development", description="Application environment (e.g., development, production, testing)")
    DEBUG_MODE: bool = Field(False, description="Enable SQL echo and verbose logging")
    LOG_LEVEL: str = Field("INFO", description="Root log level applied by the CLI entry point")

    # --- 데이터베이스 설정 ---
    DATABASE_URL: SecretStr = Field(..., description="Async database connection URL (postgresql+asyncpg://...)")
    DB_POOL_SIZE: int = Field(10, description="Connections kept open in the pool")
    DB_MAX_OVERFLOW: int = Field(20, description="Extra connections allowed above DB_POOL_SIZE")

    # --- 검색 설정 ---
    SEARCH_DEFAULT_PAGE_SIZE: int = Field(100, description="Page size used when the caller does not pass one")
    SEARCH_MAX_PAGE_SIZE: int = Field(100000, description="Upper bound for a single page (full export size)")

    # --- 필터 패싯 캐시 ---
    # 0 이면 명시적으로 invalidate() 할 때까지 유지합니다.
    FACET_CACHE_TTL_SECONDS: int = Field(0, description="Facet cache lifetime in seconds (0 = until invalidated)")

    def model_post_init(self, __context: Any) -> None:  # noqa: ANN001
        self.LOG_LEVEL = self.LOG_LEVEL.upper()
        if self.DEBUG_MODE and self.LOG_LEVEL == "INFO":
            self.LOG_LEVEL = "DEBUG"


settings = Settings()
