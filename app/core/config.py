from functools import lru_cache
from pathlib import Path
from typing import List, Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """이미지 ↔ PDF 변환 서비스 설정"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
    )

    # 서버
    ENV: Literal["development", "production", "testing"] = "development"
    HOST: str = "0.0.0.0"
    PORT: int = 5000
    LOG_LEVEL: str = "INFO"

    # CORS
    ALLOWED_ORIGINS: List[str] = ["*"]

    # 업로드 제한
    MAX_FILE_SIZE_MB: int = 10
    MAX_IMAGE_FILES: int = 20
    MAX_PDF_PAGES: int = 25

    # 경로
    UPLOAD_DIR: Path = Path("./uploads")
    OUTPUT_DIR: Path = Path("./output")

    # poppler 외부 도구
    PDFINFO_PATH: str = "pdfinfo"
    PDFTOCAIRO_PATH: str = "pdftocairo"
    PDFINFO_TIMEOUT_SECONDS: float = 15
    RENDER_TIMEOUT_SECONDS: float = 120
    DEFAULT_IMAGE_FORMAT: Literal["jpeg", "png"] = "png"

    # 남은 산출물 정리 (비정상 종료 대비)
    STALE_ARTIFACT_MINUTES: int = 60
    SWEEP_INTERVAL_MINUTES: int = 10

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """문자열 CORS origins을 리스트로 파싱"""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    @property
    def MAX_FILE_SIZE_BYTES(self) -> int:
        """파일당 최대 크기 (bytes)"""
        return self.MAX_FILE_SIZE_MB * 1024 * 1024

    @property
    def is_development(self) -> bool:
        """개발 환경 여부"""
        return self.ENV == "development"

    @property
    def is_production(self) -> bool:
        """프로덕션 환경 여부"""
        return self.ENV == "production"

    def ensure_directories(self) -> None:
        """업로드/출력 디렉토리 생성"""
        self.UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
        self.OUTPUT_DIR.mkdir(parents=True, exist_ok=True)


@lru_cache
def get_settings() -> Settings:
    """설정 싱글톤 반환 (캐싱)"""
    return Settings()


# 기본 설정 인스턴스 (get_settings()와 동일 인스턴스 사용)
settings = get_settings()
