"""
리소스 설정 관리 모듈
로깅, 엔티티 저장소, 업로드 디렉터리, 서버 설정을 관리합니다.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


_BASE_DIR = Path(__file__).resolve().parents[2]

GB = 1024 * 1024 * 1024
MB = 1024 * 1024


@dataclass
class LoggingConfig:
    """간소화된 Logging(OpenTelemetry) 설정"""
    service_name: str
    service_version: str = "1.0.0"
    environment: str = "development"
    log_level: str = "INFO"
    otlp_endpoint: Optional[str] = None
    enable_console_export: bool = False

    def __post_init__(self):
        """설정 검증"""
        if not self.service_name:
            raise ValueError("Service name이 필요합니다")

        # environment 검증
        valid_environments = ["development", "production", "staging", "test"]
        if self.environment not in valid_environments:
            raise ValueError(f"지원하지 않는 environment: {self.environment}. 지원되는 환경: {valid_environments}")

        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR"]
        self.log_level = self.log_level.upper()
        if self.log_level not in valid_levels:
            raise ValueError(f"지원하지 않는 log level: {self.log_level}. 지원되는 레벨: {valid_levels}")

    @classmethod
    def from_env(cls) -> 'LoggingConfig':
        """환경변수로부터 설정 생성"""
        return cls(
            service_name=os.getenv("OTEL_SERVICE_NAME", "filenote-server"),
            service_version=os.getenv("OTEL_SERVICE_VERSION", "1.0.0"),
            environment=os.getenv("ENVIRONMENT", "development"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            otlp_endpoint=os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT"),
            enable_console_export=os.getenv("OTEL_CONSOLE_EXPORT", "false").lower() == "true",
        )


@dataclass
class StorageConfig:
    """엔티티 저장소 및 업로드 Blob 영역 설정"""
    backend: str
    data_dir: Path
    upload_dir: Path
    reconcile_interval_seconds: float = 10.0
    quota_fraction: float = 0.8
    quota_fallback_bytes: int = 100 * GB
    max_upload_bytes: int = 200 * MB

    def __post_init__(self):
        """설정 검증"""
        if self.backend not in ("file", "memory"):
            raise ValueError(f"지원하지 않는 storage backend: {self.backend} (file | memory)")
        self.data_dir = Path(self.data_dir)
        self.upload_dir = Path(self.upload_dir)
        if self.reconcile_interval_seconds <= 0:
            raise ValueError("reconcile interval은 0보다 커야 합니다")
        if not 0 < self.quota_fraction <= 1:
            raise ValueError("quota fraction은 (0, 1] 범위여야 합니다")
        if self.quota_fallback_bytes <= 0:
            raise ValueError("quota fallback bytes는 0보다 커야 합니다")
        if self.max_upload_bytes <= 0:
            raise ValueError("max upload bytes는 0보다 커야 합니다")

    @classmethod
    def from_env(cls) -> 'StorageConfig':
        """환경변수로부터 설정 생성"""
        data_dir = Path(os.getenv("DATA_DIR", str(_BASE_DIR / "data")))
        return cls(
            backend=os.getenv("STORAGE_BACKEND", "file").lower(),
            data_dir=data_dir,
            upload_dir=Path(os.getenv("UPLOAD_DIR", str(data_dir / "uploads"))),
            reconcile_interval_seconds=float(os.getenv("RECONCILE_INTERVAL_SECONDS", "10")),
            quota_fraction=float(os.getenv("QUOTA_FRACTION", "0.8")),
            quota_fallback_bytes=int(os.getenv("QUOTA_FALLBACK_BYTES", str(100 * GB))),
            max_upload_bytes=int(os.getenv("MAX_UPLOAD_BYTES", str(200 * MB))),
        )


@dataclass
class ServerConfig:
    """HTTP 서버 설정"""
    host: str = "0.0.0.0"
    port: int = 5000

    def __post_init__(self):
        if not self.host:
            raise ValueError("Server host가 필요합니다")
        if not 0 < self.port < 65536:
            raise ValueError(f"올바르지 않은 port: {self.port}")

    @classmethod
    def from_env(cls) -> 'ServerConfig':
        return cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "5000")),
        )


@dataclass
class ResourceConfig:
    """전체 리소스 설정 통합 클래스"""
    logging: LoggingConfig
    storage: StorageConfig
    server: ServerConfig

    @classmethod
    def from_env(cls) -> 'ResourceConfig':
        """환경변수로부터 설정 생성"""
        try:
            return cls(
                logging=LoggingConfig.from_env(),
                storage=StorageConfig.from_env(),
                server=ServerConfig.from_env(),
            )
        except Exception as e:
            raise RuntimeError(f"리소스 설정 초기화 실패: {e}") from e
