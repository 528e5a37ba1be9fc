"""
Quota 추정 매니저

업로드 디렉터리가 속한 볼륨의 **여유 공간** 중 일정 비율(기본 80%)을
저장 용량 할당량으로 사용합니다. 조회 실패 시 고정 fallback 값에 같은 비율을
적용하며, 호출자에게 예외를 던지지 않습니다.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

from src.config.resources import GB
from src.resources.errors import QuotaQueryError
from src.resources.logging import trace_class


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiskSpace:
    total: int
    free: int


@dataclass(frozen=True)
class QuotaEstimate:
    quota: int
    disk_total: int
    disk_free: int
    fallback: bool


@trace_class
class QuotaManager:
    def __init__(self, path: Path, fraction: float = 0.8, fallback_bytes: int = 100 * GB):
        self.path = Path(path)
        self.fraction = fraction
        self.fallback_bytes = fallback_bytes

    def _query_disk(self) -> DiskSpace:
        try:
            usage = shutil.disk_usage(self.path)
        except (OSError, AttributeError, NotImplementedError) as e:
            raise QuotaQueryError(f"디스크 용량 조회 실패: {self.path}: {e}") from e
        return DiskSpace(total=usage.total, free=usage.free)

    def estimate(self) -> QuotaEstimate:
        try:
            space = self._query_disk()
        except QuotaQueryError as e:
            logger.warning(f"[quota] {e} -> fallback {self.fallback_bytes} bytes 사용")
            return QuotaEstimate(
                quota=int(self.fallback_bytes * self.fraction),
                disk_total=self.fallback_bytes,
                disk_free=self.fallback_bytes,
                fallback=True,
            )
        return QuotaEstimate(
            quota=int(space.free * self.fraction),
            disk_total=space.total,
            disk_free=space.free,
            fallback=False,
        )

    def allocated_bytes(self) -> int:
        """Stats 계산에 쓰이는 할당량 (bytes)"""
        return self.estimate().quota
