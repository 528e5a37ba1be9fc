"""
Filesystem Reconcile 매니저

File 레코드와 업로드 디렉터리 사이의 드리프트를 제거합니다.

- 파일: path 의 Blob 이 없으면 레코드 제거
- 폴더: 폴더 id 이름의 디렉터리가 없으면 제거 (자식 0개 규칙은 사용하지 않음)
- 존재하지 않는 부모를 가리키는 엔트리(중단된 재귀 삭제의 잔여물)도 제거
- 제거는 하위 엔트리까지 전파

백그라운드 보정 작업이므로 호출자에게 예외를 던지지 않고 로그만 남깁니다.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from src.resources.database.local.blob_storage_manager import LocalBlobStorageManager
from src.resources.logging import get_meter, trace_class
from src.schemas.models.file import File
from src.schemas.repositories.base_repository import EntityRepository
from .hierarchy_manager import collect_descendants


logger = logging.getLogger(__name__)

_meter = get_meter(__name__)
_removed_counter = _meter.create_counter(
    "reconcile.removed_records",
    unit="1",
    description="Reconciler가 제거한 File 레코드 수",
)


@dataclass
class ReconcileReport:
    missing_blobs: List[int] = field(default_factory=list)
    missing_folders: List[int] = field(default_factory=list)
    dangling: List[int] = field(default_factory=list)
    cascaded: List[int] = field(default_factory=list)
    skipped: bool = False
    error: Optional[str] = None

    @property
    def removed(self) -> List[int]:
        return self.missing_blobs + self.missing_folders + self.dangling + self.cascaded

    @property
    def changed(self) -> bool:
        return bool(self.removed)

    def to_dict(self) -> dict:
        return {
            "missingBlobs": self.missing_blobs,
            "missingFolders": self.missing_folders,
            "dangling": self.dangling,
            "cascaded": self.cascaded,
            "skipped": self.skipped,
            "error": self.error,
        }


@trace_class
class ReconcileManager:
    def __init__(
        self,
        repository: EntityRepository,
        blobs: LocalBlobStorageManager,
        interval_seconds: float = 10.0,
    ):
        self.repository = repository
        self.blobs = blobs
        self.interval_seconds = interval_seconds
        self.last_report: Optional[ReconcileReport] = None
        self._pass_lock = asyncio.Lock()
        self._task: Optional[asyncio.Task] = None

    async def reconcile(self) -> ReconcileReport:
        """한 번의 보정 패스. 이미 진행 중인 패스가 있으면 건너뛴다."""
        if self._pass_lock.locked():
            logger.debug("[reconcile] 진행 중인 패스가 있어 건너뜀")
            return ReconcileReport(skipped=True)

        async with self._pass_lock:
            try:
                report = await self._run_pass()
            except Exception as e:  # 백그라운드 보정은 다음 주기에 재시도
                logger.error(f"[reconcile] 패스 실패, 이번 주기 건너뜀: {e}", exc_info=True)
                report = ReconcileReport(skipped=True, error=str(e))
            self.last_report = report
            return report

    async def _run_pass(self) -> ReconcileReport:
        files = await self.repository.all_files()
        known_ids = {f.id for f in files}
        report = ReconcileReport()

        for f in files:
            if f.is_folder:
                if not await self.blobs.folder_exists(f.id):
                    report.missing_folders.append(f.id)
            elif not await self.blobs.exists(f.path):
                report.missing_blobs.append(f.id)

        flagged = set(report.missing_blobs) | set(report.missing_folders)
        report.dangling = [
            f.id for f in files
            if f.parent_id is not None and f.parent_id not in known_ids and f.id not in flagged
        ]

        roots = set(report.removed)
        cascaded: List[File] = []
        seen = set(roots)
        for f in files:
            if f.id in roots and f.is_folder:
                for child in collect_descendants(files, f.id):
                    if child.id not in seen:
                        seen.add(child.id)
                        cascaded.append(child)
        report.cascaded = [c.id for c in cascaded]

        if not report.changed:
            return report

        for f in files:
            if f.id not in seen:
                continue
            if f.is_folder:
                await self.blobs.delete_folder(f.id)
            elif f.id not in report.missing_blobs:
                await self.blobs.delete(f.path)

        removed = await self.repository.delete_files(seen)
        _removed_counter.add(removed)
        for file_id in report.missing_blobs:
            logger.info(f"[reconcile] Blob 없음, 레코드 제거: id={file_id}")
        for file_id in report.missing_folders:
            logger.info(f"[reconcile] 폴더 디렉터리 없음, 레코드 제거: id={file_id}")
        for file_id in report.dangling:
            logger.info(f"[reconcile] 부모 없는 엔트리 제거: id={file_id}")
        if report.cascaded:
            logger.info(f"[reconcile] 하위 엔트리 전파 제거: ids={report.cascaded}")
        logger.info(f"[reconcile] 패스 완료: 제거된 레코드 {removed}개")
        return report

    # ========== 주기 실행 ==========

    def start(self) -> None:
        """주기 실행 태스크 시작 (이미 실행 중이면 무시)"""
        if self._task is not None and not self._task.done():
            return
        self._task = asyncio.create_task(self._run_forever(), name="filesystem-reconciler")
        logger.info(f"[reconcile] 주기 실행 시작: interval={self.interval_seconds}s")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("[reconcile] 주기 실행 종료")

    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _run_forever(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            await self.reconcile()
