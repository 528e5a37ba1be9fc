"""
대시보드 Stats 매니저 (읽기 전용 집계)
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Callable, Dict, List

from src.resources.logging import trace_class
from src.schemas.models.base import utc_now
from src.schemas.models.file import File
from src.schemas.models.stats import DashboardStats, FileTypeStats, RecentFile, StorageUsage
from src.schemas.repositories.base_repository import EntityRepository
from .quota_manager import QuotaManager
from .utils.formatting import format_bytes, format_upload_time


WEEK = timedelta(days=7)

TYPE_COLORS = ["#6366f1", "#f59e42", "#10b981", "#ef4444", "#eab308", "#3b82f6", "#a21caf"]

_DOCUMENT_MARKERS = ("document", "text", "msword", "spreadsheet", "presentation")


def categorize_mime_type(mime_type: str) -> str:
    mime_type = (mime_type or "").lower()
    if mime_type.startswith("image/"):
        return "Images"
    if mime_type == "application/pdf":
        return "PDFs"
    if mime_type.startswith("video/"):
        return "Videos"
    if mime_type.startswith("audio/"):
        return "Audio"
    if any(marker in mime_type for marker in _DOCUMENT_MARKERS):
        return "Documents"
    return "Other"


def _percent(part: int, whole: int) -> int:
    # JS Math.round 과 같은 half-up 반올림
    return int(math.floor(part / whole * 100 + 0.5))


def _regular_files(files: List[File]) -> List[File]:
    return [f for f in files if not f.is_folder]


@trace_class
class StatsManager:
    def __init__(
        self,
        repository: EntityRepository,
        quota: QuotaManager,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.repository = repository
        self.quota = quota
        self.clock = clock

    async def dashboard_stats(self) -> DashboardStats:
        files = _regular_files(await self.repository.all_files())
        notes = await self.repository.list_notes()

        used = sum(f.size for f in files)
        week_ago = self.clock() - WEEK
        weekly_uploads = sum(1 for f in files if f.upload_date >= week_ago)

        total = self.quota.allocated_bytes()
        if total > 0:
            percentage = _percent(used, total)
        else:
            percentage = 100 if used else 0

        return DashboardStats(
            total_files=len(files),
            total_notes=len(notes),
            storage_used=format_bytes(used),
            weekly_uploads=weekly_uploads,
            storage_usage=StorageUsage(percentage=percentage, used=used, total=total),
        )

    async def file_type_stats(self) -> List[FileTypeStats]:
        files = _regular_files(await self.repository.all_files())
        if not files:
            return []

        counts: Dict[str, int] = {}
        for f in files:
            category = categorize_mime_type(f.mime_type)
            counts[category] = counts.get(category, 0) + 1

        return [
            FileTypeStats(
                type=category,
                count=count,
                percentage=_percent(count, len(files)),
                color=TYPE_COLORS[idx % len(TYPE_COLORS)],
            )
            for idx, (category, count) in enumerate(counts.items())
        ]

    async def recent_files(self, limit: int = 5) -> List[RecentFile]:
        files = _regular_files(await self.repository.all_files())
        files.sort(key=lambda f: f.upload_date, reverse=True)
        return [
            RecentFile(
                id=f.id,
                name=f.name,
                original_name=f.original_name,
                size=format_bytes(f.size),
                upload_time=format_upload_time(f.upload_date),
                mime_type=f.mime_type,
            )
            for f in files[:max(limit, 0)]
        ]

    async def largest_files(self, limit: int = 10) -> List[File]:
        files = _regular_files(await self.repository.all_files())
        files.sort(key=lambda f: f.size, reverse=True)
        return files[:max(limit, 0)]
