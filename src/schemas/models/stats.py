"""
대시보드 집계 응답 모델
"""

from typing import List

from .base import CamelModel
from .file import File
from .note import Note


class StorageUsage(CamelModel):
    percentage: int
    used: int
    total: int


class DashboardStats(CamelModel):
    total_files: int
    total_notes: int
    storage_used: str
    weekly_uploads: int
    storage_usage: StorageUsage


class FileTypeStats(CamelModel):
    type: str
    count: int
    percentage: int
    color: str


class RecentFile(CamelModel):
    id: int
    name: str
    original_name: str
    size: str
    upload_time: str
    mime_type: str


class SearchResults(CamelModel):
    files: List[File]
    notes: List[Note]
