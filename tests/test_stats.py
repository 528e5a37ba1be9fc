from datetime import datetime, timedelta, timezone

import pytest

from src.resources.service.business.stats_manager import TYPE_COLORS, StatsManager, categorize_mime_type
from src.resources.service.business.utils.formatting import format_bytes, format_upload_time
from src.schemas.repositories.memory_repository import MemoryRepository
from .records import NOW, file_record, note_record


class FixedQuota:
    def __init__(self, total):
        self.total = total

    def allocated_bytes(self):
        return self.total


def seeded_stats(quota=7168, files=None, notes=None):
    if files is None:
        files = [
            file_record(1, "photo.png", size=1024, mime_type="image/png", uploaded=NOW - timedelta(days=3)),
            file_record(2, "paper.pdf", size=2048, mime_type="application/pdf", uploaded=NOW - timedelta(days=10)),
            file_record(3, "todo.txt", size=512, mime_type="text/plain", uploaded=NOW - timedelta(days=7)),
            file_record(4, "Folder", is_folder=True, uploaded=NOW),
        ]
    if notes is None:
        notes = [note_record(1), note_record(2)]
    repository = MemoryRepository(files=files, notes=notes)
    return StatsManager(repository, FixedQuota(quota), clock=lambda: NOW)


# --- Formatting ---

@pytest.mark.parametrize("num_bytes, expected", [
    (0, "0 B"),
    (500, "500 B"),
    (1024, "1.0 KB"),
    (1536, "1.5 KB"),
    (1048576, "1.0 MB"),
    (5 * 1024 ** 3, "5.0 GB"),
])
def test_format_bytes(num_bytes, expected):
    assert format_bytes(num_bytes) == expected


def test_format_upload_time_is_utc():
    kst = timezone(timedelta(hours=9))
    assert format_upload_time(datetime(2024, 6, 15, 21, 30, 5, tzinfo=kst)) == "2024-06-15 12:30:05"
    assert format_upload_time(datetime(2024, 6, 15, 12, 0, 0)) == "2024-06-15 12:00:00"


@pytest.mark.parametrize("mime_type, category", [
    ("image/png", "Images"),
    ("application/pdf", "PDFs"),
    ("video/mp4", "Videos"),
    ("audio/mpeg", "Audio"),
    ("text/plain", "Documents"),
    ("application/msword", "Documents"),
    ("application/vnd.openxmlformats-officedocument.wordprocessingml.document", "Documents"),
    ("application/zip", "Other"),
    ("", "Other"),
])
def test_categorize_mime_type(mime_type, category):
    assert categorize_mime_type(mime_type) == category


# --- Dashboard ---

@pytest.mark.asyncio
async def test_dashboard_stats_counts_files_not_folders():
    stats = await seeded_stats().dashboard_stats()

    assert stats.total_files == 3
    assert stats.total_notes == 2
    assert stats.storage_used == "3.5 KB"
    assert stats.storage_usage.used == 3584
    assert stats.storage_usage.total == 7168
    assert stats.storage_usage.percentage == 50


@pytest.mark.asyncio
async def test_weekly_uploads_include_exact_boundary():
    stats = await seeded_stats().dashboard_stats()

    # 3일 전, 정확히 7일 전 포함 / 10일 전 제외
    assert stats.weekly_uploads == 2


@pytest.mark.asyncio
async def test_usage_percentage_is_not_clamped():
    stats = await seeded_stats(quota=2000).dashboard_stats()

    assert stats.storage_usage.percentage == 179


@pytest.mark.asyncio
async def test_zero_quota():
    assert (await seeded_stats(quota=0).dashboard_stats()).storage_usage.percentage == 100
    empty = await seeded_stats(quota=0, files=[], notes=[]).dashboard_stats()
    assert empty.storage_usage.percentage == 0
    assert empty.storage_used == "0 B"
    assert empty.total_files == 0


@pytest.mark.asyncio
async def test_dashboard_serializes_with_camel_case_keys():
    record = (await seeded_stats().dashboard_stats()).to_record()

    assert set(record) == {"totalFiles", "totalNotes", "storageUsed", "weeklyUploads", "storageUsage"}
    assert set(record["storageUsage"]) == {"percentage", "used", "total"}


# --- File types ---

@pytest.mark.asyncio
async def test_file_type_stats_consistency():
    files = [
        file_record(1, "a.png", mime_type="image/png"),
        file_record(2, "b.pdf", mime_type="application/pdf"),
        file_record(3, "c.txt", mime_type="text/plain"),
        file_record(4, "d.jpg", mime_type="image/jpeg"),
        file_record(5, "Folder", is_folder=True),
    ]

    result = await seeded_stats(files=files).file_type_stats()

    assert [(s.type, s.count, s.percentage) for s in result] == [
        ("Images", 2, 50),
        ("PDFs", 1, 25),
        ("Documents", 1, 25),
    ]
    assert [s.color for s in result] == TYPE_COLORS[:3]
    assert sum(s.count for s in result) == 4


@pytest.mark.asyncio
async def test_file_type_percentages_round_half_up():
    files = [file_record(i, mime_type="image/png") for i in range(1, 8)]
    files.append(file_record(8, "song.mp3", mime_type="audio/mpeg"))

    result = await seeded_stats(files=files).file_type_stats()

    # 7/8 = 87.5%, 1/8 = 12.5%
    assert [s.percentage for s in result] == [88, 13]


@pytest.mark.asyncio
async def test_file_type_stats_empty():
    assert await seeded_stats(files=[]).file_type_stats() == []


# --- Recent / largest ---

@pytest.mark.asyncio
async def test_recent_files_newest_first():
    recent = await seeded_stats().recent_files(limit=2)

    assert [r.id for r in recent] == [1, 3]
    assert recent[0].size == "1.0 KB"
    assert recent[0].upload_time == "2024-06-12 12:00:00"
    assert recent[0].original_name == "photo.png"
    assert recent[0].mime_type == "image/png"


@pytest.mark.asyncio
async def test_largest_files_excludes_folders():
    largest = await seeded_stats().largest_files()

    assert [f.id for f in largest] == [2, 1, 3]
    assert all(not f.is_folder for f in largest)
