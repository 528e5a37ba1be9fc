from __future__ import annotations

import math
from datetime import datetime, timezone


_BYTE_UNITS = ["B", "KB", "MB", "GB", "TB"]


def format_bytes(num_bytes: int) -> str:
    """바이트 수를 사람이 읽기 쉬운 문자열로 변환 (KB 이상은 소수점 한 자리, 예: 1536 -> '1.5 KB')"""
    if num_bytes <= 0:
        return "0 B"
    index = int(math.floor(math.log(num_bytes) / math.log(1024)))
    index = min(index, len(_BYTE_UNITS) - 1)
    if index == 0:
        return f"{num_bytes} B"
    value = num_bytes / math.pow(1024, index)
    return f"{value:.1f} {_BYTE_UNITS[index]}"


def format_upload_time(value: datetime) -> str:
    """업로드 시각을 'YYYY-MM-DD HH:MM:SS' (UTC) 절대 시각으로 표시"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
