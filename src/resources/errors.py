"""
도메인 예외 정의

- EntryNotFoundError: 존재하지 않는 id 참조 (404 매핑)
- EntryValidationError: 잘못된 입력, 변경 전에 발생 (400 매핑)
- StorageIOError: 레코드 컬렉션 읽기/쓰기 실패 (500 매핑)
- QuotaQueryError: 디스크 용량 조회 실패 (내부 전용, fallback 처리)
"""

from typing import Optional


class VaultError(Exception):
    """도메인 예외 기본 클래스"""


class EntryNotFoundError(VaultError):
    def __init__(self, kind: str, entry_id: int):
        self.kind = kind
        self.entry_id = entry_id
        super().__init__(f"{kind} {entry_id}을(를) 찾을 수 없습니다")


class EntryValidationError(VaultError):
    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class StorageIOError(VaultError):
    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)


class QuotaQueryError(VaultError):
    pass
