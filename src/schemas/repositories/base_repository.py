"""
Entity Repository (File / Note 컬렉션 공통 CRUD)

저장 매체는 하위 클래스가 `_read` / `_write` 로 제공하고, CRUD 규칙
(id 할당, 타임스탬프, 검색)은 이 클래스에서 한 번만 구현합니다.
각 변경 작업은 컬렉션 단위 asyncio.Lock 안에서 전체 컬렉션을
read-modify-write 하므로 동시 생성 요청이 같은 id를 받지 않습니다.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Union

from src.resources.logging import trace_class
from src.schemas.models.base import utc_now
from src.schemas.models.file import File, FileCreate, FileRecordUpdate, FileUpdate
from src.schemas.models.note import Note, NoteCreate, NoteUpdate


FILES = "files"
NOTES = "notes"

Record = Dict[str, Any]


def _next_id(records: List[Record]) -> int:
    return max((int(r["id"]) for r in records), default=0) + 1


def _matches(query: str, *values: Optional[str]) -> bool:
    return any(query in (v or "").lower() for v in values)


@trace_class
class EntityRepository(ABC):
    """File / Note 저장소 추상 클래스"""

    backend_name = "abstract"

    def __init__(self):
        self._locks = {FILES: asyncio.Lock(), NOTES: asyncio.Lock()}

    # ========== 저장 매체 프리미티브 ==========

    @abstractmethod
    def _read(self, collection: str) -> List[Record]:
        """컬렉션 전체 레코드 (camelCase dict) 반환"""

    @abstractmethod
    def _write(self, collection: str, records: List[Record]) -> None:
        """컬렉션 전체를 한 번에 교체"""

    async def initialize(self) -> None:
        """저장 매체 준비 (필요 시 하위 클래스에서 재정의)"""

    async def health_check(self) -> bool:
        try:
            self._read(FILES)
            self._read(NOTES)
            return True
        except Exception:
            return False

    # ========== Files ==========

    async def all_files(self) -> List[File]:
        return [File.model_validate(r) for r in self._read(FILES)]

    async def list_files(self, parent_id: Optional[int] = None) -> List[File]:
        """parent_id 의 직계 자식, 생략 시 루트 엔트리 목록"""
        return [
            File.model_validate(r)
            for r in self._read(FILES)
            if r.get("parentId") == parent_id
        ]

    async def get_file(self, file_id: int) -> Optional[File]:
        for r in self._read(FILES):
            if r["id"] == file_id:
                return File.model_validate(r)
        return None

    async def create_file(self, data: FileCreate) -> File:
        async with self._locks[FILES]:
            records = self._read(FILES)
            now = utc_now()
            file = File(
                **data.model_dump(),
                id=_next_id(records),
                upload_date=now,
                last_modified=now,
            )
            records.append(file.to_record())
            self._write(FILES, records)
            return file

    async def update_file(
        self,
        file_id: int,
        updates: Union[FileRecordUpdate, FileUpdate, Record],
    ) -> Optional[File]:
        if isinstance(updates, dict):
            updates = FileRecordUpdate.model_validate(updates)
        changes = updates.model_dump(mode="json", by_alias=True, exclude_unset=True)

        async with self._locks[FILES]:
            records = self._read(FILES)
            for idx, record in enumerate(records):
                if record["id"] != file_id:
                    continue
                merged = {**record, **changes, "lastModified": utc_now()}
                file = File.model_validate(merged)
                records[idx] = file.to_record()
                self._write(FILES, records)
                return file
            return None

    async def delete_file(self, file_id: int) -> bool:
        return await self.delete_files([file_id]) > 0

    async def delete_files(self, file_ids: Iterable[int]) -> int:
        """여러 레코드를 한 번의 쓰기로 제거하고 제거된 개수를 반환"""
        targets = set(file_ids)
        if not targets:
            return 0
        async with self._locks[FILES]:
            records = self._read(FILES)
            kept = [r for r in records if r["id"] not in targets]
            removed = len(records) - len(kept)
            if removed:
                self._write(FILES, kept)
            return removed

    async def search_files(self, query: str) -> List[File]:
        q = query.lower()
        return [
            File.model_validate(r)
            for r in self._read(FILES)
            if _matches(q, r.get("name"), r.get("originalName"))
        ]

    # ========== Notes ==========

    async def list_notes(self) -> List[Note]:
        """고정된 노트 우선, 그 안에서 최근 수정 순"""
        notes = [Note.model_validate(r) for r in self._read(NOTES)]
        notes.sort(key=lambda n: n.updated_at, reverse=True)
        notes.sort(key=lambda n: not n.is_pinned)
        return notes

    async def get_note(self, note_id: int) -> Optional[Note]:
        for r in self._read(NOTES):
            if r["id"] == note_id:
                return Note.model_validate(r)
        return None

    async def create_note(self, data: NoteCreate) -> Note:
        async with self._locks[NOTES]:
            records = self._read(NOTES)
            now = utc_now()
            note = Note(
                **data.model_dump(),
                id=_next_id(records),
                created_at=now,
                updated_at=now,
            )
            records.append(note.to_record())
            self._write(NOTES, records)
            return note

    async def update_note(self, note_id: int, updates: Union[NoteUpdate, Record]) -> Optional[Note]:
        if isinstance(updates, dict):
            updates = NoteUpdate.model_validate(updates)
        changes = updates.model_dump(mode="json", by_alias=True, exclude_unset=True)

        async with self._locks[NOTES]:
            records = self._read(NOTES)
            for idx, record in enumerate(records):
                if record["id"] != note_id:
                    continue
                merged = {**record, **changes, "updatedAt": utc_now()}
                note = Note.model_validate(merged)
                records[idx] = note.to_record()
                self._write(NOTES, records)
                return note
            return None

    async def delete_note(self, note_id: int) -> bool:
        async with self._locks[NOTES]:
            records = self._read(NOTES)
            kept = [r for r in records if r["id"] != note_id]
            if len(kept) == len(records):
                return False
            self._write(NOTES, kept)
            return True

    async def search_notes(self, query: str) -> List[Note]:
        q = query.lower()
        return [
            Note.model_validate(r)
            for r in self._read(NOTES)
            if _matches(q, r.get("title"), r.get("content"), *r.get("tags", []))
        ]
