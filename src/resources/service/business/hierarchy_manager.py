"""
파일/폴더 계층 매니저

- 폴더 생성 (부모 검증 + 폴더 id 이름의 실제 디렉터리 생성)
- 파일 업로드 (Blob 저장 + 레코드 생성, 파일별 성공/실패 보고)
- 이동/이름 변경 (부모 검증, 순환 방지, Blob 재배치)
- 재귀 삭제 (하위 파일 Blob, 폴더 디렉터리, 레코드를 한 번에 제거)
"""

from __future__ import annotations

import logging
import mimetypes
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Dict, Iterable, List, Optional, Union

from src.resources.database.local.blob_storage_manager import LocalBlobStorageManager
from src.resources.errors import EntryNotFoundError, EntryValidationError, StorageIOError
from src.resources.logging import trace_class
from src.schemas.models.file import FOLDER_MIME_TYPE, File, FileCreate, FileMetadata, FileRecordUpdate, FileUpdate
from src.schemas.repositories.base_repository import EntityRepository


logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"
DEFAULT_MIME_TYPE = "application/octet-stream"


@dataclass
class UploadBlob:
    """경계 계층(HTTP)에서 전달되는 업로드 단위"""
    filename: str
    data: Union[bytes, BinaryIO]
    content_type: Optional[str] = None


@dataclass
class UploadFailure:
    filename: str
    reason: str


@dataclass
class UploadResult:
    uploaded: List[File] = field(default_factory=list)
    failed: List[UploadFailure] = field(default_factory=list)


def collect_descendants(files: Iterable[File], root_id: int) -> List[File]:
    """
    parentId 체인을 따라 root_id 의 모든 하위 엔트리를 수집한다.
    스냅샷 기준으로 동작하며 (root 자신은 제외), 손상된 순환 참조가 있어도 종료한다.
    """
    children: Dict[Optional[int], List[File]] = defaultdict(list)
    for f in files:
        children[f.parent_id].append(f)

    result: List[File] = []
    visited = {root_id}
    stack = [root_id]
    while stack:
        current = stack.pop()
        for child in children.get(current, []):
            if child.id in visited:
                continue
            visited.add(child.id)
            result.append(child)
            if child.is_folder:
                stack.append(child.id)
    return result


def _guess_mime_type(filename: str, content_type: Optional[str]) -> str:
    if content_type and content_type != FOLDER_MIME_TYPE:
        return content_type
    guessed, _ = mimetypes.guess_type(filename)
    return guessed or DEFAULT_MIME_TYPE


def _stub_metadata(mime_type: str) -> Optional[FileMetadata]:
    # PDF 파싱은 아직 없음: 알려진 키만 null 로 채워 둔다
    if mime_type == PDF_MIME_TYPE:
        return FileMetadata(pages=None, title=None, author=None, word_count=None)
    return None


@trace_class
class HierarchyManager:
    """File 레코드와 업로드 디렉터리를 함께 다루는 계층 매니저"""

    def __init__(self, repository: EntityRepository, blobs: LocalBlobStorageManager):
        self.repository = repository
        self.blobs = blobs

    # ========== 조회 ==========

    async def list_files(self, parent_id: Optional[int] = None) -> List[File]:
        """자식 목록 (방금 디스크에서 사라진 Blob 의 엔트리는 감춘다, 삭제는 Reconciler 담당)"""
        entries = await self.repository.list_files(parent_id)
        return [e for e in entries if e.is_folder or await self.blobs.exists(e.path)]

    async def get_file(self, file_id: int) -> File:
        entry = await self.repository.get_file(file_id)
        if entry is None:
            raise EntryNotFoundError("file", file_id)
        return entry

    async def search_files(self, query: str) -> List[File]:
        query = (query or "").strip()
        if not query:
            return []
        return await self.repository.search_files(query)

    async def resolve_download(self, file_id: int) -> File:
        """다운로드 가능한 파일 엔트리 (폴더/Blob 없음은 오류)"""
        entry = await self.get_file(file_id)
        if entry.is_folder:
            raise EntryValidationError("폴더는 다운로드할 수 없습니다", "id")
        if self.blobs.resolve_blob(entry.path) is None:
            raise EntryNotFoundError("blob", file_id)
        return entry

    async def _require_folder(self, parent_id: int) -> File:
        parent = await self.repository.get_file(parent_id)
        if parent is None or not parent.is_folder:
            raise EntryValidationError(f"parentId {parent_id}은(는) 존재하는 폴더가 아닙니다", "parentId")
        return parent

    # ========== 생성 ==========

    async def create_folder(self, name: str, parent_id: Optional[int] = None) -> File:
        name = (name or "").strip()
        if not name:
            raise EntryValidationError("폴더 이름이 필요합니다", "name")
        if parent_id is not None:
            await self._require_folder(parent_id)

        folder = await self.repository.create_file(
            FileCreate(
                name=name,
                original_name=name,
                path="",
                size=0,
                mime_type=FOLDER_MIME_TYPE,
                is_folder=True,
                parent_id=parent_id,
                metadata=None,
            )
        )
        try:
            await self.blobs.create_folder(folder.id)
        except StorageIOError:
            await self.repository.delete_file(folder.id)
            raise
        logger.info(f"[hierarchy] 폴더 생성: id={folder.id}, name={name}, parent_id={parent_id}")
        return folder

    async def upload_files(self, blobs: List[UploadBlob], parent_id: Optional[int] = None) -> UploadResult:
        """
        Blob 을 저장하고 엔트리를 생성한다. 파일별 실패는 result.failed 에 기록하고
        나머지 파일은 계속 처리한다. 부모 폴더 검증 실패는 배치 전체 실패.
        """
        if not blobs:
            raise EntryValidationError("업로드할 파일이 없습니다", "files")
        if parent_id is not None:
            await self._require_folder(parent_id)

        result = UploadResult()
        for blob in blobs:
            original_name = Path(blob.filename or "").name
            if not original_name:
                result.failed.append(UploadFailure(filename=blob.filename or "", reason="파일 이름이 없습니다"))
                continue

            try:
                stored = await self.blobs.upload(blob.data, original_name, parent_id)
            except (EntryValidationError, StorageIOError) as e:
                logger.warning(f"[hierarchy] 업로드 실패: filename={original_name}, error={e}")
                result.failed.append(UploadFailure(filename=original_name, reason=str(e)))
                continue

            mime_type = _guess_mime_type(original_name, blob.content_type)
            try:
                entry = await self.repository.create_file(
                    FileCreate(
                        name=stored.name,
                        original_name=original_name,
                        path=stored.path,
                        size=stored.size,
                        mime_type=mime_type,
                        is_folder=False,
                        parent_id=parent_id,
                        metadata=_stub_metadata(mime_type),
                    )
                )
            except StorageIOError as e:
                await self.blobs.delete(stored.path)
                logger.error(f"[hierarchy] 레코드 생성 실패, Blob 회수: filename={original_name}, error={e}")
                result.failed.append(UploadFailure(filename=original_name, reason=str(e)))
                continue
            result.uploaded.append(entry)

        logger.info(
            f"[hierarchy] 업로드 완료: parent_id={parent_id}, "
            f"성공 {len(result.uploaded)}개, 실패 {len(result.failed)}개"
        )
        return result

    # ========== 변경 ==========

    async def update_file(self, file_id: int, updates: FileUpdate) -> File:
        """
        표시 이름/부모/메타데이터 수정. 파일의 부모가 바뀌면 Blob 도 새 폴더 디렉터리로 옮기고,
        레코드 쓰기가 실패하면 Blob 을 원래 위치로 되돌린 뒤 예외를 전파한다.
        """
        entry = await self.get_file(file_id)
        fields = updates.model_fields_set
        record_updates = FileRecordUpdate.model_validate(updates.model_dump(exclude_unset=True))
        moved_path: Optional[str] = None

        if "parent_id" in fields and updates.parent_id != entry.parent_id:
            new_parent = updates.parent_id
            if new_parent is not None:
                await self._require_folder(new_parent)
                if entry.is_folder:
                    all_files = await self.repository.all_files()
                    blocked = {entry.id} | {d.id for d in collect_descendants(all_files, entry.id)}
                    if new_parent in blocked:
                        raise EntryValidationError("폴더를 자기 자신이나 하위 폴더로 이동할 수 없습니다", "parentId")

            if not entry.is_folder:
                new_path = await self.blobs.relocate(entry.path, new_parent)
                if new_path is not None and new_path != entry.path:
                    moved_path = new_path
                    record_updates = record_updates.model_copy(update={"path": new_path})

        try:
            updated = await self.repository.update_file(file_id, record_updates)
        except (StorageIOError, ValueError) as e:
            if moved_path is not None:
                await self.blobs.relocate(moved_path, entry.parent_id)
                logger.warning(f"[hierarchy] 레코드 수정 실패, Blob 원위치: id={file_id}, path={entry.path}")
            if isinstance(e, ValueError):
                raise EntryValidationError(str(e)) from e
            raise
        if updated is None:
            raise EntryNotFoundError("file", file_id)
        logger.info(f"[hierarchy] 엔트리 수정: id={file_id}, fields={sorted(fields)}")
        return updated

    # ========== 삭제 ==========

    async def delete_entry(self, file_id: int) -> bool:
        """
        파일: Blob 삭제 후 레코드 삭제.
        폴더: 하위 전체를 스냅샷으로 수집 → 파일 Blob 및 폴더 디렉터리 삭제 →
        대상과 하위 레코드를 한 번의 쓰기로 제거.
        """
        entry = await self.repository.get_file(file_id)
        if entry is None:
            return False

        if not entry.is_folder:
            await self.blobs.delete(entry.path)
            deleted = await self.repository.delete_file(file_id)
            logger.info(f"[hierarchy] 파일 삭제: id={file_id}, deleted={deleted}")
            return deleted

        descendants = collect_descendants(await self.repository.all_files(), file_id)
        for child in descendants:
            if not child.is_folder:
                await self.blobs.delete(child.path)
        for folder in [entry] + [d for d in descendants if d.is_folder]:
            await self.blobs.delete_folder(folder.id)

        removed = await self.repository.delete_files([file_id] + [d.id for d in descendants])
        logger.info(
            f"[hierarchy] 폴더 재귀 삭제: id={file_id}, 하위 {len(descendants)}개, 제거된 레코드 {removed}개"
        )
        return removed > 0
