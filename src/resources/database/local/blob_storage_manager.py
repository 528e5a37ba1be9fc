"""
Local Blob Storage Manager
업로드 파일 본문을 로컬 디렉터리에 저장합니다.
부모 폴더가 있는 파일은 `<upload_root>/<folder_id>/` 하위에 저장됩니다.
"""

import logging
import os
import secrets
import shutil
import time
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional, Union

from src.resources.errors import EntryValidationError, StorageIOError
from src.resources.logging import trace_class


logger = logging.getLogger(__name__)

_CHUNK_SIZE = 1024 * 1024


@dataclass
class StoredBlob:
    name: str
    path: str
    size: int


@trace_class
class LocalBlobStorageManager:
    """로컬 Blob 스토리지 매니저"""

    def __init__(self, upload_root: Path, max_upload_bytes: int):
        self.upload_root = Path(upload_root).resolve()
        self.max_upload_bytes = max_upload_bytes
        self._last_health_check = 0.0
        self._health_status = False

    async def initialize(self) -> None:
        """업로드 루트 디렉터리 생성"""
        try:
            self.upload_root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageIOError(f"업로드 디렉터리 생성 실패: {e}", str(self.upload_root)) from e

    async def close(self) -> None:
        self._health_status = False

    async def health_check(self) -> bool:
        """업로드 루트 쓰기 가능 여부 (5초 캐싱)"""
        current_time = time.time()
        if current_time - self._last_health_check < 5:
            return self._health_status
        self._health_status = self.upload_root.is_dir() and os.access(self.upload_root, os.W_OK)
        self._last_health_check = current_time
        return self._health_status

    # ========== 경로 ==========

    def folder_dir(self, folder_id: int) -> Path:
        return self.upload_root / str(folder_id)

    def generate_name(self, original_name: str) -> str:
        """'<epoch ms>-<9자리 난수><원본 확장자>' 형태의 충돌 회피 이름"""
        suffix = Path(original_name).suffix
        return f"{int(time.time() * 1000)}-{secrets.randbelow(10**9):09d}{suffix}"

    def _contained(self, path: str) -> Optional[Path]:
        """업로드 루트 하위 경로면 resolve 된 Path, 아니면 None"""
        if not path:
            return None
        candidate = Path(path).resolve()
        try:
            candidate.relative_to(self.upload_root)
        except ValueError:
            return None
        return candidate

    def resolve_blob(self, path: str) -> Optional[Path]:
        """업로드 루트 하위의 실존 파일 경로만 반환"""
        candidate = self._contained(path)
        return candidate if candidate is not None and candidate.is_file() else None

    # ========== 필수 작업 ==========

    async def upload(
        self,
        data: Union[bytes, BinaryIO],
        original_name: str,
        parent_id: Optional[int] = None,
    ) -> StoredBlob:
        """본문 저장 (상한 초과 시 부분 파일 삭제 후 EntryValidationError)"""
        target_dir = self.folder_dir(parent_id) if parent_id is not None else self.upload_root
        name = self.generate_name(original_name)
        target = target_dir / name

        size = 0
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            with open(target, "wb") as out:
                if isinstance(data, (bytes, bytearray)):
                    size = len(data)
                    if size > self.max_upload_bytes:
                        raise EntryValidationError(
                            f"{original_name}: 업로드 상한({self.max_upload_bytes} bytes)을 초과했습니다", "files"
                        )
                    out.write(data)
                else:
                    while True:
                        chunk = data.read(_CHUNK_SIZE)
                        if not chunk:
                            break
                        size += len(chunk)
                        if size > self.max_upload_bytes:
                            raise EntryValidationError(
                                f"{original_name}: 업로드 상한({self.max_upload_bytes} bytes)을 초과했습니다", "files"
                            )
                        out.write(chunk)
        except EntryValidationError:
            target.unlink(missing_ok=True)
            raise
        except OSError as e:
            target.unlink(missing_ok=True)
            raise StorageIOError(f"{original_name} 저장 실패: {e}", str(target)) from e

        return StoredBlob(name=name, path=str(target), size=size)

    async def delete(self, path: str) -> bool:
        """Blob 삭제 (없거나 업로드 루트 밖이면 False, 오류 아님)"""
        target = self._contained(path)
        if target is None:
            if path:
                logger.warning(f"[blob] 업로드 루트 밖 경로 삭제 거부: {path}")
            return False
        try:
            os.remove(target)
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageIOError(f"Blob 삭제 실패: {e}", path) from e

    async def relocate(self, path: str, parent_id: Optional[int]) -> Optional[str]:
        """Blob 을 부모 폴더 디렉터리(없으면 루트)로 이동, 원본이 없거나 루트 밖이면 None"""
        source = self.resolve_blob(path)
        if source is None:
            return None
        target_dir = self.folder_dir(parent_id) if parent_id is not None else self.upload_root
        target = target_dir / source.name
        if target == source:
            return str(source)
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            shutil.move(str(source), str(target))
        except OSError as e:
            raise StorageIOError(f"Blob 이동 실패: {e}", path) from e
        return str(target)

    async def exists(self, path: str) -> bool:
        return self.resolve_blob(path) is not None

    async def create_folder(self, folder_id: int) -> Path:
        directory = self.folder_dir(folder_id)
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageIOError(f"폴더 디렉터리 생성 실패: {e}", str(directory)) from e
        return directory

    async def folder_exists(self, folder_id: int) -> bool:
        return self.folder_dir(folder_id).is_dir()

    async def delete_folder(self, folder_id: int) -> bool:
        """폴더 디렉터리 재귀 삭제 (없으면 False, 오류 아님)"""
        directory = self.folder_dir(folder_id)
        if not directory.exists():
            return False
        try:
            shutil.rmtree(directory)
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageIOError(f"폴더 디렉터리 삭제 실패: {e}", str(directory)) from e
