"""
JSON 파일 기반 Entity Repository
data/files.json, data/notes.json 에 컬렉션 전체를 평탄 배열로 저장합니다.
"""

import json
import logging
import os
from pathlib import Path
from typing import List

from src.resources.errors import StorageIOError
from .base_repository import FILES, NOTES, EntityRepository, Record


logger = logging.getLogger(__name__)


class JsonFileRepository(EntityRepository):
    """JSON 파일 저장소 (임시 파일 기록 후 원자적 교체)"""

    backend_name = "file"

    def __init__(self, data_dir: Path):
        super().__init__()
        self.data_dir = Path(data_dir)
        self._paths = {
            FILES: self.data_dir / "files.json",
            NOTES: self.data_dir / "notes.json",
        }

    async def initialize(self) -> None:
        """데이터 디렉터리와 빈 컬렉션 파일 생성"""
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            for path in self._paths.values():
                if not path.exists():
                    path.write_text("[]", encoding="utf-8")
        except OSError as e:
            logger.error(f"[repository] 데이터 디렉터리 초기화 실패: {self.data_dir}, error={e}")
            raise StorageIOError(f"데이터 디렉터리 초기화 실패: {e}", str(self.data_dir)) from e
        logger.info(f"[repository] JSON 저장소 준비 완료: {self.data_dir}")

    def _read(self, collection: str) -> List[Record]:
        path = self._paths[collection]
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return []
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"[repository] 컬렉션 읽기 실패: {path}, error={e}")
            raise StorageIOError(f"{collection} 컬렉션을 읽지 못했습니다: {e}", str(path)) from e
        if not isinstance(data, list):
            logger.error(f"[repository] 컬렉션 형식 오류 (배열 아님): {path}")
            raise StorageIOError(f"{collection} 컬렉션 형식이 올바르지 않습니다", str(path))
        return data

    def _write(self, collection: str, records: List[Record]) -> None:
        path = self._paths[collection]
        temp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(records, f, ensure_ascii=False, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, path)
        except OSError as e:
            logger.error(f"[repository] 컬렉션 쓰기 실패: {path}, error={e}")
            if temp_path.exists():
                temp_path.unlink(missing_ok=True)
            raise StorageIOError(f"{collection} 컬렉션을 저장하지 못했습니다: {e}", str(path)) from e
