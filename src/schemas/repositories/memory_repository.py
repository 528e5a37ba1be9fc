"""
In-memory Entity Repository (개발/테스트용, 프로세스 종료 시 소멸)
"""

import copy
from typing import Dict, List, Optional

from .base_repository import FILES, NOTES, EntityRepository, Record


class MemoryRepository(EntityRepository):
    backend_name = "memory"

    def __init__(
        self,
        files: Optional[List[Record]] = None,
        notes: Optional[List[Record]] = None,
    ):
        super().__init__()
        self._collections: Dict[str, List[Record]] = {
            FILES: copy.deepcopy(files or []),
            NOTES: copy.deepcopy(notes or []),
        }

    def _read(self, collection: str) -> List[Record]:
        return copy.deepcopy(self._collections[collection])

    def _write(self, collection: str, records: List[Record]) -> None:
        self._collections[collection] = copy.deepcopy(records)
