"""
데이터베이스 매니저 - Factory & Provider
Entity Repository(JSON 파일 / 메모리)와 로컬 Blob 스토리지를 생성/초기화합니다.
"""

from typing import Dict

from src.config.resources import StorageConfig
from src.schemas.repositories.base_repository import EntityRepository
from src.schemas.repositories.json_repository import JsonFileRepository
from src.schemas.repositories.memory_repository import MemoryRepository
from .local.blob_storage_manager import LocalBlobStorageManager


class DatabaseFactory:
    """저장소 인스턴스 생성 팩토리"""

    @staticmethod
    async def create_repository(config: StorageConfig) -> EntityRepository:
        """설정된 backend 의 Repository 생성 및 초기화"""
        if config.backend == "memory":
            repository: EntityRepository = MemoryRepository()
        else:
            repository = JsonFileRepository(config.data_dir)
        await repository.initialize()
        return repository

    @staticmethod
    async def create_blob_storage(config: StorageConfig) -> LocalBlobStorageManager:
        """로컬 Blob Storage Manager 생성 및 초기화"""
        manager = LocalBlobStorageManager(config.upload_dir, config.max_upload_bytes)
        await manager.initialize()
        return manager


class DatabaseProvider:
    """프로세스 시작 시 한 번 생성한 저장소 인스턴스 보관"""

    def __init__(self, repository: EntityRepository, blobs: LocalBlobStorageManager):
        self.repository = repository
        self.blobs = blobs

    @classmethod
    async def create(cls, config: StorageConfig) -> "DatabaseProvider":
        repository = await DatabaseFactory.create_repository(config)
        blobs = await DatabaseFactory.create_blob_storage(config)
        return cls(repository, blobs)

    async def close_all(self) -> None:
        """모든 인스턴스 종료 및 정리"""
        await self.blobs.close()

    async def health_check_all(self) -> Dict[str, bool]:
        """모든 저장소 헬스체크"""
        results = {
            'repository': await self.repository.health_check(),
            'blobs': await self.blobs.health_check(),
        }
        results['overall'] = all(results.values())
        return results

    def get_status(self) -> Dict[str, str]:
        return {
            'repository': self.repository.backend_name,
            'upload_root': str(self.blobs.upload_root),
        }
