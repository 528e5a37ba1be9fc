import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from src.config.resources import MB, LoggingConfig, ResourceConfig, ServerConfig, StorageConfig
from src.resources.database.local.blob_storage_manager import LocalBlobStorageManager
from src.resources.service.business.hierarchy_manager import HierarchyManager
from src.resources.service.business.reconcile_manager import ReconcileManager
from src.schemas.repositories.json_repository import JsonFileRepository
from src.schemas.repositories.memory_repository import MemoryRepository


@pytest.fixture(params=["memory", "file"])
def repository(request, tmp_path):
    """두 저장소 구현에 같은 테스트를 적용"""
    if request.param == "memory":
        return MemoryRepository()
    return JsonFileRepository(tmp_path / "data")


@pytest_asyncio.fixture
async def blobs(tmp_path):
    manager = LocalBlobStorageManager(tmp_path / "uploads", max_upload_bytes=1 * MB)
    await manager.initialize()
    return manager


@pytest_asyncio.fixture
async def hierarchy(repository, blobs):
    await repository.initialize()
    return HierarchyManager(repository, blobs)


@pytest.fixture
def reconciler(hierarchy):
    return ReconcileManager(hierarchy.repository, hierarchy.blobs, interval_seconds=0.05)


@pytest.fixture
def resource_config(tmp_path):
    return ResourceConfig(
        logging=LoggingConfig(service_name="filenote-test", environment="test", log_level="WARNING"),
        storage=StorageConfig(
            backend="file",
            data_dir=tmp_path / "data",
            upload_dir=tmp_path / "uploads",
            max_upload_bytes=1 * MB,
        ),
        server=ServerConfig(),
    )


@pytest.fixture
def client(resource_config):
    from main import create_app

    app = create_app(resource_config, start_reconciler=False)
    with TestClient(app) as test_client:
        yield test_client
