"""
통합 리소스 프로바이더
저장소(Database)와 비즈니스 매니저(Service)를 한 곳에서 생성/관리
"""

import logging
from typing import Any, Dict, Optional

from src.config.resources import ResourceConfig
from src.resources.database.database_manager import DatabaseProvider
from src.resources.service.business.hierarchy_manager import HierarchyManager
from src.resources.service.business.quota_manager import QuotaManager
from src.resources.service.business.reconcile_manager import ReconcileManager
from src.resources.service.business.stats_manager import StatsManager
from src.schemas.repositories.base_repository import EntityRepository


logger = logging.getLogger(__name__)


class ResourceProvider:
    """통합 리소스 프로바이더 (앱 생성 시 한 번 만들어 app.state 로 전달)"""

    def __init__(self, config: ResourceConfig):
        self.config = config
        self.database: Optional[DatabaseProvider] = None
        self.hierarchy: Optional[HierarchyManager] = None
        self.reconciler: Optional[ReconcileManager] = None
        self.quota: Optional[QuotaManager] = None
        self.stats: Optional[StatsManager] = None

    @property
    def repository(self) -> EntityRepository:
        return self.database.repository

    async def initialize_all(self, start_reconciler: bool = True) -> None:
        """
        모든 리소스 초기화
        Database 먼저 초기화 후 Service 구성, 시작 시 1회 보정 후 주기 실행
        """
        storage = self.config.storage

        # 1. Database 초기화
        self.database = await DatabaseProvider.create(storage)
        repository = self.database.repository
        blobs = self.database.blobs

        # 2. Service 구성 (Database 의존성 주입)
        self.hierarchy = HierarchyManager(repository, blobs)
        self.quota = QuotaManager(
            blobs.upload_root,
            fraction=storage.quota_fraction,
            fallback_bytes=storage.quota_fallback_bytes,
        )
        self.stats = StatsManager(repository, self.quota)
        self.reconciler = ReconcileManager(
            repository,
            blobs,
            interval_seconds=storage.reconcile_interval_seconds,
        )

        # 3. 시작 시 보정 + 주기 실행
        await self.reconciler.reconcile()
        if start_reconciler:
            self.reconciler.start()

        logger.info(
            f"[resources] 초기화 완료: backend={repository.backend_name}, "
            f"upload_root={blobs.upload_root}"
        )

    async def close_all(self) -> None:
        """모든 리소스 정리"""
        if self.reconciler is not None:
            await self.reconciler.stop()
        if self.database is not None:
            await self.database.close_all()

    async def health_check_all(self) -> Dict[str, Any]:
        """모든 리소스 헬스체크"""
        results: Dict[str, Any] = {}

        db_health = await self.database.health_check_all()
        results['database'] = db_health

        results['service'] = {
            'reconciler': self.reconciler.is_running(),
            'last_reconcile': (
                self.reconciler.last_report.to_dict() if self.reconciler.last_report else None
            ),
        }

        results['overall'] = db_health.get('overall', False)
        return results

    def get_status(self) -> Dict[str, Any]:
        """전체 리소스 상태"""
        return {
            'database': self.database.get_status() if self.database else None,
            'service': {
                'reconciler': self.reconciler.is_running() if self.reconciler else False,
            },
        }
