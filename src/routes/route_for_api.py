"""
API 라우터: 비즈니스 하위 라우터를 포함

- /api/files      파일/폴더 계층
- /api/notes      노트
- /api/search     통합 검색
- /api/dashboard  대시보드 집계
"""

from __future__ import annotations

from fastapi import APIRouter

from src.routes.business.route_for_dashboard import router as dashboard_router
from src.routes.business.route_for_files import router as files_router
from src.routes.business.route_for_notes import router as notes_router
from src.routes.business.route_for_search import router as search_router


router = APIRouter()

# 하위 라우터 포함 (prefix 는 하위 라우터에서 정의)
router.include_router(files_router)
router.include_router(notes_router)
router.include_router(search_router)
router.include_router(dashboard_router)
