"""
통합 검색 라우터: GET /api/search?q= -> {files, notes}
빈 질의는 오류가 아니라 빈 결과를 반환한다.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from src.resources.resource_provider import ResourceProvider
from src.routes.helpers.dependencies import get_resources
from src.routes.helpers.response_helper import ok_response
from src.schemas.models.stats import SearchResults


router = APIRouter(prefix="/api", tags=["search"])


@router.get("/search")
async def search(
    request: Request,
    q: Optional[str] = Query(None),
    resources: ResourceProvider = Depends(get_resources),
):
    query = (q or "").strip()
    if not query:
        return ok_response(request, data=SearchResults(files=[], notes=[]))

    files = await resources.hierarchy.search_files(query)
    notes = await resources.repository.search_notes(query)
    return ok_response(request, data=SearchResults(files=files, notes=notes))
