"""
Dashboard 라우터 (prefix=/api/dashboard)

집계 전에 Reconciler 패스를 한 번 실행해 이미 사라진 Blob 이 통계에 잡히지 않도록 한다.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request

from src.resources.resource_provider import ResourceProvider
from src.routes.helpers.dependencies import get_resources
from src.routes.helpers.response_helper import ok_response


router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/stats")
async def dashboard_stats(request: Request, resources: ResourceProvider = Depends(get_resources)):
    await resources.reconciler.reconcile()
    return ok_response(request, data=await resources.stats.dashboard_stats())


@router.get("/file-types")
async def file_type_stats(request: Request, resources: ResourceProvider = Depends(get_resources)):
    await resources.reconciler.reconcile()
    return ok_response(request, data=await resources.stats.file_type_stats())


@router.get("/recent-files")
async def recent_files(
    request: Request,
    limit: int = Query(5, ge=1, le=100),
    resources: ResourceProvider = Depends(get_resources),
):
    await resources.reconciler.reconcile()
    return ok_response(request, data=await resources.stats.recent_files(limit))


@router.get("/largest-files")
async def largest_files(
    request: Request,
    limit: int = Query(10, ge=1, le=100),
    resources: ResourceProvider = Depends(get_resources),
):
    await resources.reconciler.reconcile()
    return ok_response(request, data=await resources.stats.largest_files(limit))
