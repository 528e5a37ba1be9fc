"""
Files 라우터: 파일/폴더 계층 조회 및 변경

엔드포인트 (prefix=/api/files)
- GET    ""                  parentId 자식 목록 (생략 시 루트)
- GET    /search?q=          이름 검색
- GET    /{id}               단건 조회
- GET    /{id}/download      Blob 다운로드
- GET    /{id}/thumbnail     원본 Blob 을 썸네일로 인라인 제공 (1년 캐시)
- POST   /upload             multipart 업로드 (files[], parentId)
- POST   /folder             폴더 생성
- PUT    /{id}               이름 변경/이동/메타데이터 수정
- DELETE /{id}               삭제 (폴더는 재귀)
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Form, Query, Request, UploadFile
from fastapi import File as FormFile
from fastapi.responses import FileResponse
from pydantic import Field

from src.resources.errors import EntryNotFoundError
from src.resources.resource_provider import ResourceProvider
from src.resources.service.business.hierarchy_manager import UploadBlob
from src.routes.helpers.dependencies import get_resources
from src.routes.helpers.response_helper import ERROR_TYPES, ApiErrorItem, error_response, ok_response
from src.schemas.models.base import CamelModel
from src.schemas.models.file import FileUpdate


router = APIRouter(prefix="/api/files", tags=["files"])


class CreateFolderRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    parent_id: Optional[int] = Field(None, gt=0)


@router.get("")
async def list_files(
    request: Request,
    parent_id: Optional[int] = Query(None, alias="parentId"),
    resources: ResourceProvider = Depends(get_resources),
):
    files = await resources.hierarchy.list_files(parent_id)
    return ok_response(request, data=files)


@router.get("/search")
async def search_files(
    request: Request,
    q: str = Query(..., min_length=1),
    resources: ResourceProvider = Depends(get_resources),
):
    files = await resources.hierarchy.search_files(q)
    return ok_response(request, data=files)


@router.get("/{file_id}")
async def get_file(
    request: Request,
    file_id: int,
    resources: ResourceProvider = Depends(get_resources),
):
    return ok_response(request, data=await resources.hierarchy.get_file(file_id))


@router.get("/{file_id}/download")
async def download_file(
    file_id: int,
    resources: ResourceProvider = Depends(get_resources),
):
    entry = await resources.hierarchy.resolve_download(file_id)
    return FileResponse(
        entry.path,
        media_type=entry.mime_type,
        filename=entry.original_name,
        headers={"X-Content-Type-Options": "nosniff", "X-Frame-Options": "DENY"},
    )


THUMBNAIL_CACHE_CONTROL = "public, max-age=31536000"


@router.get("/{file_id}/thumbnail")
async def thumbnail_file(
    file_id: int,
    resources: ResourceProvider = Depends(get_resources),
):
    """별도 축소본 없이 원본을 이미지로 내려준다 (이미지가 아니면 image/jpeg)"""
    entry = await resources.hierarchy.resolve_download(file_id)
    media_type = entry.mime_type if entry.mime_type.startswith("image/") else "image/jpeg"
    return FileResponse(
        entry.path,
        media_type=media_type,
        headers={"Cache-Control": THUMBNAIL_CACHE_CONTROL, "X-Content-Type-Options": "nosniff"},
    )


@router.post("/upload")
async def upload_files(
    request: Request,
    files: List[UploadFile] = FormFile(...),
    parent_id: Optional[int] = Form(None, alias="parentId"),
    resources: ResourceProvider = Depends(get_resources),
):
    blobs = [
        UploadBlob(filename=f.filename or "", data=f.file, content_type=f.content_type)
        for f in files
    ]
    try:
        result = await resources.hierarchy.upload_files(blobs, parent_id)
    finally:
        for f in files:
            await f.close()

    if not result.uploaded:
        return error_response(
            request,
            status_code=400,
            title="Upload Failed",
            detail="파일을 하나도 저장하지 못했습니다",
            type_=ERROR_TYPES.UPLOAD_FAILED,
            errors=[ApiErrorItem(detail=f.reason, parameter=f.filename) for f in result.failed],
        )

    message = None
    if result.failed:
        message = f"{len(result.uploaded)}개 저장, {len(result.failed)}개 실패"
    return ok_response(
        request,
        data={
            "uploaded": result.uploaded,
            "failed": [{"filename": f.filename, "reason": f.reason} for f in result.failed],
        },
        message=message,
    )


@router.post("/folder")
async def create_folder(
    request: Request,
    payload: CreateFolderRequest,
    resources: ResourceProvider = Depends(get_resources),
):
    folder = await resources.hierarchy.create_folder(payload.name, payload.parent_id)
    return ok_response(request, data=folder, status_code=201)


@router.put("/{file_id}")
async def update_file(
    request: Request,
    file_id: int,
    payload: FileUpdate,
    resources: ResourceProvider = Depends(get_resources),
):
    updated = await resources.hierarchy.update_file(file_id, payload)
    return ok_response(request, data=updated)


@router.delete("/{file_id}")
async def delete_file(
    request: Request,
    file_id: int,
    resources: ResourceProvider = Depends(get_resources),
):
    deleted = await resources.hierarchy.delete_entry(file_id)
    if not deleted:
        raise EntryNotFoundError("file", file_id)
    return ok_response(request, data={"success": True})
