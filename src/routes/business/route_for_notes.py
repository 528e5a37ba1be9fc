"""
Notes 라우터

엔드포인트 (prefix=/api/notes)
- GET    ""            목록 (고정 우선, 최근 수정 순)
- GET    /search?q=    제목/본문/태그 검색
- GET    /{id}
- POST   ""            생성
- PUT    /{id}         부분 수정 (고정 토글 포함)
- DELETE /{id}
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request

from src.resources.errors import EntryNotFoundError
from src.resources.resource_provider import ResourceProvider
from src.routes.helpers.dependencies import get_resources
from src.routes.helpers.response_helper import ok_response
from src.schemas.models.note import NoteCreate, NoteUpdate


router = APIRouter(prefix="/api/notes", tags=["notes"])


@router.get("")
async def list_notes(request: Request, resources: ResourceProvider = Depends(get_resources)):
    return ok_response(request, data=await resources.repository.list_notes())


@router.get("/search")
async def search_notes(
    request: Request,
    q: str = Query(..., min_length=1),
    resources: ResourceProvider = Depends(get_resources),
):
    query = q.strip()
    notes = await resources.repository.search_notes(query) if query else []
    return ok_response(request, data=notes)


@router.get("/{note_id}")
async def get_note(request: Request, note_id: int, resources: ResourceProvider = Depends(get_resources)):
    note = await resources.repository.get_note(note_id)
    if note is None:
        raise EntryNotFoundError("note", note_id)
    return ok_response(request, data=note)


@router.post("")
async def create_note(
    request: Request,
    payload: NoteCreate,
    resources: ResourceProvider = Depends(get_resources),
):
    note = await resources.repository.create_note(payload)
    return ok_response(request, data=note, status_code=201)


@router.put("/{note_id}")
async def update_note(
    request: Request,
    note_id: int,
    payload: NoteUpdate,
    resources: ResourceProvider = Depends(get_resources),
):
    note = await resources.repository.update_note(note_id, payload)
    if note is None:
        raise EntryNotFoundError("note", note_id)
    return ok_response(request, data=note)


@router.delete("/{note_id}")
async def delete_note(request: Request, note_id: int, resources: ResourceProvider = Depends(get_resources)):
    if not await resources.repository.delete_note(note_id):
        raise EntryNotFoundError("note", note_id)
    return ok_response(request, data={"success": True})
