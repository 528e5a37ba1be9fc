"""
Note 도메인 모델 (제목/본문/색상/고정/태그)
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator

from src.resources.service.business.utils.normalizer import (
    MAX_TAGS,
    is_normalized_tag,
    normalize_tag_list,
)
from .base import CamelModel


class NoteColor(str, Enum):
    default = "default"
    red = "red"
    blue = "blue"
    green = "green"
    yellow = "yellow"
    purple = "purple"


def _require_text(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("빈 문자열은 허용되지 않습니다")
    return value


class NoteBase(CamelModel):
    title: str = Field(..., max_length=500)
    content: str
    color: NoteColor = NoteColor.default
    is_pinned: bool = False
    tags: List[str] = Field(default_factory=list)

    @field_validator("title", "content")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        return _require_text(value)


class NoteCreate(NoteBase):
    @field_validator("tags")
    @classmethod
    def _normalize_tags(cls, value: List[str]) -> List[str]:
        return normalize_tag_list(value)


class NoteUpdate(CamelModel):
    title: Optional[str] = Field(None, max_length=500)
    content: Optional[str] = None
    color: Optional[NoteColor] = None
    is_pinned: Optional[bool] = None
    tags: Optional[List[str]] = None

    @field_validator("title", "content")
    @classmethod
    def _non_empty(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            raise ValueError("null 은 허용되지 않습니다")
        return _require_text(value)

    @field_validator("tags")
    @classmethod
    def _normalize_tags(cls, value: Optional[List[str]]) -> List[str]:
        if value is None:
            raise ValueError("null 은 허용되지 않습니다")
        return normalize_tag_list(value)


class Note(NoteBase):
    id: int = Field(..., gt=0)
    created_at: datetime
    updated_at: datetime

    @field_validator("tags")
    @classmethod
    def _check_tags(cls, value: List[str]) -> List[str]:
        if len(value) > MAX_TAGS or len(set(value)) != len(value):
            raise ValueError("태그 목록이 올바르지 않습니다 (중복 또는 상한 초과)")
        for tag in value:
            if not is_normalized_tag(tag):
                raise ValueError(f"정규화되지 않은 태그: {tag!r}")
        return value
