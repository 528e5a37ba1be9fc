"""
File 도메인 모델 (파일/폴더 계층 레코드)
"""

from datetime import datetime
from typing import Optional

from pydantic import ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from .base import CamelModel


FOLDER_MIME_TYPE = "application/folder"


class FileMetadata(CamelModel):
    """
    파일 부가 메타데이터 (PDF 페이지 수, 작성자 등)

    알려진 키: pages, title, author, wordCount. 추출 로직이 확장될 수 있으므로
    그 외 키도 그대로 보존합니다.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    pages: Optional[int] = None
    title: Optional[str] = None
    author: Optional[str] = None
    word_count: Optional[int] = None


class FileBase(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    original_name: str = Field(..., min_length=1, max_length=255)
    path: str
    size: int = Field(0, ge=0)
    mime_type: str = Field(..., min_length=1, max_length=255)
    is_folder: bool = False
    parent_id: Optional[int] = Field(None, gt=0)
    metadata: Optional[FileMetadata] = None

    @model_validator(mode="after")
    def _check_folder_shape(self):
        # 폴더는 가상 엔트리: 물리 경로/크기 없음
        if self.is_folder and (self.path != "" or self.size != 0):
            raise ValueError("폴더 엔트리는 path가 비어 있고 size가 0이어야 합니다")
        return self


class FileCreate(FileBase):
    pass


class FileUpdate(CamelModel):
    """
    API 수정 요청 (표시 이름, 부모 폴더, 메타데이터만 허용)

    name/path/size 는 Blob 저장소만 변경한다.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    original_name: Optional[str] = Field(None, min_length=1, max_length=255)
    parent_id: Optional[int] = Field(None, gt=0)
    metadata: Optional[FileMetadata] = None


class FileRecordUpdate(CamelModel):
    """저장소 내부 수정 (Blob 재배치 시 path 포함)"""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    original_name: Optional[str] = Field(None, min_length=1, max_length=255)
    path: Optional[str] = None
    size: Optional[int] = Field(None, ge=0)
    mime_type: Optional[str] = Field(None, min_length=1, max_length=255)
    parent_id: Optional[int] = Field(None, gt=0)
    metadata: Optional[FileMetadata] = None


class File(FileBase):
    id: int = Field(..., gt=0)
    upload_date: datetime
    last_modified: datetime
