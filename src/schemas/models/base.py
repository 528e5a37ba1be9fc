"""
공용 Pydantic 베이스 모델

- 파이썬 속성은 snake_case, 저장(JSON 레코드) 및 API 응답은 camelCase 키 사용
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_record(self) -> dict:
        """저장/응답용 camelCase dict"""
        return self.model_dump(mode="json", by_alias=True)
