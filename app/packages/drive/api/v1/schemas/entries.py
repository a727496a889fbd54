"""文件/文件夹条目的请求与响应模型。"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.packages.drive.api.v1.schemas.common import ResponseEnvelope


class EntryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    is_folder: bool = False
    parent_id: Optional[str] = None
    # 以下字段仅对文件有意义，目录会被强制为默认值
    size_bytes: Optional[int] = Field(None, ge=0)
    mime_type: Optional[str] = Field(None, max_length=255)
    storage_url: Optional[str] = None


class RenameBody(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class MoveBody(BaseModel):
    # None 表示移动到根目录
    parent_id: Optional[str] = None


class StarBody(BaseModel):
    starred: bool


class EntryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    path: str
    size_bytes: int
    mime_type: str
    storage_url: str
    owner_id: str
    parent_id: Optional[str] = None
    is_folder: bool
    is_starred: bool
    is_deleted: bool
    created_at: datetime
    updated_at: datetime


class PurgeResult(BaseModel):
    id: str
    purged: int


EntryResponse = ResponseEnvelope[EntryOut]
EntryListResponse = ResponseEnvelope[list[EntryOut]]
EntryMutationResponse = ResponseEnvelope[dict]
PurgeResponse = ResponseEnvelope[PurgeResult]
