from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import List, Optional
from datetime import datetime


class CamelModel(BaseModel):
    """JSON on the wire is camelCase; Python attributes stay snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class AdminLogin(BaseModel):
    username: str
    password: str


class Token(BaseModel):
    token: str


class ShareCreate(CamelModel):
    name: str = ""
    password: str = ""
    expires_at: Optional[datetime] = None


# password_hash is deliberately absent from every Share schema
class ShareOut(CamelModel):
    id: str
    name: str
    expires_at: Optional[datetime] = None
    created_at: datetime


class FileOut(CamelModel):
    id: str
    share_id: str
    stored_name: str
    original_name: str
    mime_type: str
    size: int
    created_at: datetime


class ShareDetail(ShareOut):
    files: List[FileOut] = []


class ShareVerify(CamelModel):
    share_id: str
    password: str = ""


class ShareAccess(CamelModel):
    token: str
    share_name: str


class UploadResult(CamelModel):
    message: str
    files: List[FileOut]


class Message(BaseModel):
    message: str
