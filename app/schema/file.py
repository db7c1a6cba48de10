"""
File and file version schemas.
"""
from datetime import datetime
from typing import List, Optional
import uuid

from app.schema.auth import UserInfo
from app.schema.base import CamelModel


class FileVersionResponse(CamelModel):
    id: uuid.UUID
    file_id: uuid.UUID
    version: str
    file_name: str
    original_name: str
    file_size: int
    mime_type: str
    comment: Optional[str] = None
    hash: str
    created_at: datetime
    download_url: str
    user: Optional[UserInfo] = None


class FileSummary(CamelModel):
    """File row for listing UIs: version count plus latest version metadata."""
    id: uuid.UUID
    room_id: uuid.UUID
    name: str
    original_name: str
    created_at: datetime
    updated_at: datetime
    total_versions: int
    latest_version: Optional[FileVersionResponse] = None


class FileListResponse(CamelModel):
    items: List[FileSummary]


class FileVersionListResponse(CamelModel):
    file_id: uuid.UUID
    items: List[FileVersionResponse]
