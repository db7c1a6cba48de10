"""
Files API: list a room's files, upload new files or new versions, read a
version chain and download a version.
"""
import logging
import uuid
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status
from sqlalchemy.orm import Session

from app.chat.gateway import ConnectionGateway
from app.core.config import settings
from app.core.database import get_db
from app.core.dependencies import current_user_id, get_gateway
from app.model.file import File as FileModel
from app.model.file_version import FileVersion
from app.schema.auth import UserInfo
from app.schema.file import FileListResponse, FileSummary, FileVersionListResponse, FileVersionResponse
from app.schema.ws import FILE_NOTIFICATION, FileNotificationPayload
from app.service.file_versions import FileVersionService, download_url
from app.service.membership import MembershipService
from app.service.notification_service import NotificationService
from app.storage import BlobStore, get_blob_store

router = APIRouter()
logger = logging.getLogger(__name__)

# Types served inline when ?inline=1 is set
PREVIEWABLE_MIME_TYPES = {
    "application/pdf",
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "text/plain",
}


def _version_response(version: FileVersion) -> FileVersionResponse:
    return FileVersionResponse(
        id=version.id,
        file_id=version.file_id,
        version=version.version,
        file_name=version.file_name,
        original_name=version.original_name,
        file_size=version.size,
        mime_type=version.mime_type,
        comment=version.comment,
        hash=version.hash,
        created_at=version.created_at,
        download_url=download_url(version),
        user=UserInfo.model_validate(version.user) if version.user else None,
    )


def _file_summary(file: FileModel) -> FileSummary:
    versions = file.versions
    latest = max(versions, key=lambda v: v.version_number) if versions else None
    return FileSummary(
        id=file.id,
        room_id=file.room_id,
        name=file.name,
        original_name=file.original_name,
        created_at=file.created_at,
        updated_at=file.updated_at,
        total_versions=len(versions),
        latest_version=_version_response(latest) if latest else None,
    )


@router.get("", response_model=FileListResponse)
async def list_files(
    room_id: uuid.UUID = Query(..., alias="roomId"),
    user_id: uuid.UUID = Depends(current_user_id),
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
):
    """Files in the room with version count and latest version."""
    MembershipService(db).require_member(user_id, room_id)
    files = FileVersionService(db, blob_store).list_files(room_id)
    return FileListResponse(items=[_file_summary(f) for f in files])


@router.post("/upload", response_model=FileVersionResponse, status_code=status.HTTP_201_CREATED)
async def upload_file(
    file: UploadFile = File(...),
    room_id: uuid.UUID = Form(..., alias="roomId"),
    file_id: Optional[uuid.UUID] = Form(None, alias="fileId"),
    comment: Optional[str] = Form(None, max_length=2000),
    user_id: uuid.UUID = Depends(current_user_id),
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
    gateway: ConnectionGateway = Depends(get_gateway),
):
    """
    Upload a new file (no fileId) or a new version of an existing file.
    Notifies the room over WebSocket and writes notifications for other members.
    """
    # One byte past the limit is enough to reject without buffering the rest
    blob = await file.read(settings.MAX_UPLOAD_BYTES + 1)
    service = FileVersionService(db, blob_store)
    version = service.create_or_update(
        room_id,
        user_id,
        blob,
        original_name=file.filename or "upload",
        mime_type=file.content_type,
        target_file_id=file_id,
        comment=comment,
    )
    stored = version.file
    gateway.connections.publish(
        room_id,
        FILE_NOTIFICATION,
        FileNotificationPayload(
            file_id=stored.id,
            file_name=stored.original_name,
            version=version.version,
            user_id=user_id,
            room_id=room_id,
        ).model_dump(mode="json", by_alias=True),
    )
    uploader_name = version.user.name if version.user else ""
    NotificationService(db).notify_file_upload(stored, version, uploader_name)
    return _version_response(version)


@router.get("/{file_id}/versions", response_model=FileVersionListResponse)
async def list_versions(
    file_id: uuid.UUID,
    user_id: uuid.UUID = Depends(current_user_id),
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
):
    """Version history of one file, oldest first."""
    service = FileVersionService(db, blob_store)
    service.require_file_access(user_id, file_id)
    return FileVersionListResponse(
        file_id=file_id,
        items=[_version_response(v) for v in service.list_versions(file_id)],
    )


@router.get("/versions/{version_id}/download")
async def download_version(
    version_id: uuid.UUID,
    inline: bool = False,
    user_id: uuid.UUID = Depends(current_user_id),
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
):
    """Version payload; ?inline=1 asks for inline display of previewable types."""
    version, data = FileVersionService(db, blob_store).open_version(user_id, version_id)
    kind = "inline" if inline and version.mime_type in PREVIEWABLE_MIME_TYPES else "attachment"
    disposition = f"{kind}; filename*=UTF-8''{quote(version.original_name)}"
    return Response(
        content=data,
        media_type=version.mime_type,
        headers={"Content-Disposition": disposition},
    )
