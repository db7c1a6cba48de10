"""
File version chain manager.

Turns repeated uploads of one logical file into an ordered version history
("v1", "v2", ...). The blob is written before the version row is committed,
so a committed FileVersion always points at a stored blob. Label assignment
is guarded by the unique (file_id, version_number) constraint: a writer that
loses the race rolls back, re-reads the count and tries the next number.
Identical content is not deduplicated; every upload adds a version.
"""
import hashlib
import logging
import mimetypes
import os
import re
import uuid
from dataclasses import dataclass
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import (
    FileNotFound,
    NotFound,
    PayloadTooLarge,
    StorageError,
    UnsupportedType,
)
from app.crud import file_crud, file_version_crud
from app.model.file import File
from app.model.file_version import FileVersion
from app.model.base import utcnow
from app.service.membership import MembershipService
from app.storage import BlobStore

logger = logging.getLogger(__name__)

GENERIC_MIME_TYPES = {"", "application/octet-stream", "binary/octet-stream"}

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def sanitize_filename(filename: str) -> str:
    """Basename reduced to [A-Za-z0-9._-]; never empty, never hidden."""
    base = os.path.basename((filename or "").replace("\\", "/"))
    stem, ext = os.path.splitext(base)
    stem = _UNSAFE_CHARS.sub("_", stem).strip("._") or "file"
    ext = _UNSAFE_CHARS.sub("", ext.lower())
    return f"{stem[:120]}{ext}"


def version_label(number: int) -> str:
    return f"v{number}"


def content_hash(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def download_url(version: FileVersion) -> str:
    return f"/api/files/versions/{version.id}/download"


@dataclass
class UploadCheck:
    extension: str
    mime_type: str


def check_upload(size: int, original_name: str, mime_type: Optional[str]) -> UploadCheck:
    """
    Validate size and type against the configured limits.

    Raises:
        PayloadTooLarge: size exceeds MAX_UPLOAD_BYTES
        UnsupportedType: extension not allowed, or MIME type neither allowed nor generic
    """
    if size > settings.MAX_UPLOAD_BYTES:
        limit_mb = settings.MAX_UPLOAD_BYTES / (1024 * 1024)
        raise PayloadTooLarge(f"File exceeds the maximum upload size of {limit_mb:g} MB.")
    ext = os.path.splitext(original_name or "")[1].lower()
    if ext not in settings.ALLOWED_UPLOAD_EXTENSIONS:
        raise UnsupportedType(f"File type '{ext or 'unknown'}' is not allowed.")
    mime = (mime_type or "").split(";", 1)[0].strip().lower()
    if mime in GENERIC_MIME_TYPES:
        mime = mimetypes.guess_type(f"file{ext}")[0] or "application/octet-stream"
    elif mime not in settings.ALLOWED_UPLOAD_MIME_TYPES:
        raise UnsupportedType(f"Content type '{mime}' is not allowed.")
    return UploadCheck(extension=ext, mime_type=mime)


class FileVersionService:
    """Create/update files in a room and read their version chains."""

    def __init__(self, db: Session, blob_store: BlobStore):
        self.db = db
        self.blob_store = blob_store
        self.membership = MembershipService(db)

    def create_or_update(
        self,
        room_id: uuid.UUID,
        uploader_id: uuid.UUID,
        blob: bytes,
        original_name: str,
        mime_type: Optional[str],
        target_file_id: Optional[uuid.UUID] = None,
        comment: Optional[str] = None,
    ) -> FileVersion:
        """
        Store a new file ("v1") or the next version of target_file_id.

        Raises:
            NotAMember, PayloadTooLarge, UnsupportedType, FileNotFound, StorageError
        """
        self.membership.require_member(uploader_id, room_id)
        check = check_upload(len(blob), original_name, mime_type)

        target: Optional[File] = None
        if target_file_id is not None:
            target = file_crud.get_in_room(self.db, room_id=room_id, file_id=target_file_id)
            if target is None:
                raise FileNotFound()

        safe_name = sanitize_filename(original_name)
        file_id = target.id if target is not None else uuid.uuid4()
        stored_name = f"{uuid.uuid4().hex[:12]}_{safe_name}"
        storage_key = f"rooms/{room_id}/files/{file_id}/{stored_name}"
        comment = (comment or "").strip() or None

        # Blob first: a failure here leaves no metadata behind
        self.blob_store.put(storage_key, blob, check.mime_type)

        row = {
            "file_id": file_id,
            "file_name": stored_name,
            "original_name": original_name,
            "size": len(blob),
            "mime_type": check.mime_type,
            "storage_key": storage_key,
            "comment": comment,
            "hash": content_hash(blob),
            "user_id": uploader_id,
        }
        try:
            version = self._commit_version(room_id, target, safe_name, original_name, row)
        except StorageError:
            self._discard_blob(storage_key)
            raise
        logger.info(
            f"File version committed: file={version.file_id} {version.version} "
            f"({version.size} bytes) by {uploader_id}"
        )
        return version

    def _commit_version(
        self,
        room_id: uuid.UUID,
        target: Optional[File],
        safe_name: str,
        original_name: str,
        row: dict,
    ) -> FileVersion:
        file_id = row["file_id"]
        for attempt in range(1, settings.VERSION_ASSIGN_ATTEMPTS + 1):
            try:
                if target is None:
                    file_crud.create_from_dict(
                        self.db,
                        obj_in={
                            "id": file_id,
                            "room_id": room_id,
                            "name": safe_name,
                            "original_name": original_name,
                        },
                        commit=False,
                    )
                    number = 1
                else:
                    number = file_version_crud.count_by_file(self.db, file_id=file_id) + 1
                    target.updated_at = utcnow()
                    self.db.add(target)
                version = file_version_crud.create_from_dict(
                    self.db,
                    obj_in={**row, "version": version_label(number), "version_number": number},
                    commit=False,
                )
                self.db.commit()
                self.db.refresh(version)
                return version
            except IntegrityError as e:
                self.db.rollback()
                if target is None:
                    logger.exception("Failed to create file %s: %s", file_id, e)
                    raise StorageError("Failed to save file. Please try again.")
                logger.warning(
                    "Version label conflict on file %s (attempt %d), retrying", file_id, attempt
                )
                target = file_crud.get_in_room(self.db, room_id=room_id, file_id=file_id)
                if target is None:
                    raise StorageError("File was removed during upload.")
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.exception("Failed to save file version: %s", e)
                raise StorageError("Failed to save file. Please try again.")
        raise StorageError("Could not assign a version label. Please try again.")

    def _discard_blob(self, storage_key: str) -> None:
        try:
            self.blob_store.delete(storage_key)
        except StorageError as e:
            logger.warning("Orphan blob left at %s: %s", storage_key, e)

    def list_files(self, room_id: uuid.UUID) -> List[File]:
        """Files in a room, most recently updated first, with versions loaded."""
        return file_crud.list_by_room(self.db, room_id=room_id)

    def require_file_access(self, user_id: uuid.UUID, file_id: uuid.UUID) -> File:
        """The file, if it exists and user_id is a member of its room."""
        file = file_crud.get(self.db, file_id)
        if file is None:
            raise FileNotFound()
        self.membership.require_member(user_id, file.room_id)
        return file

    def list_versions(self, file_id: uuid.UUID) -> List[FileVersion]:
        """The canonical version history, ascending by version number."""
        return file_version_crud.list_by_file(self.db, file_id=file_id)

    def open_version(self, user_id: uuid.UUID, version_id: uuid.UUID) -> Tuple[FileVersion, bytes]:
        """Version metadata and payload for a download, membership-checked."""
        version = file_version_crud.get_by_id(self.db, version_id=version_id)
        if version is None:
            raise NotFound("File version")
        self.membership.require_member(user_id, version.file.room_id)
        if not version.storage_key:
            raise StorageError("File content is unavailable.")
        return version, self.blob_store.get(version.storage_key)
