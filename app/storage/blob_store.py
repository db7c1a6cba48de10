"""
Blob store for file version payloads, addressed by storage key.
S3 when S3_BUCKET_NAME is set, otherwise a local directory under UPLOAD_DIR.
Every failure surfaces as StorageError.
"""
import logging
import os
from typing import Optional

from botocore.exceptions import BotoCoreError, ClientError

from app.aws.s3 import delete_from_s3, download_from_s3, upload_to_s3
from app.core.config import settings
from app.core.exceptions import StorageError

logger = logging.getLogger(__name__)


class BlobStore:
    """Interface: put, get, delete by key."""

    def put(self, key: str, data: bytes, content_type: str) -> None:
        raise NotImplementedError

    def get(self, key: str) -> bytes:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


class LocalBlobStore(BlobStore):
    def __init__(self, root: str):
        self.root = os.path.abspath(root)

    def _path(self, key: str) -> str:
        path = os.path.abspath(os.path.join(self.root, key))
        if not path.startswith(self.root + os.sep):
            raise StorageError("Invalid storage key.")
        return path

    def put(self, key: str, data: bytes, content_type: str) -> None:
        path = self._path(key)
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            # Write then rename so a failed write never leaves a partial blob
            tmp_path = f"{path}.part"
            with open(tmp_path, "wb") as f:
                f.write(data)
            os.replace(tmp_path, path)
        except OSError as e:
            logger.exception("Local blob write failed for key=%s", key)
            raise StorageError("Failed to store file. Please try again.") from e
        logger.debug("Stored blob key=%s (%d bytes)", key, len(data))

    def get(self, key: str) -> bytes:
        try:
            with open(self._path(key), "rb") as f:
                return f.read()
        except OSError as e:
            logger.exception("Local blob read failed for key=%s", key)
            raise StorageError("Failed to read file.") from e

    def delete(self, key: str) -> None:
        try:
            os.remove(self._path(key))
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageError("Failed to delete file.") from e


class S3BlobStore(BlobStore):
    def __init__(self, bucket: Optional[str] = None):
        self.bucket = bucket or settings.S3_BUCKET_NAME

    def put(self, key: str, data: bytes, content_type: str) -> None:
        try:
            upload_to_s3(key=key, body=data, content_type=content_type, bucket=self.bucket)
        except (BotoCoreError, ClientError) as e:
            logger.exception("S3 put failed for key=%s", key)
            raise StorageError("Failed to store file. Please try again.") from e

    def get(self, key: str) -> bytes:
        try:
            return download_from_s3(key, bucket=self.bucket)
        except (BotoCoreError, ClientError) as e:
            logger.exception("S3 get failed for key=%s", key)
            raise StorageError("Failed to read file.") from e

    def delete(self, key: str) -> None:
        try:
            delete_from_s3(key, bucket=self.bucket)
        except (BotoCoreError, ClientError) as e:
            raise StorageError("Failed to delete file.") from e


def get_blob_store() -> BlobStore:
    """FastAPI dependency / factory for the configured blob store."""
    if settings.use_s3:
        return S3BlobStore()
    return LocalBlobStore(settings.UPLOAD_DIR)
