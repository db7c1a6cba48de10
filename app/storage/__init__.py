from app.storage.blob_store import (
    BlobStore,
    LocalBlobStore,
    S3BlobStore,
    get_blob_store,
)

__all__ = ["BlobStore", "LocalBlobStore", "S3BlobStore", "get_blob_store"]
