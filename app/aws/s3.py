"""
S3 helpers for file version blobs.
"""
import logging
from typing import Optional

from app.aws.client import get_aws_client
from app.core.config import settings

logger = logging.getLogger(__name__)


def get_s3_client():
    """S3 client for the configured region."""
    return get_aws_client("s3", region_name=settings.s3_region)


def _bucket(bucket: Optional[str]) -> str:
    b = bucket or settings.S3_BUCKET_NAME
    if not b:
        raise ValueError("S3_BUCKET_NAME not configured")
    return b


def upload_to_s3(
    key: str,
    body: bytes,
    content_type: str,
    bucket: Optional[str] = None,
) -> None:
    """
    Store bytes under key. No ACLs; access goes through the download endpoint.

    Args:
        key: S3 object key (e.g. rooms/<room_id>/files/<file_id>/<name>)
        body: File bytes
        content_type: MIME type
        bucket: Override bucket; defaults to settings.S3_BUCKET_NAME
    """
    client = get_s3_client()
    client.put_object(
        Bucket=_bucket(bucket),
        Key=key,
        Body=body,
        ContentType=content_type,
    )
    logger.info(f"Uploaded S3 key={key} ({len(body)} bytes)")


def download_from_s3(key: str, bucket: Optional[str] = None) -> bytes:
    client = get_s3_client()
    response = client.get_object(Bucket=_bucket(bucket), Key=key)
    return response["Body"].read()


def delete_from_s3(key: str, bucket: Optional[str] = None) -> None:
    client = get_s3_client()
    client.delete_object(Bucket=_bucket(bucket), Key=key)
    logger.info(f"Deleted S3 key={key}")
