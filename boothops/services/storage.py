"""Cloudflare R2 object storage for uploaded files"""

import logging
import uuid

import boto3
from botocore.config import Config

from ..config import R2_ACCESS_KEY_ID, R2_ACCOUNT_ID, R2_BUCKET_NAME, R2_SECRET_ACCESS_KEY

logger = logging.getLogger(__name__)


def get_r2_client():
    """Create and return an R2 client."""
    return boto3.client(
        "s3",
        endpoint_url=f"https://{R2_ACCOUNT_ID}.r2.cloudflarestorage.com",
        aws_access_key_id=R2_ACCESS_KEY_ID,
        aws_secret_access_key=R2_SECRET_ACCESS_KEY,
        config=Config(signature_version="s3v4"),
    )


def build_object_key(prefix: str, filename: str) -> str:
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else "bin"
    return f"{prefix}/{uuid.uuid4()}.{ext}"


def upload_bytes(key: str, content: bytes, content_type: str) -> str:
    r2 = get_r2_client()
    try:
        r2.put_object(Bucket=R2_BUCKET_NAME, Key=key, Body=content, ContentType=content_type)
        logger.info(f"✅ Uploaded {key} to R2 ({len(content)} bytes)")
        return key
    except Exception as e:
        logger.error(f"❌ Failed to upload {key} to R2: {e}")
        raise

