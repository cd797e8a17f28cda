"""
storage.py - blob area for uploaded images.

Blobs are addressed by the opaque stored name of a File record. Local disk is
the default; with USE_MINIO=true blobs go to an S3-compatible bucket and local
disk stays as the fallback.
"""

import os
import logging
import boto3
from botocore.exceptions import BotoCoreError, ClientError
from botocore.config import Config

import config

logger = logging.getLogger(__name__)


def _get_s3_client():
    return boto3.client(
        "s3",
        endpoint_url=config.MINIO_ENDPOINT,
        aws_access_key_id=config.MINIO_ACCESS_KEY,
        aws_secret_access_key=config.MINIO_SECRET_KEY,
        config=Config(
            signature_version="s3v4",
            connect_timeout=5,
            read_timeout=30,
            retries={"max_attempts": 3, "mode": "standard"},
        ),
        region_name="us-east-1",
    )


def _ensure_bucket(s3_client, bucket: str):
    try:
        s3_client.head_bucket(Bucket=bucket)
    except ClientError as e:
        if e.response["Error"]["Code"] == "404":
            s3_client.create_bucket(Bucket=bucket)
            logger.info(f"Created MinIO bucket: {bucket}")
        else:
            raise


class StorageBackend:

    def __init__(self, upload_dir: str = None, use_minio: bool = None):
        self.upload_dir = upload_dir or config.UPLOAD_DIR
        self.bucket = config.MINIO_BUCKET
        self._use_minio = config.USE_MINIO if use_minio is None else use_minio
        self._minio_available = False
        self._s3 = None
        os.makedirs(self.upload_dir, exist_ok=True)
        if self._use_minio:
            self._init_minio()

    def _init_minio(self):
        try:
            self._s3 = _get_s3_client()
            _ensure_bucket(self._s3, self.bucket)
            self._minio_available = True
            logger.info(f"MinIO connected: {config.MINIO_ENDPOINT} / bucket={self.bucket}")
        except (BotoCoreError, ClientError) as e:
            logger.warning(f"MinIO unavailable ({e}). Falling back to local disk.")
            self._minio_available = False

    @property
    def backend_name(self) -> str:
        return "MinIO" if self._minio_available else "LocalDisk"

    def _path(self, key: str) -> str:
        # Stored names are generated server-side; refuse anything path-like anyway
        if not key or os.path.basename(key) != key or key in (".", ".."):
            raise ValueError(f"Invalid blob key: {key!r}")
        return os.path.join(self.upload_dir, key)

    def put(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> None:
        if self._minio_available:
            try:
                self._s3.put_object(Bucket=self.bucket, Key=key, Body=data, ContentType=content_type)
                return
            except (BotoCoreError, ClientError) as e:
                logger.error(f"MinIO PUT failed for {key}: {e}. Falling back to disk.")

        with open(self._path(key), "wb") as f:
            f.write(data)

    def get(self, key: str):
        """Blob bytes, or None when the blob does not exist."""
        if self._minio_available:
            try:
                response = self._s3.get_object(Bucket=self.bucket, Key=key)
                return response["Body"].read()
            except ClientError as e:
                if e.response["Error"]["Code"] not in ("NoSuchKey", "404"):
                    logger.error(f"MinIO GET failed for {key}: {e}")
            except BotoCoreError as e:
                logger.error(f"MinIO GET error for {key}: {e}")

        path = self._path(key)
        try:
            with open(path, "rb") as f:
                return f.read()
        except FileNotFoundError:
            return None

    def delete(self, key: str) -> bool:
        """Unlink a blob. Returns False if nothing was there; raises OSError on real failures."""
        removed = False
        if self._minio_available:
            try:
                self._s3.delete_object(Bucket=self.bucket, Key=key)
                removed = True
            except (BotoCoreError, ClientError) as e:
                logger.error(f"MinIO DELETE failed for {key}: {e}")

        try:
            os.remove(self._path(key))
            removed = True
        except FileNotFoundError:
            pass
        return removed

    def exists(self, key: str) -> bool:
        if self._minio_available:
            try:
                self._s3.head_object(Bucket=self.bucket, Key=key)
                return True
            except (BotoCoreError, ClientError):
                pass
        return os.path.exists(self._path(key))

    def get_health(self) -> dict:
        if not self._use_minio:
            return {"status": "local_disk", "backend": "LocalDisk"}
        if self._minio_available:
            try:
                self._s3.head_bucket(Bucket=self.bucket)
                return {"status": "healthy", "backend": "MinIO", "endpoint": config.MINIO_ENDPOINT}
            except (BotoCoreError, ClientError) as e:
                return {"status": "degraded", "backend": "MinIO", "error": str(e)}
        return {"status": "fallback", "backend": self.backend_name}


_storage = None


def get_storage() -> StorageBackend:
    """Dependency - process-wide storage backend, created on first use."""
    global _storage
    if _storage is None:
        _storage = StorageBackend()
    return _storage
