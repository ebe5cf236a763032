# vertragsdb/services/storage.py
import os
import re
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import boto3
from botocore.config import Config
from vertragsdb.config import settings
import structlog

logger = structlog.get_logger()

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def build_document_key(contract_id: int, filename: Optional[str]) -> str:
    """contracts/<id>/<timestamp>_<uuid>_<sanitized name>"""
    safe_name = _UNSAFE_CHARS.sub("_", os.path.basename(filename or "")) or "document"
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
    return f"contracts/{contract_id}/{stamp}_{uuid.uuid4().hex[:8]}_{safe_name}"


class LocalStorage:
    """Stores documents below a directory on the local filesystem."""

    def __init__(self, root: str):
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root.resolve() not in path.parents:
            raise ValueError(f"Key escapes storage root: {key}")
        return path

    def upload(
        self, file_bytes: bytes, key: str, content_type: str = "application/pdf"
    ) -> str:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(file_bytes)
        logger.info("local_uploaded", key=key, size=len(file_bytes))
        return key

    def download(self, key: str) -> bytes:
        return self._path(key).read_bytes()

    def delete(self, key: str):
        self._path(key).unlink(missing_ok=True)
        logger.info("local_deleted", key=key)

    def ping(self):
        self.root.mkdir(parents=True, exist_ok=True)


class R2Client:
    """Cloudflare R2 (S3 API) backend."""

    def __init__(self):
        self._s3 = None
        self.bucket = settings.R2_BUCKET_NAME

    @property
    def s3(self):
        if self._s3 is None:
            self._s3 = boto3.client(
                "s3",
                endpoint_url=settings.R2_ENDPOINT_URL,
                aws_access_key_id=settings.R2_ACCESS_KEY_ID,
                aws_secret_access_key=settings.R2_SECRET_ACCESS_KEY,
                config=Config(signature_version="s3v4"),
                region_name="auto",
            )
        return self._s3

    def upload(
        self, file_bytes: bytes, key: str, content_type: str = "application/pdf"
    ) -> str:
        self.s3.put_object(
            Bucket=self.bucket, Key=key, Body=file_bytes, ContentType=content_type
        )
        logger.info("r2_uploaded", key=key, size=len(file_bytes))
        return key

    def download(self, key: str) -> bytes:
        return self.s3.get_object(Bucket=self.bucket, Key=key)["Body"].read()

    def delete(self, key: str):
        self.s3.delete_object(Bucket=self.bucket, Key=key)
        logger.info("r2_deleted", key=key)

    def ping(self):
        self.s3.head_bucket(Bucket=self.bucket)


def _build_storage():
    if settings.STORAGE_BACKEND == "r2":
        return R2Client()
    return LocalStorage(settings.UPLOAD_DIR)


storage = _build_storage()


def get_storage():
    """FastAPI dependency: the configured document storage backend."""
    return storage
