"""Blob storage for attachments and avatars: local filesystem or S3/MinIO."""

import hashlib
import json
import logging
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import UTC, datetime
from functools import lru_cache
from pathlib import Path

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from bugtracker.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class StoredObject:
    """A blob read back from storage, with the metadata needed to serve it."""

    key: str
    body: bytes
    content_type: str
    etag: str


@dataclass(frozen=True)
class BlobInfo:
    """Listing entry: key and last-modified time (UTC)."""

    key: str
    last_modified: datetime


class BlobStore:
    """Key-addressed binary object storage."""

    def put(self, key: str, data: bytes, content_type: str) -> None:
        raise NotImplementedError

    def get(self, key: str) -> StoredObject | None:
        """Return the object, or None when no object exists at key."""
        raise NotImplementedError

    def exists(self, key: str) -> bool:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError

    def list(self, prefix: str = "") -> Iterator[BlobInfo]:
        raise NotImplementedError


def _check_key(key: str) -> str:
    """Reject keys that are empty or could escape the storage namespace."""
    if not key or key.startswith("/") or "\\" in key:
        raise ValueError(f"Invalid storage key: {key!r}")
    if any(part in ("", ".", "..") for part in key.split("/")):
        raise ValueError(f"Invalid storage key: {key!r}")
    return key


class LocalBlobStore(BlobStore):
    """
    Filesystem-backed store for development and tests.

    Object bytes live under <root>/objects/<key>; content type and etag are kept
    in a JSON sidecar under <root>/meta/<key>.json.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)
        self._objects = self.root / "objects"
        self._meta = self.root / "meta"
        self._objects.mkdir(parents=True, exist_ok=True)
        self._meta.mkdir(parents=True, exist_ok=True)

    def _object_path(self, key: str) -> Path:
        return self._objects / _check_key(key)

    def _meta_path(self, key: str) -> Path:
        return self._meta / f"{_check_key(key)}.json"

    def put(self, key: str, data: bytes, content_type: str) -> None:
        path = self._object_path(key)
        meta_path = self._meta_path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        meta_path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        meta = {
            "content_type": content_type or DEFAULT_CONTENT_TYPE,
            "etag": f'"{hashlib.md5(data).hexdigest()}"',
        }
        meta_path.write_text(json.dumps(meta), encoding="utf-8")
        logger.debug("Stored blob key=%s bytes=%s", key, len(data))

    def get(self, key: str) -> StoredObject | None:
        path = self._object_path(key)
        if not path.is_file():
            return None
        body = path.read_bytes()
        meta_path = self._meta_path(key)
        if meta_path.is_file():
            meta = json.loads(meta_path.read_text(encoding="utf-8"))
        else:
            meta = {}
        return StoredObject(
            key=key,
            body=body,
            content_type=meta.get("content_type", DEFAULT_CONTENT_TYPE),
            etag=meta.get("etag") or f'"{hashlib.md5(body).hexdigest()}"',
        )

    def exists(self, key: str) -> bool:
        return self._object_path(key).is_file()

    def delete(self, key: str) -> None:
        self._object_path(key).unlink(missing_ok=True)
        self._meta_path(key).unlink(missing_ok=True)

    def list(self, prefix: str = "") -> Iterator[BlobInfo]:
        for path in sorted(self._objects.rglob("*")):
            if not path.is_file():
                continue
            key = path.relative_to(self._objects).as_posix()
            if not key.startswith(prefix):
                continue
            mtime = datetime.fromtimestamp(path.stat().st_mtime, tz=UTC)
            yield BlobInfo(key=key, last_modified=mtime)


class S3BlobStore(BlobStore):
    """S3 or MinIO bucket store (MinIO when an endpoint URL is configured)."""

    def __init__(
        self,
        bucket: str,
        region: str,
        endpoint_url: str | None = None,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
    ) -> None:
        self.bucket = bucket
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
            kwargs["config"] = Config(signature_version="s3v4", s3={"addressing_style": "path"})
        if access_key_id and secret_access_key:
            kwargs["aws_access_key_id"] = access_key_id
            kwargs["aws_secret_access_key"] = secret_access_key
        else:
            logger.info("S3 client using ambient credentials (IAM role or environment)")
        self._client = boto3.client("s3", **kwargs)

    def put(self, key: str, data: bytes, content_type: str) -> None:
        self._client.put_object(
            Bucket=self.bucket,
            Key=_check_key(key),
            Body=data,
            ContentType=content_type or DEFAULT_CONTENT_TYPE,
        )

    def get(self, key: str) -> StoredObject | None:
        try:
            response = self._client.get_object(Bucket=self.bucket, Key=_check_key(key))
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                return None
            raise
        return StoredObject(
            key=key,
            body=response["Body"].read(),
            content_type=response.get("ContentType") or DEFAULT_CONTENT_TYPE,
            etag=response.get("ETag", ""),
        )

    def exists(self, key: str) -> bool:
        try:
            self._client.head_object(Bucket=self.bucket, Key=_check_key(key))
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("NoSuchKey", "404", "NotFound"):
                return False
            raise
        return True

    def delete(self, key: str) -> None:
        self._client.delete_object(Bucket=self.bucket, Key=_check_key(key))

    def list(self, prefix: str = "") -> Iterator[BlobInfo]:
        paginator = self._client.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
            for item in page.get("Contents", []):
                yield BlobInfo(key=item["Key"], last_modified=item["LastModified"])


def build_blob_store(settings: Settings) -> BlobStore:
    """Construct the configured blob store backend."""
    if settings.BLOB_BACKEND == "s3":
        secret = settings.AWS_SECRET_ACCESS_KEY
        return S3BlobStore(
            bucket=settings.S3_BUCKET,
            region=settings.AWS_REGION,
            endpoint_url=settings.S3_ENDPOINT_URL,
            access_key_id=settings.AWS_ACCESS_KEY_ID,
            secret_access_key=secret.get_secret_value() if secret else None,
        )
    return LocalBlobStore(settings.BLOB_LOCAL_ROOT)


@lru_cache
def get_blob_store() -> BlobStore:
    """Dependency returning the process-wide blob store."""
    return build_blob_store(get_settings())
