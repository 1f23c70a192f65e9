# Overview: Blob storage for uploaded images (MinIO / S3 compatible).

from __future__ import annotations

import io
import mimetypes
import os
from dataclasses import dataclass

from minio import Minio
from minio.error import S3Error
from urllib3.exceptions import HTTPError

from .errors import NotFoundError, StorageError
from .identifiers import new_uuid

_MISSING_CODES = {"NoSuchKey", "NoSuchBucket", "NoSuchObject"}


@dataclass
class StoredObject:
    name: str
    data: bytes
    content_type: str
    etag: str

    @property
    def extension(self) -> str:
        _, ext = os.path.splitext(self.name)
        return ext.lstrip(".")


def object_name_for(filename: str | None, content_type: str | None) -> str:
    """Fresh, collision-free object name that keeps the upload's extension."""
    ext = ""
    if filename:
        ext = os.path.splitext(filename)[1].lower()
    if not ext and content_type:
        ext = mimetypes.guess_extension(content_type) or ""
    return f"{new_uuid()}{ext}"


class BlobStorage:
    """
    Thin wrapper over a Minio client bound to one bucket.

    Only two operations are used by the API: get() and put(). Tests swap
    this object for an in-memory fake exposing the same methods.
    """

    def __init__(self, client: Minio, bucket: str):
        self.client = client
        self.bucket = bucket

    @classmethod
    def from_config(cls, config) -> "BlobStorage":
        client = Minio(
            config["MINIO_ENDPOINT"],
            access_key=config["MINIO_ACCESS_KEY"],
            secret_key=config["MINIO_SECRET_KEY"],
            secure=bool(config["MINIO_SECURE"]),
        )
        return cls(client, config["MINIO_BUCKET"])

    def get(self, name: str) -> StoredObject:
        try:
            stat = self.client.stat_object(self.bucket, name)
            response = self.client.get_object(self.bucket, name)
        except S3Error as e:
            if e.code in _MISSING_CODES:
                raise NotFoundError("File not found") from e
            raise StorageError(f"Failed to read {name}: {e.code}") from e
        except HTTPError as e:
            raise StorageError(f"Blob store unreachable reading {name}") from e
        try:
            data = response.read()
        except HTTPError as e:
            raise StorageError(f"Blob store connection lost reading {name}") from e
        finally:
            response.close()
            response.release_conn()

        return StoredObject(
            name=name,
            data=data,
            content_type=stat.content_type or "application/octet-stream",
            etag=(stat.etag or "").strip('"'),
        )

    def put(self, name: str, data: bytes, content_type: str) -> str:
        try:
            self.client.put_object(
                self.bucket,
                name,
                io.BytesIO(data),
                length=len(data),
                content_type=content_type,
            )
        except (S3Error, HTTPError) as e:
            raise StorageError(f"Failed to write {name}") from e
        return name
