import logging
import mimetypes
from pathlib import Path
from typing import Protocol
from uuid import uuid4

import boto3
from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import BaseModel

from app.utils.config import Settings


logger = logging.getLogger(__name__)

_FALLBACK_CONTENT_TYPES = {
    "image": "image/jpeg",
    "video": "video/mp4",
}


class RemoteAsset(BaseModel):
    """Result of a successful upload: where the object is served and how to delete it."""
    url: str
    public_id: str


class AssetStoreError(Exception):
    """The remote asset store rejected or failed an operation."""


class AssetStore(Protocol):
    def upload(self, local_path: str | Path, resource_type: str = "auto") -> RemoteAsset: ...

    def delete(self, public_id: str) -> None: ...


class S3AssetStore:
    """Asset store backed by an S3-compatible bucket.

    Objects are keyed `<public_id><suffix>`; the public URL ends in that key, so
    the public id can be recovered from a stored URL.
    """

    def __init__(self, config: Settings, client=None) -> None:
        self.bucket = config.asset_bucket
        self.base_url = config.public_asset_base_url
        self._client = client or boto3.client(
            "s3",
            region_name=config.asset_region,
            endpoint_url=config.asset_endpoint_url,
            aws_access_key_id=config.asset_access_key_id,
            aws_secret_access_key=config.asset_secret_access_key,
        )

    def upload(self, local_path: str | Path, resource_type: str = "auto") -> RemoteAsset:
        path = Path(local_path)
        public_id = uuid4().hex
        key = f"{public_id}{path.suffix.lower()}"
        content_type = mimetypes.guess_type(path.name)[0] or _FALLBACK_CONTENT_TYPES.get(
            resource_type, "application/octet-stream"
        )
        try:
            self._client.upload_file(str(path), self.bucket, key, ExtraArgs={"ContentType": content_type})
        except (BotoCoreError, ClientError, S3UploadFailedError, OSError) as exc:
            raise AssetStoreError(f"Upload of {path.name} failed: {exc}") from exc
        return RemoteAsset(url=f"{self.base_url}/{key}", public_id=public_id)

    def delete(self, public_id: str) -> None:
        """Remove every object stored under `public_id`. Missing objects are not an error."""
        try:
            listing = self._client.list_objects_v2(Bucket=self.bucket, Prefix=public_id)
            keys = [
                obj["Key"] for obj in listing.get("Contents", [])
                if obj["Key"].split(".")[0] == public_id
            ]
            for key in keys:
                self._client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            raise AssetStoreError(f"Delete of {public_id} failed: {exc}") from exc
        if not keys:
            logger.info("No remote asset to delete", extra={"public_id": public_id})
