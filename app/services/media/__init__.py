import logging
import shutil
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator
from urllib.parse import urlparse
from uuid import uuid4

from fastapi import UploadFile

from app.connections.storage import AssetStore, AssetStoreError, RemoteAsset
from app.models.user import Account
from app.services.account_store import AccountStore
from app.utils.base import MediaField
from app.utils.errors import InvalidInputError, UploadError


logger = logging.getLogger(__name__)


def public_id_from_url(url: str) -> str | None:
    """Recover the asset id from its URL: last path segment up to the first dot."""
    name = urlparse(url).path.rstrip("/").split("/")[-1]
    return name.split(".")[0] or None


def discard_local_file(path: str | Path | None) -> None:
    if path is None:
        return
    try:
        Path(path).unlink(missing_ok=True)
    except OSError:
        logger.warning("Could not remove staged file", exc_info=True, extra={"path": str(path)})


class MediaService:
    """Moves staged uploads into the remote asset store and onto account records.

    Staged files never outlive the call that uploads them. Replacing an asset
    is best-effort: the previous remote object is deleted before the new one
    is uploaded, and neither step is atomic with the record update.
    """

    def __init__(self, asset_store: AssetStore, store: AccountStore, upload_dir: str | Path) -> None:
        self.asset_store = asset_store
        self.store = store
        self.upload_dir = Path(upload_dir)

    @contextmanager
    def staged(self, upload: UploadFile | None) -> Iterator[Path | None]:
        """Write an incoming upload under `upload_dir` and remove it on exit."""
        if upload is None or not upload.filename:
            yield None
            return

        self.upload_dir.mkdir(parents=True, exist_ok=True)
        path = self.upload_dir / f"{uuid4().hex}{Path(upload.filename).suffix.lower()}"
        try:
            with path.open("wb") as buffer:
                shutil.copyfileobj(upload.file, buffer)
            yield path
        finally:
            discard_local_file(path)

    def upload_and_attach(self, local_path: str | Path | None, resource_type: str = "auto") -> RemoteAsset | None:
        """Upload a staged file, always removing it afterwards.

        Returns None when there is nothing to upload or the upload failed;
        the caller decides whether that is fatal.
        """
        if not local_path:
            return None
        try:
            return self.asset_store.upload(local_path, resource_type=resource_type)
        except AssetStoreError:
            logger.exception("Upload to asset store failed", extra={"path": str(local_path)})
            return None
        finally:
            discard_local_file(local_path)

    def delete_remote(self, url: str | None) -> None:
        """Best-effort delete of the asset behind `url`; failures are logged only."""
        if not url:
            return
        public_id = public_id_from_url(url)
        if not public_id:
            return
        try:
            self.asset_store.delete(public_id)
        except AssetStoreError:
            logger.warning("Could not delete superseded asset", exc_info=True, extra={"public_id": public_id})

    def replace_asset(self, account: Account, local_path: str | Path | None, field: MediaField) -> dict:
        label = field.label
        if not local_path:
            raise InvalidInputError(f"{label} file is missing.")

        self.delete_remote(getattr(account, field.value))

        asset = self.upload_and_attach(local_path, resource_type="image")
        if asset is None or not asset.url:
            raise UploadError(f"Error while uploading {label.lower()}")

        logger.info("Replaced %s", field.value, extra={"account_id": str(account.id)})
        return self.store.update_fields(account.id, {field.value: asset.url})
