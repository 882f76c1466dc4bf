"""Test doubles and small builders shared across test modules."""

from pathlib import Path

from app.connections.storage import AssetStoreError, RemoteAsset


PASSWORD = "longpassword1"


class FakeAssetStore:
    """In-memory asset store recording every call.

    Uploaded files are read at upload time so tests can check that staging
    cleanup happens afterwards.
    """

    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}
        self.deleted: list[str] = []
        self.calls: list[tuple[str, str]] = []
        self.fail_uploads = False
        self.rejected_names: set[str] = set()
        self.fail_deletes = False

    def upload(self, local_path, resource_type: str = "auto") -> RemoteAsset:
        path = Path(local_path)
        self.calls.append(("upload", path.name))
        if self.fail_uploads or path.name in self.rejected_names:
            raise AssetStoreError("upload rejected")
        public_id = f"asset{len(self.calls)}"
        self.objects[public_id] = path.read_bytes()
        return RemoteAsset(url=f"https://store/{public_id}{path.suffix}", public_id=public_id)

    def delete(self, public_id: str) -> None:
        self.calls.append(("delete", public_id))
        self.deleted.append(public_id)
        if self.fail_deletes:
            raise AssetStoreError("delete rejected")
        self.objects.pop(public_id, None)


def write_image(directory: Path, name: str = "avatar.png", content: bytes = b"\x89PNG-data") -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_bytes(content)
    return path
