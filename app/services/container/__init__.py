from dataclasses import dataclass
from pathlib import Path

from app.connections.storage import AssetStore, S3AssetStore
from app.services.account_store import AccountStore
from app.services.channel import ChannelService
from app.services.media import MediaService
from app.services.password import PasswordHasher
from app.services.session import SessionService
from app.services.token import TokenService
from app.utils.config import Settings


@dataclass(frozen=True)
class ServiceContainer:
    """Services built once at startup and shared by every request."""
    config: Settings
    accounts: AccountStore
    media: MediaService
    sessions: SessionService
    channels: ChannelService


def build_services(config: Settings, asset_store: AssetStore | None = None) -> ServiceContainer:
    accounts = AccountStore()
    media = MediaService(
        asset_store=asset_store or S3AssetStore(config),
        store=accounts,
        upload_dir=Path(config.upload_dir),
    )
    sessions = SessionService(
        store=accounts,
        hasher=PasswordHasher(config),
        tokens=TokenService(config),
        media=media,
    )
    return ServiceContainer(
        config=config,
        accounts=accounts,
        media=media,
        sessions=sessions,
        channels=ChannelService(),
    )
