from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "vidtube-accounts"
    debug: bool = False
    log_level: str = "INFO"

    mongo_port: int = 27017
    mongo_host: str = "localhost"
    mongo_db: str = "vidtube"
    mongo_srv: bool = False
    mongo_password: str | None = None
    mongo_user: str | None = None

    jwt_algorithm: str = "HS256"
    access_token_secret: str = "access-secret-key"
    access_token_expires_minutes: int = 15
    refresh_token_secret: str = "refresh-secret-key"
    refresh_token_expires_days: int = 10

    bcrypt_rounds: int = 10

    asset_bucket: str = "vidtube-media"
    asset_region: str = "us-east-1"
    asset_endpoint_url: str | None = None
    asset_access_key_id: str | None = None
    asset_secret_access_key: str | None = None
    asset_public_base_url: str | None = None

    upload_dir: str = "public/temp"

    cors_origins: list[str] = ["http://localhost:3000"]
    max_body_bytes: int = 16 * 1024
    cookie_secure: bool = True

    model_config = SettingsConfigDict(env_file=(".env",), case_sensitive=True, frozen=True)

    @property
    def mongo_uri(self) -> str:
        auth = ""
        if self.mongo_user and self.mongo_password:
            auth = f"{self.mongo_user}:{self.mongo_password}@"
        if self.mongo_srv:
            params = "?retryWrites=true&w=majority"
            return f"mongodb+srv://{auth}{self.mongo_host}/{self.mongo_db}{params}"
        return f"mongodb://{auth}{self.mongo_host}:{self.mongo_port}/{self.mongo_db}"

    @property
    def public_asset_base_url(self) -> str:
        if self.asset_public_base_url:
            return self.asset_public_base_url.rstrip("/")
        return f"https://{self.asset_bucket}.s3.{self.asset_region}.amazonaws.com"


settings = Settings()
