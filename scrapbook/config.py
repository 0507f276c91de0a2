"""Scrapbook Events Server Configuration."""

import secrets
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Server
    app_name: str = "Scrapbook Events"
    environment: str = "local"  # 'local' | 'staging' | 'production'
    log_level: str = "INFO"

    # Paths
    data_dir: Path = Path.home() / "scrapbook" / "data"

    # Database
    database_url: str = ""  # empty -> sqlite file inside data_dir

    # JWT
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    access_token_expire_days: int = 7

    # Uploads
    max_upload_bytes: int = 100 * 1024 * 1024  # 100MB

    # Cloudinary
    cloudinary_cloud_name: str = ""
    cloudinary_api_key: str = ""
    cloudinary_api_secret: str = ""
    media_folder: str = "scrapbook_events"

    model_config = {"env_prefix": "SCRAPBOOK_"}

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def sqlalchemy_url(self) -> str:
        return self.database_url or f"sqlite:///{self.data_dir / 'scrapbook.db'}"

    def ensure_dirs(self) -> None:
        """Create all required directories."""
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def ensure_secrets(self) -> None:
        """Generate the JWT secret if not set, persist it so tokens survive restarts."""
        if self.jwt_secret:
            return
        secrets_file = self.data_dir / ".secrets"
        saved = {}
        if secrets_file.exists():
            for line in secrets_file.read_text().strip().splitlines():
                if "=" in line:
                    k, v = line.split("=", 1)
                    saved[k.strip()] = v.strip()

        self.jwt_secret = saved.get("jwt_secret", "") or secrets.token_urlsafe(32)
        secrets_file.write_text(f"jwt_secret={self.jwt_secret}\n")


settings = Settings()
settings.ensure_dirs()
settings.ensure_secrets()
