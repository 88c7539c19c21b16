from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    sftp_host: str = ""
    sftp_port: int = 22
    sftp_username: str = ""
    sftp_password: str = ""
    sftp_remote_dir: str = "/"
    admin_username: str = "admin"
    admin_password: str = "admin123"
    session_secret: str = "your-secret-key"
    session_max_age: int = 24 * 60 * 60
    session_https_only: bool = False
    data_dir: Path = Path("./data")
    sync_hour: Optional[int] = None  # unset: sync only when triggered
    host: str = "0.0.0.0"
    port: int = 3000

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @property
    def csv_dir(self) -> Path:
        return self.data_dir / "csv"


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
