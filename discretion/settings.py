from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration for the secret browser.

    Values are loaded from environment variables and `.env`.

    Notes:
    - Credentials come from the Azure CLI login; nothing secret lives here.
    - Logs go to a file because the terminal belongs to the table view.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Table
    DISCRETION_WINDOW_HEIGHT: int = Field(default=10)
    DISCRETION_COLUMN_WIDTH: int = Field(default=20)
    DISCRETION_SHOW_DISABLED: bool = Field(default=False)

    # Enumeration: comma-separated subscription ids, empty means every subscription.
    DISCRETION_SUBSCRIPTIONS: str = Field(default="")

    # Resolution
    DISCRETION_RESOLVE_TIMEOUT: float = Field(default=15.0)
    DISCRETION_RESOLVE_WORKERS: int = Field(default=4)

    # Main loop: seconds between background event drains.
    DISCRETION_REFRESH_INTERVAL: float = Field(default=0.2)

    # Logging (diagnostic; never written to the terminal while the TUI runs)
    DISCRETION_LOG_DIR: Path = Field(default=Path("_logs"))
    DISCRETION_LOG_LEVEL: str = Field(default="INFO")
    # Timed rotation retention count (days). Old log files are auto-deleted.
    DISCRETION_LOG_BACKUP_COUNT: int = Field(default=7)

    def subscription_ids(self) -> list[str]:
        return [s.strip() for s in self.DISCRETION_SUBSCRIPTIONS.split(",") if s.strip()]


def load_settings() -> Settings:
    s = Settings()
    s.DISCRETION_WINDOW_HEIGHT = max(1, s.DISCRETION_WINDOW_HEIGHT)
    s.DISCRETION_COLUMN_WIDTH = max(1, s.DISCRETION_COLUMN_WIDTH)
    s.DISCRETION_RESOLVE_WORKERS = max(1, s.DISCRETION_RESOLVE_WORKERS)
    if s.DISCRETION_REFRESH_INTERVAL <= 0:
        s.DISCRETION_REFRESH_INTERVAL = 0.2
    return s
