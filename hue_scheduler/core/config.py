from typing import Literal, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "Hue Scheduler"

    # "hue" talks to a real bridge; "sim" uses the in-memory bridge
    mode: Literal["hue", "sim"] = "sim"

    # Bridge (empty ip => mDNS discovery)
    bridge_ip: Optional[str] = None
    bridge_username: str = ""
    request_timeout: float = Field(default=5.0, gt=0)
    discovery_timeout: float = Field(default=3.0, gt=0)

    # Loop timing, milliseconds
    ping_interval: int = Field(default=1000, gt=0)
    reachability_window: int = Field(default=3000, ge=0)

    # Upper bound for one whole tick (fetch + commands), seconds
    tick_timeout: float = Field(default=10.0, gt=0)

    # Home location for sunrise/sunset
    home_latitude: float = Field(default=52.52, ge=-90, le=90)
    home_longitude: float = Field(default=13.405, ge=-180, le=180)
    home_timezone: str = "Europe/Berlin"

    # "most_recent" => only the scene whose window started last wins overlapping lights
    tie_break: Literal["most_recent", "all"] = "most_recent"

    # Storage
    sqlite_path: str = Field(default="hue_scheduler.db")

    # Rotating log file, disabled when empty
    debug_file: Optional[str] = None

    @field_validator("home_timezone")
    @classmethod
    def _known_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v


settings = Settings()
