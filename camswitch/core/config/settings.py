# File: camswitch/core/config/settings.py

import os
from pathlib import Path


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


class Settings:
    # --- Paths ---
    # camswitch/core/config/settings.py -> camswitch/core/config -> camswitch/core -> camswitch -> ROOT
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent.parent
    DATA_DIR: Path = BASE_DIR / "data"

    # --- Database ---
    POSTGRES_USER: str = os.getenv("POSTGRES_USER", "postgres")
    POSTGRES_PASSWORD: str = os.getenv("POSTGRES_PASSWORD", "password")
    POSTGRES_SERVER: str = os.getenv("POSTGRES_SERVER", "localhost")
    POSTGRES_PORT: str = os.getenv("POSTGRES_PORT", "5432")
    POSTGRES_DB: str = os.getenv("POSTGRES_DB", "camswitch_db")

    @property
    def DATABASE_URL(self) -> str:
        # SQLite only when explicitly requested (tests, local runs).
        if _env_flag("USE_SQLITE", "false"):
            return f"sqlite:///{os.getenv('SQLITE_PATH', str(self.DATA_DIR / 'camswitch.db'))}"

        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # --- Persistence ---
    # Off by default: the engine runs fully in memory unless a store is wired in.
    @property
    def PERSISTENCE_ENABLED(self) -> bool:
        return _env_flag("CAMSWITCH_PERSISTENCE", "false")

    # --- Switching Policy ---
    MANUAL_SWITCH_EXEMPT_FROM_COOLDOWN: bool = _env_flag("MANUAL_SWITCH_EXEMPT_FROM_COOLDOWN", "true")
    DEFAULT_SWITCH_DELAY: float = float(os.getenv("DEFAULT_SWITCH_DELAY", "1.0"))
    EVENT_PAGE_LIMIT: int = int(os.getenv("EVENT_PAGE_LIMIT", "50"))

    # Confidence floor applied on top of each rule's own min_confidence.
    SENSITIVITY_FLOORS = {
        "low": float(os.getenv("SENSITIVITY_FLOOR_LOW", "0.4")),
        "medium": float(os.getenv("SENSITIVITY_FLOOR_MEDIUM", "0.5")),
        "high": float(os.getenv("SENSITIVITY_FLOOR_HIGH", "0.6")),
    }

    # Simulated transition latency per transition type (milliseconds).
    TRANSITION_DELAYS_MS = {
        "instant": 0,
        "fade": 500,
        "smooth": 800,
        "zoom": 1200,
        "smart": 1000,
    }

    def ensure_dirs(self):
        """Creates necessary data directories if they don't exist."""
        self.DATA_DIR.mkdir(parents=True, exist_ok=True)


settings = Settings()
