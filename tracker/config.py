"""Tracker configuration via pydantic-settings."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings


class TrackerSettings(BaseSettings):
    environment: str = "development"
    app_title: str = "Task Tracker"
    log_level: str = "INFO"

    # Storage: "sqlite" (single database file) or "json" (one document per collection)
    backend: str = "sqlite"
    db_path: str = "data/tracker.db"
    json_dir: str = "data/json"
    echo_sql: bool = False

    # Default task ordering for list(): "created" or "priority"
    default_order: str = "created"

    # Static credentials, supplied by the environment at start-up.
    auth_enabled: bool = True
    api_keys: str = ""
    basic_users: str = ""
    # PBKDF2 rounds used by `tracker hash-password`
    password_iterations: int = 200_000

    host: str = "127.0.0.1"
    port: int = 9000

    model_config = {"env_prefix": "TRACKER_", "env_file": ".env", "extra": "ignore"}

    @property
    def base_dir(self) -> Path:
        return Path(__file__).resolve().parent

    @property
    def project_dir(self) -> Path:
        return self.base_dir.parent

    def _resolve(self, value: str) -> Path:
        path = Path(value)
        if not path.is_absolute():
            path = self.project_dir / path
        return path

    @property
    def database_path(self) -> Path:
        return self._resolve(self.db_path)

    @property
    def json_path(self) -> Path:
        return self._resolve(self.json_dir)

    @property
    def api_keys_set(self) -> frozenset[str]:
        """Parse comma-separated API keys."""
        return frozenset(k.strip() for k in self.api_keys.split(",") if k.strip())

    @property
    def basic_users_map(self) -> dict[str, str]:
        """Parse comma-separated user:hash pairs."""
        mapping: dict[str, str] = {}
        if not self.basic_users.strip():
            return mapping

        for item in self.basic_users.split(","):
            pair = item.strip()
            if not pair or ":" not in pair:
                continue
            username, password_hash = pair.split(":", 1)
            username = username.strip()
            password_hash = password_hash.strip()
            if username and password_hash:
                mapping[username] = password_hash
        return mapping

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() in {"prod", "production"}


settings = TrackerSettings()
