from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    db_url: str = "sqlite:///orders.db"
    auto_migrate: bool = True
    snapshot_retention_minutes: int | None = None  # None - completed orders never age out
    complete_max_attempts: int = 3
    passkey_hash_rounds: int = 12
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    model_config = SettingsConfigDict(env_file="config.env")
