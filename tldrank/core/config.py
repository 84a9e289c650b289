from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATA_ROOT: str = "./"
    DB_DIR: str = "warehouse"
    MAPPING_FILE: str = "mapping"
    URLS_FILE: str = "TopURLs"
    STRICT_INPUTS: bool = False
    JSON_LOGS: bool = False
    LOG_LEVEL: str = "INFO"
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    def resolve(self, name: str) -> Path:
        """Paths in the settings are relative to DATA_ROOT unless absolute."""
        p = Path(name)
        return p if p.is_absolute() else Path(self.DATA_ROOT) / p

    @property
    def mapping_path(self) -> Path:
        return self.resolve(self.MAPPING_FILE)

    @property
    def urls_path(self) -> Path:
        return self.resolve(self.URLS_FILE)

    def database_path(self, user: str) -> Path:
        return self.resolve(self.DB_DIR) / f"{user}.duckdb"
