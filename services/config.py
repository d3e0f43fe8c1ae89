from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def split_csv(value: str | None) -> list[str]:
    if not value:
        return []
    parts = [p.strip() for p in value.replace("\n", ",").split(",")]
    return [p for p in parts if p]


class Settings(BaseSettings):
    # Target site whose headers get checked; falls back to the request host
    SERVER_URL: str = Field(default="")
    HEADER_TIMEOUT_SECONDS: float = Field(default=10.0)

    # DB (optional)
    DATABASE_URL: str | None = None

    # Directories shown in the size section
    MEDIA_DIR: str = Field(default="media")
    DATA_DIR: str = Field(default="data")
    SRC_DIR: str = Field(default="src")
    CACHE_DIR: str = Field(default="cache")

    # Backend links
    BACKEND_PATH: str = Field(default="/admin")

    # Extensions
    EXTENSION_ENTRY_POINT_GROUP: str = Field(default="status_report.extensions")
    DISABLED_EXTENSIONS: str = Field(default="")
    PACKAGE_INDEX_URL: str = Field(default="https://pypi.org/pypi")
    REST_EXTENSION: str = Field(default="")
    REST_PLUGIN: str = Field(default="")
    CRONJOB_EXTENSION: str = Field(default="cronjob")
    CRONJOB_TABLE: str = Field(default="cronjob")

    # Runtime
    CONSTANTS_MODULES: str = Field(default="")
    MAX_FORM_FIELDS: int = Field(default=1000)
    MAX_EXECUTION_TIME: int = Field(default=30)
    MAX_INPUT_TIME: int = Field(default=60)
    UPLOAD_MAX_FILESIZE: str = Field(default="8M")
    POST_MAX_SIZE: str = Field(default="8M")
    TIMEZONE: str = Field(default="UTC")
    DEBUG: bool = Field(default=False)
    DISPLAY_STARTUP_ERRORS: bool = Field(default=False)

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def disabled_extensions(self) -> list[str]:
        return split_csv(self.DISABLED_EXTENSIONS)

    @property
    def constants_modules(self) -> list[str]:
        return split_csv(self.CONSTANTS_MODULES)


settings = Settings()
