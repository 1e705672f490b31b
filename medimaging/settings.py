"""
Configuration settings for MedImaging.

This module provides a settings class for MedImaging, with support for loading
configuration from TOML files and environment variables.
"""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)


class Settings(BaseSettings):
    """Main settings class for MedImaging.

    Values are resolved from constructor arguments, then environment variables
    prefixed with ``MEDIMAGING_``, then ``settings.toml`` / ``settings.custom.toml``.
    """

    model_config = SettingsConfigDict(
        toml_file=["settings.toml", "settings.custom.toml"],
        env_prefix="MEDIMAGING_",
        extra="ignore",
    )

    # Server settings
    port: int = 5000
    host: str = "127.0.0.1"
    root_url: str = "/"
    debug: bool = False
    environment: str = "production"
    cors_origins: list[str] = ["*"]

    # Security settings
    jwt_secret_key: str = "medical_imaging_secret_key_2024"
    jwt_algorithm: str = "HS256"
    token_expire_hours: int = 24
    auth_required: bool = False
    bcrypt_rounds: int = 12

    # PACS settings
    pacs_url: str = "http://localhost:8080/pacs"  # read-only proxy, no credentials
    pacs_direct_url: str = "http://localhost:8042"
    pacs_username: str = "orthanc"
    pacs_password: str = "orthanc"
    pacs_timeout: float | None = None
    pacs_upload_timeout: float = 30.0
    patient_fanout_limit: int = 10
    study_fanout_limit: int = 20

    # Upload settings
    upload_dir: str = str(Path("uploads") / "dicom")
    max_upload_files: int = 100
    max_upload_size: int = 100 * 1024 * 1024
    upload_chunk_size: int = 1024 * 1024

    # Local study collection
    seed_demo_studies: bool = True
    institution_name: str = "Central Medical Center"

    # Frontend settings
    frontend_enabled: bool = True
    static_dir: str | None = None

    # Logging settings
    log_level: str = "INFO"
    log_to_file: bool = False
    log_dir: str = "logs"
    log_rotation: str = "20 MB"
    log_retention: str = "1 week"
    log_format: str | None = None
    log_serialize: bool = False

    @property
    def token_expire_seconds(self) -> int:
        """Get token lifetime in seconds."""
        return self.token_expire_hours * 3600

    @property
    def token_expires_in(self) -> str:
        """Human readable token lifetime, as returned by the login endpoint."""
        return f"{self.token_expire_hours}h"

    @property
    def explorer_url(self) -> str:
        """URL of the PACS built-in explorer."""
        return f"{self.pacs_direct_url}/app/explorer.html"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize the sources for settings.

        Priority order: explicit arguments, environment variables, then TOML config files
        """
        return init_settings, env_settings, TomlConfigSettingsSource(settings_cls)

    def get_upload_dir(self) -> Path:
        """Get the upload directory, creating it if needed."""
        path = Path(self.upload_dir)
        path.mkdir(parents=True, exist_ok=True)
        return path

    def get_log_dir(self) -> Path:
        """Get the log directory path."""
        return Path(self.log_dir)

    @property
    def static_path(self) -> Path:
        """Path to built frontend static files."""
        if self.static_dir:
            return Path(self.static_dir)
        return Path(__file__).parent.parent / "frontend" / "build"

    @property
    def custom_static_path(self) -> Path | None:
        """Path to user custom static files."""
        custom_path = Path.cwd() / "medimaging_custom"
        return custom_path if custom_path.exists() else None

    @property
    def static_directories(self) -> list[Path]:
        """List of static directories in priority order."""
        dirs = []
        if self.custom_static_path:
            dirs.append(self.custom_static_path)
        if self.static_path.exists():
            dirs.append(self.static_path)
        return dirs

    @property
    def is_development(self) -> bool:
        """Whether internal error details may be returned to clients."""
        return self.debug or self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    """Get the settings instance, with caching.

    Returns:
        Cached Settings instance
    """
    return Settings()


# Create a global settings instance for easy imports
settings = get_settings()
