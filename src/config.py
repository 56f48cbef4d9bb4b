"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "catalog-profiling"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    log_format: str = "console"  # console | json

    # Export destinations
    profiles_dir: str = "user-profiles"
    extracted_profiles_dir: str = "extracted-profiles"

    # Archived catalog-service logs read by the batch extractor
    log_paths: list[str] = [
        "logs/product-management.log",
        "structured-logs/application-logs.txt",
    ]

    model_config = {"env_prefix": "", "env_file": ".env", "extra": "ignore"}


settings = Settings()
