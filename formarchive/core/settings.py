# formarchive/core/settings.py
from typing import List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_REGION = "ap-southeast-2"

# Primary env var name per required value, as reported in "missing" lists.
REQUIRED_ENV = {
    "bucket_name": "S3_BUCKET_NAME",
    "access_key_id": "AWS_ACCESS_KEY_ID",
    "secret_access_key": "AWS_SECRET_ACCESS_KEY",
}


class StorageConfig(BaseSettings):
    # --- Storage ---
    bucket_name: Optional[str] = Field(None, validation_alias="S3_BUCKET_NAME")
    region: str = Field(
        DEFAULT_REGION,
        validation_alias=AliasChoices("AWS_REGION", "ASSURE_AWS_REGION"),
    )
    endpoint_url: Optional[str] = Field(None, validation_alias="S3_ENDPOINT")

    # --- Credentials (primary first, ASSURE_* as fallback) ---
    access_key_id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("AWS_ACCESS_KEY_ID", "ASSURE_AWS_ACCESS_KEY_ID"),
    )
    secret_access_key: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("AWS_SECRET_ACCESS_KEY", "ASSURE_AWS_SECRET_ACCESS_KEY"),
    )

    # --- Retrieval endpoint ---
    submissions_password: Optional[str] = Field(None, validation_alias="SUBMISSIONS_PASSWORD")

    # --- Logging ---
    log_level: str = Field("INFO", validation_alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        populate_by_name=True,
        extra="ignore",
    )

    def missing_env(self) -> List[str]:
        """Names of the required variables that did not resolve to a value."""
        return [env for field, env in REQUIRED_ENV.items() if not getattr(self, field)]


def load_config() -> StorageConfig:
    """Read the environment again; every call gets its own instance."""
    return StorageConfig()
