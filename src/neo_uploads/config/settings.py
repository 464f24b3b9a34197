"""Settings for the upload storage engine.

Environment-driven configuration for the upload store and its storage
backends, loaded through pydantic-settings.
"""

from enum import Enum
from typing import Optional

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MIB = 1024 * 1024

# Block/append size ceiling accepted by block-oriented object stores
BACKEND_MAX_CHUNK_SIZE = 100 * MIB


class StrategyKind(str, Enum):
    """Write model bound to an upload at creation time."""
    APPEND = "append"
    STAGED = "staged"


class UploadStoreSettings(BaseSettings):
    """Upload store settings."""

    model_config = SettingsConfigDict(
        env_prefix="NEO_UPLOADS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Object layout
    blob_prefix: str = Field(default="uploads", description="Key prefix for upload objects")

    # Strategy selection
    default_strategy: StrategyKind = Field(default=StrategyKind.STAGED, description="Strategy for new uploads")
    staged_threshold_bytes: Optional[int] = Field(
        default=None,
        ge=0,
        description="Declared lengths above this always use the staged strategy",
    )

    # Chunking
    default_chunk_size: int = Field(default=4 * MIB, gt=0, description="Chunk size for unknown or medium uploads")
    max_chunk_size: int = Field(default=BACKEND_MAX_CHUNK_SIZE, gt=0, description="Chunk size for large uploads")
    small_upload_threshold: int = Field(default=10 * MIB, gt=0, description="Below this, chunks shrink to the upload")
    large_upload_threshold: int = Field(default=100 * MIB, gt=0, description="At or above this, max chunks are used")

    # Creation behaviour
    hide_until_complete: bool = Field(default=False, description="Defer staged object creation to first commit")
    create_is_idempotent: bool = Field(default=False, description="Tolerate existing objects on create")

    # Metadata namespacing
    metadata_prefix: str = Field(default="upload_", description="Prefix for internal metadata keys")
    user_metadata_prefix: str = Field(default="upload_meta_", description="Prefix for user metadata keys")

    @field_validator("blob_prefix")
    @classmethod
    def normalize_blob_prefix(cls, v: str) -> str:
        """Strip surrounding slashes so names are always '{prefix}/{id}'."""
        return v.strip("/")

    @field_validator("max_chunk_size")
    @classmethod
    def validate_max_chunk_size(cls, v: int) -> int:
        """Reject chunk sizes the backend cannot accept."""
        if v > BACKEND_MAX_CHUNK_SIZE:
            raise ValueError(f"max_chunk_size must not exceed {BACKEND_MAX_CHUNK_SIZE} bytes")
        return v

    @field_validator("metadata_prefix", "user_metadata_prefix")
    @classmethod
    def validate_metadata_prefix(cls, v: str) -> str:
        """Metadata keys must be identifiers starting with a letter or underscore."""
        if not v or not (v[0].isalpha() or v[0] == "_"):
            raise ValueError(f"Invalid metadata prefix: {v!r}")
        if not all(c.isalnum() or c == "_" for c in v):
            raise ValueError(f"Metadata prefix may only contain letters, digits and underscores: {v!r}")
        return v.lower()

    @model_validator(mode="after")
    def validate_relationships(self) -> "UploadStoreSettings":
        """Validate cross-field constraints."""
        if self.default_chunk_size > self.max_chunk_size:
            raise ValueError("default_chunk_size must not exceed max_chunk_size")
        if self.small_upload_threshold > self.large_upload_threshold:
            raise ValueError("small_upload_threshold must not exceed large_upload_threshold")
        if not self.user_metadata_prefix.startswith(self.metadata_prefix):
            raise ValueError("user_metadata_prefix must start with metadata_prefix")
        if self.user_metadata_prefix == self.metadata_prefix:
            raise ValueError("user_metadata_prefix must differ from metadata_prefix")
        return self


class AzureBackendSettings(BaseSettings):
    """Azure Blob Storage backend settings."""

    model_config = SettingsConfigDict(
        env_prefix="NEO_UPLOADS_AZURE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    connection_string: Optional[SecretStr] = Field(default=None, description="Storage account connection string")
    container_name: str = Field(default="uploads", min_length=3, max_length=63, description="Blob container")
    create_container_if_not_exists: bool = Field(default=True, description="Create the container on startup")

    @field_validator("container_name")
    @classmethod
    def validate_container_name(cls, v: str) -> str:
        """Container names are lowercase letters, digits and dashes."""
        if not all(c.islower() or c.isdigit() or c == "-" for c in v):
            raise ValueError(f"Invalid container name: {v!r}")
        return v
