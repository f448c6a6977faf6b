"""Application configuration settings.

Values can be overridden via environment variables with the ``HASHDROP_``
prefix (e.g. ``HASHDROP_FILENAME_LEN=8``) or the command line flags in
``cli.py``. A ``Settings`` instance is immutable; it is built once at startup
and handed to the app and the upload pipeline.
"""
from __future__ import annotations

import tempfile

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..hashing import DEFAULT_ALGORITHM, SUPPORTED_ALGORITHMS
from ..storage import DEFAULT_CHUNK_SIZE
from ..views import VIEWS


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="HASHDROP_",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Page
    title: str = "hashdrop"
    page_uri: str = "http://yourdomain.com"
    file_uri: str = "http://files.yourdomain.com"
    index_view: str = "minimal"

    # Directories; both must exist, nothing here creates them.
    # HASHDROP_UPLOAD_DIR is the name the --upload-dir flag suggests.
    store_dir: str = Field(
        default="./files",
        validation_alias=AliasChoices("store_dir", "hashdrop_store_dir", "hashdrop_upload_dir"),
    )
    tmp_dir: str = Field(default_factory=tempfile.gettempdir)

    # Naming
    disallow_chars: str = "lIO0-"
    rand_prefix: int = Field(default=24, ge=0)
    filename_len: int = Field(default=6, ge=1)
    hash_algorithm: str = DEFAULT_ALGORITHM

    # Streaming
    chunk_size: int = Field(default=DEFAULT_CHUNK_SIZE, ge=1)

    # Server
    host: str = "0.0.0.0"
    port: int = Field(default=8080, ge=0, le=65535)

    @field_validator("index_view")
    @classmethod
    def _known_view(cls, value: str) -> str:
        if value not in VIEWS:
            raise ValueError(f"unknown view {value!r}, expected one of {sorted(VIEWS)}")
        return value

    @field_validator("hash_algorithm")
    @classmethod
    def _fixed_length_hash(cls, value: str) -> str:
        if value not in SUPPORTED_ALGORITHMS:
            raise ValueError(f"unsupported hash algorithm {value!r}")
        return value
