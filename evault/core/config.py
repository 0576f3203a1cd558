"""Application configuration via environment variables.

All settings are loaded from environment variables (or .env file) using
Pydantic BaseSettings. The Filebase credentials keep the names the
original proxy read (FILEBASE_API_KEY, FILEBASE_SECRET_KEY, FILEBASE_BUCKET)
and the listen port honours PORT.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration for the E-Vault backend."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
    )

    # --- API ---
    api_host: str = "0.0.0.0"
    api_port: int = Field(default=3000, validation_alias=AliasChoices("PORT", "API_PORT", "api_port"))
    api_prefix: str = "/api"
    debug: bool = False

    # --- Frontend / mock data ---
    frontend_dir: Path = Path("frontend")
    seed_on_startup: bool = True
    seed_random_seed: int | None = None

    # --- Uploads / Filebase ---
    upload_dir: Path = Path("uploads")
    max_upload_bytes: int = 50 * 1024 * 1024
    filebase_api_key: str = ""
    filebase_secret_key: str = ""
    filebase_bucket: str = ""
    filebase_endpoint_url: str = "https://s3.filebase.com"
    filebase_region: str = "us-east-1"
    ipfs_gateway_url: str = "https://ipfs.filebase.io/ipfs"

    # --- Ethereum ---
    eth_rpc_url: str = ""
    user_registry_address: str = ""
    case_manager_address: str = ""
    admin_address: str = ""
    tx_receipt_timeout_seconds: float = 120.0

    # --- Logging ---
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def users_path(self) -> Path:
        return self.frontend_dir / "users.json"

    @property
    def cases_path(self) -> Path:
        return self.frontend_dir / "data" / "cases.json"
