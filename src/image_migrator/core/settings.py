"""Load run settings from the environment."""

import os
from typing import Any, Dict, Mapping, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from .exceptions import ConfigurationError
from .models import CloudinarySettings, MigrationConfig, Settings, StoreSettings


def _pick(env: Mapping[str, str], mapping: Dict[str, str]) -> Dict[str, Any]:
    return {field: env[var] for field, var in mapping.items() if env.get(var)}


def load_settings(
    env: Optional[Mapping[str, str]] = None,
    env_file: Optional[str] = None,
    migration: Optional[MigrationConfig] = None,
) -> Settings:
    """
    Build Settings from environment variables.

    Variables from ``env_file`` (or a ``.env`` in the working directory) are
    loaded first unless an explicit ``env`` mapping is given.

    Environment Variables:
        CLOUDINARY_CLOUD_NAME, CLOUDINARY_UPLOAD_PRESET, CLOUDINARY_FOLDER,
        CLOUDINARY_PUBLIC_ID_PREFIX, SUPABASE_URL, SUPABASE_KEY,
        SUPABASE_TABLE, HTTP_TIMEOUT, S3_ENDPOINT_URL

    Raises:
        ConfigurationError: If a value fails validation
    """
    if env is None:
        load_dotenv(env_file)
        env = os.environ

    try:
        return Settings(
            cloudinary=CloudinarySettings(
                **_pick(
                    env,
                    {
                        "cloud_name": "CLOUDINARY_CLOUD_NAME",
                        "upload_preset": "CLOUDINARY_UPLOAD_PRESET",
                        "folder": "CLOUDINARY_FOLDER",
                        "public_id_prefix": "CLOUDINARY_PUBLIC_ID_PREFIX",
                    },
                )
            ),
            store=StoreSettings(
                **_pick(
                    env,
                    {
                        "url": "SUPABASE_URL",
                        "key": "SUPABASE_KEY",
                        "table": "SUPABASE_TABLE",
                        "timeout": "HTTP_TIMEOUT",
                        "s3_endpoint_url": "S3_ENDPOINT_URL",
                    },
                )
            ),
            migration=migration or MigrationConfig(),
        )
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid settings: {exc}") from exc


def validate_settings(settings: Settings) -> None:
    """
    Refuse to run with an unconfigured destination or store.

    Raises:
        ConfigurationError: If the cloud name is still the placeholder or the
            store credentials are missing
    """
    if not settings.cloudinary.is_configured:
        raise ConfigurationError(
            "CLOUDINARY_CLOUD_NAME is not configured "
            f"(got {settings.cloudinary.cloud_name!r})"
        )
    if not settings.cloudinary.upload_preset:
        raise ConfigurationError("CLOUDINARY_UPLOAD_PRESET is not configured")
    if not settings.store.is_configured:
        raise ConfigurationError("SUPABASE_URL and SUPABASE_KEY must be set")
