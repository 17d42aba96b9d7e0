"""
Configuration Management

Trusted apps configuration is an immutable value handed to the
authenticator at startup. It is read from a YAML file shaped like:

```yaml
shire:
  providerId: "my-service"
trustedApps:
  publicKey: "base64-der-public-key"
  privateKey: "base64-der-private-key"
  apps:
    other-service:
      publicKey: "base64-der-public-key"
allowMultipleProtocolsInURL: false
```

with TRUSTED_APPS_* environment variables (or .env) overriding the local
identity and flags.
"""
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings

from trustedapps.core.paths import get_config_path

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "trusted_apps.yaml"


class TrustedAppsConfig(BaseModel):
    """Validated, immutable trusted apps configuration."""

    model_config = ConfigDict(frozen=True)

    provider_id: str = Field(..., description="Provider id of this service (shire.providerId)")
    public_key: str = Field(..., description="Base64 DER public key of this service")
    private_key: str = Field(..., description="Base64 DER private key of this service")
    apps: Dict[str, str] = Field(default_factory=dict, description="provider id -> base64 DER public key")
    allow_multiple_protocols_in_url: bool = Field(
        False, description="Repair 'scheme:/host' into 'scheme://host' before signing/verifying"
    )

    @field_validator("provider_id", "public_key", "private_key")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("must not be empty")
        return value.strip()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TrustedAppsConfig":
        """Build a config from the camelCase mapping shown in the module docstring."""
        return cls(**_flatten(data))


class TrustedAppsSettings(BaseSettings):
    """Environment overrides for the local identity."""

    model_config = ConfigDict(
        env_prefix="TRUSTED_APPS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    provider_id: Optional[str] = Field(None, description="Overrides shire.providerId")
    public_key: Optional[str] = Field(None, description="Overrides trustedApps.publicKey")
    private_key: Optional[str] = Field(None, description="Overrides trustedApps.privateKey")
    allow_multiple_protocols_in_url: Optional[bool] = Field(
        None, description="Overrides allowMultipleProtocolsInURL"
    )
    config_file: Optional[str] = Field(None, description="Path to trusted_apps.yaml")


def _flatten(data: Mapping[str, Any]) -> Dict[str, Any]:
    shire = data.get("shire") or {}
    trusted = data.get("trustedApps") or {}

    apps = {}
    for provider_id, entry in (trusted.get("apps") or {}).items():
        if isinstance(entry, Mapping):
            entry = entry.get("publicKey")
        apps[str(provider_id)] = entry

    values: Dict[str, Any] = {
        "provider_id": shire.get("providerId"),
        "public_key": trusted.get("publicKey"),
        "private_key": trusted.get("privateKey"),
        "apps": apps,
    }
    if "allowMultipleProtocolsInURL" in data:
        values["allow_multiple_protocols_in_url"] = data["allowMultipleProtocolsInURL"]
    return values


# Global settings instance
_settings: Optional[TrustedAppsSettings] = None


def get_settings() -> TrustedAppsSettings:
    """
    Get environment settings (singleton).

    Returns:
        TrustedAppsSettings instance
    """
    global _settings
    if _settings is None:
        _settings = TrustedAppsSettings()
    return _settings


def reload_settings() -> TrustedAppsSettings:
    """Reload settings from environment (useful for testing)."""
    global _settings
    _settings = TrustedAppsSettings()
    return _settings


def load_trusted_apps_config(
    path: Optional[Union[str, Path]] = None,
    settings: Optional[TrustedAppsSettings] = None,
) -> TrustedAppsConfig:
    """
    Load trusted apps configuration.

    Resolution: explicit path, then TRUSTED_APPS_CONFIG_FILE, then
    get_config_path("trusted_apps.yaml"). The .example.yaml fallback is
    skipped when TRUSTED_APPS_PROVIDER_ID is set. Environment settings are
    applied on top of the file.

    Raises:
        FileNotFoundError: If an explicit file is missing, or no file exists
            and the environment does not provide the local identity
        pydantic.ValidationError: If the resulting configuration is incomplete
    """
    settings = settings or get_settings()

    if path is None and settings.config_file:
        path = settings.config_file
    if path is None:
        # The example file only holds placeholders; never merge it into an env identity
        path = get_config_path(CONFIG_FILENAME, allow_example=not settings.provider_id)

    data: Mapping[str, Any] = {}
    if path is not None:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Trusted apps config not found: {path}")
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        logger.info(f"Loaded trusted apps config from {path}")
    elif not settings.provider_id:
        raise FileNotFoundError(
            f"No {CONFIG_FILENAME} found and TRUSTED_APPS_PROVIDER_ID is not set"
        )

    values = _flatten(data)
    overrides = settings.model_dump(exclude={"config_file"}, exclude_none=True)
    if overrides:
        logger.debug(f"Trusted apps settings overridden from environment: {sorted(overrides)}")
    values.update(overrides)

    return TrustedAppsConfig(**values)
