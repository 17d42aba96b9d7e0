"""
Trust Registry

Maps provider ids to the public keys of the applications allowed to call
this service. The local provider id is always registered with the local
public key, so a service trusts its own signatures whatever the supplied
app list says.

Built once at startup and read-only afterwards; safe to share between
concurrent requests without locking.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Union

from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey

from trustedapps.core.signing.errors import KeyFormatError
from trustedapps.core.signing.keys import decode_public_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrustedApp:
    """
    An application trusted to call this service.

    Attributes:
        provider_id: Unique identifier of the calling application
        public_key: Base64 DER encoding of its RSA public key
    """
    provider_id: str
    public_key: str


AppEntry = Union[str, TrustedApp, Mapping[str, str]]


def _entry_public_key(provider_id: str, entry: AppEntry) -> str:
    if isinstance(entry, TrustedApp):
        return entry.public_key
    if isinstance(entry, str):
        return entry
    if isinstance(entry, Mapping):
        key = entry.get("publicKey") or entry.get("public_key")
        if key:
            return key
    raise KeyFormatError(f"No public key configured for app '{provider_id}'")


class TrustRegistry:
    """
    Read-only registry of trusted applications.

    Use TrustRegistry.initialize() to build one; every key is parsed up front
    so malformed key material fails at startup rather than per request.
    """

    def __init__(self, apps: Mapping[str, TrustedApp], keys: Mapping[str, RSAPublicKey]):
        self._apps = MappingProxyType(dict(apps))
        self._keys = MappingProxyType(dict(keys))

    @classmethod
    def initialize(
        cls,
        self_provider_id: str,
        self_public_key: str,
        initial_apps: Optional[Mapping[str, AppEntry]] = None,
    ) -> "TrustRegistry":
        """
        Build the registry, force-inserting the local application.

        Args:
            self_provider_id: Provider id of this service
            self_public_key: Base64 DER public key of this service
            initial_apps: provider id -> encoded key, TrustedApp or {"publicKey": ...}

        Raises:
            KeyFormatError: If any configured key cannot be parsed
        """
        apps: Dict[str, TrustedApp] = {}
        keys: Dict[str, RSAPublicKey] = {}

        for provider_id, entry in (initial_apps or {}).items():
            if provider_id == self_provider_id:
                logger.warning(
                    f"Ignoring configured key for '{provider_id}': the local provider always uses its own key"
                )
                continue
            public_key = _entry_public_key(provider_id, entry)
            try:
                keys[provider_id] = decode_public_key(public_key)
            except KeyFormatError as e:
                raise KeyFormatError(f"Invalid public key for app '{provider_id}': {e}") from e
            apps[provider_id] = TrustedApp(provider_id=provider_id, public_key=public_key)

        # Trust thyself
        keys[self_provider_id] = decode_public_key(self_public_key)
        apps[self_provider_id] = TrustedApp(provider_id=self_provider_id, public_key=self_public_key)

        logger.info(f"Trust registry loaded with {len(apps)} apps (self: {self_provider_id})")
        return cls(apps, keys)

    def lookup(self, provider_id: str) -> Optional[TrustedApp]:
        """
        Get a trusted app by provider id.

        Returns:
            TrustedApp if registered, None otherwise
        """
        return self._apps.get(provider_id)

    def public_key(self, provider_id: str) -> Optional[RSAPublicKey]:
        """Get the parsed public key for a provider id."""
        return self._keys.get(provider_id)

    def provider_ids(self) -> List[str]:
        """Get list of all registered provider ids."""
        return list(self._apps.keys())

    def __contains__(self, provider_id: object) -> bool:
        return provider_id in self._apps

    def __len__(self) -> int:
        return len(self._apps)
