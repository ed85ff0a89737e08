from __future__ import annotations

import asyncio
import logging
import re
import time

import httpx
from cryptography import x509

from fbadmin.core import parse_json, raise_for_response
from fbadmin.core.exceptions import TokenVerificationError, TransportError

logger = logging.getLogger(__name__)

ID_TOKEN_CERT_URL = (
    "https://www.googleapis.com/robot/v1/metadata/x509/"
    "securetoken@system.gserviceaccount.com"
)
SESSION_COOKIE_CERT_URL = (
    "https://www.googleapis.com/identitytoolkit/v3/relyingparty/publicKeys"
)
DEFAULT_MAX_AGE = 3600

_MAX_AGE_PATTERN = re.compile(r"max-age=(\d+)")


class PublicKeyManager:
    """Fetches and caches the x509 certificates used to sign tokens.

    Certificates are cached for the max-age of the Cache-Control
    header of the response.
    """

    url: str

    _client: httpx.AsyncClient
    _keys: dict[str, str]
    _expires_at: float
    _lock: asyncio.Lock | None

    def __init__(self, client: httpx.AsyncClient, url: str):
        self._client = client
        self.url = url
        self._keys = dict()
        self._expires_at = 0
        self._lock = None

    async def get_keys(self) -> dict[str, str]:
        if self._lock is None:
            self._lock = asyncio.Lock()
        async with self._lock:
            if self._keys and time.time() < self._expires_at:
                return self._keys
            logger.debug("Fetching public keys from %s", self.url)
            try:
                response = await self._client.get(self.url)
            except httpx.TransportError as e:
                raise TransportError(
                    f"Failed to fetch public keys: {e}"
                ) from e
            raise_for_response(response, "Failed to fetch public keys")
            self._keys = parse_json(response)
            self._expires_at = time.time() + get_max_age(
                response.headers.get("cache-control")
            )
            return self._keys

    async def get_public_key(self, kid: str):
        """Get the public key of a certificate.

        Raises:
            TokenVerificationError:
                No certificate has the key id.
        """
        keys = await self.get_keys()
        if kid not in keys:
            raise TokenVerificationError(
                f"No public key found for key id {kid}"
            )
        certificate = x509.load_pem_x509_certificate(keys[kid].encode())
        return certificate.public_key()


def get_max_age(cache_control: str | None) -> int:
    if cache_control:
        match = _MAX_AGE_PATTERN.search(cache_control)
        if match:
            return int(match.group(1))
    return DEFAULT_MAX_AGE
