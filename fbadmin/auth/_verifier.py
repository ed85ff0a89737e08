"""
Verification of Firebase ID tokens and session cookies.
"""

from __future__ import annotations

import time

import jwt

from fbadmin.core.exceptions import TokenVerificationError

from ._keys import PublicKeyManager
from ._models import DecodedToken

ID_TOKEN_ISSUER = "https://securetoken.google.com/"
SESSION_COOKIE_ISSUER = "https://session.firebase.google.com/"
CLOCK_SKEW_SECONDS = 300


class TokenVerifier:
    """Verifies RS256 tokens signed by a Google certificate.

    Attributes:
        project_id: Expected audience.
        issuer: Expected issuer.
        name: Token kind used in error messages.
    """

    project_id: str
    issuer: str
    name: str

    _key_manager: PublicKeyManager

    def __init__(
        self,
        key_manager: PublicKeyManager,
        project_id: str,
        issuer_prefix: str,
        name: str,
    ):
        self._key_manager = key_manager
        self.project_id = project_id
        self.issuer = f"{issuer_prefix}{project_id}"
        self.name = name

    async def verify(self, token: str) -> DecodedToken:
        """Verify the signature and the claims of a token.

        Raises:
            TokenVerificationError:
                Token is malformed, expired or not issued
                for the project.
        """
        if not token:
            raise TokenVerificationError(f"{self.name} must not be empty")
        try:
            header = jwt.get_unverified_header(token)
        except jwt.InvalidTokenError as e:
            raise TokenVerificationError(
                f"Malformed {self.name}: {e}"
            ) from e
        if header.get("alg") != "RS256":
            raise TokenVerificationError(
                f"{self.name} has incorrect algorithm "
                f"{header.get('alg')}"
            )
        kid = header.get("kid")
        if not kid:
            raise TokenVerificationError(f"{self.name} has no kid claim")
        key = await self._key_manager.get_public_key(kid)
        try:
            claims = jwt.decode(
                token,
                key=key,
                algorithms=["RS256"],
                audience=self.project_id,
                issuer=self.issuer,
                leeway=0,
                options={"require": ["exp", "iat", "sub"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenVerificationError(f"{self.name} has expired") from e
        except jwt.InvalidTokenError as e:
            raise TokenVerificationError(
                f"Invalid {self.name}: {e}"
            ) from e
        sub = claims.get("sub")
        if not isinstance(sub, str) or not sub or len(sub) > 128:
            raise TokenVerificationError(
                f"{self.name} has an invalid subject"
            )
        auth_time = claims.get("auth_time")
        if auth_time is not None and (
            auth_time > time.time() + CLOCK_SKEW_SECONDS
        ):
            raise TokenVerificationError(
                f"{self.name} has an auth time in the future"
            )
        return DecodedToken(
            uid=sub,
            aud=claims["aud"],
            iss=claims["iss"],
            sub=sub,
            exp=claims["exp"],
            iat=claims["iat"],
            auth_time=auth_time,
            claims=claims,
        )
