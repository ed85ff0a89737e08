"""
Firebase Authentication over the Identity Toolkit REST API.
"""

from __future__ import annotations

__all__ = ["Auth", "ProjectConfigManager", "TenantManager"]

import json
import time
from datetime import timedelta
from typing import Any

import jwt

from fbadmin.core import Transport, parse_json, raise_for_response
from fbadmin.core.exceptions import (
    BadRequestError,
    ConfigError,
    ImportUserError,
    ImportUsersError,
    TokenVerificationError,
    UserNotFoundError,
)

from ._keys import ID_TOKEN_CERT_URL, SESSION_COOKIE_CERT_URL, PublicKeyManager
from ._models import (
    ActionCodeSettings,
    CreateUserRequest,
    DecodedToken,
    EmailActionType,
    ImportUsersResult,
    ListOidcProviderConfigsResponse,
    ListSamlProviderConfigsResponse,
    ListTenantsResponse,
    ListUsersResponse,
    OidcProviderConfig,
    OidcProviderConfigRequest,
    SamlProviderConfig,
    SamlProviderConfigRequest,
    Tenant,
    TenantRequest,
    UpdateUserRequest,
    UserImportHash,
    UserImportRecord,
    UserRecord,
)
from ._verifier import ID_TOKEN_ISSUER, SESSION_COOKIE_ISSUER, TokenVerifier

BASE_URL = "https://identitytoolkit.googleapis.com"
CUSTOM_TOKEN_AUDIENCE = (
    "https://identitytoolkit.googleapis.com/"
    "google.identity.identitytoolkit.v1.IdentityToolkit"
)
MAX_IMPORT_USERS = 1000
MAX_LIST_USERS = 1000
MAX_CLAIMS_LENGTH = 1000
MIN_SESSION_DURATION = 300
MAX_SESSION_DURATION = 14 * 24 * 3600
OIDC_PREFIX = "oidc."
SAML_PREFIX = "saml."

RESERVED_CLAIMS = frozenset(
    [
        "acr",
        "amr",
        "at_hash",
        "aud",
        "auth_time",
        "azp",
        "cnf",
        "c_hash",
        "exp",
        "firebase",
        "iat",
        "iss",
        "jti",
        "nbf",
        "nonce",
        "sub",
    ]
)


class Auth:
    """Firebase Authentication client.

    Attributes:
        project_id: Google Cloud project id.
        tenant_id: Tenant the client is scoped to, if any.
    """

    project_id: str
    tenant_id: str | None

    _transport: Transport
    _base_url: str
    _id_token_verifier: TokenVerifier
    _session_cookie_verifier: TokenVerifier

    def __init__(
        self,
        transport: Transport,
        project_id: str,
        tenant_id: str | None = None,
        base_url: str = BASE_URL,
    ):
        """Initialize.

        Args:
            transport:
                Authenticated transport.
            project_id:
                Google Cloud project id.
            tenant_id:
                Identity Platform tenant id. Users and tokens
                are scoped to the tenant when set.
            base_url:
                Identity Toolkit base URL.
        """
        self._transport = transport
        self.project_id = project_id
        self.tenant_id = tenant_id
        self._base_url = f"{base_url.rstrip('/')}/v1/projects/{project_id}"
        if tenant_id:
            self._base_url = f"{self._base_url}/tenants/{tenant_id}"
        self._id_token_verifier = TokenVerifier(
            PublicKeyManager(transport.client, ID_TOKEN_CERT_URL),
            project_id,
            ID_TOKEN_ISSUER,
            "ID token",
        )
        self._session_cookie_verifier = TokenVerifier(
            PublicKeyManager(transport.client, SESSION_COOKIE_CERT_URL),
            project_id,
            SESSION_COOKIE_ISSUER,
            "Session cookie",
        )

    async def create_user(self, request: CreateUserRequest) -> UserRecord:
        response = await self.request(
            "POST", "/accounts", "Failed to create user", request.to_dict()
        )
        return await self.get_user(response["localId"])

    async def update_user(self, request: UpdateUserRequest) -> UserRecord:
        await self.request(
            "POST",
            "/accounts:update",
            "Failed to update user",
            request.to_dict(),
        )
        return await self.get_user(request.uid)

    async def delete_user(self, uid: str) -> None:
        await self.request(
            "POST",
            "/accounts:delete",
            "Failed to delete user",
            {"localId": uid},
        )

    async def get_user(self, uid: str) -> UserRecord:
        return await self._lookup({"localId": [uid]}, f"uid {uid}")

    async def get_user_by_email(self, email: str) -> UserRecord:
        return await self._lookup({"email": [email]}, f"email {email}")

    async def get_user_by_phone_number(self, phone_number: str) -> UserRecord:
        return await self._lookup(
            {"phoneNumber": [phone_number]}, f"phone number {phone_number}"
        )

    async def list_users(
        self,
        max_results: int = MAX_LIST_USERS,
        page_token: str | None = None,
    ) -> ListUsersResponse:
        """List a page of users.

        Args:
            max_results:
                Page size, at most 1000.
            page_token:
                Token of the page to read, from the previous
                response.
        """
        if max_results < 1 or max_results > MAX_LIST_USERS:
            raise BadRequestError(
                f"max_results must be between 1 and {MAX_LIST_USERS}"
            )
        params: dict[str, Any] = {"maxResults": max_results}
        if page_token:
            params["nextPageToken"] = page_token
        response = await self.request(
            "GET", "/accounts", "Failed to list users", params=params
        )
        return ListUsersResponse.from_dict(response)

    async def set_custom_user_claims(
        self, uid: str, claims: dict[str, Any] | None
    ) -> None:
        """Replace the custom claims of a user.

        Claims are added to the ID tokens issued for the user.
        None removes every custom claim.
        """
        claims = claims or {}
        validate_claims(claims)
        serialized = json.dumps(claims)
        if len(serialized) > MAX_CLAIMS_LENGTH:
            raise BadRequestError(
                f"Custom claims must not exceed {MAX_CLAIMS_LENGTH} "
                "characters"
            )
        await self.request(
            "POST",
            "/accounts:update",
            "Failed to set custom claims",
            UpdateUserRequest(
                uid=uid, custom_attributes=serialized
            ).to_dict(),
        )

    async def revoke_refresh_tokens(self, uid: str) -> None:
        """Revoke every refresh token of a user issued before now."""
        await self.request(
            "POST",
            "/accounts:update",
            "Failed to revoke refresh tokens",
            UpdateUserRequest(
                uid=uid, valid_since=str(int(time.time()))
            ).to_dict(),
        )

    async def import_users(
        self,
        users: list[UserImportRecord],
        hash: UserImportHash | None = None,
    ) -> ImportUsersResult:
        """Import users in bulk.

        Args:
            users:
                Users to import, at most 1000.
            hash:
                Algorithm of the imported password hashes.
                Required when any user has a password hash.

        Raises:
            ImportUsersError:
                One or more users were rejected. The error
                lists every rejected user by its index.
        """
        if not users or len(users) > MAX_IMPORT_USERS:
            raise BadRequestError(
                f"Users must be a non-empty list of at most "
                f"{MAX_IMPORT_USERS} users"
            )
        if hash is None and any(u.password_hash for u in users):
            raise BadRequestError(
                "A hash algorithm is required to import password hashes"
            )
        body: dict[str, Any] = {"users": [u.to_dict() for u in users]}
        if hash is not None:
            body.update(hash.to_dict())
        response = await self.request(
            "POST", "/accounts:batchCreate", "Failed to import users", body
        )
        errors = [
            ImportUserError(e.get("index", 0), e.get("message", ""))
            for e in response.get("error") or []
        ]
        if errors:
            raise ImportUsersError(errors)
        return ImportUsersResult(success_count=len(users))

    async def generate_password_reset_link(
        self, email: str, settings: ActionCodeSettings | None = None
    ) -> str:
        return await self._generate_email_link(
            EmailActionType.PASSWORD_RESET, email, settings
        )

    async def generate_email_verification_link(
        self, email: str, settings: ActionCodeSettings | None = None
    ) -> str:
        return await self._generate_email_link(
            EmailActionType.VERIFY_EMAIL, email, settings
        )

    async def generate_sign_in_with_email_link(
        self, email: str, settings: ActionCodeSettings
    ) -> str:
        return await self._generate_email_link(
            EmailActionType.EMAIL_SIGNIN, email, settings
        )

    def create_custom_token(
        self, uid: str, claims: dict[str, Any] | None = None
    ) -> str:
        """Create a custom token for a client to sign in with.

        Args:
            uid:
                User id, 1 to 128 characters.
            claims:
                Developer claims copied into the ID token.

        Returns:
            RS256 JWT signed with the service account key,
            valid for one hour.
        """
        if not uid or len(uid) > 128:
            raise BadRequestError("uid must be 1 to 128 characters")
        if claims:
            validate_claims(claims)
        credentials = self._transport.credentials
        email = credentials.get_service_account_email()
        private_key = credentials.get_private_key()
        now = int(time.time())
        payload: dict[str, Any] = {
            "iss": email,
            "sub": email,
            "aud": CUSTOM_TOKEN_AUDIENCE,
            "iat": now,
            "exp": now + 3600,
            "uid": uid,
        }
        if claims:
            payload["claims"] = claims
        if self.tenant_id:
            payload["tenant_id"] = self.tenant_id
        try:
            return jwt.encode(payload, private_key, algorithm="RS256")
        except (ValueError, TypeError) as e:
            raise ConfigError(f"Failed to sign custom token: {e}") from e

    async def create_session_cookie(
        self, id_token: str, expires_in: int | timedelta
    ) -> str:
        """Exchange an ID token for a session cookie.

        Args:
            id_token:
                ID token of a signed in user.
            expires_in:
                Cookie lifetime in seconds, 5 minutes to 14 days.
        """
        if isinstance(expires_in, timedelta):
            expires_in = int(expires_in.total_seconds())
        if not (MIN_SESSION_DURATION <= expires_in <= MAX_SESSION_DURATION):
            raise BadRequestError(
                "expires_in must be between 5 minutes and 14 days"
            )
        response = await self.request(
            "POST",
            ":createSessionCookie",
            "Failed to create session cookie",
            {"idToken": id_token, "validDuration": expires_in},
        )
        return response["sessionCookie"]

    async def verify_id_token(
        self, id_token: str, check_revoked: bool = False
    ) -> DecodedToken:
        """Verify an ID token.

        Args:
            id_token:
                ID token from a client.
            check_revoked:
                Also fail if the user is disabled or the
                token was issued before its tokens were revoked.
        """
        decoded = await self._id_token_verifier.verify(id_token)
        return await self._check_token(decoded, check_revoked)

    async def verify_session_cookie(
        self, session_cookie: str, check_revoked: bool = False
    ) -> DecodedToken:
        decoded = await self._session_cookie_verifier.verify(session_cookie)
        return await self._check_token(decoded, check_revoked)

    def tenant_manager(self) -> TenantManager:
        return TenantManager(self._transport, self.project_id)

    def project_config_manager(self) -> ProjectConfigManager:
        return ProjectConfigManager(self._transport, self.project_id)

    async def request(
        self,
        method: str,
        path: str,
        default_message: str,
        json: Any = None,
        params: dict | None = None,
    ) -> Any:
        response = await self._transport.send(
            method, f"{self._base_url}{path}", json=json, params=params
        )
        raise_for_response(response, default_message)
        return parse_json(response)

    async def _lookup(self, body: dict, description: str) -> UserRecord:
        response = await self.request(
            "POST", "/accounts:lookup", "Failed to get user", body
        )
        users = response.get("users") or []
        if not users:
            raise UserNotFoundError(
                f"No user record found for {description}"
            )
        return UserRecord.from_dict(users[0])

    async def _generate_email_link(
        self,
        type: EmailActionType,
        email: str,
        settings: ActionCodeSettings | None,
    ) -> str:
        if not email:
            raise BadRequestError("email must not be empty")
        body: dict[str, Any] = {
            "requestType": type.value,
            "email": email,
            "returnOobLink": True,
        }
        if settings is not None:
            body.update(settings.to_dict())
        response = await self.request(
            "POST",
            "/accounts:sendOobCode",
            "Failed to generate email action link",
            body,
        )
        return response["oobLink"]

    async def _check_token(
        self, decoded: DecodedToken, check_revoked: bool
    ) -> DecodedToken:
        if self.tenant_id and decoded.tenant_id != self.tenant_id:
            raise TokenVerificationError(
                f"Token tenant {decoded.tenant_id} does not match "
                f"{self.tenant_id}"
            )
        if not check_revoked:
            return decoded
        user = await self.get_user(decoded.uid)
        if user.disabled:
            raise TokenVerificationError("User is disabled")
        if user.valid_since and decoded.auth_time is not None:
            if decoded.auth_time < int(user.valid_since):
                raise TokenVerificationError("Token has been revoked")
        return decoded


class TenantManager:
    """Manages Identity Platform tenants of a project."""

    project_id: str

    _transport: Transport
    _base_url: str
    _base_root: str

    def __init__(
        self,
        transport: Transport,
        project_id: str,
        base_url: str = BASE_URL,
    ):
        self._transport = transport
        self.project_id = project_id
        self._base_root = base_url.rstrip("/")
        self._base_url = (
            f"{self._base_root}/v2/projects/{project_id}/tenants"
        )

    def auth_for_tenant(self, tenant_id: str) -> Auth:
        """Get an Auth client scoped to a tenant."""
        return Auth(
            self._transport,
            self.project_id,
            tenant_id=tenant_id,
            base_url=self._base_root,
        )

    async def create_tenant(self, request: TenantRequest) -> Tenant:
        response = await self._request(
            "POST", "", "Failed to create tenant", json=request.to_dict()
        )
        return Tenant.from_dict(response)

    async def get_tenant(self, tenant_id: str) -> Tenant:
        response = await self._request(
            "GET", f"/{tenant_id}", "Failed to get tenant"
        )
        return Tenant.from_dict(response)

    async def update_tenant(
        self, tenant_id: str, request: TenantRequest
    ) -> Tenant:
        """Update the fields set on the request."""
        body = request.to_dict()
        if not body:
            raise BadRequestError("No tenant properties to update")
        response = await self._request(
            "PATCH",
            f"/{tenant_id}",
            "Failed to update tenant",
            json=body,
            params={"updateMask": ",".join(sorted(body.keys()))},
        )
        return Tenant.from_dict(response)

    async def delete_tenant(self, tenant_id: str) -> None:
        await self._request(
            "DELETE", f"/{tenant_id}", "Failed to delete tenant"
        )

    async def list_tenants(
        self, page_size: int = 100, page_token: str | None = None
    ) -> ListTenantsResponse:
        response = await self._request(
            "GET",
            "",
            "Failed to list tenants",
            params=_get_page_params(page_size, page_token),
        )
        return ListTenantsResponse.from_dict(response)

    async def _request(
        self,
        method: str,
        path: str,
        default_message: str,
        json: Any = None,
        params: dict | None = None,
    ) -> Any:
        response = await self._transport.send(
            method, f"{self._base_url}{path}", json=json, params=params
        )
        raise_for_response(response, default_message)
        return parse_json(response)


class ProjectConfigManager:
    """Manages OIDC and SAML provider configurations of a project."""

    project_id: str

    _transport: Transport
    _base_url: str

    def __init__(
        self,
        transport: Transport,
        project_id: str,
        base_url: str = BASE_URL,
    ):
        self._transport = transport
        self.project_id = project_id
        self._base_url = f"{base_url.rstrip('/')}/v2/projects/{project_id}"

    async def create_oidc_provider_config(
        self, provider_id: str, request: OidcProviderConfigRequest
    ) -> OidcProviderConfig:
        """Create an OIDC provider.

        Args:
            provider_id: ID of the new provider, prefixed with "oidc.".
            request: Provider settings. Client ID and issuer are required.
        """
        validate_provider_id(provider_id, OIDC_PREFIX)
        response = await self._request(
            "POST",
            "/oauthIdpConfigs",
            "Failed to create OIDC provider config",
            json=request.to_dict(),
            params={"oauthIdpConfigId": provider_id},
        )
        return OidcProviderConfig.from_dict(response)

    async def get_oidc_provider_config(
        self, provider_id: str
    ) -> OidcProviderConfig:
        validate_provider_id(provider_id, OIDC_PREFIX)
        response = await self._request(
            "GET",
            f"/oauthIdpConfigs/{provider_id}",
            "Failed to get OIDC provider config",
        )
        return OidcProviderConfig.from_dict(response)

    async def update_oidc_provider_config(
        self, provider_id: str, request: OidcProviderConfigRequest
    ) -> OidcProviderConfig:
        """Update the fields set on the request."""
        validate_provider_id(provider_id, OIDC_PREFIX)
        response = await self._update(
            f"/oauthIdpConfigs/{provider_id}",
            "Failed to update OIDC provider config",
            request.to_dict(),
        )
        return OidcProviderConfig.from_dict(response)

    async def delete_oidc_provider_config(self, provider_id: str) -> None:
        validate_provider_id(provider_id, OIDC_PREFIX)
        await self._request(
            "DELETE",
            f"/oauthIdpConfigs/{provider_id}",
            "Failed to delete OIDC provider config",
        )

    async def list_oidc_provider_configs(
        self, page_size: int = 100, page_token: str | None = None
    ) -> ListOidcProviderConfigsResponse:
        response = await self._request(
            "GET",
            "/oauthIdpConfigs",
            "Failed to list OIDC provider configs",
            params=_get_page_params(page_size, page_token),
        )
        return ListOidcProviderConfigsResponse.from_dict(response)

    async def create_saml_provider_config(
        self, provider_id: str, request: SamlProviderConfigRequest
    ) -> SamlProviderConfig:
        """Create a SAML provider.

        Args:
            provider_id: ID of the new provider, prefixed with "saml.".
            request: Provider settings with both IdP and SP config.
        """
        validate_provider_id(provider_id, SAML_PREFIX)
        response = await self._request(
            "POST",
            "/inboundSamlConfigs",
            "Failed to create SAML provider config",
            json=request.to_dict(),
            params={"inboundSamlConfigId": provider_id},
        )
        return SamlProviderConfig.from_dict(response)

    async def get_saml_provider_config(
        self, provider_id: str
    ) -> SamlProviderConfig:
        validate_provider_id(provider_id, SAML_PREFIX)
        response = await self._request(
            "GET",
            f"/inboundSamlConfigs/{provider_id}",
            "Failed to get SAML provider config",
        )
        return SamlProviderConfig.from_dict(response)

    async def update_saml_provider_config(
        self, provider_id: str, request: SamlProviderConfigRequest
    ) -> SamlProviderConfig:
        """Update the fields set on the request.

        Nested IdP and SP fields are masked individually, so
        unset nested fields keep their value.
        """
        validate_provider_id(provider_id, SAML_PREFIX)
        response = await self._update(
            f"/inboundSamlConfigs/{provider_id}",
            "Failed to update SAML provider config",
            request.to_dict(),
        )
        return SamlProviderConfig.from_dict(response)

    async def delete_saml_provider_config(self, provider_id: str) -> None:
        validate_provider_id(provider_id, SAML_PREFIX)
        await self._request(
            "DELETE",
            f"/inboundSamlConfigs/{provider_id}",
            "Failed to delete SAML provider config",
        )

    async def list_saml_provider_configs(
        self, page_size: int = 100, page_token: str | None = None
    ) -> ListSamlProviderConfigsResponse:
        response = await self._request(
            "GET",
            "/inboundSamlConfigs",
            "Failed to list SAML provider configs",
            params=_get_page_params(page_size, page_token),
        )
        return ListSamlProviderConfigsResponse.from_dict(response)

    async def _update(
        self, path: str, default_message: str, body: dict
    ) -> Any:
        if not body:
            raise BadRequestError("No provider properties to update")
        return await self._request(
            "PATCH",
            path,
            default_message,
            json=body,
            params={"updateMask": ",".join(get_update_mask(body))},
        )

    async def _request(
        self,
        method: str,
        path: str,
        default_message: str,
        json: Any = None,
        params: dict | None = None,
    ) -> Any:
        response = await self._transport.send(
            method, f"{self._base_url}{path}", json=json, params=params
        )
        raise_for_response(response, default_message)
        return parse_json(response)


def validate_provider_id(provider_id: str, prefix: str) -> None:
    if not provider_id.startswith(prefix) or provider_id == prefix:
        raise BadRequestError(
            f"Invalid provider ID {provider_id!r}, "
            f"must start with {prefix!r}"
        )


def get_update_mask(body: dict, parent: str = "") -> list[str]:
    """Get the sorted field paths of a request body.

    Nested objects contribute their leaf paths, e.g.
    "idpConfig.ssoUrl".
    """
    paths: list[str] = []
    for key, value in body.items():
        path = f"{parent}{key}"
        if isinstance(value, dict) and value:
            paths.extend(get_update_mask(value, f"{path}."))
        else:
            paths.append(path)
    return sorted(paths)


def _get_page_params(
    page_size: int, page_token: str | None
) -> dict[str, Any]:
    params: dict[str, Any] = {"pageSize": page_size}
    if page_token:
        params["pageToken"] = page_token
    return params


def validate_claims(claims: dict[str, Any]) -> None:
    reserved = sorted(RESERVED_CLAIMS.intersection(claims))
    if reserved:
        raise BadRequestError(
            f"Claims contain reserved names: {', '.join(reserved)}"
        )
