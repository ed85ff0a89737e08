from __future__ import annotations

import json
from enum import Enum
from typing import Any

from pydantic import Field

from fbadmin.core import DataModel


class UserMetadata(DataModel):
    """User metadata.

    Attributes:
        creation_time: Creation time in milliseconds since epoch.
        last_sign_in_time: Last sign in time in milliseconds since epoch.
        last_refresh_time: Last token refresh time, RFC3339.
    """

    creation_time: str | None = None
    last_sign_in_time: str | None = None
    last_refresh_time: str | None = None


class ProviderUserInfo(DataModel):
    provider_id: str
    display_name: str | None = None
    photo_url: str | None = None
    federated_id: str | None = None
    email: str | None = None
    raw_id: str | None = None
    screen_name: str | None = None
    phone_number: str | None = None


class MfaInfo(DataModel):
    mfa_enrollment_id: str | None = None
    display_name: str | None = None
    phone_info: str | None = None
    enrolled_at: str | None = None


class UserRecord(DataModel):
    """User account.

    Attributes:
        uid: User id.
        email: Primary email.
        email_verified: Email was verified.
        display_name: Display name.
        photo_url: Photo URL.
        phone_number: Primary phone number.
        disabled: Account is disabled.
        provider_user_info: Linked identity providers.
        password_hash: Base64 password hash.
        password_salt: Base64 password salt.
        custom_attributes: Custom claims as a JSON string.
        tenant_id: Tenant of the user.
        mfa_info: Enrolled second factors.
        valid_since: Tokens issued before this time are revoked.
    """

    uid: str = Field(alias="localId")
    email: str | None = None
    email_verified: bool = False
    display_name: str | None = None
    photo_url: str | None = None
    phone_number: str | None = None
    disabled: bool = False
    created_at: str | None = None
    last_login_at: str | None = None
    last_refresh_at: str | None = None
    provider_user_info: list[ProviderUserInfo] | None = None
    password_hash: str | None = None
    password_salt: str | None = None
    custom_attributes: str | None = None
    tenant_id: str | None = None
    mfa_info: list[MfaInfo] | None = None
    valid_since: str | None = None

    @property
    def metadata(self) -> UserMetadata:
        return UserMetadata(
            creation_time=self.created_at,
            last_sign_in_time=self.last_login_at,
            last_refresh_time=self.last_refresh_at,
        )

    @property
    def custom_claims(self) -> dict[str, Any] | None:
        if not self.custom_attributes:
            return None
        return json.loads(self.custom_attributes)


class CreateUserRequest(DataModel):
    """Properties of a new user.

    Attributes:
        uid: User id, generated by the server when not set.
    """

    uid: str | None = Field(default=None, alias="localId")
    email: str | None = None
    email_verified: bool | None = None
    password: str | None = None
    display_name: str | None = None
    photo_url: str | None = None
    disabled: bool | None = None
    phone_number: str | None = None


class UpdateUserRequest(DataModel):
    """Properties to change on a user.

    Attributes:
        uid: User id.
        custom_attributes: Custom claims as a JSON string.
        valid_since: Revoke tokens issued before this time, in seconds.
        delete_attribute: Attributes to clear, e.g. DISPLAY_NAME.
        delete_provider: Providers to unlink, e.g. phone.
    """

    uid: str = Field(alias="localId")
    email: str | None = None
    email_verified: bool | None = None
    password: str | None = None
    display_name: str | None = None
    photo_url: str | None = None
    disabled: bool | None = None
    phone_number: str | None = None
    custom_attributes: str | None = None
    valid_since: str | None = None
    delete_attribute: list[str] | None = None
    delete_provider: list[str] | None = None


class ListUsersResponse(DataModel):
    users: list[UserRecord] = Field(default_factory=list)
    next_page_token: str | None = None


class UserImportHash(DataModel):
    """Password hash configuration for imported users.

    Attributes:
        hash_algorithm: Algorithm, e.g. SCRYPT, HMAC_SHA256, BCRYPT.
        signer_key: Base64 hash key.
        salt_separator: Base64 salt separator.
        rounds: Hash rounds.
        memory_cost: Memory cost for SCRYPT.
    """

    hash_algorithm: str
    signer_key: str | None = None
    salt_separator: str | None = None
    rounds: int | None = None
    memory_cost: int | None = None


class UserImportRecord(DataModel):
    uid: str = Field(alias="localId")
    email: str | None = None
    email_verified: bool | None = None
    password_hash: str | None = None
    password_salt: str | None = None
    display_name: str | None = None
    photo_url: str | None = None
    disabled: bool | None = None
    phone_number: str | None = None
    custom_attributes: str | None = None
    provider_user_info: list[ProviderUserInfo] | None = None


class ImportUsersResult(DataModel):
    """Result of a successful bulk import.

    Attributes:
        success_count: Users imported.
    """

    success_count: int


class EmailActionType(str, Enum):
    """Email action link type.

    Attributes:
        PASSWORD_RESET: Password reset.
        VERIFY_EMAIL: Email verification.
        EMAIL_SIGNIN: Sign in with email link.
    """

    PASSWORD_RESET = "PASSWORD_RESET"
    VERIFY_EMAIL = "VERIFY_EMAIL"
    EMAIL_SIGNIN = "EMAIL_SIGNIN"


class ActionCodeSettings(DataModel):
    """Settings for email action links.

    Attributes:
        url: Continue URL after the action.
        handle_code_in_app: Open the link in the mobile app.
        ios_bundle_id: iOS bundle id.
        android_package_name: Android package name.
        android_install_app: Install the Android app if missing.
        android_minimum_version: Minimum Android app version.
        dynamic_link_domain: Dynamic link domain.
    """

    url: str = Field(alias="continueUrl")
    handle_code_in_app: bool | None = Field(
        default=None, alias="canHandleCodeInApp"
    )
    ios_bundle_id: str | None = Field(default=None, alias="iOSBundleId")
    android_package_name: str | None = None
    android_install_app: bool | None = None
    android_minimum_version: str | None = None
    dynamic_link_domain: str | None = None


class DecodedToken(DataModel):
    """Verified ID token or session cookie claims.

    Attributes:
        uid: User id, same as sub.
        claims: All claims of the token.
    """

    uid: str
    aud: str
    iss: str
    sub: str
    exp: int
    iat: int
    auth_time: int | None = None
    claims: dict[str, Any] = Field(default_factory=dict)

    @property
    def tenant_id(self) -> str | None:
        firebase = self.claims.get("firebase") or {}
        return firebase.get("tenant")


class Tenant(DataModel):
    """Identity Platform tenant.

    Attributes:
        name: Resource name "projects/{p}/tenants/{id}".
    """

    name: str
    display_name: str | None = None
    allow_password_signup: bool | None = None
    enable_email_link_signin: bool | None = None
    disable_auth: bool | None = None
    enable_anonymous_user: bool | None = None
    test_phone_numbers: dict[str, str] | None = None

    @property
    def tenant_id(self) -> str:
        return self.name.rsplit("/", 1)[-1]


class TenantRequest(DataModel):
    display_name: str | None = None
    allow_password_signup: bool | None = None
    enable_email_link_signin: bool | None = None
    disable_auth: bool | None = None
    enable_anonymous_user: bool | None = None
    test_phone_numbers: dict[str, str] | None = None


class ListTenantsResponse(DataModel):
    tenants: list[Tenant] = Field(default_factory=list)
    next_page_token: str | None = None


class OidcResponseType(DataModel):
    id_token: bool | None = None
    code: bool | None = None


class OidcProviderConfig(DataModel):
    """OpenID Connect provider configuration.

    Attributes:
        name: Resource name "projects/{p}/oauthIdpConfigs/{id}".
        client_secret: Only returned when the code flow is enabled.
    """

    name: str
    display_name: str | None = None
    enabled: bool | None = None
    client_id: str | None = None
    issuer: str | None = None
    client_secret: str | None = None
    response_type: OidcResponseType | None = None

    @property
    def provider_id(self) -> str:
        return self.name.rsplit("/", 1)[-1]


class OidcProviderConfigRequest(DataModel):
    display_name: str | None = None
    enabled: bool | None = None
    client_id: str | None = None
    issuer: str | None = None
    client_secret: str | None = None
    response_type: OidcResponseType | None = None


class ListOidcProviderConfigsResponse(DataModel):
    oauth_idp_configs: list[OidcProviderConfig] = Field(
        default_factory=list
    )
    next_page_token: str | None = None


class SamlCertificate(DataModel):
    x509_certificate: str


class SamlIdpConfig(DataModel):
    """Identity provider side of a SAML configuration.

    Attributes:
        idp_entity_id: Entity ID of the identity provider.
        sso_url: Single sign-on URL of the identity provider.
        idp_certificates: Certificates used to verify assertions.
    """

    idp_entity_id: str | None = None
    sso_url: str | None = None
    sign_request: bool | None = None
    idp_certificates: list[SamlCertificate] | None = None


class SamlSpConfig(DataModel):
    sp_entity_id: str | None = None
    callback_uri: str | None = None


class SamlProviderConfig(DataModel):
    """SAML provider configuration.

    Attributes:
        name: Resource name "projects/{p}/inboundSamlConfigs/{id}".
    """

    name: str
    display_name: str | None = None
    enabled: bool | None = None
    idp_config: SamlIdpConfig | None = None
    sp_config: SamlSpConfig | None = None

    @property
    def provider_id(self) -> str:
        return self.name.rsplit("/", 1)[-1]


class SamlProviderConfigRequest(DataModel):
    display_name: str | None = None
    enabled: bool | None = None
    idp_config: SamlIdpConfig | None = None
    sp_config: SamlSpConfig | None = None


class ListSamlProviderConfigsResponse(DataModel):
    inbound_saml_configs: list[SamlProviderConfig] = Field(
        default_factory=list
    )
    next_page_token: str | None = None
