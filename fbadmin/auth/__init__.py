from ._keys import PublicKeyManager
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
    MfaInfo,
    OidcProviderConfig,
    OidcProviderConfigRequest,
    OidcResponseType,
    ProviderUserInfo,
    SamlCertificate,
    SamlIdpConfig,
    SamlProviderConfig,
    SamlProviderConfigRequest,
    SamlSpConfig,
    Tenant,
    TenantRequest,
    UpdateUserRequest,
    UserImportHash,
    UserImportRecord,
    UserMetadata,
    UserRecord,
)
from ._verifier import TokenVerifier
from .component import Auth, ProjectConfigManager, TenantManager

__all__ = [
    "ActionCodeSettings",
    "Auth",
    "CreateUserRequest",
    "DecodedToken",
    "EmailActionType",
    "ImportUsersResult",
    "ListOidcProviderConfigsResponse",
    "ListSamlProviderConfigsResponse",
    "ListTenantsResponse",
    "ListUsersResponse",
    "MfaInfo",
    "OidcProviderConfig",
    "OidcProviderConfigRequest",
    "OidcResponseType",
    "ProjectConfigManager",
    "ProviderUserInfo",
    "PublicKeyManager",
    "SamlCertificate",
    "SamlIdpConfig",
    "SamlProviderConfig",
    "SamlProviderConfigRequest",
    "SamlSpConfig",
    "Tenant",
    "TenantManager",
    "TenantRequest",
    "TokenVerifier",
    "UpdateUserRequest",
    "UserImportHash",
    "UserImportRecord",
    "UserMetadata",
    "UserRecord",
]
