import pytest
from fbadmin.auth import (
    Auth,
    OidcProviderConfigRequest,
    OidcResponseType,
    SamlCertificate,
    SamlIdpConfig,
    SamlProviderConfigRequest,
    SamlSpConfig,
)
from fbadmin.core.exceptions import BadRequestError, NotFoundError

from common import PROJECT_ID, MockServer, get_error

BASE_PATH = f"/v2/projects/{PROJECT_ID}"

OIDC_CONFIG = {
    "name": f"projects/{PROJECT_ID}/oauthIdpConfigs/oidc.provider",
    "displayName": "Provider",
    "enabled": True,
    "clientId": "client",
    "issuer": "https://issuer.example.com",
    "responseType": {"idToken": True},
}

SAML_CONFIG = {
    "name": f"projects/{PROJECT_ID}/inboundSamlConfigs/saml.provider",
    "enabled": True,
    "idpConfig": {
        "idpEntityId": "idp",
        "ssoUrl": "https://idp.example.com/sso",
        "idpCertificates": [{"x509Certificate": "CERT"}],
    },
    "spConfig": {
        "spEntityId": "sp",
        "callbackUri": "https://app.example.com/__/auth/handler",
    },
}


@pytest.mark.asyncio
async def test_create_oidc_provider_config():
    server = MockServer().add(200, json=OIDC_CONFIG)
    auth = Auth(server.get_transport(), PROJECT_ID)
    config = await auth.project_config_manager().create_oidc_provider_config(
        "oidc.provider",
        OidcProviderConfigRequest(
            display_name="Provider",
            enabled=True,
            client_id="client",
            issuer="https://issuer.example.com",
            response_type=OidcResponseType(id_token=True),
        ),
    )
    assert config.provider_id == "oidc.provider"
    assert config.response_type.id_token is True
    request = server.requests[0]
    assert request.method == "POST"
    assert request.url.path == f"{BASE_PATH}/oauthIdpConfigs"
    assert request.url.params["oauthIdpConfigId"] == "oidc.provider"
    assert server.get_json() == {
        "displayName": "Provider",
        "enabled": True,
        "clientId": "client",
        "issuer": "https://issuer.example.com",
        "responseType": {"idToken": True},
    }


@pytest.mark.asyncio
async def test_update_oidc_provider_config_sends_mask():
    server = MockServer().add(200, json=OIDC_CONFIG)
    auth = Auth(server.get_transport(), PROJECT_ID)
    await auth.project_config_manager().update_oidc_provider_config(
        "oidc.provider",
        OidcProviderConfigRequest(
            enabled=False, response_type=OidcResponseType(code=True)
        ),
    )
    request = server.requests[0]
    assert request.method == "PATCH"
    assert request.url.path == f"{BASE_PATH}/oauthIdpConfigs/oidc.provider"
    assert request.url.params["updateMask"] == "enabled,responseType.code"


@pytest.mark.asyncio
async def test_update_without_properties_sends_nothing():
    server = MockServer()
    manager = Auth(server.get_transport(), PROJECT_ID).project_config_manager()
    with pytest.raises(BadRequestError):
        await manager.update_oidc_provider_config(
            "oidc.provider", OidcProviderConfigRequest()
        )
    with pytest.raises(BadRequestError):
        await manager.update_saml_provider_config(
            "saml.provider", SamlProviderConfigRequest()
        )
    assert server.requests == []


@pytest.mark.asyncio
async def test_get_missing_oidc_provider_config():
    server = MockServer().add(
        404, json=get_error(404, "CONFIGURATION_NOT_FOUND", "NOT_FOUND")
    )
    manager = Auth(server.get_transport(), PROJECT_ID).project_config_manager()
    with pytest.raises(NotFoundError):
        await manager.get_oidc_provider_config("oidc.missing")


@pytest.mark.asyncio
async def test_list_oidc_provider_configs():
    server = MockServer().add(
        200,
        json={"oauthIdpConfigs": [OIDC_CONFIG], "nextPageToken": "next"},
    )
    manager = Auth(server.get_transport(), PROJECT_ID).project_config_manager()
    result = await manager.list_oidc_provider_configs(
        page_size=10, page_token="token"
    )
    assert [c.provider_id for c in result.oauth_idp_configs] == [
        "oidc.provider"
    ]
    assert result.next_page_token == "next"
    params = server.requests[0].url.params
    assert params["pageSize"] == "10"
    assert params["pageToken"] == "token"


@pytest.mark.asyncio
async def test_create_saml_provider_config():
    server = MockServer().add(200, json=SAML_CONFIG)
    manager = Auth(server.get_transport(), PROJECT_ID).project_config_manager()
    config = await manager.create_saml_provider_config(
        "saml.provider",
        SamlProviderConfigRequest(
            enabled=True,
            idp_config=SamlIdpConfig(
                idp_entity_id="idp",
                sso_url="https://idp.example.com/sso",
                idp_certificates=[SamlCertificate(x509_certificate="CERT")],
            ),
            sp_config=SamlSpConfig(
                sp_entity_id="sp",
                callback_uri="https://app.example.com/__/auth/handler",
            ),
        ),
    )
    assert config.provider_id == "saml.provider"
    assert config.idp_config.idp_certificates[0].x509_certificate == "CERT"
    request = server.requests[0]
    assert request.url.path == f"{BASE_PATH}/inboundSamlConfigs"
    assert request.url.params["inboundSamlConfigId"] == "saml.provider"
    body = server.get_json()
    assert body["idpConfig"]["idpCertificates"] == [
        {"x509Certificate": "CERT"}
    ]
    assert body["spConfig"]["spEntityId"] == "sp"


@pytest.mark.asyncio
async def test_update_saml_provider_config_masks_nested_fields():
    server = MockServer().add(200, json=SAML_CONFIG)
    manager = Auth(server.get_transport(), PROJECT_ID).project_config_manager()
    await manager.update_saml_provider_config(
        "saml.provider",
        SamlProviderConfigRequest(
            display_name="SAML",
            idp_config=SamlIdpConfig(sso_url="https://idp.example.com/new"),
            sp_config=SamlSpConfig(callback_uri="https://app.example.com/cb"),
        ),
    )
    assert server.requests[0].url.params["updateMask"] == (
        "displayName,idpConfig.ssoUrl,spConfig.callbackUri"
    )


@pytest.mark.asyncio
async def test_delete_and_list_saml_provider_configs():
    server = MockServer()
    server.add(200, json={})
    server.add(200, json={})
    manager = Auth(server.get_transport(), PROJECT_ID).project_config_manager()
    await manager.delete_saml_provider_config("saml.provider")
    result = await manager.list_saml_provider_configs()
    assert result.inbound_saml_configs == []
    assert result.next_page_token is None
    delete, list_request = server.requests
    assert delete.method == "DELETE"
    assert delete.url.path == f"{BASE_PATH}/inboundSamlConfigs/saml.provider"
    assert list_request.url.params["pageSize"] == "100"
    assert "pageToken" not in list_request.url.params


@pytest.mark.parametrize(
    "provider_id",
    ["provider", "oidc.", "saml.provider"],
)
@pytest.mark.asyncio
async def test_invalid_oidc_provider_id(provider_id: str):
    server = MockServer()
    manager = Auth(server.get_transport(), PROJECT_ID).project_config_manager()
    with pytest.raises(BadRequestError):
        await manager.delete_oidc_provider_config(provider_id)
    assert server.requests == []
