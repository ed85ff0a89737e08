import pytest
from fbadmin import FirebaseApp
from fbadmin.core.exceptions import ConfigError

from common import DOCUMENTS_PATH, PROJECT_ID, MockServer


def test_project_id_from_options():
    app = FirebaseApp(project_id=PROJECT_ID, access_token="test-token")
    assert app.project_id == PROJECT_ID
    assert app.firestore().documents_path == DOCUMENTS_PATH
    assert app.storage().bucket().name == f"{PROJECT_ID}.appspot.com"
    assert app.auth(tenant_id="tenant-1").tenant_id == "tenant-1"


def test_missing_project_id():
    app = FirebaseApp(access_token="test-token")
    with pytest.raises(ConfigError):
        app.project_id


@pytest.mark.asyncio
async def test_services_share_transport():
    server = MockServer().add(404, json={}).add(200, json={})
    async with FirebaseApp(
        project_id=PROJECT_ID,
        access_token="test-token",
        max_retries=0,
        client=server.get_client(),
    ) as app:
        snapshot = await app.firestore().doc("users/alice").get()
        await app.crashlytics().delete_crash_reports("1:1:web:1", "alice")
        assert app.firestore()._transport is app.crashlytics()._transport

    assert not snapshot.exists
    assert [r.headers["authorization"] for r in server.requests] == [
        "Bearer test-token",
        "Bearer test-token",
    ]
