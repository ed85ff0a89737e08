from urllib.parse import parse_qs, urlparse

import pytest
from fbadmin.core import GoogleCredentials
from fbadmin.core.exceptions import BadRequestError, ForbiddenError
from fbadmin.storage import ObjectMetadata, Storage

from common import PROJECT_ID, MockServer, get_error
from common.keys import CLIENT_EMAIL, SigningKey

BUCKET = f"{PROJECT_ID}.appspot.com"
OBJECT_URL = (
    f"https://storage.googleapis.com/storage/v1/b/{BUCKET}/o/images%2Fcat.png"
)
METADATA = {
    "name": "images/cat.png",
    "bucket": BUCKET,
    "contentType": "image/png",
    "size": "4",
    "generation": "1",
    "metadata": {"owner": "alice"},
}


def test_default_bucket():
    storage = Storage(MockServer().get_transport(), PROJECT_ID)
    assert storage.bucket().name == BUCKET
    assert storage.bucket("other").name == "other"

    storage = Storage(
        MockServer().get_transport(), PROJECT_ID, default_bucket="custom"
    )
    assert storage.bucket().name == "custom"


@pytest.mark.asyncio
async def test_save():
    server = MockServer().add(200, json=METADATA)
    storage = Storage(server.get_transport(), PROJECT_ID)

    metadata = await storage.bucket().file("images/cat.png").save(
        b"\x89PNG", content_type="image/png"
    )

    assert metadata.content_type == "image/png"
    assert metadata.metadata == {"owner": "alice"}
    request = server.requests[0]
    assert request.method == "POST"
    assert request.url.path == f"/upload/storage/v1/b/{BUCKET}/o"
    assert request.url.params["uploadType"] == "media"
    assert request.url.params["name"] == "images/cat.png"
    assert request.headers["content-type"] == "image/png"
    assert request.content == b"\x89PNG"


@pytest.mark.asyncio
async def test_download():
    server = MockServer().add(200, content=b"\x89PNG")
    storage = Storage(server.get_transport(), PROJECT_ID)

    data = await storage.bucket().file("images/cat.png").download()

    assert data == b"\x89PNG"
    assert str(server.requests[0].url) == f"{OBJECT_URL}?alt=media"


@pytest.mark.asyncio
async def test_exists():
    server = (
        MockServer()
        .add(200, json=METADATA)
        .add(404, json=get_error(404, "No such object", "NOT_FOUND"))
    )
    file = Storage(server.get_transport(), PROJECT_ID).bucket().file(
        "images/cat.png"
    )

    assert await file.exists()
    assert not await file.exists()
    assert str(server.requests[0].url) == OBJECT_URL


@pytest.mark.asyncio
async def test_exists_propagates_other_errors():
    server = MockServer().add(
        403, json=get_error(403, "Forbidden", "PERMISSION_DENIED")
    )
    file = Storage(server.get_transport(), PROJECT_ID).bucket().file("a")
    with pytest.raises(ForbiddenError):
        await file.exists()


@pytest.mark.asyncio
async def test_set_metadata():
    server = MockServer().add(200, json=METADATA)
    file = Storage(server.get_transport(), PROJECT_ID).bucket().file(
        "images/cat.png"
    )

    await file.set_metadata(
        ObjectMetadata(cache_control="no-cache", metadata={"owner": "bob"})
    )

    assert server.requests[0].method == "PATCH"
    assert server.get_json() == {
        "cacheControl": "no-cache",
        "metadata": {"owner": "bob"},
    }


@pytest.mark.asyncio
async def test_delete():
    server = MockServer().add(204)
    file = Storage(server.get_transport(), PROJECT_ID).bucket().file(
        "images/cat.png"
    )

    await file.delete()

    assert server.requests[0].method == "DELETE"
    assert str(server.requests[0].url) == OBJECT_URL


@pytest.mark.asyncio
async def test_list_files_follows_pages():
    server = (
        MockServer()
        .add(
            200,
            json={
                "items": [{"name": "images/a.png"}, {"name": "images/b.png"}],
                "nextPageToken": "p2",
            },
        )
        .add(200, json={"items": [{"name": "images/c.png"}]})
    )
    bucket = Storage(server.get_transport(), PROJECT_ID).bucket()

    files = await bucket.list_files(prefix="images/", page_size=2)

    assert [f.name for f in files] == [
        "images/a.png",
        "images/b.png",
        "images/c.png",
    ]
    params = server.requests[1].url.params
    assert params["prefix"] == "images/"
    assert params["maxResults"] == "2"
    assert params["pageToken"] == "p2"


def test_signed_url():
    key = SigningKey()
    server = MockServer()
    transport = server.get_transport(
        credentials=GoogleCredentials(
            service_account_info=key.get_service_account_info()
        )
    )
    file = Storage(transport, PROJECT_ID).bucket().file("images/cat.png")

    url = urlparse(file.get_signed_url(expires_in=600))

    assert url.netloc == "storage.googleapis.com"
    assert url.path == f"/{BUCKET}/images/cat.png"
    query = parse_qs(url.query)
    assert query["X-Goog-Algorithm"] == ["GOOG4-RSA-SHA256"]
    assert query["X-Goog-Credential"][0].startswith(f"{CLIENT_EMAIL}/")
    assert query["X-Goog-Expires"] == ["600"]
    assert query["X-Goog-SignedHeaders"] == ["host"]
    assert len(query["X-Goog-Signature"][0]) == 512
    assert server.requests == []


def test_signed_url_expiry_bounds():
    file = Storage(MockServer().get_transport(), PROJECT_ID).bucket().file(
        "a"
    )
    with pytest.raises(BadRequestError):
        file.get_signed_url(expires_in=8 * 24 * 3600)


def test_empty_file_name():
    bucket = Storage(MockServer().get_transport(), PROJECT_ID).bucket()
    with pytest.raises(BadRequestError):
        bucket.file("")
