from __future__ import annotations

import hashlib
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from fbadmin.core import parse_json, raise_for_response
from fbadmin.core.exceptions import BadRequestError, NotFoundError

from ._models import ObjectMetadata

if TYPE_CHECKING:
    from ._bucket import Bucket

SIGNED_URL_HOST = "storage.googleapis.com"
SIGNING_ALGORITHM = "GOOG4-RSA-SHA256"
MAX_SIGNED_URL_EXPIRY = 7 * 24 * 3600


class File:
    """Object in a bucket.

    Attributes:
        bucket: Bucket of the object.
        name: Object name.
    """

    bucket: Bucket
    name: str

    def __init__(self, bucket: Bucket, name: str):
        if not name:
            raise BadRequestError("File name must not be empty")
        self.bucket = bucket
        self.name = name

    @property
    def url(self) -> str:
        return f"{self.bucket.url}/o/{quote(self.name, safe='')}"

    async def save(
        self,
        data: bytes | str,
        content_type: str = "application/octet-stream",
    ) -> ObjectMetadata:
        """Upload the content of the object in a single request."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        response = await self.bucket.transport.send(
            "POST",
            f"{self.bucket.upload_url}/o",
            params={"uploadType": "media", "name": self.name},
            content=data,
            headers={"Content-Type": content_type},
        )
        raise_for_response(response, "Upload failed")
        return ObjectMetadata.from_dict(parse_json(response))

    async def download(self) -> bytes:
        response = await self.bucket.transport.send(
            "GET", self.url, params={"alt": "media"}
        )
        raise_for_response(response, "Download failed")
        return response.content

    async def delete(self) -> None:
        response = await self.bucket.transport.send("DELETE", self.url)
        raise_for_response(response, "Delete failed")

    async def exists(self) -> bool:
        try:
            await self.get_metadata()
        except NotFoundError:
            return False
        return True

    async def get_metadata(self) -> ObjectMetadata:
        response = await self.bucket.transport.send("GET", self.url)
        raise_for_response(response, "Get metadata failed")
        return ObjectMetadata.from_dict(parse_json(response))

    async def set_metadata(self, metadata: ObjectMetadata) -> ObjectMetadata:
        """Patch the fields set on metadata."""
        response = await self.bucket.transport.send(
            "PATCH", self.url, json=metadata.to_dict()
        )
        raise_for_response(response, "Set metadata failed")
        return ObjectMetadata.from_dict(parse_json(response))

    def get_signed_url(
        self,
        method: str = "GET",
        expires_in: int | timedelta = 3600,
        content_type: str | None = None,
    ) -> str:
        """Create a V4 signed URL for the object.

        The URL is signed with the service account key of the
        credentials.

        Args:
            method:
                HTTP method the URL is valid for.
            expires_in:
                Lifetime in seconds, at most 7 days.
            content_type:
                Content type the request must send, for uploads.

        Returns:
            Signed URL.
        """
        if isinstance(expires_in, timedelta):
            expires_in = int(expires_in.total_seconds())
        if expires_in <= 0 or expires_in > MAX_SIGNED_URL_EXPIRY:
            raise BadRequestError(
                "expires_in must be between 1 second and 7 days"
            )
        credentials = self.bucket.transport.credentials
        email = credentials.get_service_account_email()
        now = datetime.now(timezone.utc)
        request_time = now.strftime("%Y%m%dT%H%M%SZ")
        scope = f"{now.strftime('%Y%m%d')}/auto/storage/goog4_request"
        headers = {"host": SIGNED_URL_HOST}
        if content_type:
            headers["content-type"] = content_type
        signed_headers = ";".join(sorted(headers))
        query: dict[str, Any] = {
            "X-Goog-Algorithm": SIGNING_ALGORITHM,
            "X-Goog-Credential": f"{email}/{scope}",
            "X-Goog-Date": request_time,
            "X-Goog-Expires": str(expires_in),
            "X-Goog-SignedHeaders": signed_headers,
        }
        query_string = "&".join(
            f"{quote(k, safe='')}={quote(v, safe='')}"
            for k, v in sorted(query.items())
        )
        path = f"/{self.bucket.name}/{quote(self.name, safe='/~')}"
        canonical_headers = "".join(
            f"{k}:{headers[k]}\n" for k in sorted(headers)
        )
        canonical_request = "\n".join(
            [
                method.upper(),
                path,
                query_string,
                canonical_headers,
                signed_headers,
                "UNSIGNED-PAYLOAD",
            ]
        )
        string_to_sign = "\n".join(
            [
                SIGNING_ALGORITHM,
                request_time,
                scope,
                hashlib.sha256(canonical_request.encode()).hexdigest(),
            ]
        )
        signature = credentials.sign_bytes(string_to_sign.encode()).hex()
        return (
            f"https://{SIGNED_URL_HOST}{path}?{query_string}"
            f"&X-Goog-Signature={signature}"
        )

    def __repr__(self) -> str:
        return f"File(bucket={self.bucket.name!r}, name={self.name!r})"
