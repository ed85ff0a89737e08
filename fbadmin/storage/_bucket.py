from __future__ import annotations

from typing import Any

from fbadmin.core import Transport, parse_json, raise_for_response

from ._file import File


class Bucket:
    """Cloud Storage bucket.

    Attributes:
        name: Bucket name.
        url: JSON API URL of the bucket.
        upload_url: Upload API URL of the bucket.
    """

    name: str
    url: str
    upload_url: str
    transport: Transport

    def __init__(
        self,
        transport: Transport,
        name: str,
        base_url: str,
        upload_url: str,
    ):
        self.transport = transport
        self.name = name
        self.url = f"{base_url}/b/{name}"
        self.upload_url = f"{upload_url}/b/{name}"

    def file(self, name: str) -> File:
        return File(self, name)

    async def list_files(
        self, prefix: str | None = None, page_size: int = 1000
    ) -> list[File]:
        """List the objects of the bucket.

        Args:
            prefix:
                Only list objects whose name starts with prefix.
            page_size:
                Objects per request.
        """
        files: list[File] = []
        page_token = None
        while True:
            params: dict[str, Any] = {"maxResults": page_size}
            if prefix:
                params["prefix"] = prefix
            if page_token:
                params["pageToken"] = page_token
            response = await self.transport.send(
                "GET", f"{self.url}/o", params=params
            )
            raise_for_response(response, "List files failed")
            data = parse_json(response)
            for item in data.get("items", []):
                files.append(self.file(item["name"]))
            page_token = data.get("nextPageToken")
            if not page_token:
                return files

    def __repr__(self) -> str:
        return f"Bucket(name={self.name!r})"
