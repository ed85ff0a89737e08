"""
Firebase Remote Config templates over the REST API.
"""

from __future__ import annotations

__all__ = ["RemoteConfig"]

from typing import Any

import httpx

from fbadmin.core import Transport, parse_json, raise_for_response
from fbadmin.core.exceptions import BadRequestError

from ._models import (
    ListVersionsOptions,
    ListVersionsResult,
    RemoteConfigTemplate,
)

BASE_URL = "https://firebaseremoteconfig.googleapis.com"


class RemoteConfig:
    """Remote Config client.

    Attributes:
        project_id: Google Cloud project id.
    """

    project_id: str

    _transport: Transport
    _url: str

    def __init__(
        self,
        transport: Transport,
        project_id: str,
        base_url: str = BASE_URL,
    ):
        self._transport = transport
        self.project_id = project_id
        self._url = (
            f"{base_url.rstrip('/')}/v1/projects/{project_id}/remoteConfig"
        )

    async def get(self) -> RemoteConfigTemplate:
        """Get the active template."""
        response = await self._transport.send("GET", self._url)
        return _parse_template(response, "Failed to get template")

    async def publish(
        self, template: RemoteConfigTemplate, validate_only: bool = False
    ) -> RemoteConfigTemplate:
        """Publish a template.

        The publish fails with PreconditionFailedError if the
        template changed since it was read.

        Args:
            template:
                Template with the ETag it was read with.
            validate_only:
                Validate without publishing.
        """
        if not template.etag:
            raise BadRequestError("Template must have an ETag to publish")
        params = {"validateOnly": "true"} if validate_only else None
        response = await self._transport.send(
            "PUT",
            self._url,
            json=template.to_dict(),
            params=params,
            headers={"If-Match": template.etag},
        )
        return _parse_template(response, "Failed to publish template")

    async def list_versions(
        self, options: ListVersionsOptions | None = None
    ) -> ListVersionsResult:
        params: dict[str, Any] = options.to_dict() if options else {}
        response = await self._transport.send(
            "GET", f"{self._url}:listVersions", params=params
        )
        raise_for_response(response, "Failed to list versions")
        return ListVersionsResult.from_dict(parse_json(response))

    async def rollback(
        self, version_number: str | int
    ) -> RemoteConfigTemplate:
        """Publish a previous version of the template as a new version."""
        response = await self._transport.send(
            "POST",
            f"{self._url}:rollback",
            json={"versionNumber": str(version_number)},
        )
        return _parse_template(response, "Failed to rollback template")


def _parse_template(
    response: httpx.Response, default_message: str
) -> RemoteConfigTemplate:
    raise_for_response(response, default_message)
    template = RemoteConfigTemplate.from_dict(parse_json(response))
    template.etag = response.headers.get("etag")
    return template
