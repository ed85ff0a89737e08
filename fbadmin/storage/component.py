"""
Cloud Storage for Firebase over the Cloud Storage JSON API.
"""

from __future__ import annotations

__all__ = ["Storage"]

from fbadmin.core import Transport

from ._bucket import Bucket

BASE_URL = "https://storage.googleapis.com/storage/v1"
UPLOAD_URL = "https://storage.googleapis.com/upload/storage/v1"


class Storage:
    """Cloud Storage client.

    Attributes:
        project_id: Google Cloud project id.
        default_bucket: Bucket used when no name is given.
    """

    project_id: str
    default_bucket: str

    _transport: Transport
    _base_url: str
    _upload_url: str

    def __init__(
        self,
        transport: Transport,
        project_id: str,
        default_bucket: str | None = None,
        base_url: str = BASE_URL,
        upload_url: str = UPLOAD_URL,
    ):
        """Initialize.

        Args:
            transport:
                Authenticated transport.
            project_id:
                Google Cloud project id.
            default_bucket:
                Default bucket name. Defaults to
                "{project_id}.appspot.com".
            base_url:
                JSON API base URL.
            upload_url:
                Upload API base URL.
        """
        self._transport = transport
        self.project_id = project_id
        self.default_bucket = default_bucket or f"{project_id}.appspot.com"
        self._base_url = base_url.rstrip("/")
        self._upload_url = upload_url.rstrip("/")

    def bucket(self, name: str | None = None) -> Bucket:
        return Bucket(
            self._transport,
            name or self.default_bucket,
            self._base_url,
            self._upload_url,
        )
