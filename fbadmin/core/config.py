"""
Application options.
"""

from __future__ import annotations

__all__ = ["AppOptions"]

import os
from typing import Any

from dotenv import dotenv_values

from .data_model import DataModel
from .exceptions import ConfigError

_ENV_MAP: dict[str, list[str]] = {
    "project_id": ["FIREBASE_PROJECT_ID", "GOOGLE_CLOUD_PROJECT"],
    "database": ["FIRESTORE_DATABASE"],
    "service_account_file": ["GOOGLE_APPLICATION_CREDENTIALS"],
    "service_account_info": ["FIREBASE_SERVICE_ACCOUNT"],
    "access_token": ["FIREBASE_ACCESS_TOKEN"],
    "storage_bucket": ["FIREBASE_STORAGE_BUCKET"],
    "tenant_id": ["FIREBASE_TENANT_ID"],
    "timeout": ["FIREBASE_HTTP_TIMEOUT"],
    "max_retries": ["FIREBASE_HTTP_MAX_RETRIES"],
    "backoff_factor": ["FIREBASE_HTTP_BACKOFF"],
}


class AppOptions(DataModel):
    """Application options.

    Attributes:
        project_id:
            Google Cloud project id. Read from the service account
            or the application default credentials when not set.
        database: Firestore database id.
        service_account_file: Path to a service account JSON file.
        service_account_info:
            Service account JSON, serialized or as a dictionary.
        access_token: Static OAuth2 access token.
        storage_bucket:
            Default Cloud Storage bucket.
            Defaults to "{project_id}.appspot.com".
        tenant_id: Identity Platform tenant for auth operations.
        timeout: HTTP timeout in seconds.
        max_retries: Transport retries for transient failures.
        backoff_factor: Base delay in seconds for exponential backoff.
    """

    project_id: str | None = None
    database: str = "(default)"
    service_account_file: str | None = None
    service_account_info: str | dict | None = None
    access_token: str | None = None
    storage_bucket: str | None = None
    tenant_id: str | None = None
    timeout: float = 60.0
    max_retries: int = 3
    backoff_factor: float = 0.5

    @classmethod
    def from_env(cls, path: str | None = ".env", **kwargs: Any) -> AppOptions:
        """Load options from an ENV file and the process environment.

        Process environment variables take precedence over the file.
        Keyword arguments take precedence over both.

        Args:
            path:
                ENV file path, defaults to ".env".
                A missing file is ignored.
        """
        items: dict[str, Any] = dict()
        if path is not None and os.path.exists(path):
            items.update(
                {k: v for k, v in dotenv_values(path).items() if v}
            )
        items.update({k: v for k, v in os.environ.items() if v})

        values: dict[str, Any] = dict()
        for field, names in _ENV_MAP.items():
            for name in names:
                if name in items:
                    values[field] = items[name]
                    break
        values.update({k: v for k, v in kwargs.items() if v is not None})
        try:
            return cls.model_validate(values)
        except ValueError as e:
            raise ConfigError(f"Invalid options: {e}") from e

    def get_storage_bucket(self) -> str | None:
        if self.storage_bucket:
            return self.storage_bucket
        if self.project_id:
            return f"{self.project_id}.appspot.com"
        return None
