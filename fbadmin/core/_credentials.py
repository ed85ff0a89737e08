from __future__ import annotations

import json
from typing import Any

from .exceptions import ConfigError

SCOPES = [
    "https://www.googleapis.com/auth/cloud-platform",
    "https://www.googleapis.com/auth/datastore",
    "https://www.googleapis.com/auth/firebase",
    "https://www.googleapis.com/auth/userinfo.email",
]


class GoogleCredentials:
    """Google credentials from a service account, an access token
    or the application default credentials.
    """

    service_account_info: dict | None
    service_account_file: str | None
    access_token: str | None

    _credentials: Any
    _project_id: str | None

    def __init__(
        self,
        service_account_info: str | dict | None = None,
        service_account_file: str | None = None,
        access_token: str | None = None,
    ):
        """Initialize.

        Args:
            service_account_info:
                Google service account info with serialized credentials.
            service_account_file:
                Google service account file with credentials.
            access_token:
                Google access token.
        """
        self.service_account_info = (
            json.loads(service_account_info)
            if isinstance(service_account_info, str)
            else service_account_info
        )
        self.service_account_file = service_account_file
        self.access_token = access_token
        self._credentials = None
        self._project_id = None
        if self.service_account_info is None and service_account_file:
            with open(service_account_file, "r", encoding="utf-8") as f:
                self.service_account_info = json.load(f)

    def get_credentials(self) -> Any:
        if self._credentials:
            return self._credentials

        if self.service_account_info is not None:
            from google.oauth2 import service_account

            self._credentials = (
                service_account.Credentials.from_service_account_info(
                    self.service_account_info, scopes=SCOPES
                )
            )
            self._project_id = self.service_account_info.get("project_id")
        elif self.access_token is not None:
            from google.oauth2.credentials import Credentials

            self._credentials = Credentials(token=self.access_token)
        else:
            import google.auth

            self._credentials, self._project_id = google.auth.default(
                scopes=SCOPES
            )
        return self._credentials

    def refresh(self) -> None:
        from google.auth.transport.requests import Request

        self.get_credentials().refresh(Request())

    def get_project_id(self) -> str | None:
        if self.service_account_info is not None:
            return self.service_account_info.get("project_id")
        if self.access_token is not None:
            return None
        self.get_credentials()
        return self._project_id

    def get_service_account_email(self) -> str:
        if self.service_account_info is not None:
            email = self.service_account_info.get("client_email")
            if email:
                return email
        credentials = self.get_credentials()
        email = getattr(credentials, "service_account_email", None)
        if not email:
            raise ConfigError("Service account email is required")
        return email

    def get_private_key(self) -> str:
        if self.service_account_info is not None:
            key = self.service_account_info.get("private_key")
            if key:
                return key
        raise ConfigError("Service account private key is required")

    def sign_bytes(self, message: bytes) -> bytes:
        credentials = self.get_credentials()
        if not hasattr(credentials, "sign_bytes"):
            raise ConfigError("Credentials can not sign bytes")
        return credentials.sign_bytes(message)
