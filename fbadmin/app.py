"""
Firebase application.
"""

from __future__ import annotations

__all__ = ["FirebaseApp"]

import logging
from typing import Any

import httpx

from fbadmin.auth import Auth
from fbadmin.core import AppOptions, GoogleCredentials, Transport
from fbadmin.core.exceptions import ConfigError
from fbadmin.crashlytics import Crashlytics
from fbadmin.firestore import Firestore
from fbadmin.messaging import Messaging
from fbadmin.remote_config import RemoteConfig
from fbadmin.storage import Storage

logger = logging.getLogger(__name__)


class FirebaseApp:
    """Entry point to the Firebase services of a project.

    Credentials and the HTTP transport are created on first use
    and shared by every service client of the app.

    Attributes:
        options: Application options.
    """

    options: AppOptions

    _credentials: GoogleCredentials | None
    _transport: Transport | None
    _client: httpx.AsyncClient | None
    _project_id: str | None

    def __init__(
        self,
        options: AppOptions | None = None,
        client: httpx.AsyncClient | None = None,
        **kwargs: Any,
    ):
        """Initialize.

        Args:
            options:
                Application options. Built from kwargs
                when not set.
            client:
                HTTP client for the transport. The app does
                not close a client it did not create.
            kwargs:
                Fields of AppOptions.
        """
        self.options = options or AppOptions(**kwargs)
        self._client = client
        self._credentials = None
        self._transport = None
        self._project_id = None

    @classmethod
    def from_env(cls, path: str | None = ".env", **kwargs: Any) -> FirebaseApp:
        return cls(AppOptions.from_env(path, **kwargs))

    @property
    def credentials(self) -> GoogleCredentials:
        if self._credentials is None:
            self._credentials = GoogleCredentials(
                service_account_info=self.options.service_account_info,
                service_account_file=self.options.service_account_file,
                access_token=self.options.access_token,
            )
        return self._credentials

    @property
    def transport(self) -> Transport:
        if self._transport is None:
            self._transport = Transport(
                self.credentials,
                timeout=self.options.timeout,
                max_retries=self.options.max_retries,
                backoff_factor=self.options.backoff_factor,
                client=self._client,
            )
        return self._transport

    @property
    def project_id(self) -> str:
        """Project id from the options or the credentials.

        Raises:
            ConfigError:
                No project id is configured.
        """
        if self._project_id is None:
            project_id = (
                self.options.project_id or self.credentials.get_project_id()
            )
            if not project_id:
                raise ConfigError(
                    "Project id is required. Set it in the options, "
                    "the service account or FIREBASE_PROJECT_ID"
                )
            logger.debug("Using project %s", project_id)
            self._project_id = project_id
        return self._project_id

    def auth(self, tenant_id: str | None = None) -> Auth:
        return Auth(
            self.transport,
            self.project_id,
            tenant_id=tenant_id or self.options.tenant_id,
        )

    def firestore(self, database: str | None = None) -> Firestore:
        return Firestore(
            self.transport,
            self.project_id,
            database=database or self.options.database,
        )

    def messaging(self) -> Messaging:
        return Messaging(self.transport, self.project_id)

    def remote_config(self) -> RemoteConfig:
        return RemoteConfig(self.transport, self.project_id)

    def storage(self) -> Storage:
        return Storage(
            self.transport,
            self.project_id,
            default_bucket=self.options.get_storage_bucket(),
        )

    def crashlytics(self) -> Crashlytics:
        return Crashlytics(self.transport, self.project_id)

    async def aclose(self) -> None:
        if self._transport is not None:
            await self._transport.aclose()
            self._transport = None

    async def __aenter__(self) -> FirebaseApp:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()
