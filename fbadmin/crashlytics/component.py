"""
Firebase Crashlytics user data management.
"""

from __future__ import annotations

__all__ = ["Crashlytics"]

from urllib.parse import quote

from fbadmin.core import Transport, raise_for_response
from fbadmin.core.exceptions import BadRequestError

BASE_URL = "https://firebasecrashlytics.googleapis.com"


class Crashlytics:
    """Crashlytics client.

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
        self._url = f"{base_url.rstrip('/')}/v1alpha/projects/{project_id}"

    async def delete_crash_reports(self, app_id: str, user_id: str) -> None:
        """Delete the crash reports of a user of an app.

        Args:
            app_id:
                Firebase app id, e.g. "1:1234:android:abcd".
            user_id:
                User id set by the app.
        """
        if not app_id or not user_id:
            raise BadRequestError("app_id and user_id must not be empty")
        response = await self._transport.send(
            "DELETE",
            f"{self._url}/apps/{quote(app_id, safe=':')}"
            f"/users/{quote(user_id, safe='')}/crashReports",
        )
        raise_for_response(response, "Failed to delete crash reports")
