"""
Daily.co API Client

Video rooms for live interviews. Rooms are created with cloud recording
enabled so the feedback pipeline can fetch the recording afterwards.

Room names are derived from the interview (interview-<id>), which makes
get-or-create idempotent across repeated joins.
"""
import logging
import time
from typing import List, Optional

import httpx

from careerhub.core.config import get_settings
from careerhub.core.exceptions import UpstreamServiceError
from careerhub.models.providers import Recording, VideoRoom
from careerhub.services.providers import RoomProvider

logger = logging.getLogger(__name__)

settings = get_settings()


class DailyRoomProvider(RoomProvider):
    """
    Wrapper for the Daily.co REST API.
    """

    def __init__(self, client: Optional[httpx.Client] = None):
        if not settings.daily_api_key:
            logger.warning("DAILY_API_KEY is not set")
        self.client = client or httpx.Client(
            base_url=settings.daily_api_url,
            headers={"Authorization": f"Bearer {settings.daily_api_key}"},
            timeout=settings.provider_timeout_seconds,
        )

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            return self.client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error("Daily.co request %s %s failed: %s", method, path, e)
            raise UpstreamServiceError(f"Daily.co unreachable: {e}", provider="daily") from e

    def _raise_for_error(self, response: httpx.Response, action: str) -> None:
        if response.is_success:
            return
        try:
            info = response.json().get("info")
        except ValueError:
            info = None
        logger.error("Daily.co API error (%s): %s %s", action, response.status_code, response.text)
        raise UpstreamServiceError(info or f"Failed to {action}: {response.status_code}", provider="daily")

    def create_room(self, name: str) -> VideoRoom:
        if not settings.daily_api_key:
            raise UpstreamServiceError("DAILY_API_KEY is not configured", provider="daily")

        expires_at = int(time.time()) + settings.daily_room_expiry_minutes * 60
        response = self._request("POST", "/rooms", json={
            "name": name,
            "properties": {
                "enable_recording": "cloud",
                "enable_chat": True,
                "enable_screenshare": True,
                "start_video_off": False,
                "start_audio_off": False,
                "exp": expires_at,
            },
        })
        self._raise_for_error(response, "create Daily room")
        return VideoRoom(**response.json())

    def get_room(self, name: str) -> Optional[VideoRoom]:
        response = self._request("GET", f"/rooms/{name}")
        if response.status_code == 404:
            return None
        self._raise_for_error(response, "get Daily room")
        return VideoRoom(**response.json())

    def list_recordings(self, room_name: str) -> List[Recording]:
        response = self._request("GET", "/recordings", params={"room_name": room_name})
        self._raise_for_error(response, "get recordings")
        return [Recording(**item) for item in response.json().get("data", [])]

    def get_recording_access_link(self, recording_id: str) -> str:
        response = self._request("GET", f"/recordings/{recording_id}/access-link")
        self._raise_for_error(response, "get recording access link")
        return response.json()["download_link"]


# Singleton instance
_room_provider: DailyRoomProvider = None


def get_room_provider() -> RoomProvider:
    """Get or create the Daily.co client (singleton pattern)"""
    global _room_provider
    if _room_provider is None:
        _room_provider = DailyRoomProvider()
    return _room_provider
