"""
Complaint notification dispatch.

Notifications are at-most-once and never block or fail complaint
submission: each one runs as a background task, failures are logged,
and when too many are already in flight the new one is dropped.
"""
import asyncio
import aiohttp
from typing import Dict, Any, Set, Optional
from app.config import get_settings
import logging

settings = get_settings()
logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Calls the complaint notification function over HTTP"""

    def __init__(
        self,
        function_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout_seconds: Optional[int] = None,
        max_in_flight: Optional[int] = None
    ):
        self.function_url = settings.NOTIFICATION_FUNCTION_URL if function_url is None else function_url
        self.api_key = settings.NOTIFICATION_API_KEY if api_key is None else api_key
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds or settings.NOTIFICATION_TIMEOUT_SECONDS)
        self.max_in_flight = max_in_flight or settings.NOTIFICATION_MAX_IN_FLIGHT
        self._in_flight: Set[asyncio.Task] = set()

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    def dispatch(self, complaint: Dict[str, Any], user_details: Dict[str, Any]) -> bool:
        """Schedule a notification without waiting for it. Returns False if it was dropped."""
        if len(self._in_flight) >= self.max_in_flight:
            logger.warning(
                f"Notification for complaint {complaint.get('complaint_id')} dropped: "
                f"{len(self._in_flight)} notifications already in flight"
            )
            return False

        task = asyncio.create_task(self._deliver(complaint, user_details))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return True

    async def drain(self):
        """Wait for in-flight notifications, used on shutdown and in tests"""
        if self._in_flight:
            await asyncio.gather(*list(self._in_flight), return_exceptions=True)

    async def send(self, complaint: Dict[str, Any], user_details: Dict[str, Any]) -> bool:
        """POST the notification; True on a 2xx response"""
        if not self.function_url:
            logger.info(f"Notification function not configured, skipping complaint {complaint.get('complaint_id')}")
            return False

        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        payload = {
            "complaint": complaint,
            "userDetails": user_details,
            "recipient": settings.NOTIFICATION_RECIPIENT,
        }

        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            async with session.post(self.function_url, json=payload, headers=headers) as response:
                if 200 <= response.status < 300:
                    logger.info(f"Notification sent for complaint {complaint.get('complaint_id')}")
                    return True
                body = await response.text()
                logger.error(
                    f"Notification function returned {response.status} for complaint "
                    f"{complaint.get('complaint_id')}: {body[:200]}"
                )
                return False

    async def _deliver(self, complaint: Dict[str, Any], user_details: Dict[str, Any]):
        try:
            await self.send(complaint, user_details)
        except Exception as e:
            logger.error(f"Notification failed for complaint {complaint.get('complaint_id')}: {str(e)}")


# Global dispatcher instance
dispatcher = NotificationDispatcher()
