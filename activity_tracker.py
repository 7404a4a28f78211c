"""
HomeForPup Matching — Activity Tracker

Records adopter activity in the external activity service. One instance is
built by the application lifespan and handed to handlers as a dependency;
it keeps no per-call state beyond its HTTP client.
"""
from __future__ import annotations
import logging
from datetime import datetime, timezone
from typing import Any, Optional

import httpx

from models import ActivityCategory, ActivityType, Preference

logger = logging.getLogger(__name__)


class ActivityTracker:
    """
    Thin client for POST <activity_api_url>/api/activities.
    Failures are logged and reported as None; tracking never breaks a request.
    """

    def __init__(
        self,
        base_url: Optional[str],
        timeout: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip('/') if base_url else None
        self._client = client
        self._owns_client = client is None
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return self.base_url is not None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def track_activity(
        self,
        user_id: str,
        activity_type: ActivityType,
        title: str,
        description: str,
        metadata: dict[str, Any],
        category: ActivityCategory,
        priority: str = 'medium',
    ) -> Optional[dict[str, Any]]:
        """Send one activity record; returns the created activity or None."""
        if not self.enabled:
            logger.debug("Activity tracking disabled; dropping %s", activity_type.value)
            return None

        body = {
            'userId': user_id,
            'type': activity_type.value,
            'title': title,
            'description': description,
            'metadata': {
                **metadata,
                'timestamp': datetime.now(timezone.utc).isoformat(),
            },
            'priority': priority,
            'category': category.value,
        }

        client = await self._get_client()
        try:
            resp = await client.post(f"{self.base_url}/api/activities", json=body)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                "Failed to track activity %s: HTTP %d",
                activity_type.value, e.response.status_code)
        except httpx.HTTPError as e:
            logger.error("Error tracking activity %s: %s", activity_type.value, e)
        return None

    async def track_preferences_updated(
        self, user_id: str, preferences: Preference
    ) -> Optional[dict[str, Any]]:
        return await self.track_activity(
            user_id,
            ActivityType.PREFERENCES_UPDATED,
            'Updated match preferences',
            'Updated your puppy matching preferences',
            {
                'targetType': 'preferences',
                'activityLevel': preferences.activity_level,
                'livingSpace': preferences.living_space,
                'sizes': list(preferences.size),
            },
            ActivityCategory.PROFILE,
            priority='low',
        )
