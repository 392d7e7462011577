"""Push notification sender service using Firebase Cloud Messaging."""
import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Optional, List

import firebase_admin
from firebase_admin import credentials, messaging

logger = logging.getLogger(__name__)

FIREBASE_APP_NAME = "pension-notifier"


@dataclass
class PushConfig:
    """FCM configuration."""
    enabled: bool = False
    credentials_path: str = ""  # Path to the service account JSON


class PushSenderService:
    """Service for sending push notifications via FCM."""

    def __init__(self):
        self._app: Optional[firebase_admin.App] = None
        self._config: Optional[PushConfig] = None

    @property
    def is_configured(self) -> bool:
        return self._app is not None and self._config is not None and self._config.enabled

    def configure(self, config: PushConfig):
        """Configure the Firebase app used for messaging."""
        self._config = config
        if self._app is not None:
            # Drop the previous app so a new service account can be loaded
            firebase_admin.delete_app(self._app)
            self._app = None

        if not config.enabled:
            logger.info("Push notifications are disabled")
            return

        path = config.credentials_path.strip()
        if not path or not os.path.exists(path):
            logger.warning(f"Firebase service account not found: {path!r}. Push disabled.")
            return

        try:
            cred = credentials.Certificate(path)
            self._app = firebase_admin.initialize_app(cred, name=FIREBASE_APP_NAME)
            logger.info("Firebase messaging configured")
        except Exception as e:
            logger.error(f"Failed to configure Firebase messaging: {e}")
            self._app = None

    async def send_multicast(
        self,
        tokens: List[str],
        title: str,
        body: str,
        data: Optional[dict] = None,
    ) -> tuple[int, int]:
        """Send one notification to every token in a single multicast call.

        Args:
            tokens: FCM registration tokens
            title: Notification title
            body: Notification body text
            data: Data payload; values are sent as strings

        Returns:
            Tuple of (success_count, failure_count)

        Raises:
            firebase_admin.exceptions.FirebaseError: If the whole request fails
        """
        if not tokens:
            return (0, 0)

        if not self.is_configured:
            logger.warning("Push notifications not configured, message not sent")
            return (0, len(tokens))

        message = messaging.MulticastMessage(
            tokens=tokens,
            notification=messaging.Notification(title=title, body=body),
            data={k: str(v) for k, v in (data or {}).items()},
        )

        # The SDK call is blocking
        response = await asyncio.to_thread(
            messaging.send_each_for_multicast, message, app=self._app
        )

        for resp, token in zip(response.responses, tokens):
            if not resp.success:
                logger.warning(f"Push failed for token {token[:16]}...: {resp.exception}")

        return (response.success_count, response.failure_count)


# Global instance
push_sender_service = PushSenderService()
