from __future__ import annotations

import logging

from barberbot.application.ports.message_platform import MessagePlatformPort


class NotifyUseCase:
    def __init__(self, platform: MessagePlatformPort) -> None:
        self._platform = platform
        self._logger = logging.getLogger(__name__)

    def execute(self, recipient_id: str | None, text: str) -> bool:
        """Push a notice to another conversation. Returns True if actually sent, False if skipped or failed."""
        if not recipient_id:
            self._logger.info("No notification target -> skipping notice", extra={"text": text})
            return False
        try:
            self._platform.send_text(recipient_id=recipient_id, text=text)
        except Exception as e:
            # The triggering action already committed; the notice is best effort.
            self._logger.exception(
                "Notification failed",
                extra={"external_user_id": recipient_id, "reason": str(e)},
            )
            return False
        return True
