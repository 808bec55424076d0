from __future__ import annotations

import logging

from smartduck.application.ports.message_platform import MessagePlatformPort
from smartduck.domain.entities.reply import ResponsePlan


MAX_QUICK_REPLY_BUTTONS = 3


class SendReplyUseCase:
    def __init__(self, platform: MessagePlatformPort, auto_reply_enabled: bool = True) -> None:
        self._platform = platform
        self._auto_reply_enabled = auto_reply_enabled
        self._logger = logging.getLogger(__name__)

    def execute(self, recipient_id: str, plan: ResponsePlan) -> bool:
        """Send a reply. Returns True if actually sent, False if skipped."""
        if not self._auto_reply_enabled:
            self._logger.info("WOULD_SEND_REPLY", extra={"recipient_id": recipient_id, "reply_text": plan.text})
            self._logger.info("AUTO_REPLY_ENABLED=false -> skipping send")
            return False

        replies = [reply for reply in plan.quick_replies if reply]
        if not replies:
            self._platform.send_text(recipient_id=recipient_id, text=plan.text)
        elif len(replies) <= MAX_QUICK_REPLY_BUTTONS:
            self._platform.send_quick_replies(recipient_id=recipient_id, text=plan.text, replies=replies)
        else:
            self._platform.send_text(recipient_id=recipient_id, text=_with_reply_list(plan.text, replies))
        return True


def _with_reply_list(text: str, replies: list[str]) -> str:
    return text + "\n\n" + "\n".join(f"• {reply}" for reply in replies)
