# slack_client.py
"""Posting replies back to Slack."""

from __future__ import annotations

import logging
from typing import Any, Optional

from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError

logger = logging.getLogger(__name__)


class SlackPoster:
    def __init__(self, client: WebClient) -> None:
        self.client = client

    def post_message(
        self, channel: str, text: str, blocks: Optional[list[dict[str, Any]]] = None
    ) -> bool:
        """Post ``text`` to ``channel``. Failures are logged, never raised."""
        try:
            response = self.client.chat_postMessage(channel=channel, text=text, blocks=blocks)
        except SlackApiError as exc:
            logger.error(
                "slack_post_failed",
                extra={"channel": channel, "error": exc.response.get("error")},
            )
            return False

        if not response.get("ok"):
            logger.error(
                "slack_post_rejected", extra={"channel": channel, "error": response.get("error")}
            )
            return False
        return True
