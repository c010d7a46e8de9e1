# handlers/welcome.py
"""Introduction reply for greetings and help requests."""

from __future__ import annotations

import logging
from typing import Optional

import persona
from branding import build_branded_blocks, section
from models import IntentContext, IntentResponse

logger = logging.getLogger(__name__)


class WelcomeHandler:
    def __init__(self, logo_url: Optional[str] = None) -> None:
        self.logo_url = logo_url

    def handle(self, context: IntentContext) -> IntentResponse:
        logger.info("welcome_sent", extra={"channel": context.channel, "user": context.user_id})
        blocks = build_branded_blocks(
            persona.INTRODUCTION,
            extra_blocks=[section("I can help you with:"), section(persona.CAPABILITIES)],
            logo_url=self.logo_url,
        )
        return IntentResponse(text=persona.INTRODUCTION, blocks=blocks)
