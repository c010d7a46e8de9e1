# handlers/general.py
"""Conversational replies through the LLM."""

from __future__ import annotations

import logging
from typing import Optional

import persona
from llm_client import ChatMessage, CompletionClient
from models import IntentContext, IntentResponse

logger = logging.getLogger(__name__)


class GeneralHandler:
    def __init__(self, llm: CompletionClient, model: Optional[str] = None) -> None:
        self.llm = llm
        self.model = model

    def handle(self, context: IntentContext) -> IntentResponse:
        logger.info("general_intent", extra={"channel": context.channel, "user": context.user_id})
        content = self.llm.complete(
            [
                ChatMessage(role="system", content=persona.SYSTEM_PROMPT),
                ChatMessage(role="user", content=context.message),
            ],
            model=self.model,
        )
        return IntentResponse(text=content or persona.FALLBACK_RESPONSE)
