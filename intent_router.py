# intent_router.py
"""Top-level dispatch from a chat message to exactly one intent handler."""

from __future__ import annotations

import logging
from typing import Mapping, Protocol

from intent_detector import IntentDetector
from models import IntentContext, IntentResponse, IntentType

logger = logging.getLogger(__name__)


class IntentHandler(Protocol):
    def handle(self, context: IntentContext) -> IntentResponse: ...


class IntentRouter:
    def __init__(self, detector: IntentDetector, handlers: Mapping[IntentType, IntentHandler]) -> None:
        if IntentType.GENERAL not in handlers:
            raise ValueError("A general intent handler is required.")
        self.detector = detector
        self.handlers = dict(handlers)

    def route(self, context: IntentContext) -> IntentResponse:
        """Classify once and hand the context to the matching handler.

        Faults raised by the handler propagate to the caller unchanged.
        """
        intent = self.detector.detect(context.message)
        handler = self.handlers.get(intent, self.handlers[IntentType.GENERAL])
        logger.info(
            "intent_routed",
            extra={"intent": intent.value, "channel": context.channel, "user": context.user_id},
        )
        return handler.handle(context)
