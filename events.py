# events.py
"""Slack event envelope handling: verification, filtering, de-duplication."""

from __future__ import annotations

import logging
import re
import threading
import time
from typing import Any, Callable, Optional

from errors import ConfigurationMissing
from intent_router import IntentRouter
from models import IntentContext
from slack_client import SlackPoster

logger = logging.getLogger(__name__)

MENTION_PATTERN = re.compile(r"<@[A-Z0-9]+(?:\|[^>]*)?>")
GENERIC_ERROR_MESSAGE = "Sorry, something went wrong while handling your request. Please try again."


class EventDeduplicator:
    """Remembers recently seen event ids for ``ttl_seconds``.

    Expired entries are swept lazily, at most once per ``sweep_interval``.
    """

    def __init__(
        self,
        ttl_seconds: float = 300,
        sweep_interval: float = 60,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.sweep_interval = sweep_interval
        self._clock = clock
        self._entries: dict[str, float] = {}
        self._last_sweep = clock()
        self._lock = threading.Lock()

    def check_and_record(self, event_id: str) -> bool:
        """Return True if ``event_id`` was already seen inside the window."""
        with self._lock:
            now = self._clock()
            if now - self._last_sweep >= self.sweep_interval:
                self._sweep(now)

            seen_at = self._entries.get(event_id)
            if seen_at is not None and now - seen_at < self.ttl_seconds:
                return True
            self._entries[event_id] = now
            return False

    def sweep(self) -> None:
        with self._lock:
            self._sweep(self._clock())

    def _sweep(self, now: float) -> None:
        expired = [key for key, seen_at in self._entries.items() if now - seen_at >= self.ttl_seconds]
        for key in expired:
            del self._entries[key]
        self._last_sweep = now
        if expired:
            logger.debug("dedup_swept", extra={"expired": len(expired), "remaining": len(self._entries)})

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class EventProcessor:
    def __init__(
        self, router: IntentRouter, poster: SlackPoster, deduplicator: EventDeduplicator
    ) -> None:
        self.router = router
        self.poster = poster
        self.deduplicator = deduplicator

    def handle(self, envelope: dict[str, Any]) -> dict[str, Any]:
        if envelope.get("type") == "url_verification":
            return {"challenge": envelope.get("challenge")}

        event = envelope.get("event") or {}
        if _should_ignore(event):
            return {"status": "ignored"}

        event_id = envelope.get("event_id") or event.get("client_msg_id") or event.get("ts")
        if event_id and self.deduplicator.check_and_record(str(event_id)):
            logger.info("duplicate_event", extra={"event_id": event_id})
            return {"status": "duplicate"}

        channel = event.get("channel", "")
        context = IntentContext(
            message=strip_mentions(event.get("text", "")),
            channel=channel,
            user_id=event.get("user"),
        )

        try:
            response = self.router.route(context)
        except ConfigurationMissing as exc:
            logger.error("configuration_missing", extra={"error": exc.message, "channel": channel})
            self.poster.post_message(channel, f"⚠️ {exc.message}")
            return {"status": "error"}
        except Exception:  # pragma: no cover - defensive logging
            logger.exception("event_handling_failed", extra={"event_id": event_id})
            self.poster.post_message(channel, GENERIC_ERROR_MESSAGE)
            return {"status": "error"}

        if response.text:
            self.poster.post_message(channel, response.text, blocks=response.blocks)
        return {"status": "ok"}


def _should_ignore(event: dict[str, Any]) -> bool:
    if not event:
        return True
    if event.get("subtype") == "bot_message" or event.get("bot_id"):
        logger.debug("ignore_bot_message", extra={"channel": event.get("channel")})
        return True
    if event.get("type") != "app_mention":
        logger.debug("ignore_event_type", extra={"event_type": event.get("type")})
        return True
    return False


def strip_mentions(text: Optional[str]) -> str:
    if not text:
        return ""
    return re.sub(r"\s{2,}", " ", MENTION_PATTERN.sub("", text)).strip()
