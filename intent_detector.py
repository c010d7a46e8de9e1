# intent_detector.py
"""Two-stage intent classification: keyword patterns first, LLM fallback second."""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Tuple

from llm_client import CompletionClient, ask
from models import IntentType

logger = logging.getLogger(__name__)

WELCOME_PATTERNS: List[re.Pattern[str]] = [
    re.compile(
        r"^(hi|hello|hey|howdy|yo|greetings|good\s+(morning|afternoon|evening))"
        r"(\s+(there|harper|team|all|everyone))?\s*[!.?]*$",
        re.IGNORECASE,
    ),
    re.compile(r"^(help|\?)\s*[!.?]*$", re.IGNORECASE),
    re.compile(r"^what\s+can\s+you\s+do\b", re.IGNORECASE),
    re.compile(r"^who\s+are\s+you\b", re.IGNORECASE),
    re.compile(r"^introduce\s+yourself\b", re.IGNORECASE),
    re.compile(r"^how\s+do\s+i\s+use\s+you\b", re.IGNORECASE),
]

LINEAR_PATTERNS: List[re.Pattern[str]] = [
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"linear\s+card",
        r"create\s+(a\s+)?(new\s+)?linear",
        r"add\s+(a\s+)?(new\s+)?linear",
        r"update\s+linear",
        r"move\s+linear",
        r"change\s+linear",
        r"delete\s+linear",
        r"remove\s+linear",
        r"find\s+linear",
        r"search\s+linear",
        r"show\s+linear",
        r"linear\s+issue",
        r"linear\s+task",
        r"linear\s+ticket",
        r"linear\s+help",
    )
]

GITHUB_PATTERNS: List[re.Pattern[str]] = [
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"github\s+issue",
        r"github\s+pr\b",
        r"github\s+pull\s+request",
        r"github\s+repo",
        r"github\s+repository",
    )
]

# Checked in this order; the first matching group wins.
PATTERN_GROUPS: List[Tuple[IntentType, List[re.Pattern[str]]]] = [
    (IntentType.WELCOME, WELCOME_PATTERNS),
    (IntentType.LINEAR, LINEAR_PATTERNS),
    (IntentType.GITHUB, GITHUB_PATTERNS),
]

_FALLBACK_LABELS = (IntentType.WELCOME, IntentType.LINEAR, IntentType.GITHUB)


class IntentDetector:
    def __init__(self, llm: CompletionClient, model: Optional[str] = None) -> None:
        self.llm = llm
        self.model = model

    def detect(self, message: str) -> IntentType:
        text = message.strip()
        matched = match_patterns(text)
        if matched is not None:
            logger.debug("intent_detected", extra={"intent": matched.value, "stage": "pattern"})
            return matched

        intent = self._classify_with_llm(text)
        logger.debug("intent_detected", extra={"intent": intent.value, "stage": "llm"})
        return intent

    def _classify_with_llm(self, message: str) -> IntentType:
        prompt = (
            'Classify the following Slack message into one of: "welcome", "general", '
            '"linear", or "github".\n\n'
            "Welcome is a greeting, a request for help, or a question about what the assistant can do.\n"
            "Linear refers to the Linear issue tracking system (cards, tasks, tickets, etc.)\n"
            "GitHub refers to GitHub-related operations (issues, pull requests, repositories, etc.)\n"
            "General is anything conversational or not related to Linear or GitHub.\n\n"
            f'Message: "{message}"\n'
            "Intent:"
        )
        label = (ask(self.llm, prompt, model=self.model) or "").lower().strip()
        for intent in _FALLBACK_LABELS:
            if intent.value in label:
                return intent
        return IntentType.GENERAL


def match_patterns(message: str) -> Optional[IntentType]:
    for intent, patterns in PATTERN_GROUPS:
        for pattern in patterns:
            if pattern.search(message):
                return intent
    return None
