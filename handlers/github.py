# handlers/github.py
"""Placeholder reply until the GitHub integration exists."""

from __future__ import annotations

import persona
from models import IntentContext, IntentResponse


class GithubStubHandler:
    def handle(self, context: IntentContext) -> IntentResponse:
        return IntentResponse(text=persona.GITHUB_NOT_IMPLEMENTED)
