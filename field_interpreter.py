# field_interpreter.py
"""Map a user's field wording onto one of the canonical Linear card fields."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from errors import UnknownField
from extraction import match_label
from llm_client import CompletionClient, ask

logger = logging.getLogger(__name__)


class CanonicalField(str, Enum):
    TITLE = "title"
    DESCRIPTION = "description"
    STATUS = "status"
    ASSIGNEE = "assignee"
    PRIORITY = "priority"


CANONICAL_FIELD_NAMES = [member.value for member in CanonicalField]


class FieldInterpreter:
    def __init__(self, llm: CompletionClient, model: Optional[str] = None) -> None:
        self.llm = llm
        self.model = model

    def interpret(self, raw_field: str) -> CanonicalField:
        prompt = (
            "A user wants to update a field on a Linear card. Decide which field they mean.\n"
            f"Valid fields: {', '.join(CANONICAL_FIELD_NAMES)}\n"
            "For example, 'state' or 'column' means status, 'who it's assigned to' means "
            "assignee, 'name' means title, 'details' means description.\n\n"
            f'User field: "{raw_field}"\n\n'
            "Reply with exactly one word from the valid fields and nothing else."
        )
        match = match_label(ask(self.llm, prompt, model=self.model), CANONICAL_FIELD_NAMES)
        if not match.ok:
            logger.info("field_unknown", extra={"raw_field": raw_field, "reason": match.error})
            raise UnknownField(
                f'"{raw_field}" is not a field I can update.', options=CANONICAL_FIELD_NAMES
            )

        logger.debug("field_interpreted", extra={"raw_field": raw_field, "field": match.value})
        return CanonicalField(match.value)
