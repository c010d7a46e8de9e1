# option_resolver.py
"""Match free-text values against a closed set of named options via the LLM."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional, Sequence, Union

from errors import NoOptionsAvailable, UnresolvedOption
from extraction import match_label
from llm_client import CompletionClient, ask
from models import PRIORITY_LABELS

logger = logging.getLogger(__name__)


class FieldKind(str, Enum):
    STATUS = "status"
    ASSIGNEE = "assignee"
    PRIORITY = "priority"


_KIND_DESCRIPTIONS = {
    FieldKind.STATUS: "workflow status",
    FieldKind.ASSIGNEE: "team member",
    FieldKind.PRIORITY: "priority level",
}


class OptionResolver:
    """Resolves a user's wording to exactly one valid option name."""

    def __init__(self, llm: CompletionClient, model: Optional[str] = None) -> None:
        self.llm = llm
        self.model = model

    def resolve(
        self,
        user_value: str,
        field_kind: Union[FieldKind, str],
        available_options: Sequence[str] = (),
    ) -> str:
        kind = FieldKind(field_kind)
        options = list(PRIORITY_LABELS) if kind is FieldKind.PRIORITY else list(available_options)
        if not options:
            raise NoOptionsAvailable(f"No {_KIND_DESCRIPTIONS[kind]} options are available.")

        reply = ask(self.llm, self._build_prompt(user_value, kind, options), model=self.model)
        match = match_label(reply, options)
        if not match.ok:
            logger.info(
                "option_unresolved",
                extra={"field_kind": kind.value, "user_value": user_value, "reason": match.error},
            )
            raise UnresolvedOption(
                f'Could not match "{user_value}" to a valid {_KIND_DESCRIPTIONS[kind]}.',
                options=options,
            )

        logger.debug(
            "option_resolved",
            extra={"field_kind": kind.value, "user_value": user_value, "matched": match.value},
        )
        return str(match.value)

    @staticmethod
    def _build_prompt(user_value: str, kind: FieldKind, options: Sequence[str]) -> str:
        listed = "\n".join(f"- {option}" for option in options)
        return (
            f"You match user input to a {_KIND_DESCRIPTIONS[kind]} in the Linear issue tracker.\n"
            f"Valid options:\n{listed}\n\n"
            f'User input: "{user_value}"\n\n'
            "Reply with the single closest option, spelled exactly as listed above. "
            "Reply with the option name only, no quotes or explanation."
        )
