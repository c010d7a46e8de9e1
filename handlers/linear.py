# handlers/linear.py
"""Linear card operations requested in chat."""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Callable, Optional

from errors import ConfigurationMissing, HarperError, NotFound, ParseAmbiguous
from linear_client import LinearClient
from models import Issue, IntentContext, IntentResponse, Operation, OperationType, priority_label
from operation_parser import UNCLEAR_OPERATION_MESSAGE, OperationParser

logger = logging.getLogger(__name__)

HELP_PATTERN = re.compile(r"^\s*(linear\s+)?help\s*[!.?]*$|\blinear\s+help\b", re.IGNORECASE)

HELP_TEXT = (
    "*Linear commands help*\n\nHere are the supported Linear commands:\n"
    "• *Create a card*: `create a linear card [your card details]`\n"
    "      - Intelligently extracts title, description, status, assignee, and priority\n"
    "      - Example: `create card Fix login bug that's blocking users, assign to Sarah, high priority`\n"
    "      - Or with explicit fields: `create card title: Fix login bug status: In Progress assignee: Jane priority: High`\n"
    "• *Find card by ID*: `find linear card [id like PRO-16]`\n"
    "• *Find cards by text*: `find linear cards with [text]`\n"
    "• *Update card*: `update linear card [id like PRO-16] status to In Progress`\n"
    "      - Intelligently interprets what field you want to update\n"
    "      - Matches your values to what's available in Linear\n"
    "• *Delete card*: `delete linear card [id like PRO-16]`"
)


class LinearHandler:
    def __init__(self, parser: OperationParser, client: LinearClient) -> None:
        self.parser = parser
        self.client = client
        self._dispatch: dict[OperationType, Callable[[Operation], IntentResponse]] = {
            OperationType.CREATE: self._create,
            OperationType.FIND: self._find,
            OperationType.UPDATE: self._update,
            OperationType.DELETE: self._delete,
        }

    def handle(self, context: IntentContext) -> IntentResponse:
        logger.info("linear_intent", extra={"channel": context.channel, "user": context.user_id})
        if HELP_PATTERN.search(context.message):
            return IntentResponse(text=HELP_TEXT)

        self.client.require_configuration()
        operation = self.parser.parse(context.message)
        if operation.type is OperationType.UNKNOWN:
            return IntentResponse(text=f"❓ {operation.error or UNCLEAR_OPERATION_MESSAGE}")

        action = operation.type.value
        try:
            return self._dispatch[operation.type](operation)
        except ConfigurationMissing:
            raise
        except NotFound as exc:
            logger.info("linear_not_found", extra={"operation": action, "error": exc.message})
            return IntentResponse(text=exc.message)
        except ParseAmbiguous as exc:
            return IntentResponse(text=f"❓ {exc.message}")
        except HarperError as exc:
            logger.warning(
                "linear_operation_failed",
                extra={"operation": action, "kind": exc.kind, "error": exc.message},
            )
            return IntentResponse(text=f"❌ Failed to {action} card: {exc.message}")
        except Exception as exc:  # pragma: no cover - defensive logging
            logger.exception("linear_operation_crashed", extra={"operation": action})
            return IntentResponse(text=f"❌ Failed to perform Linear operation: {exc}")

    def _create(self, operation: Operation) -> IntentResponse:
        if not operation.title:
            return IntentResponse(text="Please provide a title for the card.")

        card_input = operation.title
        if operation.description:
            card_input += f"\n{operation.description}"
        if operation.status:
            card_input += f" status: {operation.status}"
        if operation.assignee:
            card_input += f" assignee: {operation.assignee}"
        if operation.priority:
            card_input += f" priority: {operation.priority}"

        card = self.client.create(card_input)
        description = f"Description: {card.description}\n" if card.description else ""
        return IntentResponse(
            text=(
                f"✅ Created new Linear card *{card.identifier}*: {card.title}\n"
                f"{description}"
                f"Status: {card.state.name if card.state else 'Todo'} | "
                f"Assignee: {card.assignee.display_name if card.assignee else 'Unassigned'} | "
                f"Priority: {priority_label(card.priority)}\n"
                f"View in Linear: {card.url}"
            )
        )

    def _find(self, operation: Operation) -> IntentResponse:
        # An explicit card id wins over a search term when the parser returns both.
        search_term = operation.card_id or operation.search_term
        if not search_term:
            return IntentResponse(text="Please provide a card ID or search term.")

        cards = self.client.find(search_term)
        if not cards:
            return IntentResponse(text=f'No Linear cards found matching "{search_term}"')
        if len(cards) == 1:
            return IntentResponse(text=format_card_detail(cards[0]))

        listing = "\n\n".join(format_card_line(card) for card in cards)
        return IntentResponse(
            text=f'🔍 Found {len(cards)} Linear card(s) matching "{search_term}":\n\n{listing}'
        )

    def _update(self, operation: Operation) -> IntentResponse:
        if not operation.card_id:
            return IntentResponse(text="Please provide the card ID to update (e.g., PRO-16).")
        if not operation.field or not operation.value:
            return IntentResponse(
                text=(
                    "Please specify both the field to update (title, description, status, "
                    "assignee, or priority) and the new value."
                )
            )

        card = self.client.update(operation.card_id, operation.field, operation.value)
        return IntentResponse(
            text=(
                f"✅ Updated Linear card *{card.identifier}*: {card.title}\n"
                f'Updated {operation.field} to "{operation.value}"\n'
                f"View in Linear: {card.url}"
            )
        )

    def _delete(self, operation: Operation) -> IntentResponse:
        if not operation.card_id:
            return IntentResponse(text="Please provide the card ID to delete (e.g., PRO-16).")

        if self.client.delete(operation.card_id):
            return IntentResponse(text=f"✅ Successfully deleted Linear card {operation.card_id}")
        return IntentResponse(text=f"❌ Failed to delete Linear card {operation.card_id}")


def format_card_detail(card: Issue) -> str:
    description = f"{card.description}\n" if card.description else ""
    return (
        f"📋 Linear card *{card.identifier}*: {card.title}\n"
        f"{description}"
        f"Status: {card.state.name if card.state else 'Not set'} | "
        f"Assignee: {card.assignee.display_name if card.assignee else 'Unassigned'} | "
        f"Priority: {priority_label(card.priority)}\n"
        f"Created: {_format_date(card.created_at)} | Updated: {_format_date(card.updated_at)}\n"
        f"View in Linear: {card.url}"
    )


def format_card_line(card: Issue) -> str:
    line = f"• *{card.identifier}*: {card.title}"
    if card.state:
        line += f" | Status: {card.state.name}"
    if card.assignee:
        line += f" | Assignee: {card.assignee.display_name}"
    if card.priority is not None:
        line += f" | Priority: {priority_label(card.priority)}"
    return f"{line}\n  {card.url}"


def _format_date(timestamp: Optional[str]) -> str:
    if not timestamp:
        return "Unknown"
    try:
        return datetime.fromisoformat(timestamp.replace("Z", "+00:00")).strftime("%Y-%m-%d")
    except ValueError:
        return timestamp
