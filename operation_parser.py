# operation_parser.py
"""
Extract structured Linear operations from natural language via the LLM.
"""

import logging
from typing import Optional

from extraction import extract_json_object
from llm_client import CompletionClient, ask
from models import Operation, OperationType

logger = logging.getLogger(__name__)

UNCLEAR_OPERATION_MESSAGE = (
    "I'm not sure what Linear operation you want to perform. "
    "Please try again with clearer instructions."
)
UNPARSEABLE_MESSAGE = (
    "I couldn't understand your request. Please use a clearer format for Linear operations."
)
NO_REPLY_MESSAGE = (
    "I encountered an error while processing your request. "
    "Please try again with clearer instructions."
)

_PROMPT_TEMPLATE = """
You are a bot that helps users interact with Linear. Parse the following message and extract the Linear operation details in JSON format.

Only extract these specific operations and fields:
1. Create: extract title, description, status, assignee, and priority
2. Find: extract cardId OR searchTerm (one of them)
3. Update: extract cardId, field, and value
4. Delete: extract cardId

Be flexible in understanding user intent - they may use different terms for these operations.
For creation, look for words like "create", "add", "new", "make", etc.
For finding, look for "find", "search", "get", "show", "lookup", etc.
For updating, watch for "update", "change", "edit", "modify", "set", "move", etc.
For deleting, detect "delete", "remove", "trash", etc.

For creation operations, look for field-specific content like:
- status/state: "in progress", "todo", "done", etc.
- assignee: names like "John", "Sarah", etc.
- priority: "high", "urgent", "low", etc.

Card IDs look like TEAM-123 (for example PRO-16).

Message: "{message}"

Response format:
{{
  "type": "create" | "find" | "update" | "delete" | "unknown",
  ... relevant fields for each type
}}

For create operations, extract as many fields as possible, but don't worry if some are missing.

Keep types strictly to these operations. If you can't determine the operation type, use "unknown".
"""

_VALID_TYPES = {member.value for member in OperationType}


class OperationParser:
    """Best-effort classifier: never raises, returns an ``unknown`` operation instead."""

    def __init__(self, llm: CompletionClient, model: Optional[str] = None) -> None:
        self.llm = llm
        self.model = model

    def parse(self, message: str) -> Operation:
        reply = ask(self.llm, _PROMPT_TEMPLATE.format(message=message), model=self.model)
        if not reply:
            logger.warning("operation_parse_no_reply")
            return Operation.unknown(NO_REPLY_MESSAGE)

        extraction = extract_json_object(reply)
        if not extraction.ok:
            logger.info("operation_parse_failed", extra={"reason": extraction.error})
            return Operation.unknown(UNPARSEABLE_MESSAGE)

        payload = extraction.value
        op_type = str(payload.get("type") or "").strip().lower()
        if op_type not in _VALID_TYPES or op_type == OperationType.UNKNOWN.value:
            logger.info("operation_type_unclear", extra={"type": op_type or None})
            return Operation.unknown(UNCLEAR_OPERATION_MESSAGE)

        payload["type"] = op_type
        operation = Operation.from_payload(payload)
        logger.info(
            "operation_parsed",
            extra={"type": operation.type.value, "fields": sorted(k for k in payload if k != "type")},
        )
        return operation
