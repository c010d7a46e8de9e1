# models.py
"""Data shapes shared by the intent pipeline and the Linear adapter."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

ISSUE_IDENTIFIER_PATTERN = re.compile(r"^([A-Z][A-Z0-9]*)-(\d+)$", re.IGNORECASE)

PRIORITY_LABELS: List[str] = ["No Priority", "Urgent", "High", "Medium", "Low"]
PRIORITY_VALUES: Dict[str, int] = {label: index for index, label in enumerate(PRIORITY_LABELS)}


class IntentType(str, Enum):
    WELCOME = "welcome"
    GENERAL = "general"
    LINEAR = "linear"
    GITHUB = "github"


class OperationType(str, Enum):
    CREATE = "create"
    FIND = "find"
    UPDATE = "update"
    DELETE = "delete"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class IntentContext:
    message: str
    channel: str
    user_id: Optional[str] = None


@dataclass
class IntentResponse:
    text: str
    blocks: Optional[List[Dict[str, Any]]] = None
    attachments: Optional[List[Dict[str, Any]]] = None


# Parser payload keys that differ from the attribute names.
_PAYLOAD_ALIASES: Dict[str, str] = {
    "cardId": "card_id",
    "card_id": "card_id",
    "searchTerm": "search_term",
    "search_term": "search_term",
}
_TEXT_FIELDS = (
    "title",
    "description",
    "status",
    "assignee",
    "priority",
    "card_id",
    "search_term",
    "field",
    "value",
    "error",
)


@dataclass
class Operation:
    type: OperationType
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    assignee: Optional[str] = None
    priority: Optional[str] = None
    card_id: Optional[str] = None
    search_term: Optional[str] = None
    field: Optional[str] = None
    value: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def unknown(cls, error: str) -> Operation:
        return cls(type=OperationType.UNKNOWN, error=error)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> Operation:
        """Build an operation from the parser's JSON object.

        ``type`` must already be a valid operation type. Empty strings and
        ``null`` values are dropped; scalars are coerced to text.
        """

        values: Dict[str, Optional[str]] = {}
        for key, raw in payload.items():
            name = _PAYLOAD_ALIASES.get(key, key)
            if name not in _TEXT_FIELDS or raw is None or isinstance(raw, (dict, list)):
                continue
            text = str(raw).strip()
            if text:
                values[name] = text
        return cls(type=OperationType(str(payload["type"]).lower()), **values)


@dataclass(frozen=True)
class WorkflowState:
    id: str
    name: str


@dataclass(frozen=True)
class TeamMember:
    id: str
    name: str
    display_name: str


@dataclass
class Issue:
    id: str
    identifier: str
    title: str
    url: str
    description: Optional[str] = None
    state: Optional[WorkflowState] = None
    assignee: Optional[TeamMember] = None
    priority: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_node(cls, node: Dict[str, Any]) -> Issue:
        state_node = node.get("state") or None
        assignee_node = node.get("assignee") or None
        return cls(
            id=node["id"],
            identifier=node["identifier"],
            title=node["title"],
            url=node["url"],
            description=node.get("description"),
            state=WorkflowState(id=state_node["id"], name=state_node["name"])
            if state_node
            else None,
            assignee=TeamMember(
                id=assignee_node["id"],
                name=assignee_node.get("name") or assignee_node.get("displayName", ""),
                display_name=assignee_node.get("displayName") or assignee_node.get("name", ""),
            )
            if assignee_node
            else None,
            priority=int(node["priority"]) if node.get("priority") is not None else None,
            created_at=node.get("createdAt"),
            updated_at=node.get("updatedAt"),
        )


def priority_label(priority: Optional[int]) -> str:
    if priority is not None and 0 <= priority < len(PRIORITY_LABELS):
        return PRIORITY_LABELS[priority]
    return "Unknown"


def is_issue_identifier(value: str) -> bool:
    return bool(ISSUE_IDENTIFIER_PATTERN.match(value.strip()))
