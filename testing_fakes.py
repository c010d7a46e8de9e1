"""In-memory stand-ins for the LLM and the Linear GraphQL API used by the tests."""

from __future__ import annotations

import itertools
from typing import Any, Optional, Sequence
from unittest.mock import MagicMock

from llm_client import ChatMessage


class ScriptedLLM:
    """Returns canned replies in order; ``None`` once the script runs out."""

    def __init__(self, *replies: Optional[str]) -> None:
        self.replies = list(replies)
        self.calls: list[list[ChatMessage]] = []

    def complete(
        self, messages: Sequence[ChatMessage], model: Optional[str] = None
    ) -> Optional[str]:
        self.calls.append(list(messages))
        if not self.replies:
            return None
        return self.replies.pop(0)

    @property
    def prompts(self) -> list[str]:
        return [call[-1].content for call in self.calls]


def _response(payload: Any, status_code: int = 200) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    response.text = str(payload)
    return response


class FakeLinearAPI:
    """Answers the queries issued by ``LinearClient`` from in-memory state.

    Use as ``side_effect`` for a patched ``linear_client.requests.post``.
    """

    def __init__(
        self,
        team_key: str = "PRO",
        states: Sequence[tuple[str, str]] = (("state-todo", "Todo"), ("state-doing", "In Progress")),
        members: Sequence[tuple[str, str]] = (("user-sarah", "Sarah"), ("user-jane", "Jane")),
    ) -> None:
        self.team_key = team_key
        self.states = [{"id": sid, "name": name} for sid, name in states]
        self.members = [{"id": mid, "name": name.lower(), "displayName": name} for mid, name in members]
        self.issues: list[dict[str, Any]] = []
        self.requests: list[dict[str, Any]] = []
        self._numbers = itertools.count(1)
        self._clock = itertools.count(1)

    def add_issue(self, title: str, description: Optional[str] = None, **fields: Any) -> dict[str, Any]:
        number = next(self._numbers)
        stamp = f"2024-01-01T00:00:{next(self._clock):02d}.000Z"
        node = {
            "id": f"issue-{number}",
            "identifier": f"{self.team_key}-{number}",
            "number": number,
            "title": title,
            "description": description,
            "url": f"https://linear.app/team/issue/{self.team_key}-{number}",
            "priority": fields.get("priority", 0),
            "state": fields.get("state"),
            "assignee": fields.get("assignee"),
            "createdAt": stamp,
            "updatedAt": fields.get("updatedAt", stamp),
        }
        self.issues.append(node)
        return node

    def operations(self) -> list[str]:
        return [request["operation"] for request in self.requests]

    def __call__(self, url: str, json: dict[str, Any], headers: dict[str, str], timeout: int):
        query: str = json["query"]
        variables: dict[str, Any] = json["variables"]
        operation = query.split("(", 1)[0].split()[-1]
        self.requests.append({"operation": operation, "variables": variables, "headers": headers})
        handler = getattr(self, f"_op_{operation}")
        return _response({"data": handler(variables)})

    def _public(self, node: dict[str, Any]) -> dict[str, Any]:
        return {key: value for key, value in node.items() if key != "number"}

    def _op_TeamStates(self, variables: dict[str, Any]) -> dict[str, Any]:
        return {"team": {"states": {"nodes": self.states}}}

    def _op_TeamMembers(self, variables: dict[str, Any]) -> dict[str, Any]:
        return {"team": {"members": {"nodes": self.members}}}

    def _op_IssueByNumber(self, variables: dict[str, Any]) -> dict[str, Any]:
        nodes = [
            self._public(node)
            for node in self.issues
            if variables["teamKey"] == self.team_key and node["number"] == variables["number"]
        ]
        return {"issues": {"nodes": nodes[:1]}}

    def _op_SearchIssues(self, variables: dict[str, Any]) -> dict[str, Any]:
        term = variables["term"].lower()
        matches = [
            node
            for node in self.issues
            if term in node["title"].lower() or term in (node["description"] or "").lower()
        ]
        matches.sort(key=lambda node: node["updatedAt"], reverse=True)
        return {"issues": {"nodes": [self._public(n) for n in matches[: variables["first"]]]}}

    def _op_CreateIssue(self, variables: dict[str, Any]) -> dict[str, Any]:
        issue_input = variables["input"]
        state = next((s for s in self.states if s["id"] == issue_input.get("stateId")), None)
        assignee = next((m for m in self.members if m["id"] == issue_input.get("assigneeId")), None)
        node = self.add_issue(
            issue_input["title"],
            issue_input.get("description"),
            priority=issue_input.get("priority", 0),
            state=state or self.states[0],
            assignee=assignee,
        )
        return {"issueCreate": {"success": True, "issue": self._public(node)}}

    def _op_UpdateIssue(self, variables: dict[str, Any]) -> dict[str, Any]:
        node = next(n for n in self.issues if n["id"] == variables["id"])
        issue_input = variables["input"]
        if "stateId" in issue_input:
            node["state"] = next(s for s in self.states if s["id"] == issue_input["stateId"])
        if "assigneeId" in issue_input:
            node["assignee"] = next(m for m in self.members if m["id"] == issue_input["assigneeId"])
        for key in ("title", "description", "priority"):
            if key in issue_input:
                node[key] = issue_input[key]
        return {"issueUpdate": {"success": True, "issue": self._public(node)}}

    def _op_DeleteIssue(self, variables: dict[str, Any]) -> dict[str, Any]:
        before = len(self.issues)
        self.issues = [n for n in self.issues if n["id"] != variables["id"]]
        return {"issueDelete": {"success": len(self.issues) < before}}
