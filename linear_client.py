# linear_client.py
"""Linear GraphQL client helpers for Harper."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

import requests  # type: ignore[import-untyped]

from errors import (
    AssigneeResolutionFailed,
    CardNotFound,
    ConfigurationMissing,
    MissingTeam,
    MissingTitle,
    PriorityNotRecognized,
    RemoteAPIFault,
    ResolutionFailure,
    StatusResolutionFailed,
)
from extraction import extract_json_object
from field_interpreter import CanonicalField, FieldInterpreter
from llm_client import CompletionClient, ask
from models import (
    ISSUE_IDENTIFIER_PATTERN,
    PRIORITY_LABELS,
    PRIORITY_VALUES,
    Issue,
    TeamMember,
    WorkflowState,
)
from option_resolver import FieldKind, OptionResolver

GRAPHQL_ENDPOINT = "https://api.linear.app/graphql"
SEARCH_LIMIT = 10

logger = logging.getLogger(__name__)

_ISSUE_FIELDS = """
fragment IssueFields on Issue {
  id
  identifier
  title
  description
  url
  priority
  state { id name }
  assignee { id name displayName }
  createdAt
  updatedAt
}
"""

_TEAM_STATES = """
query TeamStates($teamId: String!) {
  team(id: $teamId) {
    states { nodes { id name } }
  }
}
"""

_TEAM_MEMBERS = """
query TeamMembers($teamId: String!) {
  team(id: $teamId) {
    members { nodes { id name displayName } }
  }
}
"""

_ISSUE_BY_NUMBER = (
    """
query IssueByNumber($teamKey: String!, $number: Float!) {
  issues(first: 1, filter: { team: { key: { eq: $teamKey } }, number: { eq: $number } }) {
    nodes { ...IssueFields }
  }
}
"""
    + _ISSUE_FIELDS
)

_SEARCH_ISSUES = (
    """
query SearchIssues($teamId: ID!, $term: String!, $first: Int!) {
  issues(
    first: $first
    orderBy: updatedAt
    filter: {
      team: { id: { eq: $teamId } }
      or: [
        { title: { containsIgnoreCase: $term } }
        { description: { containsIgnoreCase: $term } }
      ]
    }
  ) {
    nodes { ...IssueFields }
  }
}
"""
    + _ISSUE_FIELDS
)

_CREATE_ISSUE = (
    """
mutation CreateIssue($input: IssueCreateInput!) {
  issueCreate(input: $input) {
    success
    issue { ...IssueFields }
  }
}
"""
    + _ISSUE_FIELDS
)

_UPDATE_ISSUE = (
    """
mutation UpdateIssue($id: String!, $input: IssueUpdateInput!) {
  issueUpdate(id: $id, input: $input) {
    success
    issue { ...IssueFields }
  }
}
"""
    + _ISSUE_FIELDS
)

_DELETE_ISSUE = """
mutation DeleteIssue($id: String!) {
  issueDelete(id: $id) {
    success
  }
}
"""

_CREATE_EXTRACTION_PROMPT = """
Extract the details of a new Linear card from the text below and reply in JSON.

Fields:
- title: short summary of the card (required)
- description: longer explanation, if any
- status: workflow state such as "Todo" or "In Progress", if mentioned
- assignee: person the card should be assigned to, if mentioned
- priority: one of urgent, high, medium, low, if mentioned

Omit fields that are not mentioned. Do not invent values.

Text:
{raw_input}

Response format:
{{"title": "...", "description": "...", "status": "...", "assignee": "...", "priority": "..."}}
"""

# Each create-time attempt turns one free-text value into a GraphQL input fragment.
FieldAttempt = Callable[[str, str], dict[str, Any]]


class LinearClient:
    def __init__(
        self,
        api_key: Optional[str],
        default_team_id: Optional[str],
        llm: CompletionClient,
        resolver: OptionResolver,
        interpreter: FieldInterpreter,
        model: Optional[str] = None,
        endpoint: str = GRAPHQL_ENDPOINT,
        timeout: int = 30,
    ) -> None:
        self.api_key = api_key
        self.default_team_id = default_team_id
        self.llm = llm
        self.resolver = resolver
        self.interpreter = interpreter
        self.model = model
        self.endpoint = endpoint
        self.timeout = timeout

    def require_configuration(self) -> None:
        """Raise ConfigurationMissing unless an API key and default team are set."""
        self._require_team(None)

    def _require_api_key(self) -> str:
        if not self.api_key:
            raise ConfigurationMissing("Linear is not configured. Set LINEAR_API_KEY.")
        return self.api_key

    def _require_team(self, team_id: Optional[str]) -> str:
        self._require_api_key()
        team = team_id or self.default_team_id
        if not team:
            raise MissingTeam()
        return team

    def _gql(self, query: str, variables: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        api_key = self._require_api_key()
        try:
            response = requests.post(
                self.endpoint,
                json={"query": query, "variables": variables or {}},
                headers={"Authorization": api_key, "Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("linear_request_failed", extra={"error": str(exc)})
            raise RemoteAPIFault(f"Could not reach Linear: {exc}") from exc

        if response.status_code != 200:
            logger.error(
                "linear_error_response",
                extra={"status": response.status_code, "body": response.text},
            )
            raise RemoteAPIFault(
                f"Linear error {response.status_code}", status_code=response.status_code
            )

        try:
            payload = response.json()
        except ValueError as exc:
            logger.error("linear_invalid_json", extra={"error": str(exc)})
            raise RemoteAPIFault("Invalid response from Linear.") from exc

        if not isinstance(payload, dict):
            raise RemoteAPIFault(
                f"Unexpected response format from Linear ({type(payload).__name__})."
            )

        errors = payload.get("errors")
        if errors:
            messages = [str(err.get("message", err)) for err in errors if isinstance(err, dict)]
            logger.error("linear_graphql_errors", extra={"errors": messages})
            raise RemoteAPIFault(f"Linear API error: {'; '.join(messages) or errors}")

        data = payload.get("data")
        if not isinstance(data, dict):
            raise RemoteAPIFault("Linear response did not include data.")
        return data

    def workflow_states(self, team_id: str) -> list[WorkflowState]:
        data = self._gql(_TEAM_STATES, {"teamId": team_id})
        team = data.get("team") or {}
        nodes = (team.get("states") or {}).get("nodes", [])
        return [WorkflowState(id=node["id"], name=node["name"]) for node in nodes]

    def team_members(self, team_id: str) -> list[TeamMember]:
        data = self._gql(_TEAM_MEMBERS, {"teamId": team_id})
        team = data.get("team") or {}
        nodes = (team.get("members") or {}).get("nodes", [])
        return [
            TeamMember(
                id=node["id"],
                name=node.get("name") or "",
                display_name=node.get("displayName") or node.get("name") or "",
            )
            for node in nodes
        ]

    def create(self, raw_input: str, team_id: Optional[str] = None) -> Issue:
        team = self._require_team(team_id)
        fields = self._extract_create_fields(raw_input)
        title = fields.get("title")
        if not title:
            raise MissingTitle()

        issue_input: dict[str, Any] = {"teamId": team, "title": title}
        if fields.get("description"):
            issue_input["description"] = fields["description"]

        attempts: list[tuple[str, FieldAttempt]] = [
            ("status", self._status_input),
            ("assignee", self._assignee_input),
            ("priority", self._priority_input),
        ]
        for name, attempt in attempts:
            value = fields.get(name)
            if not value:
                continue
            try:
                issue_input.update(attempt(value, team))
            except (ResolutionFailure, RemoteAPIFault) as exc:
                logger.warning(
                    "create_field_unresolved",
                    extra={"field": name, "value": value, "error": exc.message},
                )

        data = self._gql(_CREATE_ISSUE, {"input": issue_input})
        result = data.get("issueCreate") or {}
        if not result.get("success") or not result.get("issue"):
            raise RemoteAPIFault("Linear issueCreate returned success=false")
        issue = Issue.from_node(result["issue"])
        logger.info(
            "linear_issue_created",
            extra={"identifier": issue.identifier, "fields": sorted(issue_input)},
        )
        return issue

    def find(self, search_term_or_id: str, team_id: Optional[str] = None) -> list[Issue]:
        team = self._require_team(team_id)
        term = search_term_or_id.strip()
        match = ISSUE_IDENTIFIER_PATTERN.match(term)
        if match:
            data = self._gql(
                _ISSUE_BY_NUMBER,
                {"teamKey": match.group(1).upper(), "number": int(match.group(2))},
            )
            nodes = (data.get("issues") or {}).get("nodes", [])
            logger.info("linear_lookup", extra={"identifier": term.upper(), "found": bool(nodes)})
            # Lowercase words such as "covid-19" also read as identifiers.
            if nodes or term == term.upper():
                return [Issue.from_node(node) for node in nodes[:1]]

        data = self._gql(_SEARCH_ISSUES, {"teamId": team, "term": term, "first": SEARCH_LIMIT})
        nodes = (data.get("issues") or {}).get("nodes", [])
        issues = [Issue.from_node(node) for node in nodes]
        issues.sort(key=lambda issue: issue.updated_at or "", reverse=True)
        logger.info("linear_search", extra={"term": term, "count": len(issues)})
        return issues[:SEARCH_LIMIT]

    def update(
        self, identifier: str, field: str, value: str, team_id: Optional[str] = None
    ) -> Issue:
        team = self._require_team(team_id)
        issue = self._find_one(identifier, team)
        canonical = self.interpreter.interpret(field)

        update_input: dict[str, Any]
        if canonical is CanonicalField.STATUS:
            update_input = self._strict_status_input(value, team)
        elif canonical is CanonicalField.ASSIGNEE:
            update_input = self._strict_assignee_input(value, team)
        elif canonical is CanonicalField.PRIORITY:
            try:
                update_input = self._priority_input(value, team)
            except ResolutionFailure as exc:
                raise PriorityNotRecognized(
                    f'Priority "{value}" is not recognized.', options=PRIORITY_LABELS
                ) from exc
        else:
            update_input = {canonical.value: value}

        data = self._gql(_UPDATE_ISSUE, {"id": issue.id, "input": update_input})
        result = data.get("issueUpdate") or {}
        if not result.get("success") or not result.get("issue"):
            raise RemoteAPIFault("Linear issueUpdate returned success=false")
        logger.info(
            "linear_issue_updated",
            extra={"identifier": issue.identifier, "field": canonical.value},
        )
        return Issue.from_node(result["issue"])

    def delete(self, identifier: str, team_id: Optional[str] = None) -> bool:
        team = self._require_team(team_id)
        issue = self._find_one(identifier, team)
        data = self._gql(_DELETE_ISSUE, {"id": issue.id})
        success = bool((data.get("issueDelete") or {}).get("success"))
        logger.info(
            "linear_issue_deleted", extra={"identifier": issue.identifier, "success": success}
        )
        return success

    def _find_one(self, identifier: str, team: str) -> Issue:
        issues = self.find(identifier, team)
        if not issues:
            raise CardNotFound(identifier)
        return issues[0]

    def _extract_create_fields(self, raw_input: str) -> dict[str, str]:
        reply = ask(self.llm, _CREATE_EXTRACTION_PROMPT.format(raw_input=raw_input), self.model)
        extraction = extract_json_object(reply)
        if not extraction.ok:
            logger.info("create_extraction_failed", extra={"reason": extraction.error})
            return {}
        fields: dict[str, str] = {}
        for key in ("title", "description", "status", "assignee", "priority"):
            raw = extraction.value.get(key)
            if raw is not None and not isinstance(raw, (dict, list)) and str(raw).strip():
                fields[key] = str(raw).strip()
        return fields

    def _status_input(self, value: str, team: str) -> dict[str, Any]:
        return self._status_from_states(value, self.workflow_states(team))

    def _assignee_input(self, value: str, team: str) -> dict[str, Any]:
        members = self.team_members(team)
        name = self.resolver.resolve(
            value, FieldKind.ASSIGNEE, [member.display_name for member in members]
        )
        return {"assigneeId": _id_for_name(name, [(m.id, m.display_name) for m in members])}

    def _priority_input(self, value: str, team: str) -> dict[str, Any]:
        name = self.resolver.resolve(value, FieldKind.PRIORITY)
        return {"priority": PRIORITY_VALUES[name]}

    def _strict_status_input(self, value: str, team: str) -> dict[str, Any]:
        states = self.workflow_states(team)
        names = [state.name for state in states]
        try:
            return self._status_from_states(value, states)
        except ResolutionFailure as exc:
            raise StatusResolutionFailed(
                f'Could not set status to "{value}".', options=names
            ) from exc

    def _status_from_states(self, value: str, states: list[WorkflowState]) -> dict[str, Any]:
        name = self.resolver.resolve(value, FieldKind.STATUS, [state.name for state in states])
        return {"stateId": _id_for_name(name, [(s.id, s.name) for s in states])}

    def _strict_assignee_input(self, value: str, team: str) -> dict[str, Any]:
        members = self.team_members(team)
        names = [member.display_name for member in members]
        if not members:
            raise AssigneeResolutionFailed("No team members are available to assign.")
        try:
            name = self.resolver.resolve(value, FieldKind.ASSIGNEE, names)
        except ResolutionFailure as exc:
            raise AssigneeResolutionFailed(
                f'Could not assign the card to "{value}".', options=names
            ) from exc
        return {"assigneeId": _id_for_name(name, [(m.id, m.display_name) for m in members])}


def _id_for_name(name: str, pairs: list[tuple[str, str]]) -> str:
    lowered = name.lower()
    for item_id, item_name in pairs:
        if item_name.lower() == lowered:
            return item_id
    raise ResolutionFailure(f'"{name}" is not a known option.', options=[n for _, n in pairs])
