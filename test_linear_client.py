import unittest
from unittest.mock import MagicMock, patch

import requests  # type: ignore[import-untyped]

from errors import (
    AssigneeResolutionFailed,
    CardNotFound,
    ConfigurationMissing,
    MissingTeam,
    MissingTitle,
    PriorityNotRecognized,
    RemoteAPIFault,
    StatusResolutionFailed,
    UnknownField,
)
from field_interpreter import FieldInterpreter
from linear_client import LinearClient
from option_resolver import OptionResolver
from testing_fakes import FakeLinearAPI, ScriptedLLM


def _client(llm, api_key="lin_api_test", team_id="team-1"):
    return LinearClient(
        api_key=api_key,
        default_team_id=team_id,
        llm=llm,
        resolver=OptionResolver(llm),
        interpreter=FieldInterpreter(llm),
    )


class TestConfiguration(unittest.TestCase):
    @patch("linear_client.requests.post")
    def test_missing_api_key_blocks_calls(self, mock_post):
        llm = ScriptedLLM('{"title": "x"}')
        client = _client(llm, api_key=None)
        with self.assertRaises(ConfigurationMissing):
            client.create("x")
        with self.assertRaises(ConfigurationMissing):
            client.find("PRO-1")
        mock_post.assert_not_called()
        self.assertEqual(llm.calls, [])

    @patch("linear_client.requests.post")
    def test_missing_team(self, mock_post):
        client = _client(ScriptedLLM(), team_id=None)
        with self.assertRaises(MissingTeam):
            client.delete("PRO-1")
        mock_post.assert_not_called()

    @patch("linear_client.requests.post")
    def test_explicit_team_overrides_missing_default(self, mock_post):
        api = FakeLinearAPI()
        mock_post.side_effect = api
        client = _client(ScriptedLLM(), team_id=None)
        self.assertEqual(client.find("nothing here", team_id="team-9"), [])
        self.assertEqual(api.requests[0]["variables"]["teamId"], "team-9")


class TestTransport(unittest.TestCase):
    @patch("linear_client.requests.post")
    def test_graphql_errors(self, mock_post):
        mock_post.return_value.status_code = 200
        mock_post.return_value.json.return_value = {"errors": [{"message": "Unauthorized"}]}
        with self.assertRaises(RemoteAPIFault) as ctx:
            _client(ScriptedLLM()).find("PRO-1")
        self.assertIn("Unauthorized", ctx.exception.message)

    @patch("linear_client.requests.post")
    def test_http_error(self, mock_post):
        mock_post.return_value.status_code = 500
        mock_post.return_value.text = "boom"
        with self.assertRaises(RemoteAPIFault) as ctx:
            _client(ScriptedLLM()).find("login")
        self.assertEqual(ctx.exception.status_code, 500)

    @patch("linear_client.requests.post", side_effect=requests.ConnectionError("down"))
    def test_network_error(self, _mock_post):
        with self.assertRaises(RemoteAPIFault):
            _client(ScriptedLLM()).find("login")

    @patch("linear_client.requests.post")
    def test_api_key_header(self, mock_post):
        api = FakeLinearAPI()
        mock_post.side_effect = api
        _client(ScriptedLLM()).find("login")
        self.assertEqual(api.requests[0]["headers"]["Authorization"], "lin_api_test")


class TestFind(unittest.TestCase):
    def setUp(self):
        patcher = patch("linear_client.requests.post")
        self.addCleanup(patcher.stop)
        self.api = FakeLinearAPI()
        patcher.start().side_effect = self.api
        self.client = _client(ScriptedLLM())

    def test_identifier_uses_exact_lookup(self):
        for index in range(20):
            self.api.add_issue(f"Card {index}")
        issues = self.client.find("PRO-16")
        self.assertEqual(self.api.operations(), ["IssueByNumber"])
        self.assertEqual(self.api.requests[0]["variables"], {"teamKey": "PRO", "number": 16})
        self.assertEqual(len(issues), 1)
        self.assertEqual(issues[0].identifier, "PRO-16")

    def test_lowercase_identifier(self):
        self.api.add_issue("Only card")
        self.assertEqual(self.client.find("pro-1")[0].title, "Only card")

    def test_substring_search_limited_and_ordered(self):
        for index in range(12):
            self.api.add_issue(f"Login bug {index}")
        self.api.add_issue("Unrelated", description="nothing")
        issues = self.client.find("login bug")
        self.assertEqual(self.api.operations(), ["SearchIssues"])
        self.assertEqual(len(issues), 10)
        stamps = [issue.updated_at for issue in issues]
        self.assertEqual(stamps, sorted(stamps, reverse=True))

    def test_search_matches_description(self):
        self.api.add_issue("Crash", description="Happens on the LOGIN page")
        self.assertEqual(len(self.client.find("login page")), 1)

    def test_lowercase_hyphenated_word_falls_back_to_search(self):
        self.api.add_issue("Update covid-19 banner")
        issues = self.client.find("covid-19")
        self.assertEqual(self.api.operations(), ["IssueByNumber", "SearchIssues"])
        self.assertEqual([issue.title for issue in issues], ["Update covid-19 banner"])

    def test_uppercase_identifier_does_not_fall_back(self):
        self.api.add_issue("Mentions PRO-7 in the title")
        self.assertEqual(self.client.find("PRO-7"), [])
        self.assertEqual(self.api.operations(), ["IssueByNumber"])

    def test_no_results(self):
        self.assertEqual(self.client.find("nothing"), [])
        self.assertEqual(self.client.find("PRO-99"), [])


class TestCreate(unittest.TestCase):
    def setUp(self):
        patcher = patch("linear_client.requests.post")
        self.addCleanup(patcher.stop)
        self.api = FakeLinearAPI()
        patcher.start().side_effect = self.api

    def test_resolves_all_fields(self):
        llm = ScriptedLLM(
            '{"title": "Fix login bug", "description": "Blocks users", '
            '"status": "doing", "assignee": "sarah", "priority": "asap"}',
            "In Progress",
            "Sarah",
            "Urgent",
        )
        issue = _client(llm).create("Fix login bug\nBlocks users status: doing")
        create_request = self.api.requests[-1]
        self.assertEqual(create_request["operation"], "CreateIssue")
        self.assertEqual(
            create_request["variables"]["input"],
            {
                "teamId": "team-1",
                "title": "Fix login bug",
                "description": "Blocks users",
                "stateId": "state-doing",
                "assigneeId": "user-sarah",
                "priority": 1,
            },
        )
        self.assertEqual(issue.identifier, "PRO-1")
        self.assertEqual(issue.state.name, "In Progress")
        self.assertEqual(issue.assignee.display_name, "Sarah")

    def test_unresolved_fields_are_skipped(self):
        llm = ScriptedLLM(
            '{"title": "Fix login bug", "status": "blocked", "assignee": "bob", "priority": "meh"}',
            "Blocked",
            "Bob",
            "Whatever",
        )
        issue = _client(llm).create("Fix login bug")
        issue_input = self.api.requests[-1]["variables"]["input"]
        self.assertEqual(issue_input, {"teamId": "team-1", "title": "Fix login bug"})
        self.assertEqual(issue.title, "Fix login bug")

    def test_only_mentioned_fields_resolved(self):
        llm = ScriptedLLM('{"title": "Write docs", "priority": "low"}', "Low")
        _client(llm).create("Write docs, low priority")
        self.assertEqual(self.api.operations(), ["CreateIssue"])
        self.assertEqual(self.api.requests[-1]["variables"]["input"]["priority"], 4)
        self.assertEqual(len(llm.calls), 2)

    def test_missing_title(self):
        with self.assertRaises(MissingTitle):
            _client(ScriptedLLM('{"description": "no title"}')).create("something")
        self.assertEqual(self.api.requests, [])

    def test_extraction_failure_is_missing_title(self):
        with self.assertRaises(MissingTitle):
            _client(ScriptedLLM("nope")).create("something")

    def test_create_then_find_round_trip(self):
        llm = ScriptedLLM('{"title": "Fix login bug"}')
        client = _client(llm)
        created = client.create("Fix login bug")
        found = client.find(created.identifier)
        self.assertEqual(len(found), 1)
        self.assertEqual(found[0].title, "Fix login bug")


class TestUpdate(unittest.TestCase):
    def setUp(self):
        patcher = patch("linear_client.requests.post")
        self.addCleanup(patcher.stop)
        self.api = FakeLinearAPI()
        patcher.start().side_effect = self.api
        self.api.add_issue("Fix login bug")

    def test_status_update(self):
        llm = ScriptedLLM("status", "In Progress")
        issue = _client(llm).update("PRO-1", "state", "working on it")
        self.assertEqual(
            self.api.operations(), ["IssueByNumber", "TeamStates", "UpdateIssue"]
        )
        self.assertEqual(
            self.api.requests[-1]["variables"],
            {"id": "issue-1", "input": {"stateId": "state-doing"}},
        )
        self.assertEqual(issue.state.name, "In Progress")

    def test_status_unresolved_never_mutates(self):
        llm = ScriptedLLM("status", "Archived")
        with self.assertRaises(StatusResolutionFailed) as ctx:
            _client(llm).update("PRO-1", "status", "archived")
        self.assertIn("Todo", ctx.exception.message)
        self.assertIn("In Progress", ctx.exception.message)
        self.assertEqual(ctx.exception.options, ["Todo", "In Progress"])
        self.assertNotIn("UpdateIssue", self.api.operations())

    def test_status_without_states(self):
        self.api.states = []
        with self.assertRaises(StatusResolutionFailed):
            _client(ScriptedLLM("status")).update("PRO-1", "status", "done")
        self.assertNotIn("UpdateIssue", self.api.operations())

    def test_assignee_update(self):
        _client(ScriptedLLM("assignee", "Jane")).update("PRO-1", "owner", "jane")
        self.assertEqual(
            self.api.requests[-1]["variables"]["input"], {"assigneeId": "user-jane"}
        )

    def test_assignee_no_members(self):
        self.api.members = []
        with self.assertRaises(AssigneeResolutionFailed):
            _client(ScriptedLLM("assignee")).update("PRO-1", "assignee", "jane")
        self.assertNotIn("UpdateIssue", self.api.operations())

    def test_assignee_no_match(self):
        with self.assertRaises(AssigneeResolutionFailed) as ctx:
            _client(ScriptedLLM("assignee", "Bob")).update("PRO-1", "assignee", "bob")
        self.assertEqual(ctx.exception.options, ["Sarah", "Jane"])

    def test_priority_update(self):
        _client(ScriptedLLM("priority", "High")).update("PRO-1", "priority", "important")
        self.assertEqual(self.api.requests[-1]["variables"]["input"], {"priority": 2})

    def test_priority_not_recognized(self):
        with self.assertRaises(PriorityNotRecognized):
            _client(ScriptedLLM("priority", "Critical-ish")).update("PRO-1", "priority", "x")
        self.assertNotIn("UpdateIssue", self.api.operations())

    def test_title_passes_through(self):
        llm = ScriptedLLM("title")
        issue = _client(llm).update("PRO-1", "name", "Fix SSO login bug")
        self.assertEqual(
            self.api.requests[-1]["variables"]["input"], {"title": "Fix SSO login bug"}
        )
        self.assertEqual(issue.title, "Fix SSO login bug")
        self.assertEqual(len(llm.calls), 1)

    def test_unknown_field(self):
        with self.assertRaises(UnknownField):
            _client(ScriptedLLM("labels")).update("PRO-1", "labels", "bug")
        self.assertNotIn("UpdateIssue", self.api.operations())

    def test_card_not_found(self):
        llm = ScriptedLLM("status")
        with self.assertRaises(CardNotFound):
            _client(llm).update("PRO-42", "status", "done")
        self.assertEqual(llm.calls, [])


class TestDelete(unittest.TestCase):
    @patch("linear_client.requests.post")
    def test_delete(self, mock_post):
        api = FakeLinearAPI()
        mock_post.side_effect = api
        api.add_issue("Old card")
        self.assertTrue(_client(ScriptedLLM()).delete("PRO-1"))
        self.assertEqual(api.operations(), ["IssueByNumber", "DeleteIssue"])
        self.assertEqual(api.issues, [])

    @patch("linear_client.requests.post")
    def test_delete_not_found(self, mock_post):
        api = FakeLinearAPI()
        mock_post.side_effect = api
        with self.assertRaises(CardNotFound):
            _client(ScriptedLLM()).delete("PRO-7")
        self.assertNotIn("DeleteIssue", api.operations())

    @patch("linear_client.requests.post")
    def test_delete_reports_remote_failure(self, mock_post):
        lookup = MagicMock(status_code=200)
        lookup.json.return_value = {
            "data": {
                "issues": {
                    "nodes": [
                        {
                            "id": "issue-1",
                            "identifier": "PRO-1",
                            "title": "Old",
                            "url": "https://linear.app/x",
                        }
                    ]
                }
            }
        }
        deletion = MagicMock(status_code=200)
        deletion.json.return_value = {"data": {"issueDelete": {"success": False}}}
        mock_post.side_effect = [lookup, deletion]
        self.assertFalse(_client(ScriptedLLM()).delete("PRO-1"))
        self.assertEqual(mock_post.call_count, 2)


if __name__ == "__main__":
    unittest.main()
