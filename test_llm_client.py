import unittest
from unittest.mock import patch

import requests  # type: ignore[import-untyped]

from llm_client import ChatCompletionClient, ChatMessage, ask


class TestChatCompletionClient(unittest.TestCase):
    def setUp(self):
        self.client = ChatCompletionClient(api_key="sk-test", model="gpt-4o-mini", base_url="https://llm.local/v1/")

    @patch("llm_client.requests.post")
    def test_complete_success(self, mock_post):
        mock_post.return_value.json.return_value = {"choices": [{"message": {"content": " linear \n"}}]}
        reply = self.client.complete([ChatMessage(role="user", content="classify")])
        self.assertEqual(reply, "linear")

        args, kwargs = mock_post.call_args
        self.assertEqual(args[0], "https://llm.local/v1/chat/completions")
        self.assertEqual(kwargs["json"]["model"], "gpt-4o-mini")
        self.assertFalse(kwargs["json"]["stream"])
        self.assertEqual(kwargs["json"]["messages"], [{"role": "user", "content": "classify"}])
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer sk-test")

    @patch("llm_client.requests.post")
    def test_model_override(self, mock_post):
        mock_post.return_value.json.return_value = {"choices": [{"message": {"content": "ok"}}]}
        ask(self.client, "hello", model="gpt-4o")
        self.assertEqual(mock_post.call_args[1]["json"]["model"], "gpt-4o")

    @patch("llm_client.requests.post", side_effect=requests.Timeout("slow"))
    def test_request_failure_returns_none(self, _mock_post):
        self.assertIsNone(ask(self.client, "hello"))

    @patch("llm_client.requests.post")
    def test_http_error_returns_none(self, mock_post):
        mock_post.return_value.raise_for_status.side_effect = requests.HTTPError("401")
        self.assertIsNone(ask(self.client, "hello"))

    @patch("llm_client.requests.post")
    def test_malformed_body_returns_none(self, mock_post):
        mock_post.return_value.json.return_value = {"choices": []}
        self.assertIsNone(ask(self.client, "hello"))

    @patch("llm_client.requests.post")
    def test_empty_content_returns_none(self, mock_post):
        mock_post.return_value.json.return_value = {"choices": [{"message": {"content": None}}]}
        self.assertIsNone(ask(self.client, "hello"))


if __name__ == "__main__":
    unittest.main()
