import os
import unittest
from unittest.mock import patch

from errors import ConfigurationMissing
from settings import HarperSettings

_REQUIRED = {"SLACK_BOT_TOKEN": "xoxb-test", "OPENAI_API_KEY": "sk-test"}


class TestHarperSettings(unittest.TestCase):
    def test_defaults_without_linear(self):
        with patch.dict(os.environ, _REQUIRED, clear=True):
            settings = HarperSettings.load()
        self.assertEqual(settings.openai.model, "gpt-4o-mini")
        self.assertEqual(settings.events.dedup_ttl_seconds, 300)
        self.assertIsNone(settings.linear.api_key)
        self.assertFalse(settings.linear_configured)

    def test_linear_configured(self):
        env = dict(_REQUIRED, LINEAR_API_KEY="lin_api_x", LINEAR_TEAM_ID="team-1", HARPER_LOG_JSON="true")
        with patch.dict(os.environ, env, clear=True):
            settings = HarperSettings.load()
        self.assertTrue(settings.linear_configured)
        self.assertEqual(settings.linear.team_id, "team-1")
        self.assertTrue(settings.logging.json_enabled)

    def test_missing_required_values(self):
        with patch.dict(os.environ, {"SLACK_BOT_TOKEN": "xoxb-test"}, clear=True):
            with self.assertRaises(ConfigurationMissing) as ctx:
                HarperSettings.load()
        self.assertIn("OPENAI_API_KEY", ctx.exception.message)


if __name__ == "__main__":
    unittest.main()
