import os
import unittest
from unittest import mock

from web.config import AppConfig


class ConfigTests(unittest.TestCase):
    def test_defaults(self):
        keys = ("MAX_VIDEOS", "REFRESH_INTERVAL_HOURS", "CLEANUP_BATCH_SIZE", "LOG_LEVEL", "OPENAI_MODEL")
        environ = {key: value for key, value in os.environ.items() if key not in keys}
        with mock.patch.dict(os.environ, environ, clear=True):
            config = AppConfig.from_env()

        self.assertEqual(config.max_videos, 200)
        self.assertEqual(config.refresh_interval_hours, 24)
        self.assertEqual(config.cleanup_batch_size, 500)
        self.assertEqual(config.log_level, "INFO")
        self.assertEqual(config.openai_model, "gpt-4o-mini")

    def test_overrides_reach_flask_config(self):
        with mock.patch.dict(os.environ, {"REFRESH_INTERVAL_HOURS": "6", "AUTO_CREATE_SCHEMA": "no", "LOG_LEVEL": "debug"}):
            flask_config = AppConfig.from_env().to_flask_config()

        self.assertEqual(flask_config["REFRESH_INTERVAL_HOURS"], 6)
        self.assertFalse(flask_config["AUTO_CREATE_SCHEMA"])
        self.assertEqual(flask_config["LOG_LEVEL"], "DEBUG")


if __name__ == "__main__":
    unittest.main()
