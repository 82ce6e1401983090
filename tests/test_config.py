import os
import unittest
from unittest.mock import patch

from config import Settings


class TestSessionSecret(unittest.TestCase):

    def test_configured_secret_is_used(self):
        with patch.dict(os.environ, {"SESSION_SECRET": "from-env"}):
            self.assertEqual(Settings().session_secret, "from-env")

    def test_missing_secret_is_random_per_process(self):
        with patch.dict(os.environ):
            os.environ.pop("SESSION_SECRET", None)
            with self.assertLogs("config", level="ERROR") as logs:
                first = Settings().session_secret
            second = Settings().session_secret

        self.assertIn("SESSION_SECRET is not set", logs.output[0])
        self.assertGreaterEqual(len(first), 32)
        self.assertNotEqual(first, second)
        self.assertNotEqual(first, "change-me-in-production")
