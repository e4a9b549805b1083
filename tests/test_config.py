"""Tests for environment-driven configuration."""
from __future__ import annotations

import logging
import os
import unittest
from unittest import mock

from room_inspection.config import load_config
from room_inspection.utils.logging import parse_level


class TestLoadConfig(unittest.TestCase):
    def _load(self, **env):
        with mock.patch.dict(os.environ, env, clear=True), mock.patch("room_inspection.config.load_dotenv"):
            return load_config()

    def test_defaults(self):
        config = self._load()
        self.assertEqual(config.app_id, "default-app-id")
        self.assertEqual(config.store_backend, "firestore")
        self.assertEqual(config.llm_provider, "google")
        self.assertEqual(config.store_timeout_seconds, 15.0)
        self.assertEqual(config.llm_timeout_seconds, 30.0)
        self.assertEqual(config.delete_passphrase, "hoshinoya")
        self.assertEqual((config.photo_max_width, config.photo_quality, config.marker_quality), (800, 60, 70))
        self.assertEqual(config.export_prefix, "Inspection")
        self.assertIsNone(config.firestore_project)

    def test_environment_overrides(self):
        config = self._load(
            APP_ID="resort-7",
            STORE_BACKEND="Memory",
            LLM_PROVIDER="OPENAI",
            OPENAI_API_KEY="sk-test",
            STORE_TIMEOUT_SECONDS="2.5",
            REQUESTS_PER_MINUTE="10",
            LOG_LEVEL="debug",
        )
        self.assertEqual(config.app_id, "resort-7")
        self.assertEqual(config.store_backend, "memory")
        self.assertEqual(config.llm_provider, "openai")
        self.assertEqual(config.openai_api_key, "sk-test")
        self.assertEqual(config.store_timeout_seconds, 2.5)
        self.assertEqual(config.requests_per_minute, 10)
        self.assertEqual(config.log_level, "DEBUG")

    def test_unknown_provider(self):
        with self.assertRaises(ValueError):
            self._load(LLM_PROVIDER="anthropic")

    def test_unknown_store_backend(self):
        with self.assertRaises(ValueError):
            self._load(STORE_BACKEND="sqlite")

    def test_missing_key_does_not_fail_loading(self):
        config = self._load(LLM_PROVIDER="google")
        self.assertIsNone(config.google_api_key)


class TestParseLevel(unittest.TestCase):
    def test_names_and_numbers(self):
        self.assertEqual(parse_level("debug"), logging.DEBUG)
        self.assertEqual(parse_level(logging.WARNING), logging.WARNING)

    def test_unknown_name(self):
        with self.assertRaises(ValueError):
            parse_level("chatty")


if __name__ == "__main__":
    unittest.main()
