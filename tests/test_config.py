import os
import unittest
from unittest import mock

from open_items.config import Config


class ConfigTests(unittest.TestCase):
    def test_defaults(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            config = Config()
        self.assertEqual(config.cache_default_ttl, 10)
        self.assertEqual(config.category_ttls["terminals"], 5)
        self.assertEqual(config.cache_max_selections, 1)
        self.assertEqual(config.api_port, 8771)
        self.assertEqual(config.log_level, "INFO")

    def test_environment_overrides(self):
        env = {
            "OPEN_ITEMS_CACHE_TTL_BROWSERS": "3",
            "OPEN_ITEMS_CACHE_MAX_SELECTIONS": "4",
            "OPEN_ITEMS_LOG_LEVEL": "debug",
        }
        with mock.patch.dict(os.environ, env, clear=True):
            config = Config()
        self.assertEqual(config.ttl_for_category("browsers"), 3)
        self.assertEqual(config.cache_max_selections, 4)
        self.assertEqual(config.log_level, "DEBUG")

    def test_unknown_category_uses_universal_ttl(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            config = Config()
        self.assertEqual(config.ttl_for_category("games"), config.category_ttls["universal"])

    def test_invalid_values(self):
        for name, value in (
            ("OPEN_ITEMS_CACHE_DEFAULT_TTL", "0"),
            ("OPEN_ITEMS_CACHE_TTL_SYSTEM", "-1"),
            ("OPEN_ITEMS_CACHE_MAX_SELECTIONS", "0"),
            ("OPEN_ITEMS_BROWSER_TIMEOUT", "0"),
            ("OPEN_ITEMS_LOG_LEVEL", "LOUD"),
        ):
            with self.subTest(name=name):
                with mock.patch.dict(os.environ, {name: value}, clear=True):
                    with self.assertRaises(ValueError):
                        Config()


if __name__ == "__main__":
    unittest.main()
