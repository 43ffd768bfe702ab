import os
import unittest
from unittest import mock

from open_items import main as entry


class MainTests(unittest.TestCase):
    def setUp(self):
        patchers = {
            "configure_logging": mock.patch.object(entry, "configure_logging"),
            "build_service": mock.patch.object(entry, "build_service"),
            "ServiceLoop": mock.patch.object(entry, "ServiceLoop"),
            "serve": mock.patch.object(entry, "serve"),
        }
        self.mocks = {name: patcher.start() for name, patcher in patchers.items()}
        for patcher in patchers.values():
            self.addCleanup(patcher.stop)
        self.service = self.mocks["build_service"].return_value
        self.service_loop = self.mocks["ServiceLoop"].return_value.start.return_value

    def test_serves_on_configured_port_and_shuts_down(self):
        with mock.patch.dict(os.environ, {"OPEN_ITEMS_API_PORT": "9911"}, clear=True):
            self.assertEqual(entry.main(), 0)

        self.mocks["configure_logging"].assert_called_once_with()
        self.mocks["build_service"].assert_called_once()
        self.assertIs(self.mocks["build_service"].call_args[1]["defer_refresh"], entry.user_is_typing)
        self.service_loop.call.assert_called_once_with(self.service.prewarm)
        self.mocks["serve"].assert_called_once_with(self.service, self.service_loop, port=9911)
        self.service_loop.submit.assert_called_once_with(self.service.close.return_value)
        self.service_loop.stop.assert_called_once_with()

    def test_keyboard_interrupt_still_stops_the_loop(self):
        self.mocks["serve"].side_effect = KeyboardInterrupt

        with mock.patch.dict(os.environ, {}, clear=True):
            self.assertEqual(entry.main(), 0)

        self.service_loop.stop.assert_called_once_with()

    def test_invalid_configuration_is_raised(self):
        with mock.patch.dict(os.environ, {"OPEN_ITEMS_CACHE_MAX_SELECTIONS": "0"}, clear=True):
            with self.assertRaises(ValueError):
                entry.main()

        self.mocks["serve"].assert_not_called()
        self.mocks["ServiceLoop"].assert_not_called()


if __name__ == "__main__":
    unittest.main()
