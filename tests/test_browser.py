import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from playwright.sync_api import Error as PlaywrightError

from fakes import make_settings
from jobharvest.clients.browser import SessionError, open_session


class TestOpenSession(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.settings = make_settings(Path(self._tmp.name), selector_timeout_ms=4321, nav_timeout_ms=9876)
        patcher = patch("jobharvest.clients.browser.sync_playwright")
        self.pw = patcher.start().return_value.start.return_value
        self.addCleanup(patcher.stop)

    def tearDown(self):
        self._tmp.cleanup()

    def test_every_wait_gets_the_configured_timeout(self):
        context = self.pw.chromium.launch.return_value.new_context.return_value
        with open_session(self.settings):
            pass
        context.set_default_timeout.assert_called_once_with(4321)
        context.set_default_navigation_timeout.assert_called_once_with(9876)

    def test_browser_closed_when_block_raises(self):
        browser = self.pw.chromium.launch.return_value
        with self.assertRaises(RuntimeError):
            with open_session(self.settings):
                raise RuntimeError("boom")
        browser.close.assert_called_once()
        self.pw.stop.assert_called_once()

    def test_launch_failure_is_a_session_error(self):
        self.pw.chromium.launch.side_effect = PlaywrightError("Executable doesn't exist")
        with self.assertRaises(SessionError):
            with open_session(self.settings):
                pass
        self.pw.stop.assert_called_once()


if __name__ == "__main__":
    unittest.main()
