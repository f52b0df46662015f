import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from fakes import FakeSource, FakeStore, SessionRecorder, make_config, make_settings, raw
from jobharvest import runner
from jobharvest.clients.browser import SessionError
from jobharvest.io.cache import load_cache


class RunnerTestCase(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)
        self.settings = make_settings(self.dir)
        self.configs = [make_config()]

    def tearDown(self):
        self._tmp.cleanup()

    def run_once(self, sources, store, sessions=None, **kwargs):
        return runner.run_once(
            self.settings,
            self.configs,
            sources=sources,
            store=store,
            session_factory=sessions or SessionRecorder(),
            **kwargs,
        )


class TestRunOnce(RunnerTestCase):
    def test_accepts_flushes_and_caches(self):
        store = FakeStore()
        state = self.run_once([FakeSource([raw("http://x/1"), raw("http://x/2", location="London")])], store)

        self.assertEqual([j["detail_url"] for j in state.accepted], ["http://x/1"])
        self.assertEqual(store.urls("sheet-frontend"), ["http://x/1"])
        self.assertEqual([j["detail_url"] for j in load_cache(self.settings.results_file)], ["http://x/1"])

    def test_second_run_with_same_data_accepts_nothing(self):
        store = FakeStore()
        source = FakeSource([raw("http://x/1"), raw("http://x/2")])
        first = self.run_once([source], store)
        second = self.run_once([source], store)

        self.assertEqual(len(first.accepted), 2)
        self.assertEqual(second.accepted, [])
        self.assertEqual(len(store.urls("sheet-frontend")), 2)
        self.assertEqual(len(load_cache(self.settings.results_file)), 2)

    def test_remote_store_alone_prevents_duplicates(self):
        store = FakeStore()
        source = FakeSource([raw("http://x/1")])
        self.run_once([source], store)
        Path(self.settings.results_file).unlink()  # lose the local cache entirely

        second = self.run_once([source], store)
        self.assertEqual(second.accepted, [])

    def test_cache_alone_prevents_duplicates_when_sheet_unreachable(self):
        Path(self.settings.results_file).write_text(json.dumps([{"detail_url": "http://x/1"}]), encoding="utf-8")
        with self.assertLogs("jobharvest.runner", level="ERROR"):
            state = self.run_once([FakeSource([raw("http://x/1")])], FakeStore(fail_query=True))
        self.assertEqual(state.accepted, [])

    def test_cache_keeps_prior_records(self):
        Path(self.settings.results_file).write_text(json.dumps([{"detail_url": "http://old/1"}]), encoding="utf-8")
        self.run_once([FakeSource([raw("http://x/1")])], FakeStore())
        urls = {j["detail_url"] for j in load_cache(self.settings.results_file)}
        self.assertEqual(urls, {"http://old/1", "http://x/1"})

    def test_dry_run_leaves_cache_alone(self):
        self.run_once([FakeSource([raw()])], FakeStore(), write_cache=False)
        self.assertFalse(Path(self.settings.results_file).exists())


class TestSessionLifecycle(RunnerTestCase):
    def test_session_closed_after_run(self):
        sessions = SessionRecorder()
        self.run_once([FakeSource([raw()])], FakeStore(), sessions)
        self.assertEqual((sessions.opened, sessions.closed), (1, 1))

    def test_session_closed_and_cache_written_on_error(self):
        sessions = SessionRecorder()
        Path(self.settings.results_file).write_text(json.dumps([{"detail_url": "http://old/1"}]), encoding="utf-8")
        with patch("jobharvest.runner.run_categories", side_effect=RuntimeError("browser crashed")):
            with self.assertRaises(RuntimeError):
                self.run_once([FakeSource([])], FakeStore(), sessions)
        self.assertEqual(sessions.closed, 1)
        self.assertEqual([j["detail_url"] for j in load_cache(self.settings.results_file)], ["http://old/1"])

    def test_fatal_session_error_propagates(self):
        sessions = SessionRecorder(fail_with=SessionError("no chromium"))
        with self.assertRaises(SessionError):
            self.run_once([FakeSource([raw()])], FakeStore(), sessions)
        self.assertEqual(sessions.opened, 0)
        self.assertTrue(Path(self.settings.results_file).exists())


class TestNoReentry(RunnerTestCase):
    def test_overlapping_run_is_skipped(self):
        sessions = SessionRecorder()
        runner._run_lock.acquire()
        try:
            with self.assertLogs("jobharvest.runner", level="WARNING"):
                self.assertIsNone(self.run_once([FakeSource([raw()])], FakeStore(), sessions))
        finally:
            runner._run_lock.release()
        self.assertEqual(sessions.opened, 0)

    def test_lock_released_after_failure(self):
        sessions = SessionRecorder(fail_with=SessionError("no chromium"))
        with self.assertRaises(SessionError):
            self.run_once([], FakeStore(), sessions)
        self.assertIsNotNone(self.run_once([], FakeStore()))


if __name__ == "__main__":
    unittest.main()
