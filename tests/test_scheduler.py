import unittest
from unittest.mock import MagicMock, patch

from jobharvest.clients.browser import SessionError
from jobharvest.scheduler import build_scheduler, guarded, serve


class TestScheduler(unittest.TestCase):
    def test_guarded_run_survives_failures(self):
        for exc in (SessionError("no chromium"), RuntimeError("boom")):
            run = MagicMock(side_effect=exc)
            with self.assertLogs("jobharvest.scheduler", level="ERROR"):
                guarded(run)()
            run.assert_called_once()

    def test_hourly_single_instance_job(self):
        sched = build_scheduler(MagicMock(), minute=0, timezone="UTC")
        (job,) = sched.get_jobs()
        self.assertEqual(job.max_instances, 1)
        self.assertTrue(job.coalesce)
        self.assertIn("minute='0'", str(job.trigger))

    def test_serve_runs_now_then_blocks(self):
        run = MagicMock()
        with patch("jobharvest.scheduler.build_scheduler") as build:
            serve(run, minute=5, run_now=True)
        run.assert_called_once()
        build.assert_called_once_with(run, minute=5)
        build.return_value.start.assert_called_once()

    def test_serve_without_immediate_run(self):
        run = MagicMock()
        with patch("jobharvest.scheduler.build_scheduler"):
            serve(run, run_now=False)
        run.assert_not_called()


if __name__ == "__main__":
    unittest.main()
