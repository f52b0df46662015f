import unittest
from unittest.mock import MagicMock

from fakes import FakeSource, FakeStore, make_config, raw
from jobharvest.pipeline.orchestrator import RunState, collect_category, consider, run_categories

NOW = lambda: "2026-10-18T09:00:00+00:00"  # noqa: E731


class TestConsider(unittest.TestCase):
    def setUp(self):
        self.config = make_config()
        self.source = FakeSource([], name="naukri")
        self.state = RunState()

    def test_reference_record_accepted_and_stamped(self):
        job = consider(raw(), self.config, self.source, self.state, NOW)
        self.assertIsNotNone(job)
        self.assertEqual(job["detail_url"], "http://x/1")
        self.assertEqual(job["category"], "Frontend")
        self.assertEqual(job["source_platform"], "naukri")
        self.assertEqual(job["scraped_at"], NOW())
        self.assertTrue(self.state.ledger.contains("http://x/1"))
        self.assertEqual(self.state.accepted, [job])
        self.assertEqual(self.state.known, [job])

    def test_london_rejected_at_location(self):
        self.assertIsNone(consider(raw(location="London"), self.config, self.source, self.state, NOW))
        self.assertEqual(self.state.rejected["location"], 1)
        self.assertEqual(len(self.state.ledger), 0)

    def test_old_posting_rejected_at_recency(self):
        self.assertIsNone(consider(raw(posted_date="2 weeks ago"), self.config, self.source, self.state, NOW))
        self.assertEqual(self.state.rejected["recency"], 1)

    def test_same_url_accepted_once(self):
        self.assertIsNotNone(consider(raw(), self.config, self.source, self.state, NOW))
        self.assertIsNone(consider(raw(title="Frontend Engineer"), self.config, self.source, self.state, NOW))
        self.assertEqual(self.state.rejected["duplicate"], 1)
        self.assertEqual(len(self.state.accepted), 1)

    def test_tracking_params_do_not_make_a_new_job(self):
        consider(raw("https://www.naukri.com/job-1?src=a"), self.config, self.source, self.state, NOW)
        self.assertIsNone(consider(raw("https://www.naukri.com/job-1?src=b"), self.config, self.source, self.state, NOW))

    def test_same_title_different_url_is_a_different_job(self):
        consider(raw("http://x/1"), self.config, self.source, self.state, NOW)
        self.assertIsNotNone(consider(raw("http://x/2"), self.config, self.source, self.state, NOW))

    def test_previously_known_url_is_never_reemitted(self):
        state = RunState.from_cache([{"detail_url": "http://x/1", "title": "old"}])
        self.assertIsNone(consider(raw(), self.config, self.source, state, NOW))
        self.assertEqual(state.accepted, [])

    def test_unknown_experience_only_for_sources_without_it(self):
        linkedin = FakeSource([], name="linkedin", exposes_experience=False)
        self.assertIsNone(consider(raw("http://x/1", experience=None), self.config, self.source, self.state, NOW))
        self.assertIsNotNone(consider(raw("http://x/2", experience=None), self.config, linkedin, self.state, NOW))

    def test_card_without_url_is_dropped(self):
        self.assertIsNone(consider(raw(None), self.config, self.source, self.state, NOW))
        self.assertEqual(self.state.rejected["no_url"], 1)


class TestFanOut(unittest.TestCase):
    def test_every_location_role_pair_is_searched(self):
        config = make_config(roles=("Frontend Developer", "React Developer"))
        source = FakeSource([])
        collect_category(config, [source], MagicMock(), RunState(), ["Chennai", "Remote"], NOW)
        self.assertEqual(
            source.calls,
            [("Chennai", "Frontend Developer"), ("Chennai", "React Developer"),
             ("Remote", "Frontend Developer"), ("Remote", "React Developer")],
        )

    def test_one_failing_search_does_not_stop_the_category(self):
        config = make_config(roles=("Frontend Developer", "React Developer"))
        bad = FakeSource([raw("http://x/1")], name="naukri", fail_on={("Chennai", "Frontend Developer")})
        good = FakeSource([raw("http://x/2")], name="linkedin")
        state = RunState()

        with self.assertLogs("jobharvest.pipeline.orchestrator", level="ERROR"):
            batch = collect_category(config, [bad, good], MagicMock(), state, ["Chennai"], NOW)

        self.assertEqual(state.failures, 1)
        self.assertEqual(len(bad.calls), 2)
        # records yielded before the failure still count
        self.assertEqual(sorted(j["detail_url"] for j in batch), ["http://x/1", "http://x/2"])

    def test_batches_flushed_per_category(self):
        frontend = make_config("Frontend", "sheet-fe")
        design = make_config("Design", "sheet-design", roles=("UI Developer",))
        source = FakeSource([raw("http://x/1")])
        store = FakeStore()
        state = run_categories([frontend, design], [source], MagicMock(), RunState(), store, ["Chennai"], NOW)

        # the second category sees the same card but the ledger already has it
        self.assertEqual(state.per_category, {"Frontend": 1, "Design": 0})
        self.assertEqual(store.urls("sheet-fe"), ["http://x/1"])
        self.assertNotIn("sheet-design", store.sheets)

    def test_unconfigured_target_keeps_records_local(self):
        config = make_config(sheet_id="")
        store = FakeStore()
        state = run_categories([config], [FakeSource([raw()])], MagicMock(), RunState(), store, ["Chennai"], NOW)
        self.assertEqual(len(state.accepted), 1)
        self.assertEqual(store.sheets, {})

    def test_remote_failure_does_not_lose_records(self):
        state = run_categories(
            [make_config()], [FakeSource([raw()])], MagicMock(), RunState(), FakeStore(fail_append=True), ["Chennai"], NOW
        )
        self.assertEqual([j["detail_url"] for j in state.known], ["http://x/1"])


if __name__ == "__main__":
    unittest.main()
