"""End-to-end tests for probe.engine -- orchestration and history."""

import asyncio
import unittest

from fakes import FakeClock, FakeTransport, MemoryStore, down

from probe.config import ProbeSettings
from probe.constants import FAILURE_MARKER
from probe.engine import MeasurementEngine
from probe.history import HistoryEntry, HistoryLog

LAT = ["https://lat-1.example", "https://lat-2.example", "https://lat-3.example"]
DL = ["https://dl-1.example", "https://dl-2.example", "https://dl-3.example"]
UL = ["https://ul-1.example", "https://ul-2.example", "https://ul-3.example"]


def _settings(**overrides):
    data = dict(
        retries=3,
        backoff=0.5,
        latency_urls=LAT,
        download_urls=DL,
        upload_urls=UL,
    )
    data.update(overrides)
    return ProbeSettings(**data)


class EngineTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.store = MemoryStore()
        self.history = HistoryLog(self.store)

    def make_engine(self, transport, **overrides):
        return MeasurementEngine(
            transport,
            _settings(**overrides),
            history=self.history,
            clock=self.clock,
            sleep=self.clock.sleep,
            now=lambda: "2025-01-15T10:30:00+00:00",
        )


class TestRunTest(EngineTestCase):
    async def test_all_instant_success(self):
        t = FakeTransport()
        run = await self.make_engine(t).run_test()

        self.assertTrue(run.latency.success)
        self.assertTrue(run.download_speed.success)
        self.assertTrue(run.upload_speed.success)
        self.assertEqual(run.latency.value, 0)
        self.assertEqual(run.download_speed.value, 800.0)
        self.assertEqual(run.upload_speed.value, 8000.0)

        history = self.history.load()
        self.assertEqual(len(history), 1)
        self.assertEqual(history[0], run.entry)
        self.assertEqual(history[0].date, "2025-01-15T10:30:00+00:00")

    async def test_only_first_candidates_contacted(self):
        t = FakeTransport()
        await self.make_engine(t).run_test()
        self.assertEqual(sorted(u for u, _ in t.calls), sorted([LAT[0], DL[0], UL[0]]))

    async def test_latency_falls_back_to_third_candidate(self):
        t = FakeTransport({LAT[0]: [down(LAT[0])], LAT[1]: [down(LAT[1])]})
        run = await self.make_engine(t).run_test()

        self.assertTrue(run.latency.success)
        self.assertEqual(run.latency.source, LAT[2])
        self.assertEqual(t.calls_to(LAT[0]), 3)
        self.assertEqual(t.calls_to(LAT[1]), 3)
        self.assertEqual(t.calls_to(LAT[2]), 1)
        # two candidates' backoff (0.5 + 1.0 each) is part of the latency
        self.assertGreaterEqual(run.latency.value, 3000)

    async def test_download_failure_does_not_abort_run(self):
        t = FakeTransport({u: [down(u)] for u in DL})
        run = await self.make_engine(t).run_test()

        self.assertFalse(run.download_speed.success)
        self.assertTrue(run.latency.success)
        self.assertTrue(run.upload_speed.success)
        for url in DL:
            self.assertEqual(t.calls_to(url), 3)

        entry = self.history.load()[0]
        self.assertEqual(entry.download_speed, FAILURE_MARKER)
        self.assertIsInstance(entry.latency, int)
        self.assertIsInstance(entry.upload_speed, float)

    async def test_everything_fails_still_records_entry(self):
        t = FakeTransport({u: [500] for u in LAT + DL + UL})
        run = await self.make_engine(t, retries=1).run_test()
        self.assertEqual(
            (run.entry.latency, run.entry.download_speed, run.entry.upload_speed),
            (FAILURE_MARKER, FAILURE_MARKER, FAILURE_MARKER),
        )
        self.assertEqual(len(self.history.load()), 1)

    async def test_entry_built_from_returned_outcomes(self):
        t = FakeTransport(clock=self.clock, cost=0.5)
        engine = self.make_engine(t)
        run = await engine.run_test()
        self.assertEqual(run.entry.latency, run.latency.value)
        self.assertEqual(run.entry.download_speed, run.download_speed.value)
        self.assertEqual(run.entry.upload_speed, run.upload_speed.value)

    async def test_consecutive_runs_do_not_mix(self):
        t = FakeTransport()
        engine = self.make_engine(t)
        first = await engine.run_test()

        engine.download_tester.urls = ["https://gone.example"]
        t.script["https://gone.example"] = [down("https://gone.example")]
        second = await engine.run_test()

        self.assertEqual(first.entry.download_speed, 800.0)
        self.assertEqual(second.entry.download_speed, FAILURE_MARKER)
        self.assertEqual(engine.get_history(), [first.entry, second.entry])

    async def test_probes_run_concurrently(self):
        started = []
        release = asyncio.Event()

        class _Gate(FakeTransport):
            async def request(self, url, config):
                started.append(url)
                if len(started) == 3:
                    release.set()
                await release.wait()
                return await super().request(url, config)

        run = await asyncio.wait_for(self.make_engine(_Gate()).run_test(), timeout=5)
        self.assertEqual(len(started), 3)
        self.assertTrue(run.latency.success)

    async def test_crashing_probe_becomes_failure(self):
        engine = self.make_engine(FakeTransport())

        async def _boom():
            raise RuntimeError("kaboom")

        engine.upload_tester.measure = _boom
        run = await engine.run_test()
        self.assertFalse(run.upload_speed.success)
        self.assertIn("kaboom", run.upload_speed.error)
        self.assertTrue(run.latency.success)
        self.assertEqual(run.entry.upload_speed, FAILURE_MARKER)

    async def test_history_write_failure_is_not_fatal(self):
        self.history = HistoryLog(MemoryStore(fail_writes=True))
        with self.assertLogs("probe", level="ERROR"):
            run = await self.make_engine(FakeTransport()).run_test()
        self.assertTrue(run.latency.success)

    async def test_measure_payload_setting_reaches_download(self):
        engine = self.make_engine(FakeTransport(), download_measure_payload=True)
        self.assertTrue(engine.download_tester.measure_payload)


class TestGetHistory(EngineTestCase):
    async def test_empty(self):
        self.assertEqual(self.make_engine(FakeTransport()).get_history(), [])

    async def test_idempotent_between_runs(self):
        engine = self.make_engine(FakeTransport())
        await engine.run_test()
        await engine.run_test()
        self.assertEqual(engine.get_history(), engine.get_history())
        self.assertEqual(len(engine.get_history()), 2)

    async def test_appends_to_existing(self):
        old = HistoryEntry(latency=12, download_speed="Error", upload_speed=3.5, date="old")
        self.history.save([old])
        engine = self.make_engine(FakeTransport())
        run = await engine.run_test()
        self.assertEqual(engine.get_history(), [old, run.entry])


if __name__ == "__main__":
    unittest.main()
