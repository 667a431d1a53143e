"""Tests for cache-checked synchronous and asynchronous execution."""

from __future__ import annotations

import unittest

from docpage.cache import CacheKey, DocCache
from docpage.dispatch import MainLoopDispatcher
from docpage.errors import BackendError, SpawnError
from docpage.jobs import JobScheduler, JobState
from docpage.runner import CommandRunner

from docpage_fakes import PLAIN_ADAPTER, FakeSpawner


class CommandRunnerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.spawner = FakeSpawner()
        self.dispatcher = MainLoopDispatcher()
        self.cache = DocCache()
        self.scheduler = JobScheduler(self.spawner, self.dispatcher, self.cache, max_async_jobs=2)
        self.runner = CommandRunner(self.cache, self.spawner, self.scheduler, self.dispatcher)

    def test_run_sync_caches_and_second_call_spawns_nothing(self) -> None:
        self.spawner.add_rule("plaindoc ls", 0, "ls page\nmore\n")

        first = self.runner.run_sync(PLAIN_ADAPTER, "ls", None, 80)
        second = self.runner.run_sync(PLAIN_ADAPTER, "ls", None, 80)

        self.assertEqual(first, ["ls page", "more"])
        self.assertEqual(first, second)
        self.assertEqual(self.spawner.run_commands, ["COLS=80 plaindoc ls"])

    def test_run_sync_raises_backend_error_with_exit_code_and_command(self) -> None:
        self.spawner.add_rule("plaindoc nope", 16, "")
        with self.assertRaises(BackendError) as ctx:
            self.runner.run_sync(PLAIN_ADAPTER, "nope", None, 80)
        self.assertEqual(ctx.exception.exit_code, 16)
        self.assertEqual(ctx.exception.command, "COLS=80 plaindoc nope")

    def test_run_sync_raises_backend_error_for_matched_pattern(self) -> None:
        self.spawner.add_rule("plaindoc nope", 0, "No manual entry for nope\n")
        with self.assertRaises(BackendError) as ctx:
            self.runner.run_sync(PLAIN_ADAPTER, "nope", None, 80)
        self.assertEqual(ctx.exception.pattern, "No manual entry for")

    def test_run_sync_empty_output_returns_sentinel_and_is_not_cached(self) -> None:
        self.assertEqual(self.runner.run_sync(PLAIN_ADAPTER, "quiet", None, 80), ["No output from plaindoc"])
        self.assertEqual(len(self.cache), 0)

    def test_run_sync_spawn_failure_raises_spawn_error(self) -> None:
        self.spawner.fail_spawn = True
        with self.assertRaises(SpawnError):
            self.runner.run_sync(PLAIN_ADAPTER, "ls", None, 80)

    def test_run_async_cache_hit_bypasses_scheduler_and_completes_on_dispatch(self) -> None:
        self.cache.put(CacheKey("plaindoc", "ls", None, 80), ["cached"])
        results = []

        state = self.runner.run_async(PLAIN_ADAPTER, "ls", None, 80, results.append)

        self.assertEqual(state, JobState.COMPLETED)
        self.assertEqual(results, [])
        self.dispatcher.run_pending()
        self.assertEqual(results[0].lines, ("cached",))
        self.assertEqual(self.spawner.spawned, [])

    def test_run_async_miss_submits_job_and_caches_result(self) -> None:
        self.spawner.add_rule("plaindoc ls", 0, "fresh\n")
        results = []

        self.runner.run_async(PLAIN_ADAPTER, "ls", None, 80, results.append)
        self.spawner.finish_all()
        self.dispatcher.run_pending()

        self.assertEqual(results[0].lines, ("fresh",))
        self.assertEqual(self.runner.run_sync(PLAIN_ADAPTER, "ls", None, 80), ["fresh"])
        self.assertEqual(self.spawner.run_commands, [])

    def test_identical_in_flight_requests_are_not_deduplicated(self) -> None:
        self.runner.run_async(PLAIN_ADAPTER, "ls", None, 80, lambda _r: None)
        self.runner.run_async(PLAIN_ADAPTER, "ls", None, 80, lambda _r: None)
        self.assertEqual(len(self.spawner.spawned), 2)

    def test_run_without_async_delivers_errors_as_results(self) -> None:
        self.spawner.add_rule("plaindoc nope", 2, "")
        results = []

        self.runner.run(PLAIN_ADAPTER, "nope", None, 80, results.append, use_async=False)

        self.assertIsInstance(results[0].error, BackendError)
        self.assertEqual(results[0].lines[0], "Error running plaindoc (exit code: 2)")

    def test_run_without_async_marks_sentinel_as_empty(self) -> None:
        results = []
        self.runner.run(PLAIN_ADAPTER, "quiet", None, 80, results.append, use_async=False)
        self.assertTrue(results[0].empty)


if __name__ == "__main__":
    unittest.main()
