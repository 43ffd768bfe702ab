import asyncio
import unittest

from open_items.exceptions import AdapterError
from open_items.orchestrator import SourceOrchestrator

from .support import FakeAdapter, tab


class OrchestratorTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.chrome = FakeAdapter("Google Chrome", [tab("Inbox", "Google Chrome", "https://mail")])
        self.safari = FakeAdapter("Safari", [tab("News", "Safari", "https://news")])
        self.universal = FakeAdapter("Windows", [tab("Downloads", "Finder")], dedicated=False)
        self.orchestrator = SourceOrchestrator([self.universal, self.chrome, self.safari])

    def test_dedicated_adapters_come_first(self):
        self.assertEqual(
            [adapter.name for adapter in self.orchestrator.adapters],
            ["Google Chrome", "Safari", "Windows"],
        )

    async def test_alias_selection_runs_owner_and_universal_only(self):
        results = await self.orchestrator.fetch(["chrome"])

        self.assertEqual([result.adapter for result in results], ["Google Chrome", "Windows"])
        self.assertEqual(self.chrome.fetch_calls, 1)
        self.assertEqual(self.safari.fetch_calls, 0)
        self.assertEqual(self.universal.fetch_calls, 1)

        context = self.universal.contexts[0]
        self.assertEqual(context.apps, ("chrome",))
        self.assertTrue(context.is_covered("Google Chrome"))
        self.assertTrue(context.is_covered("chrome"))
        self.assertFalse(context.is_covered("Safari"))

    async def test_all_selection_runs_everything(self):
        results = await self.orchestrator.fetch([])
        self.assertEqual(len(results), 3)
        self.assertTrue(self.universal.contexts[0].is_all)
        self.assertTrue(self.universal.contexts[0].is_covered("safari"))

    async def test_failing_adapter_is_isolated(self):
        self.safari.error = AdapterError("Safari is not responding")

        results = await self.orchestrator.fetch([])

        by_name = {result.adapter: result for result in results}
        self.assertFalse(by_name["Safari"].ok)
        self.assertEqual(by_name["Safari"].records, [])
        self.assertTrue(by_name["Google Chrome"].ok)
        self.assertEqual(len(by_name["Google Chrome"].records), 1)

    async def test_timeout_is_isolated(self):
        self.safari.delay = 5
        self.safari.timeout = 0.01

        results = await self.orchestrator.fetch([])

        by_name = {result.adapter: result for result in results}
        self.assertTrue(by_name["Safari"].error.startswith("AdapterTimeoutError"))
        self.assertTrue(by_name["Windows"].ok)

    async def test_unexpected_exception_is_isolated(self):
        self.chrome.error = KeyError("surprise")
        results = await self.orchestrator.fetch(["chrome"])
        self.assertFalse(results[0].ok)
        self.assertTrue(results[1].ok)

    async def test_adapters_run_concurrently(self):
        for adapter in (self.chrome, self.safari, self.universal):
            adapter.delay = 0.2
        loop = asyncio.get_running_loop()
        started = loop.time()
        await self.orchestrator.fetch([])
        self.assertLess(loop.time() - started, 0.5)

    def test_adapter_for(self):
        self.assertIs(self.orchestrator.adapter_for("chrome"), self.chrome)
        self.assertIs(self.orchestrator.adapter_for("Safari"), self.safari)
        self.assertIs(self.orchestrator.adapter_for("Pages"), self.universal)

    def test_adapter_for_without_universal(self):
        orchestrator = SourceOrchestrator([self.safari])
        self.assertIsNone(orchestrator.adapter_for("Pages"))


if __name__ == "__main__":
    unittest.main()
