import unittest

from open_items.api_server import ServiceLoop, create_app, set_user_typing, user_is_typing

from .support import FakeAdapter, make_service, tab


class ApiServerTests(unittest.TestCase):
    def setUp(self):
        self.browser = FakeAdapter(
            "BrowserA",
            [tab("Docs", "BrowserA", "https://d", window=1, tab_index=1)],
            activate_results=[True],
        )
        self.universal = FakeAdapter("Windows", [tab("Report", "Pages")], dedicated=False)
        self.service = make_service([self.browser, self.universal])
        self.service_loop = ServiceLoop().start()
        self.client = create_app(self.service, self.service_loop).test_client()

    def tearDown(self):
        self.service_loop.submit(self.service.close())
        self.service_loop.stop()
        set_user_typing(False)

    def test_health(self):
        response = self.client.get("/health")
        self.assertEqual(response.get_json(), {"status": "ok"})
        self.assertEqual(response.headers["Access-Control-Allow-Origin"], "*")

    def test_items(self):
        response = self.client.get("/items")
        items = response.get_json()["items"]

        self.assertEqual([item["title"] for item in items], ["Docs", "Report"])
        self.assertEqual(items[0]["capability"]["category"], "universal")
        self.assertEqual(items[0]["window_index"], 1)

    def test_items_for_selection(self):
        response = self.client.get("/items?apps=Pages")
        self.assertEqual([item["title"] for item in response.get_json()["items"]], ["Report"])
        self.assertEqual(self.browser.fetch_calls, 0)

    def test_activate_round_trip(self):
        item = self.client.get("/items").get_json()["items"][0]

        response = self.client.post("/activate", json={"item": item})

        self.assertEqual(response.get_json(), {"success": True})
        self.assertEqual(self.browser.activated[0].title, "Docs")

    def test_activate_invalid_index(self):
        item = {"title": "Docs", "source_label": "BrowserA", "window_index": 0, "tab_index": 1}
        response = self.client.post("/activate", json={"item": item})
        self.assertEqual(response.get_json(), {"success": False})
        self.assertEqual(self.browser.activated, [])

    def test_activate_requires_item(self):
        response = self.client.post("/activate", json={})
        self.assertEqual(response.status_code, 400)

    def test_invalidate(self):
        self.client.get("/items")
        self.assertEqual(self.client.post("/invalidate").status_code, 200)
        self.client.get("/items")
        self.assertEqual(self.browser.fetch_calls, 2)

    def test_apps(self):
        apps = self.client.get("/apps").get_json()["apps"]
        self.assertIn("Safari", [app["name"] for app in apps])

    def test_permissions_without_universal_window_adapter(self):
        self.assertEqual(self.client.get("/permissions").get_json(), {"granted": True, "error": None})

    def test_query_state(self):
        self.client.post("/query-state", json={"has_query": True})
        self.assertTrue(user_is_typing())
        self.client.post("/query-state", json={"has_query": False})
        self.assertFalse(user_is_typing())

    def test_options_preflight(self):
        self.assertEqual(self.client.open("/items", method="OPTIONS").status_code, 204)


if __name__ == "__main__":
    unittest.main()
