import unittest

from open_items.capabilities import UNIVERSAL_PROFILE, lookup, supports_documents, supports_tabs, ttl_for_selection
from open_items.config import Config
from open_items.selection import (
    ALL_SELECTION_KEY,
    app_identities,
    build_selection_key,
    is_app_selected,
    normalize_selection,
    same_app,
)


class SelectionKeyTests(unittest.TestCase):
    def test_order_case_and_whitespace_do_not_matter(self):
        self.assertEqual(
            build_selection_key(["Safari", "chrome"]),
            build_selection_key([" CHROME ", "safari"]),
        )
        self.assertEqual(build_selection_key(["Safari", " chrome "]), "chrome|safari")

    def test_duplicates_collapse(self):
        self.assertEqual(build_selection_key(["Safari", "safari"]), "safari")

    def test_empty_selection_is_all(self):
        self.assertEqual(build_selection_key([]), ALL_SELECTION_KEY)
        self.assertEqual(build_selection_key(None), ALL_SELECTION_KEY)
        self.assertEqual(build_selection_key(["", "  "]), ALL_SELECTION_KEY)

    def test_all_key_cannot_be_produced_by_names(self):
        self.assertNotEqual(build_selection_key(["all"]), ALL_SELECTION_KEY)

    def test_aliases_are_not_merged_in_keys(self):
        self.assertNotEqual(build_selection_key(["chrome"]), build_selection_key(["google chrome"]))

    def test_single_string_is_one_app(self):
        self.assertEqual(normalize_selection("Safari"), ("safari",))


class AppSelectionTests(unittest.TestCase):
    def test_empty_selection_includes_everything(self):
        self.assertTrue(is_app_selected("Anything", []))

    def test_alias_selects_full_name(self):
        self.assertTrue(is_app_selected("Google Chrome", ["chrome"]))
        self.assertTrue(is_app_selected("chrome", ["Google Chrome"]))
        self.assertTrue(is_app_selected("Brave Browser", ["brave"]))

    def test_unselected_app(self):
        self.assertFalse(is_app_selected("Safari", ["chrome"]))
        self.assertFalse(is_app_selected("", ["chrome"]))

    def test_identities_include_aliases(self):
        self.assertEqual(app_identities("Google Chrome"), frozenset({"google chrome", "chrome"}))
        self.assertEqual(app_identities(None), frozenset())

    def test_same_app(self):
        self.assertTrue(same_app("Chrome", "google chrome"))
        self.assertFalse(same_app("Safari", "Arc"))
        self.assertFalse(same_app("", ""))


class CapabilityTests(unittest.TestCase):
    def test_known_apps(self):
        self.assertEqual(lookup("Safari").category, "browsers")
        self.assertTrue(supports_tabs("Terminal"))
        self.assertTrue(supports_documents("Pages"))
        self.assertFalse(supports_documents("Safari"))

    def test_lookup_is_case_and_alias_insensitive(self):
        self.assertEqual(lookup("safari"), lookup("Safari"))
        self.assertEqual(lookup("chrome"), lookup("Google Chrome"))

    def test_unknown_app_is_universal(self):
        self.assertIs(lookup("Unknown App"), UNIVERSAL_PROFILE)
        self.assertIs(lookup(None), UNIVERSAL_PROFILE)

    def test_ttl_uses_most_volatile_category(self):
        config = Config()
        self.assertEqual(ttl_for_selection(["Terminal"], config), config.category_ttls["terminals"])
        self.assertEqual(
            ttl_for_selection(["Pages", "Terminal"], config),
            config.category_ttls["terminals"],
        )
        self.assertEqual(ttl_for_selection(["Pages"], config), config.category_ttls["productivity"])

    def test_ttl_for_all_and_unknown(self):
        config = Config()
        self.assertEqual(ttl_for_selection([], config), config.cache_default_ttl)
        self.assertEqual(ttl_for_selection(["Mystery"], config), config.category_ttls["universal"])


if __name__ == "__main__":
    unittest.main()
