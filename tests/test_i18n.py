from __future__ import annotations

import json
import os
import tempfile
import unittest

from services import i18n


class TranslationTests(unittest.TestCase):
    def tearDown(self) -> None:
        i18n.reset_translations()

    def test_builtin_languages(self) -> None:
        self.assertEqual(i18n.t("timeshift.save", language="en"), "Save configuration")
        self.assertEqual(i18n.t("timeshift.help", language="de"), "Hilfe")

    def test_unknown_language_falls_back_to_english(self) -> None:
        self.assertEqual(i18n.t("timeshift.title", language="xx"), "Timeshift")

    def test_missing_key_uses_default_and_formats(self) -> None:
        self.assertEqual(i18n.t("nope.key", "Fallback {n}", language="en", n=3), "Fallback 3")
        self.assertEqual(
            i18n.t("timeshift.load_failed", language="en", error="HTTP 500"),
            "Loading settings failed: HTTP 500",
        )

    def test_override_file_wins(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "translations.json")
            with open(path, "w", encoding="utf-8") as f:
                json.dump({"timeshift.help": {"en": "Manual"}, "broken": "x"}, f)
            merged = i18n.load_translations(path)
        self.assertEqual(merged["timeshift.help"]["en"], "Manual")
        self.assertEqual(merged["timeshift.help"]["de"], "Hilfe")
        self.assertNotIn("broken", merged)


if __name__ == "__main__":
    unittest.main()
