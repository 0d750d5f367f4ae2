"""
Tests for CLI entry points.

Every test points --catalog and --selection at temporary files so the
bundled data and the user's real selection are never touched.
"""

import json
import sys
import tempfile
import unittest
from contextlib import redirect_stdout
from io import StringIO
from pathlib import Path
from unittest import mock

from coursecal.cli import main
from coursecal.storage import load_selected_codes

CATALOG = {
    "evening_courses": {
        "courses": [
            {"code": "62502", "name": "経済原論", "credits": 2, "instructor": "鈴木", "faculty": "経済学部", "day_of_week": "monday"},
            {"code": "12101", "name": "哲学", "credits": 2, "instructor": "山田", "faculty": "総合", "day_of_week": "monday"},
        ]
    },
    "weekend_courses": {
        "courses": [
            {"code": "63810", "name": "統計学", "credits": 2, "instructor": "中村", "faculty": "経済学部", "schedule": "土日"},
        ]
    },
}


class TestCLI(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)
        self.catalog = self.dir / "courses.json"
        self.catalog.write_text(json.dumps(CATALOG, ensure_ascii=False), encoding="utf-8")
        self.selection = self.dir / "selected.json"

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def run_cli(self, *args: str) -> tuple[int, str]:
        buf = StringIO()
        with redirect_stdout(buf):
            with self.assertRaises(SystemExit) as ctx:
                main(["--catalog", str(self.catalog), "--selection", str(self.selection), *args])
        return ctx.exception.code, buf.getvalue()

    def test_add_requires_code(self) -> None:
        code, _ = self.run_cli("add", "")
        self.assertNotEqual(code, 0)

    def test_add_and_remove_roundtrip(self) -> None:
        code, out = self.run_cli("add", "62502")
        self.assertEqual(code, 0)
        self.assertIn("Added: 62502", out)
        self.assertEqual(load_selected_codes(self.selection), ["62502"])

        code, _ = self.run_cli("remove", "62502")
        self.assertEqual(code, 0)
        self.assertEqual(load_selected_codes(self.selection), [])

    def test_add_rejects_malformed_code(self) -> None:
        code, out = self.run_cli("add", "62 502")
        self.assertEqual(code, 1)
        self.assertIn("Invalid course code", out)
        self.assertEqual(load_selected_codes(self.selection), [])

    def test_add_same_weekday_is_refused(self) -> None:
        self.run_cli("add", "62502")
        code, out = self.run_cli("add", "12101")
        self.assertEqual(code, 1)
        self.assertIn("経済原論", out)
        self.assertEqual(load_selected_codes(self.selection), ["62502"])

    def test_list_filters_by_day(self) -> None:
        code, out = self.run_cli("list", "--day", "土日")
        self.assertEqual(code, 0)
        self.assertIn("63810", out)
        self.assertNotIn("62502", out)

    def test_sessions_lists_selection(self) -> None:
        self.run_cli("add", "63810")
        code, _ = self.run_cli("sessions")
        self.assertEqual(code, 0)

    def test_conflicts_without_selection(self) -> None:
        code, out = self.run_cli("conflicts")
        self.assertEqual(code, 0)
        self.assertIn("No conflicts found.", out)

    def test_export_writes_calendar(self) -> None:
        self.run_cli("add", "62502")
        self.run_cli("add", "63810")
        out_file = self.dir / "out.ics"

        code, out = self.run_cli("export", str(out_file), "--yes")
        self.assertEqual(code, 0)
        self.assertIn("Sessions: 18", out)
        self.assertIn("Estimated credits: 4", out)
        text = out_file.read_text(encoding="utf-8")
        self.assertEqual(text.count("BEGIN:VEVENT"), 18)
        # events follow selection order
        self.assertLess(text.index("UID:62502-1@"), text.index("UID:63810-sat-1@"))

    def test_export_follows_selection_order(self) -> None:
        self.run_cli("add", "63810")
        self.run_cli("add", "62502")
        out_file = self.dir / "out.ics"

        self.run_cli("export", str(out_file), "--yes")
        text = out_file.read_text(encoding="utf-8")
        self.assertLess(text.index("UID:63810-sat-1@"), text.index("UID:62502-1@"))

    def test_export_declined_writes_nothing(self) -> None:
        self.run_cli("add", "62502")
        self.run_cli("add", "63810")
        out_file = self.dir / "out.ics"
        shown_before_prompt: list[str] = []

        def decline(*args: object, **kwargs: object) -> bool:
            shown_before_prompt.append(sys.stdout.getvalue())
            return False

        with mock.patch("coursecal.cli.Confirm.ask", side_effect=decline) as ask:
            code, out = self.run_cli("export", str(out_file))

        self.assertEqual(code, 0)
        ask.assert_called_once()
        self.assertIn("Sessions: 18", shown_before_prompt[0])
        self.assertIn("Export cancelled.", out)
        self.assertFalse(out_file.exists())

    def test_export_confirmed_writes_file(self) -> None:
        self.run_cli("add", "63810")
        out_file = self.dir / "out.ics"

        with mock.patch("coursecal.cli.Confirm.ask", return_value=True):
            code, out = self.run_cli("export", str(out_file))

        self.assertEqual(code, 0)
        self.assertIn("Exported 6 sessions", out)
        self.assertTrue(out_file.exists())

    def test_export_without_selection(self) -> None:
        code, out = self.run_cli("export", str(self.dir / "out.ics"), "--yes")
        self.assertEqual(code, 0)
        self.assertIn("No selected sessions", out)
        self.assertFalse((self.dir / "out.ics").exists())


if __name__ == "__main__":
    unittest.main()
