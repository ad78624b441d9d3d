import contextlib
import csv
import io
import tempfile
import unittest
from pathlib import Path

from seat_shuffler.__main__ import main


def _run(*argv):
    out = io.StringIO()
    with contextlib.redirect_stdout(out):
        code = main(list(argv))
    return code, out.getvalue()


class TestCli(unittest.TestCase):
    def test_balance(self):
        code, out = _run("balance", "--students", "37", "--columns", "6")
        self.assertEqual(code, 0)
        self.assertEqual(out.strip(), "6,6,7,6,6,6")

    def test_generate_is_seeded(self):
        first = _run("generate", "--students", "10", "--columns", "3", "--seed", "5", "--title", "4-A")
        second = _run("generate", "--students", "10", "--columns", "3", "--seed", "5", "--title", "4-A")
        self.assertEqual(first, second)
        code, out = first
        self.assertEqual(code, 0)
        self.assertIn("4-A seating result", out)
        self.assertIn("[ podium ]", out)

    def test_generate_with_swap_and_roster(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "out" / "roster.csv"
            code, out = _run("generate", "--depths", "2,2", "--seed", "1", "--swap", "1:4", "--output", str(path))
            self.assertEqual(code, 0)
            self.assertIn("Swapped 1 <-> 4", out)
            with path.open(newline="", encoding="utf-8") as f:
                rows = list(csv.DictReader(f))
        self.assertEqual(len(rows), 4)
        self.assertEqual(sorted(int(r["seat"]) for r in rows), [1, 2, 3, 4])
        self.assertEqual([(r["row"], r["col"]) for r in rows], [("1", "1"), ("1", "2"), ("2", "1"), ("2", "2")])

    def test_generate_columns_only_uses_default_depth(self):
        code, out = _run("generate", "--columns", "3", "--seed", "2")
        self.assertEqual(code, 0)
        rows = [line for line in out.splitlines() if line.startswith("R")]
        self.assertEqual(len(rows), 6)

    def test_swap_of_same_number_is_reported_as_skipped(self):
        code, out = _run("generate", "--depths", "2,2", "--swap", "3:3")
        self.assertEqual(code, 0)
        self.assertNotIn("Swapped", out)
        self.assertIn("Skipped 3 <-> 3", out)

    def test_log_level(self):
        code, _ = _run("--log-level", "debug", "balance", "--students", "4", "--columns", "2")
        self.assertEqual(code, 0)
        err = io.StringIO()
        with contextlib.redirect_stderr(err), self.assertRaises(SystemExit) as ctx:
            main(["--log-level", "bogus", "balance", "--students", "4", "--columns", "2"])
        self.assertEqual(ctx.exception.code, 2)
        self.assertIn("invalid choice", err.getvalue())

    def test_errors_exit_2(self):
        code, out = _run("generate", "--students", "200", "--columns", "3")
        self.assertEqual(code, 2)
        self.assertTrue(out.startswith("Error:"))

        code, out = _run("generate", "--students", "5", "--depths", "2,2")
        self.assertEqual(code, 2)

        code, out = _run("generate", "--depths", "2,2", "--swap", "1:9")
        self.assertEqual(code, 2)


if __name__ == "__main__":
    unittest.main()
