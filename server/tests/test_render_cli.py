from io import StringIO
import os
from pathlib import Path
import sys
import tempfile
import unittest
from unittest.mock import patch

SERVER_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(SERVER_DIR))

from colours import Colour
import render_cli


class LoadExportEnvTests(unittest.TestCase):
    def test_reads_exports_and_skips_comments(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "env"
            path.write_text(
                "# colours\nexport CF_FOREGROUND='Yellow'\nCF_BACKGROUND=\"DarkBlue\"\nnonsense\nexport TP_TOKEN=secret\n",
                encoding="utf-8",
            )
            values = render_cli.load_export_env(path)
        self.assertEqual(values, {"CF_FOREGROUND": "Yellow", "CF_BACKGROUND": "DarkBlue"})

    def test_missing_file(self):
        self.assertEqual(render_cli.load_export_env(Path("/nonexistent/colourfmt/env")), {})


class EnvColourTests(unittest.TestCase):
    def test_environment_wins_over_file(self):
        with patch.dict(os.environ, {"CF_FOREGROUND": "red"}):
            colour = render_cli.env_colour("CF_FOREGROUND", Colour.WHITE, {"CF_FOREGROUND": "blue"})
        self.assertIs(colour, Colour.RED)

    def test_falls_back_on_unknown_name(self):
        with patch.dict(os.environ, {"CF_FOREGROUND": "octarine"}):
            colour = render_cli.env_colour("CF_FOREGROUND", Colour.WHITE, {})
        self.assertIs(colour, Colour.WHITE)


class MainTests(unittest.TestCase):
    def run_main(self, *argv, stdin=""):
        out, err = StringIO(), StringIO()
        with patch.object(sys, "stdout", out), patch.object(sys, "stderr", err), \
                patch.object(sys, "stdin", StringIO(stdin)), \
                patch.object(render_cli, "ENV_FILE", Path("/nonexistent/colourfmt/env")), \
                patch.dict(os.environ, {"CF_FOREGROUND": "", "CF_BACKGROUND": ""}):
            code = render_cli.main(list(argv))
        return code, out.getvalue(), err.getvalue()

    def test_writes_formatted_text(self):
        code, out, _ = self.run_main("{0:}hello", "-a", "red", "-n")
        self.assertEqual(code, 0)
        self.assertEqual(out, "\x1b[91m\x1b[40mhello\x1b[39m\x1b[49m")

    def test_format_error_exit_code(self):
        code, out, err = self.run_main("{red}oops")
        self.assertEqual(code, 2)
        self.assertEqual(out, "")
        self.assertIn("oops", err)

    def test_missing_format(self):
        code, _, err = self.run_main()
        self.assertEqual(code, 2)
        self.assertIn("required", err)

    def test_default_colours_from_flags(self):
        code, out, _ = self.run_main("x", "--fg", "cyan", "--bg", "darkred", "-n")
        self.assertEqual(code, 0)
        self.assertEqual(out, "\x1b[96m\x1b[41mx\x1b[39m\x1b[49m")

    def test_list_colours(self):
        code, out, _ = self.run_main("--list-colours")
        self.assertEqual(code, 0)
        for colour in Colour:
            self.assertIn(colour.label, out)

    def test_interactive_until_quit(self):
        code, out, err = self.run_main("--interactive", stdin="{red:}one\n{bad:}two\nquit\nnever\n")
        self.assertEqual(code, 0)
        self.assertIn("one", out)
        self.assertNotIn("never", out)
        self.assertIn("bad", err)

    def test_rejects_unknown_colour_flag(self):
        with patch.object(sys, "stderr", StringIO()):
            with self.assertRaises(SystemExit):
                render_cli.parse_args(["x", "--fg", "nope"])


if __name__ == "__main__":
    unittest.main()
