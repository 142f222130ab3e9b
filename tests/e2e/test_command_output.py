"""E2E tests for command echo and command output control."""

import sys
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

from . import run_runner_cli

NOISY = """\
noisy:
    echo "stdout message"
    echo "stderr message" >&2
"""


def lines(text):
    return [line.rstrip() for line in text.splitlines() if line.strip()]


@unittest.skipIf(sys.platform == "win32", "requires a POSIX shell")
class TestEcho(unittest.TestCase):
    """
    Command output is only visible in a real subprocess, CliRunner doesn't
    capture what the shell writes to inherited file descriptors.
    """

    def run_document(self, text, *args):
        with TemporaryDirectory() as tmpdir:
            project_root = Path(tmpdir)
            (project_root / "justfile").write_text(text)
            return run_runner_cli(list(args), cwd=project_root)

    def test_loud_recipe_echoes_before_output(self):
        result = self.run_document("greet:\n    echo hello\n    echo world\n", "greet")

        self.assertEqual(
            result.returncode, 0, f"STDOUT:\n{result.stdout}\nSTDERR:\n{result.stderr}"
        )
        self.assertEqual(
            lines(result.stdout), ["echo hello", "hello", "echo world", "world"]
        )

    def test_quiet_recipe_shows_only_output(self):
        result = self.run_document("@greet:\n    echo hello\n    echo world\n", "greet")

        self.assertEqual(result.returncode, 0, result.stderr)
        self.assertEqual(lines(result.stdout), ["hello", "world"])

    def test_quiet_attribute(self):
        result = self.run_document("[quiet]\ngreet:\n    echo hello\n", "greet")

        self.assertEqual(result.returncode, 0, result.stderr)
        self.assertEqual(lines(result.stdout), ["hello"])

    def test_silenced_line_in_loud_recipe(self):
        result = self.run_document(
            "build:\n    @echo building\n    echo done\n", "build"
        )

        self.assertEqual(result.returncode, 0, result.stderr)
        self.assertEqual(lines(result.stdout), ["building", "echo done", "done"])

    def test_echo_keeps_emoji_codes_and_tabs(self):
        result = self.run_document(
            "greet:\n    echo :thumbs_up: done\n    echo 'x\ty'\n", "greet"
        )

        self.assertEqual(result.returncode, 0, result.stderr)
        self.assertEqual(
            lines(result.stdout),
            ["echo :thumbs_up: done", ":thumbs_up: done", "echo 'x\ty'", "x\ty"],
        )

    def test_listing_runs_nothing(self):
        result = self.run_document("# Say hello\ngreet:\n    echo hello\n")

        self.assertEqual(result.returncode, 0, result.stderr)
        self.assertNotIn("hello", lines(result.stdout))
        self.assertIn("Say hello", result.stdout)


@unittest.skipIf(sys.platform == "win32", "requires a POSIX shell")
class TestCommandOutputControl(unittest.TestCase):
    def setUp(self):
        self.tmpdir = TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)
        self.project_root = Path(self.tmpdir.name)
        (self.project_root / "justfile").write_text(NOISY)

    def run_noisy(self, *args):
        result = run_runner_cli([*args, "noisy"], cwd=self.project_root)
        self.assertEqual(
            result.returncode, 0, f"STDOUT:\n{result.stdout}\nSTDERR:\n{result.stderr}"
        )
        return result

    def test_all_is_default(self):
        result = self.run_noisy()

        self.assertIn("stdout message", lines(result.stdout))
        self.assertIn("stderr message", lines(result.stderr))

    def test_none_suppresses_all_output(self):
        result = self.run_noisy("--command-output", "none")

        # Echoed command lines are not command output
        self.assertIn('echo "stdout message"', lines(result.stdout))
        self.assertNotIn("stdout message", lines(result.stdout))
        self.assertNotIn("stderr message", result.stderr)

    def test_out_shows_stdout_only(self):
        result = self.run_noisy("-O", "out")

        self.assertIn("stdout message", lines(result.stdout))
        self.assertNotIn("stderr message", result.stderr)

    def test_err_shows_stderr_only(self):
        result = self.run_noisy("-O", "err")

        self.assertNotIn("stdout message", lines(result.stdout))
        self.assertIn("stderr message", lines(result.stderr))

    def test_value_is_case_insensitive(self):
        result = self.run_noisy("-O", "NONE")
        self.assertNotIn("stdout message", lines(result.stdout))

    def test_config_file_setting(self):
        (self.project_root / ".reciperunner.yml").write_text("command_output: none\n")

        result = self.run_noisy()

        self.assertNotIn("stdout message", lines(result.stdout))

    def test_option_overrides_config_file(self):
        (self.project_root / ".reciperunner.yml").write_text("command_output: none\n")

        result = self.run_noisy("-O", "all")

        self.assertIn("stdout message", lines(result.stdout))


@unittest.skipIf(sys.platform == "win32", "requires a POSIX shell")
class TestExitStatus(unittest.TestCase):
    def run_document(self, text, *args):
        with TemporaryDirectory() as tmpdir:
            project_root = Path(tmpdir)
            (project_root / "justfile").write_text(text)
            result = run_runner_cli(list(args), cwd=project_root)
            return result, sorted(p.name for p in project_root.iterdir())

    def test_failing_command_status_is_returned(self):
        result, files = self.run_document(
            "build:\n    exit 7\n\ntest: build\n    touch tested\n", "test"
        )

        self.assertEqual(result.returncode, 7)
        self.assertIn("Recipe 'build' failed on line 2 with exit code 7", result.stderr)
        self.assertNotIn("tested", files)

    def test_signal_gives_128_plus_signal_number(self):
        result, _ = self.run_document("serve:\n    kill -TERM $$\n", "serve")

        self.assertEqual(result.returncode, 128 + 15)
        self.assertIn("SIGTERM", result.stderr)

    def test_unknown_recipe_is_configuration_error(self):
        result, files = self.run_document("build:\n    touch built\n", "build", "deploy")

        self.assertEqual(result.returncode, 2)
        self.assertIn("Recipe not found: deploy", result.stderr)
        self.assertNotIn("built", files)

    def test_success(self):
        result, files = self.run_document("build:\n    touch built\n", "build")

        self.assertEqual(result.returncode, 0, result.stderr)
        self.assertIn("built", files)


if __name__ == "__main__":
    unittest.main()
