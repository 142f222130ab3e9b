"""Tests for configuration file parsing."""

import unittest
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest.mock import patch

from reciperunner.config import (
    PROJECT_CONFIG_NAME,
    ConfigError,
    RunnerConfig,
    default_shell,
    find_project_config,
    get_machine_config_path,
    get_user_config_path,
    load_config,
    parse_config_file,
)


class TestConfigPaths(unittest.TestCase):
    def test_user_config_path(self):
        path = get_user_config_path()
        self.assertEqual(path.name, "config.yml")
        self.assertIn("reciperunner", str(path))

    def test_machine_config_path(self):
        path = get_machine_config_path()
        self.assertEqual(path.name, "config.yml")
        self.assertIn("reciperunner", str(path))

    def test_default_shell(self):
        with patch("platform.system", return_value="Linux"):
            self.assertEqual(default_shell(), ["sh", "-cu"])
        with patch("platform.system", return_value="Windows"):
            self.assertEqual(default_shell(), ["cmd", "/c"])


class TestFindProjectConfig(unittest.TestCase):
    def test_found_in_parent(self):
        with TemporaryDirectory() as tmpdir:
            root = Path(tmpdir).resolve()
            (root / PROJECT_CONFIG_NAME).write_text("log_level: debug\n")
            nested = root / "a" / "b"
            nested.mkdir(parents=True)

            self.assertEqual(find_project_config(nested), root / PROJECT_CONFIG_NAME)

    def test_nearest_wins(self):
        with TemporaryDirectory() as tmpdir:
            root = Path(tmpdir).resolve()
            (root / PROJECT_CONFIG_NAME).write_text("")
            nested = root / "sub"
            nested.mkdir()
            (nested / PROJECT_CONFIG_NAME).write_text("")

            self.assertEqual(find_project_config(nested), nested / PROJECT_CONFIG_NAME)


class TestParseConfigFile(unittest.TestCase):
    def setUp(self):
        self.tmpdir = TemporaryDirectory()
        self.path = Path(self.tmpdir.name) / "config.yml"

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_missing_file(self):
        self.assertEqual(parse_config_file(self.path), {})

    def test_empty_file(self):
        self.path.write_text("   \n")
        self.assertEqual(parse_config_file(self.path), {})

    def test_all_settings(self):
        self.path.write_text(
            "shell: [bash, -euo, pipefail, -c]\nlog_level: debug\ncommand_output: err\n"
        )
        self.assertEqual(
            parse_config_file(self.path),
            {
                "shell": ["bash", "-euo", "pipefail", "-c"],
                "log_level": "debug",
                "command_output": "err",
            },
        )

    def test_shell_as_string(self):
        self.path.write_text("shell: bash -c\n")
        self.assertEqual(parse_config_file(self.path), {"shell": ["bash", "-c"]})

    def test_empty_shell_is_error(self):
        self.path.write_text("shell: []\n")
        with self.assertRaises(ConfigError):
            parse_config_file(self.path)

    def test_shell_wrong_type(self):
        self.path.write_text("shell: 42\n")
        with self.assertRaises(ConfigError) as cm:
            parse_config_file(self.path)
        self.assertIn("'shell'", str(cm.exception))

    def test_log_level_wrong_type(self):
        self.path.write_text("log_level: [debug]\n")
        with self.assertRaises(ConfigError):
            parse_config_file(self.path)

    def test_unknown_key(self):
        self.path.write_text("runners: {}\n")
        with self.assertRaises(ConfigError) as cm:
            parse_config_file(self.path)
        self.assertIn("runners", str(cm.exception))

    def test_invalid_yaml(self):
        self.path.write_text("shell: [bash\n")
        with self.assertRaises(ConfigError) as cm:
            parse_config_file(self.path)
        self.assertIn(str(self.path), str(cm.exception))

    def test_top_level_not_mapping(self):
        self.path.write_text("- shell\n")
        with self.assertRaises(ConfigError):
            parse_config_file(self.path)


class TestLoadConfig(unittest.TestCase):
    def setUp(self):
        self.tmpdir = TemporaryDirectory()
        self.root = Path(self.tmpdir.name).resolve()
        self.machine = self.root / "machine.yml"
        self.user = self.root / "user.yml"
        self.project_dir = self.root / "project"
        self.project_dir.mkdir()

        patcher_machine = patch(
            "reciperunner.config.get_machine_config_path", return_value=self.machine
        )
        patcher_user = patch("reciperunner.config.get_user_config_path", return_value=self.user)
        patcher_machine.start()
        patcher_user.start()
        self.addCleanup(patcher_machine.stop)
        self.addCleanup(patcher_user.stop)

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_defaults_without_files(self):
        config = load_config(self.project_dir)
        self.assertEqual(config, RunnerConfig())
        self.assertEqual(config.sources, ())

    def test_later_levels_override_earlier(self):
        self.machine.write_text("shell: [zsh, -c]\nlog_level: error\n")
        self.user.write_text("log_level: warn\ncommand_output: out\n")
        (self.project_dir / PROJECT_CONFIG_NAME).write_text("command_output: none\n")

        config = load_config(self.project_dir)

        self.assertEqual(config.shell, ["zsh", "-c"])
        self.assertEqual(config.log_level, "warn")
        self.assertEqual(config.command_output, "none")
        self.assertEqual(
            config.sources,
            (self.machine, self.user, self.project_dir / PROJECT_CONFIG_NAME),
        )

    def test_invalid_file_propagates(self):
        self.user.write_text("colour: always\n")
        with self.assertRaises(ConfigError):
            load_config(self.project_dir)


if __name__ == "__main__":
    unittest.main()
