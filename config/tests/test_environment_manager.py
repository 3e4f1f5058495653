import os
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from pydantic import ValidationError

from config.manager import EnvironmentManager
from config.types import JobSettings, NotepadSettings


class TestEnvironmentManager(unittest.TestCase):
    """Test cases for the EnvironmentManager class."""

    def setUp(self):
        """Create a fresh manager that ignores any real .env file."""
        self.original_instance = EnvironmentManager._instance
        EnvironmentManager._instance = None

        patcher = mock.patch.object(EnvironmentManager, "_load_from_env_file")
        patcher.start()
        self.addCleanup(patcher.stop)

        self.env_manager = EnvironmentManager()
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)
        EnvironmentManager._instance = self.original_instance

    def create_env_file(self, content):
        """Create a temporary .env file with the given content."""
        env_file = Path(self.temp_dir) / ".env"
        env_file.write_text(content)
        return env_file

    def test_defaults(self):
        settings = self.env_manager.settings
        self.assertEqual(settings["job_max_completed"], 50)
        self.assertEqual(settings["job_max_wait_seconds"], 25.0)
        self.assertEqual(settings["job_kill_delay_seconds"], 5.0)
        self.assertEqual(settings["notepad_priority_max_chars"], 500)
        self.assertFalse(settings["mcp_omx_debug"])
        self.assertIsNone(settings["claude_cli_name"])

    def test_singleton_pattern(self):
        self.assertIs(EnvironmentManager(), self.env_manager)

    def test_load_from_os_environment(self):
        with mock.patch.dict(
            os.environ,
            {
                "JOB_MAX_COMPLETED": "10",
                "JOB_MAX_WAIT_SECONDS": "2.5",
                "MCP_OMX_DEBUG": "true",
                "CLAUDE_CLI_NAME": "claude-dev",
            },
        ):
            self.env_manager.load()

        self.assertEqual(self.env_manager.get_setting("job_max_completed"), 10)
        self.assertEqual(self.env_manager.get_setting("job_max_wait_seconds"), 2.5)
        self.assertTrue(self.env_manager.is_debug_enabled())
        self.assertEqual(self.env_manager.get_claude_cli_name(), "claude-dev")

    def test_invalid_value_keeps_default(self):
        with mock.patch.dict(os.environ, {"JOB_MAX_COMPLETED": "lots"}):
            with self.assertLogs("config.manager", level="WARNING"):
                self.env_manager.load()

        self.assertEqual(self.env_manager.get_setting("job_max_completed"), 50)

    def test_parse_env_file(self):
        env_file = self.create_env_file(
            "# comment\n"
            "OMX_HOME='/tmp/omx-test'\n"
            'JOB_OUTPUT_TAIL_CHARS="100"\n'
            "UNRELATED=value\n"
            "not a variable\n"
        )
        self.env_manager._parse_env_file(env_file)

        self.assertEqual(self.env_manager.settings["omx_home"], "/tmp/omx-test")
        self.assertEqual(self.env_manager.settings["job_output_tail_chars"], 100)
        self.assertEqual(self.env_manager.env_variables["UNRELATED"], "value")

    def test_path_settings_are_expanded(self):
        with mock.patch.dict(os.environ, {"OMX_HOME": "~/custom-omx"}):
            self.env_manager.load()

        self.assertEqual(
            self.env_manager.get_omx_home(), (Path.home() / "custom-omx").resolve()
        )

    def test_default_locations(self):
        home = Path.home()
        self.assertEqual(self.env_manager.get_omx_home(), home / ".codex" / ".omx")
        self.assertEqual(
            self.env_manager.get_state_dir(), home / ".codex" / ".omx" / "state"
        )
        self.assertEqual(
            self.env_manager.get_notepad_path(), home / ".codex" / ".omx" / "notepad.json"
        )
        self.assertEqual(self.env_manager.get_default_work_folder(), str(home))

    def test_job_settings(self):
        self.env_manager.settings["job_kill_delay_seconds"] = 1.0
        settings = self.env_manager.get_job_settings()

        self.assertIsInstance(settings, JobSettings)
        self.assertEqual(settings.kill_delay_seconds, 1.0)
        self.assertEqual(settings.max_completed_jobs, 50)
        self.assertEqual(settings.default_work_folder, str(Path.home()))

    def test_job_settings_validation(self):
        self.env_manager.settings["job_max_wait_seconds"] = -1.0
        with self.assertRaises(ValidationError):
            self.env_manager.get_job_settings()

    def test_max_wait_cannot_exceed_long_poll_bound(self):
        self.env_manager.settings["job_max_wait_seconds"] = 600.0
        with self.assertRaises(ValidationError):
            self.env_manager.get_job_settings()

        self.env_manager.settings["job_max_wait_seconds"] = 25.0
        self.assertEqual(self.env_manager.get_job_settings().max_wait_seconds, 25.0)

    def test_notepad_settings(self):
        settings = self.env_manager.get_notepad_settings()
        self.assertIsInstance(settings, NotepadSettings)
        self.assertEqual(settings.priority_max_chars, 500)
        self.assertEqual(settings.working_retention_days, 7)


if __name__ == "__main__":
    unittest.main()
