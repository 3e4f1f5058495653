from pathlib import Path
from typing import Dict, Any, Optional
from config.types import JobSettings, NotepadSettings
import logging
import os


class EnvironmentManager:
    """
    Environment manager holding the server settings.

    Settings come from DEFAULT_SETTINGS, then from the first .env file found,
    then from the OS environment.
    """

    _instance = None

    # List of all settings that are paths
    PATH_SETTINGS = [
        "omx_home",
        "default_work_folder",
    ]

    # Default settings with their types
    DEFAULT_SETTINGS = {
        # Storage locations
        "omx_home": (None, str),
        "default_work_folder": (None, str),
        # Claude CLI resolution
        "claude_cli_name": (None, str),
        # Logging
        "mcp_omx_debug": (False, bool),
        "log_to_file": (True, bool),
        # Job orchestration
        "job_max_completed": (50, int),
        "job_max_wait_seconds": (25.0, float),
        "job_kill_delay_seconds": (5.0, float),
        "job_output_tail_chars": (3000, int),
        "job_error_tail_chars": (2000, int),
        # Notepad
        "notepad_priority_max_chars": (500, int),
        "notepad_working_retention_days": (7, int),
    }

    # Create mapping dynamically - each setting can be set via its uppercase env var
    ENV_MAPPING = {setting.upper(): setting for setting in DEFAULT_SETTINGS.keys()}

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialize()
        return cls._instance

    def _initialize(self):
        """Initialize environment with default values"""
        self.env_variables: Dict[str, str] = {}
        self.settings: Dict[str, Any] = {}
        self.env_file_path: Optional[Path] = None
        self.logger = logging.getLogger(__name__)

        # Initialize settings with default values
        for key, (default_value, _) in self.DEFAULT_SETTINGS.items():
            self.settings[key] = default_value

        self._load_from_env_file()
        self._resolve_paths()

    def _resolve_paths(self):
        """Expand user and make every configured path setting absolute"""
        for key in self.PATH_SETTINGS:
            value = self.settings.get(key)
            if value:
                self.settings[key] = str(Path(value).expanduser().resolve())

    def _convert_value(self, value: str, target_type: type) -> Any:
        """Convert string value to target type"""
        if target_type == bool:
            return value.lower() == "true"
        return target_type(value)

    def _apply_variable(self, key: str, value: str):
        """Store a variable and update the mapped setting if there is one"""
        self.env_variables[key] = value

        if key not in self.ENV_MAPPING:
            return

        setting_name = self.ENV_MAPPING[key]
        _, target_type = self.DEFAULT_SETTINGS[setting_name]
        try:
            self.settings[setting_name] = self._convert_value(value, target_type)
        except ValueError:
            self.logger.warning(
                f"Ignoring invalid value for {key}: {value!r} (expected {target_type.__name__})"
            )

    def _load_from_env_file(self):
        """Find and load variables from a .env file"""
        env_file_paths = [Path.cwd() / ".env"]

        # Try additional common locations - safely handle home directory
        try:
            env_file_paths.append(Path.home() / ".env")
        except (RuntimeError, OSError):
            # Skip home directory if it can't be determined
            pass

        # Load from the first .env file found
        for env_path in env_file_paths:
            if env_path.exists() and env_path.is_file():
                self.logger.info(f"Loading environment from: {env_path}")
                self._parse_env_file(env_path)
                self.env_file_path = env_path
                return

        self.logger.debug(
            "No .env file found, tried: "
            + ", ".join(str(env_path) for env_path in env_file_paths)
        )

    def _parse_env_file(self, env_file_path: Path):
        """Parse a .env file and load variables into settings"""
        try:
            with open(env_file_path, "r") as f:
                for line in f:
                    line = line.strip()
                    if line and not line.startswith("#") and "=" in line:
                        key, value = line.split("=", 1)
                        key = key.strip()
                        value = value.strip()

                        # Remove quotes if present
                        if (value.startswith('"') and value.endswith('"')) or (
                            value.startswith("'") and value.endswith("'")
                        ):
                            value = value[1:-1]

                        self._apply_variable(key, value)

        except OSError as e:
            self.logger.error(f"Error parsing .env file {env_file_path}: {e}")

    def load(self):
        """Load all environment information"""
        self._load_from_env_file()

        # Load variables from OS environment
        for key, value in os.environ.items():
            self._apply_variable(key, value)

        self._resolve_paths()
        return self

    def get_setting(self, name: str, default: Any = None) -> Any:
        """Get a setting value by name"""
        value = self.settings.get(name, default)
        return default if value is None else value

    def get_omx_home(self) -> Path:
        """Directory holding workflow state, the notepad and server logs"""
        configured = self.get_setting("omx_home")
        if configured:
            return Path(configured)
        return Path.home() / ".codex" / ".omx"

    def get_state_dir(self) -> Path:
        """Directory holding one JSON document per workflow mode"""
        return self.get_omx_home() / "state"

    def get_notepad_path(self) -> Path:
        """Path of the session notepad document"""
        return self.get_omx_home() / "notepad.json"

    def get_default_work_folder(self) -> str:
        """Working directory used when a job does not name a valid one"""
        return self.get_setting("default_work_folder") or str(Path.home())

    def get_claude_cli_name(self) -> Optional[str]:
        """Explicitly configured Claude CLI name or path, if any"""
        return self.get_setting("claude_cli_name")

    def is_debug_enabled(self) -> bool:
        """Check if debug logging is requested"""
        return bool(self.get_setting("mcp_omx_debug", False))

    def get_job_settings(self) -> JobSettings:
        """Validated tunables of the job orchestrator"""
        return JobSettings(
            max_completed_jobs=self.get_setting("job_max_completed"),
            max_wait_seconds=self.get_setting("job_max_wait_seconds"),
            kill_delay_seconds=self.get_setting("job_kill_delay_seconds"),
            output_tail_chars=self.get_setting("job_output_tail_chars"),
            error_tail_chars=self.get_setting("job_error_tail_chars"),
            default_work_folder=self.get_default_work_folder(),
        )

    def get_notepad_settings(self) -> NotepadSettings:
        """Validated limits of the session notepad"""
        return NotepadSettings(
            priority_max_chars=self.get_setting("notepad_priority_max_chars"),
            working_retention_days=self.get_setting("notepad_working_retention_days"),
        )


# Create a global instance
env_manager = EnvironmentManager()
