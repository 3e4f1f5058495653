"""Tests for Claude CLI resolution and command construction."""

from omx_tools.claude_code import ClaudeCliConfig, ClaudeCodeLauncher, find_claude_cli


class TestFindClaudeCli:
    def test_configured_name_wins(self, tmp_path):
        local = tmp_path / ".claude" / "local" / "claude"
        local.parent.mkdir(parents=True)
        local.touch()

        assert find_claude_cli("my-claude", home=tmp_path) == "my-claude"

    def test_local_install(self, tmp_path):
        local = tmp_path / ".claude" / "local" / "claude"
        local.parent.mkdir(parents=True)
        local.touch()

        assert find_claude_cli(home=tmp_path) == str(local)

    def test_falls_back_to_path_lookup(self, tmp_path):
        assert find_claude_cli(home=tmp_path) == "claude"


class TestClaudeCodeLauncher:
    def test_build_command(self):
        launcher = ClaudeCodeLauncher(ClaudeCliConfig(cli_path="/opt/claude"))

        assert launcher.build_command("do the thing") == [
            "/opt/claude",
            "--dangerously-skip-permissions",
            "-p",
            "do the thing",
            "--output-format",
            "text",
        ]

    def test_build_command_options(self):
        launcher = ClaudeCodeLauncher(
            ClaudeCliConfig(
                cli_path="claude",
                skip_permissions=False,
                output_format="json",
                additional_cli_args=["--verbose"],
            )
        )

        assert launcher.build_command("p") == [
            "claude", "-p", "p", "--output-format", "json", "--verbose"
        ]

    def test_build_env_disables_color(self):
        env = ClaudeCodeLauncher().build_env({"PATH": "/bin", "FORCE_COLOR": "1"})
        assert env == {"PATH": "/bin", "FORCE_COLOR": "0", "NO_COLOR": "1"}

    def test_display_name(self):
        assert ClaudeCodeLauncher.display_name == "Claude CLI"
