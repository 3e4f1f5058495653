"""Tests for the claude_code tools, driven through a fake Claude CLI."""

import json
import os

import pytest
import pytest_asyncio

from omx_tools.claude_code import (
    ClaudeCliConfig,
    ClaudeCodeCancelTool,
    ClaudeCodeLauncher,
    ClaudeCodeListTool,
    ClaudeCodeStatusTool,
    ClaudeCodeTool,
    set_job_manager,
)
from utils.async_jobs import JobManager

pytestmark = [pytest.mark.subprocess, pytest.mark.usefixtures("reap_children")]


@pytest_asyncio.fixture
async def job_manager(fake_claude_cli, tmp_path):
    manager = JobManager(
        ClaudeCodeLauncher(ClaudeCliConfig(cli_path=fake_claude_cli)),
        kill_delay_seconds=0.2,
        default_work_folder=str(tmp_path),
    )
    set_job_manager(manager)
    yield manager
    set_job_manager(None)
    await manager.shutdown()


async def start(prompt, **extra):
    result = await ClaudeCodeTool().execute_tool({"prompt": prompt, **extra})
    return result["jobId"]


async def status(job_id, wait=10):
    return await ClaudeCodeStatusTool().execute_tool({"jobId": job_id, "waitSeconds": wait})


class TestClaudeCodeTool:
    @pytest.mark.asyncio
    async def test_start_returns_job_id(self, job_manager):
        result = await ClaudeCodeTool().execute_tool({"prompt": "echo hello"})

        assert result["status"] == "running"
        assert len(result["jobId"]) == 8
        assert f'claude_code_status(jobId: "{result["jobId"]}")' in result["message"]

    @pytest.mark.asyncio
    async def test_invokes_cli_with_expected_arguments(
        self, job_manager, tmp_path, monkeypatch
    ):
        record = tmp_path / "record.json"
        monkeypatch.setenv("FAKE_CLAUDE_RECORD", str(record))
        work = tmp_path / "work"
        work.mkdir()

        job_id = await start("echo hello", workFolder=str(work))
        result = await status(job_id)

        assert result["status"] == "completed"
        assert result["output"] == "hello\n"
        recorded = json.loads(record.read_text())
        assert recorded["args"] == [
            "--dangerously-skip-permissions",
            "-p",
            "echo hello",
            "--output-format",
            "text",
        ]
        assert os.path.realpath(recorded["cwd"]) == os.path.realpath(work)
        assert recorded["FORCE_COLOR"] == "0"
        assert recorded["NO_COLOR"] == "1"

    @pytest.mark.asyncio
    async def test_missing_prompt(self, job_manager):
        result = await ClaudeCodeTool().execute_tool({})
        assert result == {"success": False, "error": "prompt is required."}

    @pytest.mark.asyncio
    async def test_missing_cli_reports_spawn_failure(self, tmp_path):
        manager = JobManager(
            ClaudeCodeLauncher(ClaudeCliConfig(cli_path=str(tmp_path / "no-claude")))
        )
        set_job_manager(manager)
        try:
            job_id = await start("echo hello")
            result = await status(job_id, wait=0)
        finally:
            set_job_manager(None)

        assert result["status"] == "failed"
        assert result["error"].startswith("Failed to spawn Claude CLI:")


class TestClaudeCodeStatusTool:
    @pytest.mark.asyncio
    async def test_failed_job_reports_error(self, job_manager):
        job_id = await start("fail")
        result = await status(job_id)

        assert result["status"] == "failed"
        assert result["exitCode"] == 3
        assert result["error"] == "boom"
        assert result["output"] == "(no output)"

    @pytest.mark.asyncio
    async def test_running_job(self, job_manager):
        job_id = await start("sleep 30")
        result = await status(job_id, wait=0)

        assert result["status"] == "running"
        assert result["hint"] == "Still running. Call claude_code_status again."
        assert "outputTail" in result
        assert "output" not in result

    @pytest.mark.asyncio
    async def test_unknown_job(self, job_manager):
        result = await status("nope", wait=0)
        assert result == {
            "success": False,
            "error": 'No job "nope". Use claude_code_list to see all jobs.',
        }

    @pytest.mark.asyncio
    async def test_missing_job_id(self, job_manager):
        result = await ClaudeCodeStatusTool().execute_tool({})
        assert result == {"success": False, "error": "jobId is required."}


class TestClaudeCodeCancelTool:
    @pytest.mark.asyncio
    async def test_cancel_then_cancel_again(self, job_manager):
        job_id = await start("sleep 30")
        cancel = ClaudeCodeCancelTool()

        assert await cancel.execute_tool({"jobId": job_id}) == f"Job {job_id} cancelled."
        assert await cancel.execute_tool({"jobId": job_id}) == f"Job {job_id} already cancelled."
        assert (await status(job_id, wait=0))["status"] == "cancelled"

    @pytest.mark.asyncio
    async def test_unknown_job(self, job_manager):
        result = await ClaudeCodeCancelTool().execute_tool({"jobId": "nope"})
        assert result["success"] is False


class TestClaudeCodeListTool:
    @pytest.mark.asyncio
    async def test_no_jobs(self, job_manager):
        assert await ClaudeCodeListTool().execute_tool({}) == "No jobs found."

    @pytest.mark.asyncio
    async def test_lists_newest_first_with_filter(self, job_manager):
        done = await start("echo a")
        await status(done)
        running = await start("sleep 30")
        tool = ClaudeCodeListTool()

        everything = await tool.execute_tool({"status": "all"})
        assert [entry["jobId"] for entry in everything] == [running, done]
        assert everything[0]["promptPreview"] == "sleep 30"

        only_running = await tool.execute_tool({"status": "running"})
        assert [entry["jobId"] for entry in only_running] == [running]
        assert await tool.execute_tool({"status": "failed"}) == "No jobs found."

    @pytest.mark.asyncio
    async def test_invalid_status(self, job_manager):
        result = await ClaudeCodeListTool().execute_tool({"status": "bogus"})
        assert result["success"] is False
        assert "status must be one of" in result["error"]
