"""
Shared pytest fixtures.

- ``fake_claude_cli``: an executable that stands in for the Claude CLI
- ``python_launcher``: a launcher running its instructions with ``python -c``
- ``omx_home``: an isolated directory for state files and the notepad
- ``reap_children``: kills subprocesses a test left behind
"""

import asyncio
import logging
import os
import stat
import sys
import textwrap

import psutil
import pytest

from config import env
from utils.async_jobs import ProcessLauncher

logger = logging.getLogger(__name__)


def pytest_configure(config):
    """Add custom markers for tests"""
    config.addinivalue_line("markers", "asyncio: mark test as an asyncio test")
    config.addinivalue_line("markers", "subprocess: mark test as spawning real processes")


FAKE_CLAUDE_SCRIPT = textwrap.dedent(
    """\
    import json
    import os
    import signal
    import sys
    import time

    args = sys.argv[1:]
    prompt = args[args.index("-p") + 1] if "-p" in args else ""

    record_path = os.environ.get("FAKE_CLAUDE_RECORD")
    if record_path:
        with open(record_path, "w") as f:
            json.dump(
                {
                    "args": args,
                    "cwd": os.getcwd(),
                    "FORCE_COLOR": os.environ.get("FORCE_COLOR"),
                    "NO_COLOR": os.environ.get("NO_COLOR"),
                },
                f,
            )

    command, _, rest = prompt.partition(" ")
    if command == "echo":
        print(rest)
    elif command == "fail":
        sys.stderr.write("boom")
        sys.exit(3)
    elif command == "sleep":
        print("started", flush=True)
        time.sleep(float(rest))
        print("done")
    elif command == "spam":
        sys.stdout.write("x" * int(rest))
        sys.stdout.flush()
        time.sleep(30)
    elif command == "stubborn":
        signal.signal(signal.SIGTERM, signal.SIG_IGN)
        print("ready", flush=True)
        time.sleep(30)
    else:
        print("ok: " + prompt)
    """
)


@pytest.fixture
def fake_claude_cli(tmp_path):
    """Path of an executable script that behaves like a tiny Claude CLI.

    The prompt selects the behaviour: ``echo <text>``, ``fail``,
    ``sleep <seconds>``, ``spam <count>`` or ``stubborn`` (ignores SIGTERM).
    When ``FAKE_CLAUDE_RECORD`` is set the script writes its argv, cwd and
    color variables there as JSON.
    """
    script = tmp_path / "bin" / "claude"
    script.parent.mkdir()
    script.write_text(f"#!{sys.executable}\n" + FAKE_CLAUDE_SCRIPT)
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(script)


class PythonLauncher(ProcessLauncher):
    """Runs the instructions as a Python program."""

    display_name = "python"

    def __init__(self, executable: str = sys.executable):
        self.executable = executable

    async def launch(self, instructions, cwd):
        return await asyncio.create_subprocess_exec(
            self.executable,
            "-c",
            instructions,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=cwd,
        )


@pytest.fixture
def python_launcher():
    return PythonLauncher()


@pytest.fixture
def missing_executable_launcher(tmp_path):
    return PythonLauncher(str(tmp_path / "does-not-exist"))


@pytest.fixture
def omx_home(tmp_path, monkeypatch):
    """Point the omx home setting at a fresh temporary directory."""
    home = tmp_path / "omx-home"
    monkeypatch.setitem(env.settings, "omx_home", str(home))
    return home


@pytest.fixture
def reap_children():
    """Kill any subprocess still alive when the test finishes."""
    yield
    children = psutil.Process(os.getpid()).children(recursive=True)
    for child in children:
        try:
            child.kill()
        except psutil.NoSuchProcess:
            continue
    if children:
        logger.debug(f"Reaped {len(children)} leftover child processes")
        psutil.wait_procs(children, timeout=5)
