# executor.py
from __future__ import annotations

import shlex
import shutil
import subprocess
from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

from .errors import ExternalCommandFailure, PreflightError
from .model import CommandResult
from .ui.console import Console, get_console

REQUIRED_TOOLS = ("gcloud", "gsutil", "kubectl")

TOOL_HINTS = {
    "gcloud": "Install the Google Cloud SDK: https://cloud.google.com/sdk/docs/install",
    "gsutil": "gsutil ships with the Google Cloud SDK (gcloud components install gsutil).",
    "kubectl": "Install kubectl (gcloud components install kubectl) or fix PATH.",
}

# Shell conventions for "command not found" and "found but cannot execute"
NOT_FOUND_STATUS = 127
NOT_EXECUTABLE_STATUS = 126


def require_tools(tools: Iterable[str] = REQUIRED_TOOLS) -> dict[str, str]:
    """
    Preflight: make sure every required CLI is on PATH.

    Returns:
        tool name -> resolved path

    Raises:
        PreflightError: naming the first missing tool
    """
    found: dict[str, str] = {}
    for tool in tools:
        path = shutil.which(tool)
        if path is None:
            raise PreflightError(
                f"{tool} not found.",
                hint=TOOL_HINTS.get(tool, f"Install {tool} or fix PATH."),
            )
        found[tool] = path
    return found


class CommandExecutor:
    """
    Runs control-plane commands synchronously and hands back what they printed.

    Failures are fail-open: a non-zero exit status is returned in the
    CommandResult and the caller decides what to do with it. With
    `strict=True` every call that does not pass `check=False` raises
    ExternalCommandFailure instead.
    """

    def __init__(self, *, strict: bool = False, console: Optional[Console] = None):
        self.strict = strict
        self.console = console or get_console()

    def run(
        self,
        args: Sequence[str],
        *,
        echo: bool = True,
        check: Optional[bool] = None,
        cwd: Optional[Union[str, Path]] = None,
    ) -> CommandResult:
        """
        Run one command; stdout is captured, stderr goes straight to the terminal.

        Args:
            args: argv of the command
            echo: print the captured stdout once the command finishes
            check: raise on non-zero exit; defaults to the executor's strict flag
            cwd: working directory for the command
        """
        argv = [str(a) for a in args]
        self.console.print_command(argv)

        try:
            proc = subprocess.run(
                argv,
                cwd=str(cwd) if cwd is not None else None,
                stdout=subprocess.PIPE,
                text=True,
            )
            output = proc.stdout or ""
            status = proc.returncode
        except FileNotFoundError:
            self.console.print_error("Command not found", f"{argv[0]}: command not found")
            output = ""
            status = NOT_FOUND_STATUS
        except OSError as e:
            self.console.print_error("Command could not be executed", f"{argv[0]}: {e.strerror or e}")
            output = ""
            status = NOT_EXECUTABLE_STATUS

        if echo:
            self.console.print_output(output)

        result = CommandResult(args=argv, output=output, exit_status=status)

        if check is None:
            check = self.strict
        if check and not result.ok:
            raise ExternalCommandFailure(cmd=shlex.join(argv), exit_code=status)
        if not result.ok:
            self.console.print_debug(f"exit={status} (ignored): {shlex.join(argv)}")

        return result
