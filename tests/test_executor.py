import sys

import pytest

from gkesetup import executor as executor_mod
from gkesetup.errors import ExternalCommandFailure, PreflightError
from gkesetup.executor import NOT_EXECUTABLE_STATUS, NOT_FOUND_STATUS, CommandExecutor, require_tools


def _py(code: str) -> list[str]:
    return [sys.executable, "-c", code]


def test_run_captures_stdout_and_status(console):
    result = CommandExecutor(console=console).run(_py("print('hello')"), echo=False)
    assert result.output == "hello\n"
    assert result.exit_status == 0
    assert result.ok


def test_nonzero_exit_is_returned_not_raised(console):
    result = CommandExecutor(console=console).run(_py("import sys; print('partial'); sys.exit(3)"))
    assert result.exit_status == 3
    assert result.output == "partial\n"
    assert not result.ok


def test_strict_mode_raises_on_nonzero_exit(console):
    ex = CommandExecutor(strict=True, console=console)
    with pytest.raises(ExternalCommandFailure) as info:
        ex.run(_py("import sys; sys.exit(2)"))
    assert info.value.exit_code == 2


def test_check_false_overrides_strict_mode(console):
    ex = CommandExecutor(strict=True, console=console)
    assert ex.run(_py("import sys; sys.exit(2)"), check=False).exit_status == 2


def test_missing_binary_fails_open(console):
    result = CommandExecutor(console=console).run(["definitely-not-a-real-binary-xyz", "--version"])
    assert result.exit_status == NOT_FOUND_STATUS
    assert result.output == ""


@pytest.mark.skipif(sys.platform == "win32", reason="relies on POSIX exec permissions")
def test_script_without_exec_bit_fails_open(console, tmp_path, capsys):
    script = tmp_path / "postprocess_project.sh"
    script.write_text("#!/bin/sh\necho done\n", encoding="utf-8")
    script.chmod(0o644)

    result = CommandExecutor(console=console).run([str(script)])

    assert result.exit_status == NOT_EXECUTABLE_STATUS
    assert result.output == ""
    assert not result.ok
    assert "could not be executed" in capsys.readouterr().err


def test_echo_prints_captured_output(console, capsys):
    CommandExecutor(console=console).run(_py("print('shown')"))
    assert "shown" in capsys.readouterr().out


def test_cwd_is_honoured(console, tmp_path):
    result = CommandExecutor(console=console).run(
        _py("import os; print(os.getcwd())"), echo=False, cwd=tmp_path
    )
    assert result.output.strip() == str(tmp_path)


def test_require_tools_reports_first_missing(monkeypatch):
    found = {"gcloud": "/usr/bin/gcloud", "kubectl": "/usr/bin/kubectl"}
    monkeypatch.setattr(executor_mod.shutil, "which", lambda tool: found.get(tool))
    with pytest.raises(PreflightError) as info:
        require_tools()
    assert "gsutil" in info.value.message
    assert info.value.hint


def test_require_tools_returns_paths(monkeypatch):
    monkeypatch.setattr(executor_mod.shutil, "which", lambda tool: f"/opt/bin/{tool}")
    assert require_tools(("gcloud",)) == {"gcloud": "/opt/bin/gcloud"}
