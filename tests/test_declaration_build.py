from __future__ import annotations

import subprocess
from pathlib import Path

from tests.harness.workspace_harness import WorkspaceBuilder
from tsgate.config import TsgateConfig
from tsgate.packages import load_packages
from tsgate.tooling.declaration_build import build_command, run_declaration_build


def _packages(workspace: WorkspaceBuilder):
    workspace.add_package("expect")
    workspace.add_package("jest-types", name="@jest/types")
    packages, issues = load_packages(workspace.root, TsgateConfig())
    assert issues == []
    return packages


def test_build_command_lists_every_package_then_passthrough(workspace: WorkspaceBuilder) -> None:
    packages = _packages(workspace)

    command = build_command(packages, ["--force", "--verbose"], TsgateConfig())

    assert command == [
        "yarn",
        "tsc",
        "-b",
        str(workspace.package_dir("expect")),
        str(workspace.package_dir("jest-types")),
        "--force",
        "--verbose",
    ]


def test_build_runs_once_without_capturing_output(workspace: WorkspaceBuilder) -> None:
    packages = _packages(workspace)
    calls: list[tuple[list[str], dict[str, object]]] = []

    def _run(cmd: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        calls.append((cmd, kwargs))
        return subprocess.CompletedProcess(cmd, 0)

    failure = run_declaration_build(
        packages,
        root=workspace.root,
        passthrough=[],
        config=TsgateConfig(),
        run=_run,
    )

    assert failure is None
    assert len(calls) == 1
    _cmd, kwargs = calls[0]
    assert kwargs == {"cwd": workspace.root, "check": False}


def test_build_failure_surfaces_exit_status(workspace: WorkspaceBuilder) -> None:
    packages = _packages(workspace)

    def _run(cmd: list[str], **_kwargs: object) -> subprocess.CompletedProcess[str]:
        return subprocess.CompletedProcess(cmd, 2, None, None)

    failure = run_declaration_build(
        packages,
        root=workspace.root,
        passthrough=["--force"],
        config=TsgateConfig(),
        run=_run,
    )

    assert failure is not None
    assert failure.returncode == 2
    assert failure.command[-1] == "--force"
    assert "exit code 2" in failure.render()


def test_missing_compiler_is_a_build_failure(tmp_path: Path) -> None:
    def _run(cmd: list[str], **_kwargs: object) -> subprocess.CompletedProcess[str]:
        raise FileNotFoundError(2, "No such file or directory", cmd[0])

    failure = run_declaration_build(
        [],
        root=tmp_path,
        passthrough=[],
        config=TsgateConfig(build_command=("missing-tsc", "-b")),
        run=_run,
    )

    assert failure is not None
    assert failure.returncode == 127
    assert "No such file or directory" in failure.render()
