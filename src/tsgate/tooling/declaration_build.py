from __future__ import annotations

from pathlib import Path
import subprocess
from typing import Callable, Sequence

from tsgate.config import TsgateConfig
from tsgate.issues import BuildFailure
from tsgate.packages import Package

RunCommand = Callable[..., subprocess.CompletedProcess[str]]

_COMMAND_NOT_FOUND_EXIT = 127


def build_command(
    packages: Sequence[Package],
    passthrough: Sequence[str],
    config: TsgateConfig,
) -> list[str]:
    return [
        *config.build_command,
        *(str(package.directory) for package in packages),
        *passthrough,
    ]


def run_declaration_build(
    packages: Sequence[Package],
    *,
    root: Path,
    passthrough: Sequence[str],
    config: TsgateConfig,
    run: RunCommand = subprocess.run,
) -> BuildFailure | None:
    # stdio is inherited so compiler progress streams straight to the terminal.
    command = build_command(packages, passthrough, config)
    try:
        completed = run(command, cwd=root, check=False)
    except OSError as exc:
        return BuildFailure(
            returncode=_COMMAND_NOT_FOUND_EXIT,
            command=tuple(command),
            detail=str(exc),
        )
    if completed.returncode != 0:
        return BuildFailure(
            returncode=completed.returncode,
            command=tuple(command),
            detail=completed.stderr or "",
        )
    return None
