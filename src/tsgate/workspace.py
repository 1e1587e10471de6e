from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path, PurePosixPath
import subprocess
from typing import Callable, Iterable, Mapping, Sequence

from pydantic import ValidationError

from tsgate.issues import WorkspaceListingError
from tsgate.runtime import json_io
from tsgate.schema import WorkspaceEntry

RunCommand = Callable[..., subprocess.CompletedProcess[str]]


def decode_workspace_entries(text: str) -> list[WorkspaceEntry]:
    entries: list[WorkspaceEntry] = []
    try:
        for line_number, payload in json_io.iter_json_lines(text):
            try:
                entries.append(WorkspaceEntry.model_validate(payload))
            except ValidationError as exc:
                raise WorkspaceListingError(
                    f"workspace listing line {line_number} is not a workspace entry: {exc}"
                ) from exc
    except ValueError as exc:
        raise WorkspaceListingError(f"workspace listing is malformed: {exc}") from exc
    return entries


def list_workspaces(
    root: Path,
    *,
    command: Sequence[str],
    run: RunCommand = subprocess.run,
) -> list[WorkspaceEntry]:
    try:
        completed = run(
            list(command),
            cwd=root,
            check=False,
            capture_output=True,
            text=True,
        )
    except OSError as exc:
        raise WorkspaceListingError(
            f"unable to run `{' '.join(command)}`: {exc}"
        ) from exc
    if completed.returncode != 0:
        raise WorkspaceListingError(
            f"`{' '.join(command)}` exited with {completed.returncode}:\n{completed.stderr}"
        )
    return decode_workspace_entries(completed.stdout)


@dataclass(frozen=True)
class WorkspaceIndex:
    locations: Mapping[str, str]

    @classmethod
    def from_entries(cls, entries: Iterable[WorkspaceEntry]) -> "WorkspaceIndex":
        return cls(
            locations={
                entry.name: PurePosixPath(entry.location).as_posix()
                for entry in entries
            }
        )

    def __contains__(self, name: object) -> bool:
        return name in self.locations

    def location(self, name: str) -> str:
        return self.locations[name]

    def names(self) -> list[str]:
        return sorted(self.locations)

    def restrict_to(self, directories: Iterable[Path], *, root: Path) -> "WorkspaceIndex":
        resolved_root = root.resolve()
        wanted = {directory.resolve() for directory in directories}
        return WorkspaceIndex(
            locations={
                name: location
                for name, location in self.locations.items()
                if (resolved_root / location).resolve() in wanted
            }
        )
