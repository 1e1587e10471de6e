"""Typed failure values reported by the pipeline stages.

Every stage returns a list of issues instead of raising; an empty list means
the stage passed. Each issue knows the package it belongs to (when there is
one) and how to render itself for the console.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


class Issue(Protocol):
    package: str | None

    def render(self) -> str: ...


class WorkspaceListingError(RuntimeError):
    """The workspace listing command failed or produced malformed records."""


@dataclass(frozen=True)
class ManifestShapeError:
    package: str | None
    path: Path
    message: str

    def render(self) -> str:
        return f"{self.path}: {self.message}"


@dataclass(frozen=True)
class ReferenceMismatch:
    package: str
    declared: tuple[str, ...]
    required: tuple[str, ...]

    @property
    def missing(self) -> tuple[str, ...]:
        declared = set(self.declared)
        return tuple(path for path in self.required if path not in declared)

    @property
    def extra(self) -> tuple[str, ...]:
        required = set(self.required)
        return tuple(path for path in self.declared if path not in required)

    def render(self) -> str:
        got = "\n".join(self.declared)
        expected = "\n".join(self.required)
        return (
            "Expected declared references to match dependencies in package "
            f"{self.package}. Got:\n\n{got}\nExpected:\n\n{expected}"
        )


@dataclass(frozen=True)
class BuildFailure:
    returncode: int
    command: tuple[str, ...]
    detail: str = ""
    package: str | None = None

    def render(self) -> str:
        message = f"Command failed with exit code {self.returncode}: {' '.join(self.command)}"
        if self.detail:
            message = f"{message}\n{self.detail}"
        return message


@dataclass(frozen=True)
class DisallowedReference:
    package: str
    path: Path
    lines: tuple[str, ...]

    def render(self) -> str:
        references = "\n".join(self.lines)
        return f"{self.path} has the following non-node type references:\n\n{references}\n"


@dataclass(frozen=True)
class MissingNodeTypes:
    package: str
    message: str

    def render(self) -> str:
        return self.message


@dataclass(frozen=True)
class AuditCrash:
    package: str
    error: str

    def render(self) -> str:
        return f"Auditing package `{self.package}` crashed: {self.error}"


@dataclass(frozen=True)
class SetupFailure:
    message: str
    package: str | None = None

    def render(self) -> str:
        return self.message
