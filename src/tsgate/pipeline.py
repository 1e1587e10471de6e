from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
import subprocess
from typing import Callable, Literal, Sequence

import typer
import yaml

from tsgate.config import TsgateConfig, tsgate_config
from tsgate.issues import Issue, SetupFailure, WorkspaceListingError
from tsgate.packages import load_packages
from tsgate.runtime import env_policy
from tsgate.tooling.declaration_audit import audit_packages
from tsgate.tooling.declaration_build import run_declaration_build
from tsgate.tooling.reference_check import check_references
from tsgate.tooling.reference_policy import load_reference_policy
from tsgate.workspace import WorkspaceIndex, list_workspaces

RunCommand = Callable[..., subprocess.CompletedProcess[str]]
Echo = Callable[[str], None]

Stage = Literal["load", "references", "build", "audit", "complete"]


def _default_echo_err(message: str) -> None:
    typer.echo(message, err=True)


@dataclass(frozen=True)
class PipelineDeps:
    run: RunCommand = subprocess.run
    echo: Echo = typer.echo
    echo_err: Echo = _default_echo_err


@dataclass(frozen=True)
class RunConfig:
    root: Path
    passthrough: tuple[str, ...] = ()
    config: TsgateConfig = field(default_factory=TsgateConfig)
    workers: int | None = None

    @classmethod
    def from_root(
        cls,
        root: Path,
        *,
        passthrough: Sequence[str] = (),
        config_path: Path | None = None,
        workers: int | None = None,
    ) -> "RunConfig":
        resolved_root = root.resolve()
        config = tsgate_config(resolved_root, config_path)
        if workers is None:
            workers = env_policy.audit_workers_override() or config.audit_workers
        return cls(
            root=resolved_root,
            passthrough=tuple(passthrough),
            config=config,
            workers=workers,
        )


@dataclass(frozen=True)
class PipelineResult:
    stage: Stage
    issues: tuple[Issue, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.issues

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1


def _banner(text: str, *, fg: str | None = None) -> str:
    return typer.style(f" {text} ", fg=fg, reverse=True)


def _fail(
    deps: PipelineDeps,
    stage: Stage,
    banner: str,
    issues: Sequence[Issue],
) -> PipelineResult:
    deps.echo_err(_banner(banner, fg=typer.colors.RED))
    for issue in issues:
        deps.echo_err(typer.style(issue.render(), fg=typer.colors.RED))
    return PipelineResult(stage=stage, issues=tuple(issues))


def run_pipeline(
    run_config: RunConfig,
    deps: PipelineDeps | None = None,
) -> PipelineResult:
    active_deps = deps or PipelineDeps()
    root = run_config.root
    config = run_config.config

    packages, shape_issues = load_packages(root, config)
    if shape_issues:
        return _fail(active_deps, "load", "Invalid package manifests", shape_issues)

    try:
        entries = list_workspaces(root, command=config.list_command, run=active_deps.run)
    except WorkspaceListingError as exc:
        return _fail(
            active_deps,
            "load",
            "Unable to list workspaces",
            [SetupFailure(message=str(exc))],
        )
    typed_index = WorkspaceIndex.from_entries(entries).restrict_to(
        (package.directory for package in packages), root=root
    )
    try:
        policy = load_reference_policy(config.policy_path)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        return _fail(
            active_deps,
            "load",
            "Unable to load reference policy",
            [SetupFailure(message=str(exc))],
        )

    reference_issues = check_references(
        packages,
        root=root,
        typed_index=typed_index,
        policy=policy,
        config=config,
    )
    if reference_issues:
        return _fail(
            active_deps,
            "references",
            "TypeScript project references do not match dependencies",
            reference_issues,
        )

    active_deps.echo(_banner("Building TypeScript definition files"))
    build_failure = run_declaration_build(
        packages,
        root=root,
        passthrough=run_config.passthrough,
        config=config,
        run=active_deps.run,
    )
    if build_failure is not None:
        return _fail(
            active_deps,
            "build",
            "Unable to build TypeScript definition files",
            [build_failure],
        )
    active_deps.echo(
        _banner("Successfully built TypeScript definition files", fg=typer.colors.GREEN)
    )

    active_deps.echo(_banner("Validating TypeScript definition files"))
    violations = audit_packages(packages, config, workers=run_config.workers)
    if violations:
        return _fail(
            active_deps,
            "audit",
            "Unable to validate TypeScript definition files",
            violations,
        )
    active_deps.echo(
        _banner("Successfully validated TypeScript definition files", fg=typer.colors.GREEN)
    )
    return PipelineResult(stage="complete")


def main(
    argv: Sequence[str],
    deps: PipelineDeps | None = None,
    *,
    root: Path | None = None,
) -> int:
    run_config = RunConfig.from_root(root or Path.cwd(), passthrough=argv)
    result = run_pipeline(run_config, deps)
    return result.exit_code
