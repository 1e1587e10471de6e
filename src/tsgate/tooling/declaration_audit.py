from __future__ import annotations

import concurrent.futures
from dataclasses import dataclass
import os
from pathlib import Path
from typing import Callable, Literal, Sequence

from tsgate.config import TsgateConfig
from tsgate.issues import AuditCrash, DisallowedReference, MissingNodeTypes
from tsgate.packages import Package

TYPES_REFERENCE_DIRECTIVE = "/// <reference types"
NODE_TYPES_REFERENCE_DIRECTIVE = f'{TYPES_REFERENCE_DIRECTIVE}="node" />'

DirectiveKind = Literal["node", "other"]
AuditViolation = DisallowedReference | MissingNodeTypes | AuditCrash


@dataclass(frozen=True)
class ReferenceDirective:
    line: str
    kind: DirectiveKind


@dataclass(frozen=True)
class DeclarationFile:
    path: Path
    content: str


def default_worker_count(cpu_count: Callable[[], int | None] = os.cpu_count) -> int:
    return max(1, (cpu_count() or 1) - 1)


def scan_directives(content: str) -> list[ReferenceDirective]:
    directives: list[ReferenceDirective] = []
    for raw_line in content.split("\n"):
        line = raw_line.strip()
        if TYPES_REFERENCE_DIRECTIVE not in line:
            continue
        kind: DirectiveKind = "node" if line == NODE_TYPES_REFERENCE_DIRECTIVE else "other"
        directives.append(ReferenceDirective(line=line, kind=kind))
    return directives


def declaration_files(package: Package, config: TsgateConfig) -> list[DeclarationFile]:
    build_root = package.directory / config.build_dir
    if not build_root.is_dir():
        return []
    return [
        DeclarationFile(path=path, content=path.read_text(encoding="utf-8"))
        for path in sorted(build_root.rglob("*.d.ts"))
        if path.is_file()
    ]


def _check_node_types_pin(package: Package, config: TsgateConfig) -> MissingNodeTypes | None:
    dependencies = package.manifest.dependencies
    if dependencies is None:
        return MissingNodeTypes(
            package=package.name,
            message=f"Package `{package.name}` is missing `dependencies`",
        )
    if dependencies.get(config.node_types_package) != config.node_types_pin:
        return MissingNodeTypes(
            package=package.name,
            message=(
                f"Package `{package.name}` is missing a dependency on "
                f"`{config.node_types_package}` pinned to `{config.node_types_pin}`"
            ),
        )
    return None


def audit_package(package: Package, config: TsgateConfig) -> list[AuditViolation]:
    disallowed: list[AuditViolation] = []
    has_node_reference = False
    for declaration in declaration_files(package, config):
        directives = scan_directives(declaration.content)
        other_lines = tuple(
            directive.line for directive in directives if directive.kind == "other"
        )
        if other_lines:
            disallowed.append(
                DisallowedReference(
                    package=package.name,
                    path=declaration.path,
                    lines=other_lines,
                )
            )
        elif directives:
            has_node_reference = True
    if disallowed:
        return disallowed
    if has_node_reference:
        missing = _check_node_types_pin(package, config)
        if missing is not None:
            return [missing]
    return []


def audit_packages(
    packages: Sequence[Package],
    config: TsgateConfig,
    *,
    workers: int | None = None,
    audit_fn: Callable[[Package, TsgateConfig], list[AuditViolation]] = audit_package,
) -> list[AuditViolation]:
    """Audit every package on a bounded thread pool.

    All tasks run to completion even when some fail, so one run reports every
    offending package. Results are returned in ``packages`` order.
    """
    if not packages:
        return []
    max_workers = workers if workers is not None and workers > 0 else default_worker_count()
    results: dict[int, list[AuditViolation]] = {}
    with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {
            executor.submit(audit_fn, package, config): index
            for index, package in enumerate(packages)
        }
        for future in concurrent.futures.as_completed(futures):
            index = futures[future]
            try:
                results[index] = future.result()
            except Exception as exc:
                results[index] = [AuditCrash(package=packages[index].name, error=str(exc))]
    violations: list[AuditViolation] = []
    for index in range(len(packages)):
        violations.extend(results[index])
    return violations
