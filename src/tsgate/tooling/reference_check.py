from __future__ import annotations

import os
from pathlib import Path, PurePath

from pydantic import ValidationError

from tsgate.config import TsgateConfig
from tsgate.issues import ManifestShapeError, ReferenceMismatch
from tsgate.packages import Package
from tsgate.runtime import json_io
from tsgate.schema import BuildConfig
from tsgate.tooling.reference_policy import ReferencePolicy
from tsgate.workspace import WorkspaceIndex


def required_references(
    package: Package,
    *,
    root: Path,
    typed_index: WorkspaceIndex,
    policy: ReferencePolicy,
) -> list[str]:
    """Project references ``package`` must declare, sorted.

    One entry per typed workspace dependency that survives the exclusion
    policy, expressed relative to the package's own directory.
    """
    names = {
        name
        for name in package.manifest.dependency_names()
        if name in typed_index and not policy.excludes(package.name, name)
    }
    return sorted(
        PurePath(
            os.path.relpath(root / typed_index.location(name), package.directory)
        ).as_posix()
        for name in names
    )


def load_build_config(path: Path) -> BuildConfig:
    return BuildConfig.model_validate(json_io.load_relaxed_json_object_path(path))


def check_package_references(
    package: Package,
    *,
    root: Path,
    typed_index: WorkspaceIndex,
    policy: ReferencePolicy,
    config: TsgateConfig,
) -> ManifestShapeError | ReferenceMismatch | None:
    required = required_references(
        package, root=root, typed_index=typed_index, policy=policy
    )
    config_path = package.directory / config.build_config_name
    try:
        build_config = load_build_config(config_path)
    except ValidationError as exc:
        return ManifestShapeError(
            package=package.name,
            path=config_path,
            message=f"invalid references: {exc}",
        )
    except (OSError, UnicodeError, ValueError) as exc:
        return ManifestShapeError(
            package=package.name,
            path=config_path,
            message=f"unable to parse build config: {exc}",
        )
    declared = sorted(build_config.reference_paths())
    if declared != required:
        return ReferenceMismatch(
            package=package.name,
            declared=tuple(declared),
            required=tuple(required),
        )
    return None


def check_references(
    packages: list[Package],
    *,
    root: Path,
    typed_index: WorkspaceIndex,
    policy: ReferencePolicy,
    config: TsgateConfig,
) -> list[ManifestShapeError | ReferenceMismatch]:
    issues: list[ManifestShapeError | ReferenceMismatch] = []
    for package in packages:
        issue = check_package_references(
            package,
            root=root,
            typed_index=typed_index,
            policy=policy,
            config=config,
        )
        if issue is not None:
            issues.append(issue)
    return issues
