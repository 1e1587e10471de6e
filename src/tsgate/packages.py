from __future__ import annotations

from dataclasses import dataclass
import json
from pathlib import Path

from pydantic import ValidationError

from tsgate.config import TsgateConfig
from tsgate.issues import ManifestShapeError
from tsgate.runtime import json_io
from tsgate.schema import Manifest

MANIFEST_NAME = "package.json"


@dataclass(frozen=True)
class Package:
    name: str
    directory: Path
    manifest: Manifest


def candidate_directories(root: Path, config: TsgateConfig) -> list[Path]:
    packages_root = root / config.packages_dir
    if not packages_root.is_dir():
        return []
    return sorted(
        child
        for child in packages_root.iterdir()
        if child.is_dir() and (child / MANIFEST_NAME).is_file()
    )


def typed_directories(root: Path, config: TsgateConfig) -> list[Path]:
    return [
        directory
        for directory in candidate_directories(root, config)
        if (directory / config.build_config_name).is_file()
    ]


def load_manifest(directory: Path) -> Manifest | ManifestShapeError:
    path = directory / MANIFEST_NAME
    try:
        payload = json_io.load_json_object_path(path)
    except (OSError, UnicodeError, ValueError) as exc:
        reason = exc.msg if isinstance(exc, json.JSONDecodeError) else str(exc)
        return ManifestShapeError(
            package=None, path=path, message=f"unable to parse manifest: {reason}"
        )
    try:
        return Manifest.model_validate(payload)
    except ValidationError as exc:
        return ManifestShapeError(
            package=str(payload.get("name")) if payload.get("name") else None,
            path=path,
            message=f"invalid manifest: {exc}",
        )


def declaration_entry(main: str) -> str:
    if main.endswith(".js"):
        return main[: -len(".js")] + ".d.ts"
    return main


def check_manifest_shape(package: Package) -> list[ManifestShapeError]:
    manifest = package.manifest
    path = package.directory / MANIFEST_NAME
    if not manifest.types:
        return [
            ManifestShapeError(
                package=package.name,
                path=path,
                message=f"Package {package.name} is missing `types` field",
            )
        ]
    if manifest.types != declaration_entry(manifest.main):
        return [
            ManifestShapeError(
                package=package.name,
                path=path,
                message=f"`main` and `types` field of {package.name} does not match",
            )
        ]
    return []


def load_packages(
    root: Path, config: TsgateConfig
) -> tuple[list[Package], list[ManifestShapeError]]:
    packages: list[Package] = []
    issues: list[ManifestShapeError] = []
    for directory in typed_directories(root, config):
        manifest = load_manifest(directory)
        if isinstance(manifest, ManifestShapeError):
            issues.append(manifest)
            continue
        package = Package(name=manifest.name, directory=directory, manifest=manifest)
        issues.extend(check_manifest_shape(package))
        packages.append(package)
    return packages, issues
