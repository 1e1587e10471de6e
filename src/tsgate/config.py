from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from pathlib import Path
from typing import TypeAlias
import tomllib

DEFAULT_CONFIG_NAME = "tsgate.toml"

DEFAULT_LIST_COMMAND: tuple[str, ...] = ("yarn", "workspaces", "list", "--json")
DEFAULT_BUILD_COMMAND: tuple[str, ...] = ("yarn", "tsc", "-b")

TomlScalar: TypeAlias = str | int | float | bool | None | date | datetime | time
TomlValue: TypeAlias = TomlScalar | list["TomlValue"] | dict[str, "TomlValue"]
TomlTable: TypeAlias = dict[str, TomlValue]


@dataclass(frozen=True)
class TsgateConfig:
    packages_dir: str = "packages"
    list_command: tuple[str, ...] = DEFAULT_LIST_COMMAND
    build_config_name: str = "tsconfig.json"
    policy_path: Path | None = None
    build_command: tuple[str, ...] = DEFAULT_BUILD_COMMAND
    build_dir: str = "build"
    audit_workers: int | None = None
    node_types_package: str = "@types/node"
    node_types_pin: str = "*"


def _load_toml(path: Path) -> TomlTable:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError:
        return {}
    try:
        data = tomllib.loads(raw)
    except tomllib.TOMLDecodeError:
        return {}
    return data if isinstance(data, dict) else {}


def load_config(root: Path | None = None, config_path: Path | None = None) -> TomlTable:
    if config_path is None:
        base = root if root is not None else Path.cwd()
        config_path = base / DEFAULT_CONFIG_NAME
    return _load_toml(config_path)


def _section(data: TomlTable, name: str) -> TomlTable:
    section = data.get(name, {})
    return section if isinstance(section, dict) else {}


def _as_str(value: TomlValue, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def _as_command(value: TomlValue, default: tuple[str, ...]) -> tuple[str, ...]:
    if isinstance(value, str):
        parts = tuple(part for part in value.split() if part)
        return parts or default
    if isinstance(value, list) and value and all(isinstance(item, str) for item in value):
        return tuple(value)
    return default


def _as_positive_int(value: TomlValue) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int) and value > 0:
        return value
    return None


def tsgate_config(
    root: Path | None = None, config_path: Path | None = None
) -> TsgateConfig:
    base = root if root is not None else Path.cwd()
    data = load_config(root=base, config_path=config_path)
    workspace = _section(data, "workspace")
    references = _section(data, "references")
    build = _section(data, "build")
    audit = _section(data, "audit")

    policy_raw = references.get("policy")
    policy_path = None
    if isinstance(policy_raw, str) and policy_raw.strip():
        policy_path = Path(policy_raw.strip())
        if not policy_path.is_absolute():
            policy_path = base / policy_path

    return TsgateConfig(
        packages_dir=_as_str(workspace.get("packages_dir"), "packages"),
        list_command=_as_command(workspace.get("list_command"), DEFAULT_LIST_COMMAND),
        build_config_name=_as_str(references.get("config_name"), "tsconfig.json"),
        policy_path=policy_path,
        build_command=_as_command(build.get("command"), DEFAULT_BUILD_COMMAND),
        build_dir=_as_str(audit.get("build_dir"), "build"),
        audit_workers=_as_positive_int(audit.get("workers")),
        node_types_package=_as_str(audit.get("node_types_package"), "@types/node"),
        node_types_pin=_as_str(audit.get("node_types_pin"), "*"),
    )
