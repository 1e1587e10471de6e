from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

import yaml

DEFAULT_POLICY_PATH = Path(__file__).resolve().parents[1] / "policy" / "reference_policy.yaml"


@dataclass(frozen=True)
class ReferencePolicy:
    global_exclusions: frozenset[str] = frozenset()
    package_exclusions: Mapping[str, frozenset[str]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def excludes(self, consumer: str, dependency: str) -> bool:
        if dependency in self.global_exclusions:
            return True
        return dependency in self.package_exclusions.get(consumer, frozenset())


def _yaml_loader():
    class Loader(yaml.SafeLoader):
        pass

    # Package names such as `yes` or `on` must stay strings.
    for key, values in list(Loader.yaml_implicit_resolvers.items()):
        Loader.yaml_implicit_resolvers[key] = [
            (tag, regexp) for tag, regexp in values if tag != "tag:yaml.org,2002:bool"
        ]
    return Loader


def _name_set(raw: object, *, field_name: str) -> frozenset[str]:
    if raw is None:
        return frozenset()
    if not isinstance(raw, list) or any(not isinstance(item, str) for item in raw):
        raise ValueError(f"reference_policy invalid {field_name}: expected list[str]")
    return frozenset(raw)


def policy_from_mapping(raw: Mapping[str, object]) -> ReferencePolicy:
    package_raw = raw.get("package_exclusions") or {}
    if not isinstance(package_raw, Mapping):
        raise ValueError("reference_policy invalid package_exclusions: expected mapping")
    package_exclusions: dict[str, frozenset[str]] = {}
    for consumer, names in package_raw.items():
        package_exclusions[str(consumer)] = _name_set(
            names, field_name=f"package_exclusions.{consumer}"
        )
    return ReferencePolicy(
        global_exclusions=_name_set(
            raw.get("global_exclusions"), field_name="global_exclusions"
        ),
        package_exclusions=MappingProxyType(package_exclusions),
    )


@lru_cache(maxsize=8)
def load_reference_policy(path: Path | None = None) -> ReferencePolicy:
    policy_path = DEFAULT_POLICY_PATH if path is None else path
    loader = _yaml_loader()
    with policy_path.open("r", encoding="utf-8") as handle:
        raw = yaml.load(handle, Loader=loader) or {}
    if not isinstance(raw, Mapping):
        raise ValueError("reference_policy root must be a mapping")
    return policy_from_mapping(raw)
