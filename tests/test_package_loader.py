from __future__ import annotations

from tests.harness.workspace_harness import WorkspaceBuilder
from tsgate.config import TsgateConfig
from tsgate.packages import declaration_entry, load_packages, typed_directories


def test_typed_directories_require_build_config(workspace: WorkspaceBuilder) -> None:
    workspace.add_package("expect")
    workspace.add_package("jest-cli", typed=False)
    (workspace.root / "packages" / "not-a-package").mkdir()

    directories = typed_directories(workspace.root, TsgateConfig())

    assert [directory.name for directory in directories] == ["expect"]


def test_load_packages_returns_sorted_packages(workspace: WorkspaceBuilder) -> None:
    workspace.add_package("jest-types", name="@jest/types")
    workspace.add_package("expect", dependencies={"@jest/types": "workspace:^"})

    packages, issues = load_packages(workspace.root, TsgateConfig())

    assert issues == []
    assert [package.name for package in packages] == ["expect", "@jest/types"]
    assert packages[0].manifest.dependencies == {"@jest/types": "workspace:^"}
    assert packages[1].directory == workspace.package_dir("jest-types")


def test_load_packages_reports_missing_types(workspace: WorkspaceBuilder) -> None:
    workspace.add_package("expect", types=None)

    _packages, issues = load_packages(workspace.root, TsgateConfig())

    assert len(issues) == 1
    assert issues[0].package == "expect"
    assert "Package expect is missing `types` field" in issues[0].render()


def test_load_packages_reports_types_main_mismatch(workspace: WorkspaceBuilder) -> None:
    workspace.add_package("expect", main="./build/index.js", types="./types/index.d.ts")

    _packages, issues = load_packages(workspace.root, TsgateConfig())

    assert len(issues) == 1
    assert "`main` and `types` field of expect does not match" in issues[0].render()


def test_load_packages_reports_every_shape_error(workspace: WorkspaceBuilder) -> None:
    workspace.add_package("expect", types=None)
    workspace.add_package("jest-mock", types="./build/mock.d.ts")
    workspace.add_package("pretty-format")

    _packages, issues = load_packages(workspace.root, TsgateConfig())

    assert sorted(issue.package for issue in issues) == ["expect", "jest-mock"]


def test_load_packages_reports_malformed_manifest(workspace: WorkspaceBuilder) -> None:
    directory = workspace.add_package("expect")
    (directory / "package.json").write_text("{ not json", encoding="utf-8")

    packages, issues = load_packages(workspace.root, TsgateConfig())

    assert packages == []
    assert len(issues) == 1
    assert "unable to parse manifest" in issues[0].render()
    assert str(directory / "package.json") in issues[0].render()


def test_load_packages_reports_manifest_without_main(workspace: WorkspaceBuilder) -> None:
    directory = workspace.add_package("expect")
    (directory / "package.json").write_text('{"name": "expect"}', encoding="utf-8")

    _packages, issues = load_packages(workspace.root, TsgateConfig())

    assert len(issues) == 1
    assert issues[0].package == "expect"
    assert "invalid manifest" in issues[0].render()


def test_load_packages_honours_packages_dir(workspace: WorkspaceBuilder) -> None:
    workspace.add_package("expect")

    packages, issues = load_packages(workspace.root, TsgateConfig(packages_dir="libs"))

    assert packages == []
    assert issues == []


def test_declaration_entry_swaps_js_suffix() -> None:
    assert declaration_entry("./build/index.js") == "./build/index.d.ts"
    assert declaration_entry("./build/index.mjs") == "./build/index.mjs"


def test_load_packages_accepts_null_dev_dependencies(workspace: WorkspaceBuilder) -> None:
    directory = workspace.add_package("expect", dependencies={"jest-util": "workspace:^"})
    (directory / "package.json").write_text(
        '{"name": "expect", "main": "./build/index.js", "types": "./build/index.d.ts",'
        ' "dependencies": {"jest-util": "workspace:^"}, "devDependencies": null}',
        encoding="utf-8",
    )

    packages, issues = load_packages(workspace.root, TsgateConfig())

    assert issues == []
    assert packages[0].manifest.dev_dependencies == {}
    assert packages[0].manifest.dependency_names() == ["jest-util"]
