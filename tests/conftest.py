from __future__ import annotations

import os
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


import pytest

from tests.harness.workspace_harness import FakeRunner, WorkspaceBuilder
from tsgate.pipeline import PipelineDeps


@pytest.fixture
def workspace(tmp_path: Path) -> WorkspaceBuilder:
    return WorkspaceBuilder(tmp_path)


@pytest.fixture
def fake_runner(workspace: WorkspaceBuilder):
    def _make(**kwargs: object) -> FakeRunner:
        return FakeRunner(listing=workspace.listing(), **kwargs)

    return _make


@pytest.fixture
def captured_deps():
    def _make(runner: FakeRunner) -> tuple[PipelineDeps, list[str], list[str]]:
        out: list[str] = []
        err: list[str] = []
        return PipelineDeps(run=runner, echo=out.append, echo_err=err.append), out, err

    return _make


@pytest.fixture
def env_override():
    @contextmanager
    def _override(values: dict[str, str | None]) -> Iterator[None]:
        previous = {key: os.environ.get(key) for key in values}
        _apply(values)
        try:
            yield
        finally:
            _apply(previous)

    return _override


def _apply(values: dict[str, str | None]) -> None:
    for key, value in values.items():
        if value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = value
