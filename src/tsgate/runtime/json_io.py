from __future__ import annotations

import json
from pathlib import Path
from typing import Iterator, Mapping

import json5


def load_json_object_path(
    path: Path,
    *,
    encoding: str = "utf-8",
) -> dict[str, object]:
    payload = json.loads(path.read_text(encoding=encoding))
    if not isinstance(payload, Mapping):
        raise ValueError(f"{path}: expected a JSON object")
    return {str(key): payload[key] for key in payload}


def load_relaxed_json_object_path(
    path: Path,
    *,
    encoding: str = "utf-8",
) -> dict[str, object]:
    """Load a JSON object that may contain comments and trailing commas.

    ``tsconfig.json`` files are written in this dialect, so plain ``json``
    rejects most real-world configs.
    """
    payload = json5.loads(path.read_text(encoding=encoding))
    if not isinstance(payload, Mapping):
        raise ValueError(f"{path}: expected a JSON object")
    return {str(key): payload[key] for key in payload}


def iter_json_lines(text: str) -> Iterator[tuple[int, dict[str, object]]]:
    for line_number, line in enumerate(text.splitlines(), start=1):
        stripped = line.strip()
        if not stripped:
            continue
        try:
            payload = json.loads(stripped)
        except json.JSONDecodeError as exc:
            raise ValueError(f"line {line_number}: {exc}") from exc
        if not isinstance(payload, Mapping):
            raise ValueError(f"line {line_number}: expected a JSON object")
        yield line_number, {str(key): payload[key] for key in payload}
