from __future__ import annotations

from pathlib import Path
import sys

from tsgate import pipeline


def main(
    argv: list[str] | None = None,
    deps: pipeline.PipelineDeps | None = None,
    *,
    root: Path | None = None,
) -> int:
    return pipeline.main(sys.argv[1:] if argv is None else argv, deps, root=root)


if __name__ == "__main__":
    raise SystemExit(main())
