from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from tsgate.pipeline import PipelineDeps, RunConfig, run_pipeline

app = typer.Typer(add_completion=False)


def _deps(ctx: typer.Context) -> PipelineDeps:
    if isinstance(ctx.obj, PipelineDeps):
        return ctx.obj
    return PipelineDeps()


@app.command(
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
    help=(
        "Check TypeScript project references, build declaration files with "
        "`tsc -b` and audit the emitted declarations. Extra arguments are "
        "forwarded to the compiler."
    ),
)
def build(
    ctx: typer.Context,
    root: Path = typer.Option(Path("."), "--root", help="Workspace root."),
    config: Optional[Path] = typer.Option(
        None, "--config", help="Path to tsgate.toml (default: <root>/tsgate.toml)."
    ),
    workers: Optional[int] = typer.Option(
        None, "--workers", min=1, help="Declaration audit worker count."
    ),
) -> None:
    run_config = RunConfig.from_root(
        root,
        passthrough=list(ctx.args),
        config_path=config,
        workers=workers,
    )
    result = run_pipeline(run_config, _deps(ctx))
    raise typer.Exit(code=result.exit_code)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
