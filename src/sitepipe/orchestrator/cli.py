from __future__ import annotations

import importlib
import pkgutil
from importlib import resources
from pathlib import Path
from typing import Dict, Optional

import typer
import yaml
from dotenv import load_dotenv

from .core import Pipeline, TaskSpec, resolve_paths
from .logging import get_logger
from .pipelines import build_pipeline
from .utils import max_workers
from ..tasks.serve import stop_server


app = typer.Typer(add_completion=False, help="Static site asset pipeline")
log = get_logger("orchestrator.cli")

DEFAULT_CONFIG = "configs/base.yaml"


def load_config(path: str | Path) -> dict:
    p = Path(path)
    if not p.is_file():
        log.warning("Config %s not found; using defaults", p)
        return {}
    with open(p, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def discover_tasks() -> Dict[str, TaskSpec]:
    """Import all modules in the `tasks` package and collect decorated functions."""
    tasks_pkg = "sitepipe.tasks"
    specs: Dict[str, TaskSpec] = {}
    pkg = importlib.import_module(tasks_pkg)
    for m in pkgutil.iter_modules(pkg.__path__, prefix=f"{tasks_pkg}."):
        mod = importlib.import_module(m.name)
        for attr_name in dir(mod):
            obj = getattr(mod, attr_name)
            spec = getattr(obj, "_task_spec", None)
            if isinstance(spec, TaskSpec):
                specs[spec.name] = spec
    return specs


def _run_pipeline(
    name: str,
    config: str,
    serve: Optional[bool] = None,
    docs: Optional[bool] = None,
    from_step: str = "",
    until_step: str = "",
) -> None:
    params = load_config(config)
    specs = discover_tasks()
    try:
        pipe = build_pipeline(name, specs, params, serve=serve, docs=docs)
        code = pipe.run(
            params=params,
            from_step=from_step or None,
            until_step=until_step or None,
            max_workers=max_workers(params),
        )
    except KeyError as e:
        typer.echo(f"Error: {e.args[0] if e.args else e}")
        raise typer.Exit(code=2)
    except KeyboardInterrupt:
        log.info("Interrupted, shutting down")
        code = 0
    finally:
        stop_server()
    raise typer.Exit(code=code)


@app.command("list")
def list_tasks(
    config: str = typer.Option(DEFAULT_CONFIG, help="Path to YAML config"),
):
    """List discovered tasks."""
    specs = discover_tasks()
    params = load_config(config)
    typer.echo("Discovered tasks:")
    for name in sorted(specs.keys()):
        spec = specs[name]
        typer.echo(f"- {name}: {spec.description}")
        inputs = resolve_paths(spec.inputs, params)
        outputs = resolve_paths(spec.outputs, params)
        if inputs:
            typer.echo(f"    inputs:  {', '.join(inputs)}")
        if outputs:
            typer.echo(f"    outputs: {', '.join(outputs)}")


@app.command()
def run_task(
    name: str = typer.Argument(..., help="Task name to run"),
    config: str = typer.Option(DEFAULT_CONFIG, help="Path to YAML config"),
):
    """Run a single task by name."""
    specs = discover_tasks()
    if name not in specs:
        typer.echo(f"Task not found: {name}")
        raise typer.Exit(code=1)
    params = load_config(config)
    pipe = Pipeline(tasks={name: specs[name]}, edges=[], name=f"task.{name}")
    try:
        code = pipe.run(params=params, only_step=name)
    except KeyboardInterrupt:
        code = 0
    finally:
        stop_server()
    raise typer.Exit(code=code)


@app.command()
def linters(
    config: str = typer.Option(DEFAULT_CONFIG, help="Path to YAML config"),
):
    """Run the HTML, Sass and script linters."""
    _run_pipeline("linters", config)


@app.command()
def accessibility(
    config: str = typer.Option(DEFAULT_CONFIG, help="Path to YAML config"),
):
    """Write accessibility reports for the generated pages."""
    _run_pipeline("accessibility", config)


@app.command()
def dev(
    config: str = typer.Option(DEFAULT_CONFIG, help="Path to YAML config"),
    serve: Optional[bool] = typer.Option(
        None, "--serve/--no-serve", help="Start the live-reload server and watchers"
    ),
):
    """Development build, then serve with live reload and watch for changes."""
    _run_pipeline("dev", config, serve=serve)


@app.command()
def prod(
    config: str = typer.Option(DEFAULT_CONFIG, help="Path to YAML config"),
    serve: Optional[bool] = typer.Option(
        None, "--serve/--no-serve", help="Preview the build when done"
    ),
    docs: Optional[bool] = typer.Option(
        None, "--docs/--no-docs", help="Copy the build into the docs folder"
    ),
    from_step: str = typer.Option("", help="Start from this step name"),
    until_step: str = typer.Option("", help="Stop after this step name"),
):
    """Production build: bundled, minified, references rewritten."""
    _run_pipeline(
        "prod", config, serve=serve, docs=docs, from_step=from_step, until_step=until_step
    )


def _copy_skeleton(node, dest: Path, force: bool) -> int:
    written = 0
    for entry in node.iterdir():
        if entry.name == "__pycache__":
            continue
        target = dest / entry.name
        if entry.is_dir():
            written += _copy_skeleton(entry, target, force)
            continue
        if target.exists() and not force:
            log.warning("Exists, skipped: %s", target)
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(entry.read_bytes())
        written += 1
    return written


@app.command()
def init(
    directory: str = typer.Argument(".", help="Where to create the starter site"),
    force: bool = typer.Option(False, help="Overwrite existing files"),
):
    """Write a starter source tree, lint configs and config file."""
    skeleton = resources.files("sitepipe") / "skeleton"
    written = _copy_skeleton(skeleton, Path(directory), force)
    typer.echo(f"Wrote {written} file(s) to {directory}")


def main():  # pragma: no cover
    load_dotenv()
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
