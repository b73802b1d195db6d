from __future__ import annotations

import json
import os
import sys
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional, Sequence, Union, List

from .logging import get_logger, run_log
from . import cache as cache_mod


# Allow static lists or callables that build paths from params
PathSpec = Union[List[str], Callable[[dict], List[str]]]

# A stage is a single task name or a group of names that may run concurrently
Stage = Union[str, Sequence[str]]

GLOB_CHARS = "*?["


@dataclass
class TaskSpec:
    name: str
    inputs: PathSpec
    outputs: PathSpec
    fn: Callable[..., Optional[int]]
    description: str = ""


def task(name: str, inputs: PathSpec, outputs: PathSpec, description: str = ""):
    """Decorator to declare a task on a function.

    The wrapped function accepts a single dict `params` (parsed config) and
    returns None or an integer status; a non-zero status marks the step as
    failed without stopping the pipeline (lint findings).
    """

    def deco(fn: Callable[..., Optional[int]]):
        doc = description or next(iter((fn.__doc__ or "").strip().splitlines()), "")
        spec = TaskSpec(
            name=name, inputs=inputs, outputs=outputs, fn=fn, description=doc
        )
        setattr(fn, "_task_spec", spec)
        return fn

    return deco


def _graph(
    nodes: Iterable[str], edges: Iterable[tuple[str, str]]
) -> tuple[list[str], dict[str, set], dict[str, set]]:
    nodes = list(nodes)
    incoming = {n: set() for n in nodes}
    outgoing = {n: set() for n in nodes}
    for u, v in edges:
        if u not in incoming or v not in incoming:
            raise ValueError(f"Edge references unknown node: {(u, v)}")
        outgoing[u].add(v)
        incoming[v].add(u)
    return nodes, incoming, outgoing


def topo_sort(nodes: Iterable[str], edges: Iterable[tuple[str, str]]) -> list[str]:
    """Kahn's algorithm; ties are broken by declaration order."""
    nodes, incoming, outgoing = _graph(nodes, edges)
    position = {n: i for i, n in enumerate(nodes)}
    ordered: list[str] = []
    roots = [n for n in nodes if not incoming[n]]
    while roots:
        roots.sort(key=position.__getitem__)
        n = roots.pop(0)
        ordered.append(n)
        for m in sorted(outgoing[n], key=position.__getitem__):
            incoming[m].discard(n)
            outgoing[n].discard(m)
            if not incoming[m]:
                roots.append(m)
    if any(incoming[n] for n in nodes):
        raise ValueError("Cycle detected in DAG")
    return ordered


def levels(nodes: Iterable[str], edges: Iterable[tuple[str, str]]) -> list[list[str]]:
    """Group nodes by longest distance from a root.

    Nodes in the same level never depend on each other and may run
    concurrently; every node of level k has all its predecessors in levels < k.
    """
    edges = list(edges)
    order = topo_sort(nodes, edges)
    preds: dict[str, set] = {n: set() for n in order}
    for u, v in edges:
        preds[v].add(u)
    depth: dict[str, int] = {}
    for n in order:
        depth[n] = max((depth[p] + 1 for p in preds[n]), default=0)
    grouped: list[list[str]] = []
    for n in order:
        while len(grouped) <= depth[n]:
            grouped.append([])
        grouped[depth[n]].append(n)
    return grouped


def stages_to_edges(stages: Sequence[Stage]) -> tuple[list[str], list[tuple[str, str]]]:
    """Flatten a series of stages into (nodes, edges).

    Each stage is a task name or a list of names run in parallel; every node of
    a stage depends on every node of the previous stage.
    """
    nodes: list[str] = []
    edges: list[tuple[str, str]] = []
    previous: list[str] = []
    for stage in stages:
        group = [stage] if isinstance(stage, str) else list(stage)
        for name in group:
            if name in nodes:
                raise ValueError(f"Task listed twice in stages: {name}")
            nodes.append(name)
            for prev in previous:
                edges.append((prev, name))
        if group:
            previous = group
    return nodes, edges


class Pipeline:
    def __init__(
        self,
        tasks: dict[str, TaskSpec],
        edges: list[tuple[str, str]],
        name: str = "pipeline",
    ):
        self.name = name
        self.tasks = tasks
        self.edges = edges
        self.order = topo_sort(tasks.keys(), edges)
        self.logger = get_logger(f"orchestrator.{self.name}")

    @classmethod
    def from_stages(
        cls, specs: dict[str, TaskSpec], stages: Sequence[Stage], name: str
    ) -> "Pipeline":
        nodes, edges = stages_to_edges(stages)
        missing = [n for n in nodes if n not in specs]
        if missing:
            raise KeyError(f"Unknown tasks: {', '.join(missing)}")
        return cls(tasks={n: specs[n] for n in nodes}, edges=edges, name=name)

    def _select_subset(
        self, from_step: str | None, until_step: str | None, only_step: str | None
    ) -> list[str]:
        if only_step:
            if only_step not in self.tasks:
                raise KeyError(f"Unknown step: {only_step}")
            return [only_step]
        ordered = self.order
        if from_step:
            if from_step not in self.tasks:
                raise KeyError(f"Unknown step: {from_step}")
            start_idx = ordered.index(from_step)
            ordered = ordered[start_idx:]
        if until_step:
            if until_step not in self.tasks:
                raise KeyError(f"Unknown step: {until_step}")
            if until_step not in ordered:
                raise KeyError(f"Step {until_step} runs before {from_step}")
            end_idx = ordered.index(until_step)
            ordered = ordered[: end_idx + 1]
        return ordered

    def run(
        self,
        params: dict,
        from_step: str | None = None,
        until_step: str | None = None,
        only_step: str | None = None,
        max_workers: int = 1,
    ) -> int:
        run_id = time.strftime("%Y%m%d-%H%M%S")
        run_dir = (
            Path(params.get("project", {}).get("runs_dir", ".sitepipe/runs"))
            / self.name
            / run_id
        )
        os.makedirs(run_dir, exist_ok=True)

        # Expose runtime metadata to tasks for dynamic path construction
        params = dict(params)
        params["runtime"] = dict(params.get("runtime", {}))
        params["runtime"]["run_id"] = run_id
        params["runtime"]["pipeline"] = self.name

        selected = self._select_subset(from_step, until_step, only_step)
        self.logger.info("Selected steps: %s", " → ".join(selected))

        state = {
            "pipeline": self.name,
            "run_id": run_id,
            "steps": [],
            "python": sys.version,
        }
        state_lock = threading.Lock()

        selected_set = set(selected)
        sub_edges = [
            (u, v) for u, v in self.edges if u in selected_set and v in selected_set
        ]
        exit_code = 0
        with run_log(run_dir / "pipeline.log"):
            for level in levels(selected, sub_edges):
                if max_workers > 1 and len(level) > 1:
                    with ThreadPoolExecutor(max_workers=max_workers) as pool:
                        futures = [
                            pool.submit(
                                self._run_step, name, params, run_dir, state, state_lock
                            )
                            for name in level
                        ]
                        codes = [f.result() for f in futures]
                else:
                    codes = [
                        self._run_step(name, params, run_dir, state, state_lock)
                        for name in level
                    ]
                exit_code = max([exit_code, *codes])
        state["exit_code"] = exit_code
        _write_state(run_dir, state)
        return exit_code

    def _run_step(
        self,
        step_name: str,
        params: dict,
        run_dir: Path,
        state: dict,
        state_lock: threading.Lock,
    ) -> int:
        spec = self.tasks[step_name]
        step_logger = get_logger(f"orchestrator.{self.name}.{step_name}")
        started = time.monotonic()
        try:
            step_logger.debug("Run: %s", step_name)
            result = spec.fn(params=params)
        except Exception as e:  # noqa: BLE001
            step_logger.exception("Step failed (%s)", step_name)
            with state_lock:
                state["steps"].append(
                    {
                        "name": step_name,
                        "status": "error",
                        "error": str(e),
                        "seconds": round(time.monotonic() - started, 3),
                    }
                )
                _write_state(run_dir, state)
            raise
        code = int(result or 0)
        outputs = [
            p for pat in resolve_paths(spec.outputs, params) for p in expand_glob(pat)
        ]
        entry = {
            "name": step_name,
            "status": "ok" if code == 0 else "failed",
            "seconds": round(time.monotonic() - started, 3),
            "outputs_digest": cache_mod.outputs_digest(outputs),
        }
        if code:
            step_logger.warning("Step %s finished with status %d", step_name, code)
        with state_lock:
            state["steps"].append(entry)
            _write_state(run_dir, state)
        return code


def _write_state(run_dir: Path, state: dict) -> None:
    with open(run_dir / "state.json", "w", encoding="utf-8") as f:
        json.dump(state, f, indent=2)


def resolve_paths(paths_spec: PathSpec, params: dict) -> list[str]:
    """Resolve a static list of paths or a callable(PathSpec) into a list[str].

    Callables receive the full params dict and must return a list of path strings.
    """
    if callable(paths_spec):
        paths = paths_spec(params)
    else:
        paths = paths_spec
    if paths is None:
        return []
    # Normalize to strings
    out: list[str] = []
    for p in paths:
        out.append(str(p))
    return out


def expand_glob(pattern: str) -> list[Path]:
    """Files matching `pattern`, sorted.

    `**` matches zero or more directories. Absolute patterns are split into a
    literal base directory and a relative glob. A pattern without glob
    characters yields the path itself when it is an existing file.
    """
    path = Path(pattern)
    parts = path.parts
    idx = next(
        (i for i, part in enumerate(parts) if any(ch in part for ch in GLOB_CHARS)),
        None,
    )
    if idx is None:
        return [path] if path.is_file() else []
    base = Path(*parts[:idx]) if idx else Path(".")
    rel = "/".join(parts[idx:])
    if not base.is_dir():
        return []
    return sorted((p for p in base.glob(rel) if p.is_file()), key=str)


def expand_globs(patterns: Iterable[str]) -> list[Path]:
    """Expand several patterns, keeping first-match order and dropping repeats."""
    seen: set[Path] = set()
    out: list[Path] = []
    for pat in patterns:
        for p in expand_glob(pat):
            if p not in seen:
                seen.add(p)
                out.append(p)
    return out
