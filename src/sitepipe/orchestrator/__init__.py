"""Lightweight in-repo orchestrator for the site build.

Provides Task and Pipeline primitives, DAG scheduling with parallel stages, run
state, and a Typer CLI.
"""

from .core import TaskSpec, Pipeline, task  # re-export for convenience

__all__ = ["TaskSpec", "Pipeline", "task"]
