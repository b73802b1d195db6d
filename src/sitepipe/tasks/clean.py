"""Remove the output tree so every build starts from the sources alone."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Dict

from ..orchestrator import task
from ..orchestrator.logging import banner, get_logger
from ..orchestrator.utils import dist_dir

log = get_logger("tasks.clean")


@task(name="clean_dist", inputs=[], outputs=[])
def clean_dist(params: Dict):
    """Delete the output directory."""
    banner(log, "removing old files from dist")
    dist = Path(dist_dir(params))
    if dist.exists():
        shutil.rmtree(dist)
        log.info("Removed %s", dist)
