from importlib import resources
from pathlib import Path

import pytest
from typer.testing import CliRunner

from sitepipe.orchestrator.cli import _copy_skeleton, load_config


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def site(tmp_path: Path, monkeypatch) -> Path:
    """A copy of the starter site in a temporary working directory."""
    _copy_skeleton(resources.files("sitepipe") / "skeleton", tmp_path, force=True)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def params(site: Path) -> dict:
    p = load_config(site / "configs" / "base.yaml")
    p["serve"]["enabled"] = False
    p["project"]["max_workers"] = 1
    return p


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path
