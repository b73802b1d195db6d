from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml


@dataclass(frozen=True)
class Finding:
    path: str
    line: int
    code: str
    message: str
    column: int = 0
    severity: str = "error"


def load_rule_file(path: Optional[Path]) -> Optional[Dict[str, Any]]:
    """Read a YAML or JSON rule file (JSON parses as YAML); None when absent."""
    if path is None or not Path(path).is_file():
        return None
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Lint config {path} must be a mapping")
    return data


def rule_setting(value: Any) -> Tuple[int, Dict[str, Any]]:
    """Normalise a sass-lint style rule value to (severity, options).

    ``1`` / ``2`` / ``[2, {size: 4}]`` / ``true`` / ``false`` are accepted.
    """
    if isinstance(value, bool):
        return (2 if value else 0), {}
    if isinstance(value, int):
        return value, {}
    if isinstance(value, (list, tuple)) and value:
        severity = int(value[0])
        options = value[1] if len(value) > 1 and isinstance(value[1], dict) else {}
        return severity, dict(options)
    if isinstance(value, dict):
        return int(value.get("severity", 2)), dict(value)
    return 0, {}
