"""Loader for the ``service.yaml`` deployment file."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml

SERVICE_YAML_ENV = "SERVICE_YAML"
SERVICE_YAML_NAME = "service.yaml"
CONTAINER_SERVICE_YAML = Path("/app") / SERVICE_YAML_NAME
MAX_PARENT_DEPTH = 5


def find_service_yaml(start_path: Path | None = None) -> Path | None:
    """Return the nearest ``service.yaml`` at or above ``start_path`` (default: cwd)."""
    start = Path(start_path or Path.cwd()).resolve()
    for directory in [start, *start.parents][:MAX_PARENT_DEPTH]:
        candidate = directory / SERVICE_YAML_NAME
        if candidate.is_file():
            return candidate
    return None


def _read_mapping(path: Path) -> dict[str, Any]:
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level, got {type(data).__name__}")
    return data


def load_service_yaml(yaml_path: Path | None = None) -> dict[str, Any]:
    """Load deployment settings.

    ``yaml_path`` wins, then ``$SERVICE_YAML``, then the nearest file above
    the working directory, then the container path. A missing file yields
    an empty dict; a file that is not a mapping raises ``ValueError``.
    """
    if yaml_path is None and os.environ.get(SERVICE_YAML_ENV):
        yaml_path = Path(os.environ[SERVICE_YAML_ENV])
    if yaml_path is None:
        yaml_path = find_service_yaml() or CONTAINER_SERVICE_YAML
    if not yaml_path.is_file():
        return {}
    return _read_mapping(yaml_path)
