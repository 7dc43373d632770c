from __future__ import annotations

from pathlib import Path

import pytest

from rover_service.core.yaml_loader import find_service_yaml, load_service_yaml
from rover_service.settings import Settings


def test_service_yaml_supplies_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    yaml_path = tmp_path / "service.yaml"
    yaml_path.write_text(
        "analysis_service_url: http://yaml.test/analyze\nanalysis_max_concurrency: 3\nunknown_key: 1\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("SERVICE_YAML", str(yaml_path))
    monkeypatch.delenv("ANALYSIS_MAX_CONCURRENCY", raising=False)

    settings = Settings(_env_file=None)

    assert str(settings.analysis_service_url) == "http://yaml.test/analyze"
    assert settings.analysis_max_concurrency == 3


def test_environment_beats_service_yaml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    yaml_path = tmp_path / "service.yaml"
    yaml_path.write_text("analysis_timeout_s: 12.5\n", encoding="utf-8")
    monkeypatch.setenv("SERVICE_YAML", str(yaml_path))
    monkeypatch.setenv("ANALYSIS_TIMEOUT_S", "4")

    settings = Settings(_env_file=None)

    assert settings.analysis_timeout_s == 4.0


def test_cors_origins_are_split(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CORS_ALLOWED_ORIGINS", "http://a.test, http://b.test,")

    settings = Settings(_env_file=None)

    assert settings.cors_allowed_origins == ["http://a.test", "http://b.test"]


def test_find_service_yaml_walks_up(tmp_path: Path) -> None:
    (tmp_path / "service.yaml").write_text("port: 9000\n", encoding="utf-8")
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)

    assert find_service_yaml(nested) == (tmp_path / "service.yaml").resolve()


def test_load_service_yaml_rejects_non_mapping(tmp_path: Path) -> None:
    yaml_path = tmp_path / "service.yaml"
    yaml_path.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_service_yaml(yaml_path)


def test_missing_explicit_yaml_is_empty(tmp_path: Path) -> None:
    assert load_service_yaml(tmp_path / "absent.yaml") == {}
