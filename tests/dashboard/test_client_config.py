"""Tests for the dashboard configuration file."""

from pathlib import Path

import yaml

from vibesync.dashboard.common.config import ClientConfig


def test_defaults_when_file_missing(tmp_path: Path) -> None:
    config = ClientConfig(tmp_path / "dashboard.yaml")

    assert config.server_host == "localhost"
    assert config.server_port == 3005
    assert config.use_https is False
    assert config.language == "es"
    assert config.get("visualizer", "fft_size") == 256


def test_file_values_merge_over_defaults(tmp_path: Path) -> None:
    path = tmp_path / "dashboard.yaml"
    path.write_text(
        yaml.safe_dump({"server": {"host": "http://media-box/", "port": 4000}}),
        encoding="utf-8",
    )

    config = ClientConfig(path)

    assert config.server_host == "media-box"
    assert config.server_port == 4000
    assert config.get("server", "analysis_timeout") == 180


def test_unknown_language_falls_back_to_spanish(tmp_path: Path) -> None:
    path = tmp_path / "dashboard.yaml"
    path.write_text("ui:\n  language: fr\n", encoding="utf-8")

    assert ClientConfig(path).language == "es"


def test_save_round_trip_leaves_no_temp_file(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "dashboard.yaml"
    config = ClientConfig(path)
    config.set("ui", "language", value="en")

    assert config.save() is True
    assert not path.with_suffix(".tmp").exists()
    assert ClientConfig(path).language == "en"
