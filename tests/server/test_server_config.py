"""Tests for ServerConfig and API key resolution."""

from pathlib import Path

import pytest

from vibesync.server import config


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_packaged_default_loads():
    cfg = config.ServerConfig(Path(config.__file__).parent / "config.yaml")
    assert cfg.get("server", "port") == config.DEFAULT_PORT
    assert cfg.get("ai", "model") == config.DEFAULT_MODEL


def test_get_nested_with_default(tmp_path: Path):
    cfg = config.ServerConfig(_write(tmp_path / "c.yaml", "server:\n  port: 4000\n"))
    assert cfg.get("server", "port") == 4000
    assert cfg.get("nonexistent", "nested", default="fallback") == "fallback"
    assert cfg.get("server", "port", "deeper", default=1) == 1


def test_get_rejects_non_string_keys(tmp_path: Path):
    cfg = config.ServerConfig(_write(tmp_path / "c.yaml", "server: {}\n"))
    with pytest.raises(TypeError, match="must be strings"):
        cfg.get("server", {})


def test_get_empty_keys_returns_everything(tmp_path: Path):
    cfg = config.ServerConfig(_write(tmp_path / "c.yaml", "a: 1\nb: 2\n"))
    assert cfg.get() == {"a": 1, "b": 2}
    assert cfg.loaded_from == tmp_path / "c.yaml"


def test_section_properties_tolerate_missing_sections(tmp_path: Path):
    cfg = config.ServerConfig(_write(tmp_path / "c.yaml", "ai:\n"))
    assert cfg.server == {}
    assert cfg.database == {}
    assert cfg.logging == {}
    assert cfg.ai == {}


def test_invalid_explicit_config_raises(tmp_path: Path):
    with pytest.raises(RuntimeError, match="Failed to load configuration"):
        config.ServerConfig(_write(tmp_path / "c.yaml", "- just\n- a list\n"))


def test_missing_explicit_config_raises(tmp_path: Path):
    with pytest.raises(RuntimeError, match="No configuration file found"):
        config.ServerConfig(tmp_path / "absent.yaml")


def test_get_config_caches_until_reset(tmp_path: Path):
    first_path = _write(tmp_path / "one.yaml", "server:\n  port: 1\n")
    second_path = _write(tmp_path / "two.yaml", "server:\n  port: 2\n")

    first = config.get_config(first_path)
    assert config.get_config(second_path) is first

    config.reset_config()
    assert config.get_config(second_path).get("server", "port") == 2


@pytest.mark.parametrize(
    "config_key, gemini_env, api_env, expected",
    [
        ("from-config", "from-gemini-env", "from-api-env", "from-config"),
        ("", "from-gemini-env", "from-api-env", "from-gemini-env"),
        ("", None, "from-api-env", "from-api-env"),
        ("PLACEHOLDER", None, None, None),
        ("   ", None, None, None),
        ("", "PLACEHOLDER", "real", "real"),
    ],
)
def test_resolve_api_key_priority(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    config_key: str,
    gemini_env: str | None,
    api_env: str | None,
    expected: str | None,
):
    if gemini_env is not None:
        monkeypatch.setenv("GEMINI_API_KEY", gemini_env)
    if api_env is not None:
        monkeypatch.setenv("API_KEY", api_env)

    cfg = config.ServerConfig(
        _write(tmp_path / "c.yaml", f'ai:\n  api_key: "{config_key}"\n')
    )
    assert config.resolve_api_key(cfg) == expected
