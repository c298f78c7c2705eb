import os
from pathlib import Path

import pytest

from steak_watcher.config import DEFAULT_SCHEDULE, load_settings, split_terms
from steak_watcher.errors import ConfigError

ENV_VARS = (
    "TARGET_URL",
    "CHECK_SCHEDULE",
    "TRACKED_ITEMS",
    "TELEGRAM_TOKEN",
    "TELEGRAM_CHAT_ID",
    "REQUEST_TIMEOUT",
)

CONFIG = """
telegram:
  token: "123:abc"
  chat_id: "-100500"
tracking:
  url: "https://shop.example/steaks"
  interval: "@every 30m"
  steaks_to_track:
    - ribeye
    - "  t-bone "
    - ""
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield
    # load_dotenv writes straight into os.environ
    for name in ENV_VARS:
        os.environ.pop(name, None)


def _write(tmp_path: Path, text: str) -> Path:
    p = tmp_path / "config.yaml"
    p.write_text(text, encoding="utf-8")
    return p


def _no_env(tmp_path: Path) -> str:
    return str(tmp_path / "none.env")


def test_load_settings_from_yaml(tmp_path: Path):
    s = load_settings(_write(tmp_path, CONFIG), dotenv_path=_no_env(tmp_path))
    assert s.url == "https://shop.example/steaks"
    assert s.schedule == "@every 30m"
    assert s.tracked == ("ribeye", "t-bone")
    assert s.telegram_token == "123:abc"
    assert s.telegram_chat_id == "-100500"
    assert s.timeout == 25


def test_env_overrides_yaml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("TARGET_URL", "https://other.example/meat")
    monkeypatch.setenv("TRACKED_ITEMS", "picanha,\nflank")
    monkeypatch.setenv("CHECK_SCHEDULE", "*/15 * * * *")
    monkeypatch.setenv("TELEGRAM_CHAT_ID", "42")
    monkeypatch.setenv("REQUEST_TIMEOUT", "7.5")

    s = load_settings(_write(tmp_path, CONFIG), dotenv_path=_no_env(tmp_path))
    assert s.url == "https://other.example/meat"
    assert s.tracked == ("picanha", "flank")
    assert s.schedule == "*/15 * * * *"
    assert s.telegram_token == "123:abc"
    assert s.telegram_chat_id == "42"
    assert s.timeout == 7.5


def test_dotenv_file_is_loaded(tmp_path: Path):
    env = tmp_path / ".env"
    env.write_text("TARGET_URL=https://env.example/list\nTRACKED_ITEMS=ribeye\n", encoding="utf-8")

    s = load_settings(tmp_path / "absent.yaml", dotenv_path=str(env))
    assert s.url == "https://env.example/list"
    assert s.tracked == ("ribeye",)
    assert s.schedule == DEFAULT_SCHEDULE


def test_missing_url_is_an_error(tmp_path: Path):
    with pytest.raises(ConfigError):
        load_settings(tmp_path / "absent.yaml", dotenv_path=_no_env(tmp_path))


@pytest.mark.parametrize(
    "text",
    [
        "tracking: [1, 2]\n",
        "- just\n- a list\n",
        "tracking:\n  url: https://x\n  steaks_to_track: 5\n",
        "tracking: {url: [unclosed\n",
    ],
)
def test_malformed_yaml_is_an_error(tmp_path: Path, text: str):
    with pytest.raises(ConfigError):
        load_settings(_write(tmp_path, text), dotenv_path=_no_env(tmp_path))


@pytest.mark.parametrize("raw", ["abc", "0", "-3"])
def test_bad_timeout_is_an_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, raw: str):
    monkeypatch.setenv("REQUEST_TIMEOUT", raw)
    with pytest.raises(ConfigError):
        load_settings(_write(tmp_path, CONFIG), dotenv_path=_no_env(tmp_path))


def test_split_terms():
    assert split_terms("a, b\n c,,\n") == ["a", "b", "c"]
    assert split_terms("") == []
