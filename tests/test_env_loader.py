from pathlib import Path

import pytest

from home_rss.utils.env import get_int_env, get_str_env, load_env_file


def test_load_env_file_parses_assignments(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(
        "# comment\n"
        "export HOME_RSS_DATA_DIR=/srv/home-rss\n"
        "HOME_RSS_USER_AGENT=\"home-rss test\"\n"
        "HOME_RSS_HTTP_TIMEOUT=5 # seconds\n"
        "not an assignment\n",
        encoding="utf-8",
    )
    environ = {"HOME_RSS_HTTP_TIMEOUT": "9"}

    parsed = load_env_file(env_file, environ=environ)

    assert parsed == {
        "HOME_RSS_DATA_DIR": "/srv/home-rss",
        "HOME_RSS_USER_AGENT": "home-rss test",
        "HOME_RSS_HTTP_TIMEOUT": "5",
    }
    assert environ["HOME_RSS_HTTP_TIMEOUT"] == "9"
    assert environ["HOME_RSS_DATA_DIR"] == "/srv/home-rss"


def test_load_env_file_override(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("A=new\n", encoding="utf-8")
    environ = {"A": "old"}

    load_env_file(env_file, override=True, environ=environ)

    assert environ["A"] == "new"


def test_missing_env_file(tmp_path: Path) -> None:
    assert load_env_file(tmp_path / "absent", environ={}) == {}


def test_env_getters(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NUMBER", "12")
    monkeypatch.setenv("BLANK", "   ")

    assert get_int_env("NUMBER", 0) == 12
    assert get_str_env("BLANK", "fallback") == "fallback"
    assert get_str_env("UNSET_FOR_TEST", "fallback") == "fallback"


def test_quoted_values_keep_hashes(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("TITLE='News #1' # trailing\nURL=https://example.org/#top\n", encoding="utf-8")

    parsed = load_env_file(env_file, environ={})

    assert parsed == {"TITLE": "News #1", "URL": "https://example.org/#top"}
