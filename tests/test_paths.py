"""Tests for path management."""

from pathlib import Path

from bulletin.config.paths import (
    ENV_VAR,
    ensure_bulletin_home,
    get_all_paths,
    get_bulletin_home,
    get_config_path,
    get_database_path,
    get_logs_path,
)


class TestGetBulletinHome:
    """Tests for get_bulletin_home()."""

    def test_default_is_home_dot_bulletin(self, monkeypatch):
        monkeypatch.delenv(ENV_VAR, raising=False)
        get_bulletin_home.cache_clear()

        assert get_bulletin_home() == Path.home() / ".bulletin"

    def test_respects_env_var(self, monkeypatch, tmp_path):
        custom_path = tmp_path / "custom-bulletin"
        monkeypatch.setenv(ENV_VAR, str(custom_path))
        get_bulletin_home.cache_clear()

        assert get_bulletin_home() == custom_path.resolve()

    def test_expands_tilde_in_env_var(self, monkeypatch):
        monkeypatch.setenv(ENV_VAR, "~/my-bulletin")
        get_bulletin_home.cache_clear()

        assert get_bulletin_home() == (Path.home() / "my-bulletin").resolve()


class TestDerivedPaths:
    """Tests for derived path functions."""

    def test_config_path(self, monkeypatch, tmp_path):
        monkeypatch.setenv(ENV_VAR, str(tmp_path))
        get_bulletin_home.cache_clear()

        assert get_config_path() == tmp_path.resolve() / "config.toml"

    def test_database_path(self, monkeypatch, tmp_path):
        monkeypatch.setenv(ENV_VAR, str(tmp_path))
        get_bulletin_home.cache_clear()

        assert get_database_path() == tmp_path.resolve() / "bulletin.db"

    def test_logs_path(self, monkeypatch, tmp_path):
        monkeypatch.setenv(ENV_VAR, str(tmp_path))
        get_bulletin_home.cache_clear()

        assert get_logs_path() == tmp_path.resolve() / "logs"

    def test_get_all_paths(self):
        paths = get_all_paths()
        assert set(paths) == {"home", "config", "database", "logs"}
        assert all(p.is_relative_to(paths["home"]) for p in paths.values())

    def test_ensure_bulletin_home_creates_directory(self, isolated_home):
        assert not isolated_home.exists()

        home = ensure_bulletin_home()

        assert home.is_dir()
