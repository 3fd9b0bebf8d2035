"""Unit tests for bookmarkd.config module."""

import pytest

from bookmarkd.config import init_config, load_config


class TestLoadConfig:
    """Test load_config."""

    def test_defaults_without_file(self, tmp_path):
        """Should fall back to defaults."""
        cfg = load_config(tmp_path)
        assert cfg.root == tmp_path
        assert cfg.store.path == tmp_path / "bookmarks.json"
        assert cfg.store.timeout is None
        assert cfg.server.host == "0.0.0.0"
        assert cfg.server.port == 3000
        assert cfg.log.level == "info"

    def test_reads_values(self, tmp_path):
        """Should read every section."""
        (tmp_path / "bookmarkd.toml").write_text(
            '[store]\npath = "data/marks.json"\nlock_timeout = 2.5\n'
            '[server]\nhost = "127.0.0.1"\nport = 8080\n'
            '[log]\nlevel = "DEBUG"\n'
        )
        cfg = load_config(tmp_path)
        assert cfg.store.path == tmp_path / "data" / "marks.json"
        assert cfg.store.timeout == 2.5
        assert cfg.server.host == "127.0.0.1"
        assert cfg.server.port == 8080
        assert cfg.log.level == "debug"

    def test_absolute_store_path(self, tmp_path):
        """Should keep an absolute store path as is."""
        target = tmp_path / "elsewhere.json"
        (tmp_path / "bookmarkd.toml").write_text(f'[store]\npath = "{target}"\n')
        assert load_config(tmp_path).store.path == target

    def test_searches_upward(self, tmp_path):
        """Should find bookmarkd.toml in a parent directory."""
        (tmp_path / "bookmarkd.toml").write_text("[server]\nport = 9000\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        cfg = load_config(nested)
        assert cfg.root == tmp_path
        assert cfg.server.port == 9000

    def test_unknown_log_level(self, tmp_path):
        """Should reject an unknown log level."""
        (tmp_path / "bookmarkd.toml").write_text('[log]\nlevel = "loud"\n')
        with pytest.raises(ValueError):
            load_config(tmp_path)


class TestInitConfig:
    """Test init_config."""

    def test_writes_loadable_file(self, tmp_path):
        """Should write a config that loads with defaults."""
        path = init_config(tmp_path)
        assert path.exists()
        cfg = load_config(tmp_path)
        assert cfg.store.path == tmp_path / "bookmarks.json"
        assert cfg.server.port == 3000

    def test_refuses_overwrite(self, tmp_path):
        """Should raise if the file exists."""
        init_config(tmp_path)
        with pytest.raises(FileExistsError):
            init_config(tmp_path)
