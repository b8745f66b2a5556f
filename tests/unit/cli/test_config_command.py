"""Unit tests for the config commands."""

import tomllib
from pathlib import Path

import pytest
from basectl.cli.main import app
from typer.testing import CliRunner

runner = CliRunner()


@pytest.fixture
def config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the config directory at a temp dir and return basectl's dir in it."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    return tmp_path / "basectl"


class TestConfigShow:
    """Tests for config show."""

    def test_shows_defaults(self, config_dir: Path) -> None:
        """Without a file, the defaults are shown."""
        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        assert "defaults" in result.stdout
        assert "rootOnly" in result.stdout

    def test_shows_file_values(self, config_dir: Path) -> None:
        """Values from the config file are shown."""
        config_dir.mkdir(parents=True)
        (config_dir / "config.toml").write_text('load_restrictor = "none"\n')

        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        assert "none" in result.stdout

    def test_invalid_file(self, config_dir: Path) -> None:
        """A broken config file exits with 1."""
        config_dir.mkdir(parents=True)
        (config_dir / "config.toml").write_text("git_command = ''\n")

        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 1


class TestConfigInit:
    """Tests for config init."""

    def test_writes_defaults(self, config_dir: Path) -> None:
        """init writes a config file with the defaults."""
        result = runner.invoke(app, ["config", "init"])

        assert result.exit_code == 0
        data = tomllib.loads((config_dir / "config.toml").read_text())
        assert data["load_restrictor"] == "rootOnly"
        assert data["clone_timeout_seconds"] == 27

    def test_refuses_to_overwrite(self, config_dir: Path) -> None:
        """init keeps an existing file unless --force is given."""
        config_dir.mkdir(parents=True)
        (config_dir / "config.toml").write_text('git_command = "mygit"\n')

        result = runner.invoke(app, ["config", "init"])

        assert result.exit_code == 1
        assert "exists" in result.stdout + result.stderr
        assert "mygit" in (config_dir / "config.toml").read_text()

    def test_force_overwrites(self, config_dir: Path) -> None:
        """init --force replaces an existing file."""
        config_dir.mkdir(parents=True)
        (config_dir / "config.toml").write_text('git_command = "mygit"\n')

        result = runner.invoke(app, ["config", "init", "--force"])

        assert result.exit_code == 0
        assert "mygit" not in (config_dir / "config.toml").read_text()

    def test_config_dir_is_a_file(self, config_dir: Path) -> None:
        """init exits with 1 when the config directory cannot be created."""
        config_dir.write_text("")

        result = runner.invoke(app, ["config", "init"])

        assert result.exit_code == 1
        assert "Cannot create config directory" in result.stdout + result.stderr


class TestMain:
    """Tests for global options."""

    def test_version(self) -> None:
        """--version prints the version and exits."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "basectl version" in result.stdout
