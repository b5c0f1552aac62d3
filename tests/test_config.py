"""Tests for the configuration module."""

from pathlib import Path

import pytest

from hermes._cli.config import (
    ConfigError,
    HermesConfig,
    find_pyproject_toml,
    get_config,
    load_config,
)


class TestFindPyprojectToml:
    """Tests for find_pyproject_toml function."""

    def test_finds_in_current_directory(self, tmp_path: Path) -> None:
        """Should find pyproject.toml in current directory."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[project]\nname = 'test'\n")

        result = find_pyproject_toml(tmp_path)

        assert result == pyproject

    def test_finds_in_parent_directory(self, tmp_path: Path) -> None:
        """Should find pyproject.toml in parent directory."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[project]\nname = 'test'\n")

        subdir = tmp_path / "templates" / "nested"
        subdir.mkdir(parents=True)

        result = find_pyproject_toml(subdir)

        assert result == pyproject


class TestLoadConfig:
    """Tests for load_config function."""

    def test_no_hermes_section(self, tmp_path: Path) -> None:
        """Should return an empty config when [tool.hermes] is absent."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[project]\nname = 'test'\n")

        config = load_config(pyproject)

        assert config == HermesConfig(project_root=tmp_path)

    def test_full_section(self, tmp_path: Path) -> None:
        """Should parse all supported keys and resolve relative paths."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(
            """
[tool.hermes]
variables = "config/vars.toml"
seed = 42
capacity = 32
""",
        )

        config = load_config(pyproject)

        assert config.variables == tmp_path / "config" / "vars.toml"
        assert config.seed == 42
        assert config.capacity == 32
        assert config.project_root == tmp_path

    def test_absolute_variables_path_kept(self, tmp_path: Path) -> None:
        """Should keep absolute variables paths unchanged."""
        vars_path = tmp_path / "elsewhere" / "vars.toml"
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(f"[tool.hermes]\nvariables = '{vars_path.as_posix()}'\n")

        config = load_config(pyproject)

        assert config.variables == vars_path

    @pytest.mark.parametrize(
        ("body", "match"),
        [
            ("variables = 1", "variables: expected string path"),
            ("seed = 'abc'", "seed: expected integer"),
            ("seed = true", "seed: expected integer"),
            ("capacity = 1.5", "capacity: expected integer"),
            ("capacity = -1", "capacity: must be >= 0"),
        ],
    )
    def test_invalid_values(self, tmp_path: Path, body: str, match: str) -> None:
        """Should raise ConfigError for values of the wrong type."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(f"[tool.hermes]\n{body}\n")

        with pytest.raises(ConfigError, match=match):
            load_config(pyproject)

    def test_invalid_toml(self, tmp_path: Path) -> None:
        """Should raise ConfigError for malformed TOML."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[tool.hermes\n")

        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_config(pyproject)


class TestGetConfig:
    def test_reads_from_working_directory(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should pick up the pyproject.toml of the working directory."""
        (tmp_path / "pyproject.toml").write_text("[tool.hermes]\nseed = 7\n")
        monkeypatch.chdir(tmp_path)

        assert get_config().seed == 7
