"""Configuration loading from pyproject.toml."""

import tomllib
from dataclasses import dataclass
from pathlib import Path


class ConfigError(Exception):
    """Error in hermes configuration."""


@dataclass(slots=True, frozen=True)
class HermesConfig:
    """Configuration loaded from the ``[tool.hermes]`` table of pyproject.toml.

    All relative paths are resolved from the project root (directory containing pyproject.toml).
    """

    variables: Path | None = None
    seed: int | None = None
    capacity: int | None = None
    project_root: Path | None = None


def find_pyproject_toml(start_dir: Path | None = None) -> Path | None:
    """Find pyproject.toml by walking up from start_dir.

    Args:
        start_dir: Starting directory. Defaults to current working directory.

    Returns:
        Path to pyproject.toml if found, None otherwise.

    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = start_dir.resolve()

    while True:
        candidate = current / "pyproject.toml"
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            # Reached filesystem root
            return None
        current = parent


def _get_int(section: dict[str, object], key: str, *, minimum: int | None = None) -> int | None:
    if key not in section:
        return None
    value = section[key]
    # bool is an int subclass; TOML `true` is not a valid number here
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"Invalid [tool.hermes].{key}: expected integer"
        raise ConfigError(msg)
    if minimum is not None and value < minimum:
        msg = f"Invalid [tool.hermes].{key}: must be >= {minimum}"
        raise ConfigError(msg)
    return value


def load_config(pyproject_path: Path) -> HermesConfig:
    """Load and validate [tool.hermes] config from pyproject.toml.

    Args:
        pyproject_path: Path to pyproject.toml

    Returns:
        Parsed HermesConfig

    Raises:
        ConfigError: If the configuration is invalid

    """
    project_root = pyproject_path.parent

    with pyproject_path.open("rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {pyproject_path}: {e}"
            raise ConfigError(msg) from e

    hermes_section = data.get("tool", {}).get("hermes", {})
    if not hermes_section:
        return HermesConfig(project_root=project_root)

    variables_path: Path | None = None
    if "variables" in hermes_section:
        variables_value = hermes_section["variables"]
        if not isinstance(variables_value, str):
            msg = "Invalid [tool.hermes].variables: expected string path"
            raise ConfigError(msg)
        variables_path = Path(variables_value)
        if not variables_path.is_absolute():
            variables_path = project_root / variables_path

    return HermesConfig(
        variables=variables_path,
        seed=_get_int(hermes_section, "seed"),
        capacity=_get_int(hermes_section, "capacity", minimum=0),
        project_root=project_root,
    )


def get_config() -> HermesConfig:
    """Get config from pyproject.toml in current directory or parents.

    Returns:
        HermesConfig (may be empty if no pyproject.toml or no [tool.hermes] section)

    """
    pyproject_path = find_pyproject_toml()
    if pyproject_path is None:
        return HermesConfig()
    return load_config(pyproject_path)
