"""
Configuration loader — reads substitutions.yml into a GeneratorConfig.

It reads YAML, validates against the Pydantic schema, and returns a
typed config.  Relative paths in the config are resolved against the
directory holding the file (see ``resolve_paths``).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import yaml

from subgen.core.models.config import GeneratorConfig
from subgen.core.services.generators.substitutor import LICENSE_HEADER

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "substitutions.yml"

# Optional wrapper key: the file may hold everything under "subgen:"
_WRAPPER_KEY = "subgen"


class ConfigError(Exception):
    """Raised when generator configuration is invalid or missing."""


@dataclass
class ResolvedPaths:
    """Absolute paths derived from a config and its base directory."""

    base_dir: Path
    source_roots: list[Path]
    output_dir: Path
    license_header_file: Path | None = None


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for substitutions.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to substitutions.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_config(path: Path) -> GeneratorConfig:
    """Load and validate generator configuration.

    Args:
        path: Path to substitutions.yml.

    Returns:
        Validated GeneratorConfig.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading generator config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    # An empty file means "all defaults"
    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    if _WRAPPER_KEY in data:
        data = data[_WRAPPER_KEY] or {}
        if not isinstance(data, dict):
            raise ConfigError(f"Expected a mapping under '{_WRAPPER_KEY}:' in {path}")

    try:
        config = GeneratorConfig.model_validate(data)
    except Exception as e:
        raise ConfigError(f"Invalid generator configuration: {e}") from e

    logger.info(
        "Loaded config from %s (%d source roots, package %s)",
        path,
        len(config.source_roots),
        config.substitution_package,
    )
    return config


def load_or_default(config_path: Path | None = None) -> tuple[GeneratorConfig, Path | None]:
    """Load an explicit or discovered config, or fall back to defaults.

    Returns:
        ``(config, path)`` — path is None when defaults are used.

    Raises:
        ConfigError: If an explicit path is missing, or a found file is invalid.
    """
    path = config_path or find_config_file()
    if path is None:
        logger.info("No %s found — using defaults", CONFIG_FILE)
        return GeneratorConfig(), None
    return load_config(path), path


def config_base_dir(config_path: Path | None) -> Path:
    """Directory relative paths are resolved against."""
    return config_path.parent.resolve() if config_path else Path.cwd()


def resolve_paths(config: GeneratorConfig, base_dir: Path) -> ResolvedPaths:
    """Resolve the config's relative paths against ``base_dir``."""
    header = base_dir / config.license_header_file if config.license_header_file else None
    return ResolvedPaths(
        base_dir=base_dir,
        source_roots=[base_dir / root for root in config.source_roots],
        output_dir=base_dir / config.output_dir,
        license_header_file=header,
    )


def read_license_header(paths: ResolvedPaths) -> str:
    """The configured license header text, or the built-in one.

    Raises:
        ConfigError: If a configured header file cannot be read.
    """
    if paths.license_header_file is None:
        return LICENSE_HEADER
    try:
        return paths.license_header_file.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read license header {paths.license_header_file}: {e}") from e
