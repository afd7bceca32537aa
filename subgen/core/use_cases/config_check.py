"""
Config check use case — validate substitutions.yml and report issues.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

from subgen.core.config.loader import (
    CONFIG_FILE,
    ConfigError,
    config_base_dir,
    find_config_file,
    load_config,
    resolve_paths,
)
from subgen.core.models.config import GeneratorConfig

_QUALIFIED_NAME = re.compile(r"^[A-Za-z_$][\w$]*(\.[A-Za-z_$][\w$]*)*$")


@dataclass
class ConfigCheckResult:
    """Result of configuration validation."""

    valid: bool = False
    config: GeneratorConfig | None = None
    config_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "config_path": str(self.config_path) if self.config_path else None,
            "errors": self.errors,
            "warnings": self.warnings,
            "substitution_package": self.config.substitution_package if self.config else None,
            "source_roots": self.config.source_roots if self.config else [],
        }


def check_config(config_path: Path | None = None) -> ConfigCheckResult:
    """Validate generator configuration and report issues.

    A missing config file is not an error: the defaults apply.

    Args:
        config_path: Optional explicit path to substitutions.yml.

    Returns:
        ConfigCheckResult with validation status and any issues.
    """
    result = ConfigCheckResult()

    if config_path is None:
        config_path = find_config_file()

    if config_path is None:
        result.warnings.append(f"No {CONFIG_FILE} found — using defaults.")
        config = GeneratorConfig()
    else:
        result.config_path = config_path
        try:
            config = load_config(config_path)
        except ConfigError as e:
            result.errors.append(str(e))
            return result

    result.config = config

    # Java names
    names = {
        "substitution_package": config.substitution_package,
        "class_marker": config.class_marker,
        "method_marker": config.method_marker,
        "receiver_type": config.receiver_type,
        "substitutor_type": config.substitutor_type,
    }
    if not config.substitution_package:
        del names["substitution_package"]
        result.warnings.append("Empty 'substitution_package': substitutors go to the default package.")

    for key, value in names.items():
        if not _QUALIFIED_NAME.match(value):
            result.errors.append(f"'{key}' is not a valid Java name: {value!r}")

    if not re.match(r"^[A-Za-z_$][\w$]*$", config.receiver_attribute):
        result.errors.append(f"'receiver_attribute' is not a valid identifier: {config.receiver_attribute!r}")

    # Paths
    paths = resolve_paths(config, config_base_dir(config_path))

    if not config.source_roots:
        result.warnings.append("No source roots configured. Nothing will be scanned.")

    dupes = {r for r in config.source_roots if config.source_roots.count(r) > 1}
    if dupes:
        result.warnings.append(f"Duplicate source roots: {', '.join(sorted(dupes))}")

    for root, resolved in zip(config.source_roots, paths.source_roots):
        if not resolved.exists():
            result.warnings.append(f"Source root does not exist: {root}")

    if paths.license_header_file is not None and not paths.license_header_file.is_file():
        result.errors.append(f"License header file not found: {config.license_header_file}")

    # Result
    result.valid = len(result.errors) == 0
    return result
