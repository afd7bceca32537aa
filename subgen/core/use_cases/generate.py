"""
Generate use case — orchestrate a full generator run.

Ties together config loading, the Java front end, the processor, the
filer and the manifest.  ``run_scan`` stops after extraction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from subgen.core.config.loader import (
    ConfigError,
    config_base_dir,
    load_or_default,
    read_license_header,
    resolve_paths,
)
from subgen.core.frontend.java_source import JavaSourceModel
from subgen.core.models.config import GeneratorConfig
from subgen.core.models.substitution import SubstitutionRequest
from subgen.core.persistence.manifest import (
    build_manifest,
    default_manifest_path,
    load_manifest,
    save_manifest,
)
from subgen.core.services.filer import Filer
from subgen.core.services.processor import (
    ProcessorReport,
    RoundEnvironment,
    SubstitutionProcessor,
)

logger = logging.getLogger(__name__)


@dataclass
class GenerateResult:
    """Result of the generate use case."""

    config_path: Path | None = None
    output_dir: Path | None = None
    files_scanned: int = 0
    unreadable: list[str] = field(default_factory=list)
    report: ProcessorReport | None = None
    written: int = 0
    manifest_path: Path | None = None
    stale: list[str] = field(default_factory=list)
    dry_run: bool = False
    error: str | None = None

    @property
    def warnings(self) -> list[str]:
        messages = [f"unreadable source: {p}" for p in self.unreadable]
        if self.report:
            messages.extend(self.report.warnings)
        return messages

    def to_dict(self) -> dict:
        result: dict = {}
        if self.error:
            result["error"] = self.error
            return result

        result["config_path"] = str(self.config_path) if self.config_path else None
        result["output_dir"] = str(self.output_dir) if self.output_dir else None
        result["files_scanned"] = self.files_scanned
        result["dry_run"] = self.dry_run
        result["written"] = self.written
        result["manifest_path"] = str(self.manifest_path) if self.manifest_path else None
        result["stale"] = self.stale
        result["warnings"] = self.warnings
        if self.report:
            result["report"] = self.report.to_dict()
        return result


@dataclass
class ScanResult:
    """Result of the scan use case."""

    config_path: Path | None = None
    files_scanned: int = 0
    requests: list[SubstitutionRequest] = field(default_factory=list)
    report: ProcessorReport | None = None
    error: str | None = None

    @property
    def warnings(self) -> list[str]:
        return self.report.warnings if self.report else []

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        return {
            "config_path": str(self.config_path) if self.config_path else None,
            "files_scanned": self.files_scanned,
            "requests": [r.model_dump(mode="json") | {"class_name": r.class_name} for r in self.requests],
            "warnings": self.warnings,
        }


def _load_model(config: GeneratorConfig, roots: list[Path]) -> JavaSourceModel:
    return JavaSourceModel.from_paths(
        roots,
        external_types=[config.class_marker, config.method_marker],
    )


def run_generate(
    config_path: Path | None = None,
    source_roots: list[Path] | None = None,
    output_dir: Path | None = None,
    dry_run: bool = False,
) -> GenerateResult:
    """Generate substitutors for every ``@Substitution`` method under the source roots.

    Args:
        config_path:  Optional explicit path to substitutions.yml.
        source_roots: Override the configured source roots.
        output_dir:   Override the configured output directory.
        dry_run:      Render and report, but write nothing.

    Returns:
        GenerateResult with the processor report and manifest details.
    """
    result = GenerateResult(dry_run=dry_run)

    try:
        config, found = load_or_default(config_path)
        result.config_path = found
        paths = resolve_paths(config, config_base_dir(found))
        license_header = read_license_header(paths)
    except ConfigError as e:
        result.error = str(e)
        return result

    roots = source_roots or paths.source_roots
    out = output_dir or paths.output_dir
    result.output_dir = out

    model = _load_model(config, roots)
    result.files_scanned = len(model.units)
    result.unreadable = list(model.skipped)

    filer = Filer(out, dry_run=dry_run)
    processor = SubstitutionProcessor(config, filer=filer, license_header=license_header)

    # One working round, then the final round the host framework always runs
    processor.process(RoundEnvironment(declarations=model))
    processor.process(RoundEnvironment(declarations=model, processing_over=True))

    result.report = processor.report
    result.written = sum(1 for c in filer.created.values() if c.written)

    manifest_path = default_manifest_path(out)
    manifest = build_manifest(filer.created.values(), out)
    previous = load_manifest(manifest_path)
    if previous is not None:
        result.stale = sorted(previous.paths() - manifest.paths())
        for path in result.stale:
            logger.info("Stale generated file (no longer produced): %s", path)

    if config.manifest and not dry_run:
        try:
            save_manifest(manifest, manifest_path)
            result.manifest_path = manifest_path
        except OSError as e:
            logger.warning("Could not write manifest %s: %s", manifest_path, e)

    logger.info(
        "Generated %d substitutors (%d written, %d skipped, %d failed)",
        len(processor.report.generated),
        result.written,
        len(processor.report.skipped),
        len(processor.report.failed),
    )
    return result


def run_scan(
    config_path: Path | None = None,
    source_roots: list[Path] | None = None,
) -> ScanResult:
    """Discover and extract substitution requests without rendering them."""
    result = ScanResult()

    try:
        config, found = load_or_default(config_path)
    except ConfigError as e:
        result.error = str(e)
        return result

    result.config_path = found
    roots = source_roots or resolve_paths(config, config_base_dir(found)).source_roots

    model = _load_model(config, roots)
    result.files_scanned = len(model.units)

    processor = SubstitutionProcessor(config)
    result.requests = processor.collect(model)
    result.report = processor.report
    return result
