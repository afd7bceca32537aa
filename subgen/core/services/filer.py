"""
Filer — emit generated compilation units under an output root.

Behaves like a compiler's source filer: each qualified name can be
created once per run, and every created file remembers the element it
originates from.  A second creation of the same name raises
``FilerError`` (an ``OSError``), so callers treat it like any other
I/O failure.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from subgen.core.models.template import GeneratedUnit

logger = logging.getLogger(__name__)


class FilerError(OSError):
    """Raised when a source file cannot be created."""


@dataclass
class CreatedSource:
    """A unit accepted by the filer."""

    qualified_name: str
    path: Path
    owner: str = ""
    method_name: str = ""
    origin: str = ""
    written: bool = False

    def to_dict(self) -> dict:
        return {
            "qualified_name": self.qualified_name,
            "path": str(self.path),
            "owner": self.owner,
            "method": self.method_name,
            "origin": self.origin,
            "written": self.written,
        }


class Filer:
    """Writes units to ``<output_dir>/<package path>/<Class>.java``.

    Args:
        output_dir: Root of the generated source tree.
        dry_run:    Accept and track units without touching the disk.
    """

    def __init__(self, output_dir: Path, dry_run: bool = False) -> None:
        self.output_dir = output_dir
        self.dry_run = dry_run
        self.created: dict[str, CreatedSource] = {}

    def create_source_file(self, unit: GeneratedUnit) -> CreatedSource:
        """Create the file for ``unit``.

        Unchanged files are left alone so incremental builds see a
        stable mtime.

        Raises:
            FilerError: The qualified name was already created in this run.
            OSError:    The file could not be written.
        """
        if unit.qualified_name in self.created:
            raise FilerError(f"Attempt to recreate a file for type {unit.qualified_name}")

        target = self.output_dir / unit.relative_path
        created = CreatedSource(
            qualified_name=unit.qualified_name,
            path=target,
            owner=unit.owner,
            method_name=unit.method_name,
            origin=unit.origin,
        )

        if not self.dry_run:
            if _read_existing(target) == unit.content:
                logger.debug("Unchanged: %s", target)
            else:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(unit.content, encoding="utf-8")
                created.written = True
                logger.info("Wrote %s", target)

        self.created[unit.qualified_name] = created
        return created


def _read_existing(path: Path) -> str | None:
    if not path.is_file():
        return None
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None
