"""
Generation manifest — which units were generated, and from where.

Stored as JSON in ``<output_dir>/.subgen-manifest.json``.  Each entry
ties a generated qualified name to its file and to the method it was
generated from, so tooling can trace a substitutor back to its source.
Writes are atomic (temp file, then rename).
"""

from __future__ import annotations

import json
import logging
import tempfile
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel, Field

from subgen.core.services.filer import CreatedSource

logger = logging.getLogger(__name__)

MANIFEST_FILE = ".subgen-manifest.json"


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class ManifestEntry(BaseModel):
    """One generated unit."""

    qualified_name: str
    path: str
    owner: str = ""
    method: str = ""
    origin: str = ""


class Manifest(BaseModel):
    """All units generated by the last run."""

    version: int = 1
    generated_at: str = Field(default_factory=_now_iso)
    entries: list[ManifestEntry] = Field(default_factory=list)

    def paths(self) -> set[str]:
        return {e.path for e in self.entries}


def default_manifest_path(output_dir: Path) -> Path:
    return output_dir / MANIFEST_FILE


def build_manifest(created: Iterable[CreatedSource], output_dir: Path) -> Manifest:
    """Manifest for the filer's created sources, paths relative to ``output_dir``."""
    entries = []
    for source in sorted(created, key=lambda c: c.qualified_name):
        try:
            rel = source.path.relative_to(output_dir)
        except ValueError:
            rel = source.path
        data = source.to_dict()
        data["path"] = rel.as_posix()
        entries.append(ManifestEntry.model_validate(data))
    return Manifest(entries=entries)


def load_manifest(path: Path) -> Manifest | None:
    """Load a manifest, or None if it is missing or unreadable."""
    if not path.is_file():
        return None

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return Manifest.model_validate(data)
    except json.JSONDecodeError as e:
        logger.warning("Corrupt manifest %s: %s — ignoring", path, e)
        return None
    except Exception as e:
        logger.warning("Cannot load manifest from %s: %s — ignoring", path, e)
        return None


def save_manifest(manifest: Manifest, path: Path) -> None:
    """Write ``manifest`` to ``path`` atomically."""
    path.parent.mkdir(parents=True, exist_ok=True)
    content = json.dumps(manifest.model_dump(mode="json"), indent=2, ensure_ascii=False) + "\n"

    _fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=".manifest_", suffix=".tmp")
    tmp = Path(tmp_path)
    try:
        with open(_fd, "w", encoding="utf-8") as fh:
            fh.write(content)
        tmp.replace(path)
        logger.debug("Manifest saved to %s (%d entries)", path, len(manifest.entries))
    except Exception:
        tmp.unlink(missing_ok=True)
        raise
