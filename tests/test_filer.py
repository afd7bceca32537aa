"""
Tests for the filer and the generation manifest.
"""

import json
from pathlib import Path

import pytest

from subgen.core.persistence.manifest import (
    MANIFEST_FILE,
    Manifest,
    build_manifest,
    default_manifest_path,
    load_manifest,
    save_manifest,
)
from subgen.core.services.filer import Filer, FilerError
from subgen.core.services.generators.substitutor import render_substitutor


# ═══════════════════════════════════════════════════════════════════
#  Filer
# ═══════════════════════════════════════════════════════════════════


class TestFiler:
    def test_writes_under_package_path(self, make_request, tmp_path: Path):
        unit = render_substitutor(make_request())
        created = Filer(tmp_path).create_source_file(unit)

        expected = tmp_path / "com" / "oracle" / "truffle" / "espresso" / "substitutions" / "Foo_bar.java"
        assert created.path == expected
        assert created.written is True
        assert expected.read_text(encoding="utf-8") == unit.content

    def test_recreate_same_name_raises(self, make_request, tmp_path: Path):
        filer = Filer(tmp_path)
        filer.create_source_file(render_substitutor(make_request()))

        with pytest.raises(FilerError, match="recreate"):
            filer.create_source_file(render_substitutor(make_request(parameter_types=("int",))))

    def test_filer_error_is_oserror(self):
        assert issubclass(FilerError, OSError)

    def test_unchanged_file_not_rewritten(self, make_request, tmp_path: Path):
        unit = render_substitutor(make_request())
        Filer(tmp_path).create_source_file(unit)

        again = Filer(tmp_path).create_source_file(unit)
        assert again.written is False

    def test_changed_file_rewritten(self, make_request, tmp_path: Path):
        Filer(tmp_path).create_source_file(render_substitutor(make_request()))
        unit = render_substitutor(make_request(is_void=False))

        again = Filer(tmp_path).create_source_file(unit)
        assert again.written is True
        assert again.path.read_text(encoding="utf-8") == unit.content

    def test_dry_run_touches_nothing(self, make_request, tmp_path: Path):
        filer = Filer(tmp_path / "out", dry_run=True)
        created = filer.create_source_file(render_substitutor(make_request()))

        assert created.written is False
        assert not (tmp_path / "out").exists()
        assert list(filer.created) == ["com.oracle.truffle.espresso.substitutions.Foo_bar"]

    def test_created_carries_origin(self, make_request, tmp_path: Path):
        unit = render_substitutor(make_request(origin="Foo.java:7"))
        data = Filer(tmp_path).create_source_file(unit).to_dict()

        assert data["owner"] == "com.example.natives.Foo"
        assert data["method"] == "bar"
        assert data["origin"] == "Foo.java:7"


# ═══════════════════════════════════════════════════════════════════
#  Manifest
# ═══════════════════════════════════════════════════════════════════


class TestManifest:
    def _created(self, make_request, tmp_path: Path):
        filer = Filer(tmp_path)
        filer.create_source_file(render_substitutor(make_request(method_name="zed")))
        filer.create_source_file(render_substitutor(make_request(method_name="abc")))
        return filer.created.values()

    def test_build_relative_sorted(self, make_request, tmp_path: Path):
        manifest = build_manifest(self._created(make_request, tmp_path), tmp_path)

        assert [e.qualified_name.rsplit(".", 1)[-1] for e in manifest.entries] == ["Foo_abc", "Foo_zed"]
        assert manifest.entries[0].path == "com/oracle/truffle/espresso/substitutions/Foo_abc.java"
        assert manifest.entries[0].owner == "com.example.natives.Foo"
        assert "com/oracle/truffle/espresso/substitutions/Foo_zed.java" in manifest.paths()

    def test_entry_mirrors_created_source(self, make_request, tmp_path: Path):
        filer = Filer(tmp_path)
        created = filer.create_source_file(render_substitutor(make_request(origin="Foo.java:9")))

        (entry,) = build_manifest(filer.created.values(), tmp_path).entries
        data = created.to_dict()
        assert entry.qualified_name == data["qualified_name"]
        assert entry.method == data["method"] == "bar"
        assert entry.origin == data["origin"] == "Foo.java:9"
        assert entry.path != data["path"]
        assert "written" not in entry.model_dump()

    def test_save_and_load(self, make_request, tmp_path: Path):
        manifest = build_manifest(self._created(make_request, tmp_path), tmp_path)
        path = default_manifest_path(tmp_path)
        save_manifest(manifest, path)

        assert path.name == MANIFEST_FILE
        assert not list(tmp_path.glob(".manifest_*.tmp"))

        loaded = load_manifest(path)
        assert loaded is not None
        assert loaded.paths() == manifest.paths()
        assert loaded.generated_at == manifest.generated_at

    def test_saved_file_is_json(self, tmp_path: Path):
        path = tmp_path / "m.json"
        save_manifest(Manifest(), path)

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["version"] == 1
        assert data["entries"] == []

    def test_missing_returns_none(self, tmp_path: Path):
        assert load_manifest(tmp_path / "nope.json") is None

    def test_corrupt_returns_none(self, tmp_path: Path):
        path = tmp_path / MANIFEST_FILE
        path.write_text("{not json")
        assert load_manifest(path) is None

    def test_wrong_shape_returns_none(self, tmp_path: Path):
        path = tmp_path / MANIFEST_FILE
        path.write_text(json.dumps({"entries": "nope"}))
        assert load_manifest(path) is None
