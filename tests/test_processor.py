"""
Tests for the substitution processor — discovery, extraction, rounds, emission.

Declarations are built by hand through InMemoryDeclarations, so these
tests exercise the processor independently of any front end.
"""

from pathlib import Path

import pytest

from subgen.core.frontend.base import InMemoryDeclarations
from subgen.core.models.config import GeneratorConfig, ParameterSource
from subgen.core.models.declarations import (
    AnnotationAttribute,
    AnnotationMirror,
    AnnotationTypeElement,
    ElementKind,
    ExecutableElement,
    SourcePosition,
    TypeElement,
    VariableElement,
)
from subgen.core.services.filer import Filer
from subgen.core.services.processor import (
    ProcessorContext,
    RoundEnvironment,
    SubstitutionProcessor,
)

from tests.java_sources import CLASS_MARKER, METHOD_MARKER


def _method(name, *, receiver=None, params=(), type_params=(), returns="void", marked=True, values=None):
    annotations = ()
    if marked:
        mirror_values = dict(values or {})
        if receiver is not None:
            mirror_values["hasReceiver"] = receiver
        annotations = (AnnotationMirror(METHOD_MARKER, mirror_values),)
    return ExecutableElement(
        kind=ElementKind.METHOD,
        simple_name=name,
        annotations=annotations,
        position=SourcePosition("Foo.java", 10),
        return_type=returns,
        parameter_types=tuple(params),
        type_parameters=tuple(type_params),
    )


def _owner(*members, name="Foo", pkg="com.example", kind=ElementKind.CLASS, marked=True):
    return TypeElement(
        kind=kind,
        simple_name=name,
        annotations=(AnnotationMirror(CLASS_MARKER),) if marked else (),
        qualified_name=f"{pkg}.{name}",
        package=pkg,
        enclosed=tuple(members),
    )


def _marker_type(default=False, attribute="hasReceiver"):
    attrs = (AnnotationAttribute(name=attribute, type="boolean", default=default),) if attribute else ()
    return AnnotationTypeElement(
        kind=ElementKind.ANNOTATION_TYPE,
        simple_name="Substitution",
        qualified_name=METHOD_MARKER,
        package=METHOD_MARKER.rsplit(".", 1)[0],
        attributes=attrs,
    )


# ═══════════════════════════════════════════════════════════════════
#  ProcessorContext
# ═══════════════════════════════════════════════════════════════════


class TestProcessorContext:
    def test_default_from_annotation_type(self, config):
        ctx = ProcessorContext.create(config, InMemoryDeclarations([_marker_type(default=True)]))
        assert ctx.receiver_declared is True
        assert ctx.receiver_default is True

    def test_config_default_when_type_unknown(self):
        ctx = ProcessorContext.create(GeneratorConfig(receiver_default=False), InMemoryDeclarations())
        assert ctx.receiver_declared is True
        assert ctx.receiver_default is False

    def test_annotation_type_default_beats_config(self):
        config = GeneratorConfig(receiver_default=True)
        ctx = ProcessorContext.create(config, InMemoryDeclarations([_marker_type(default=False)]))
        assert ctx.receiver_default is False

    def test_missing_attribute_on_known_type(self, config):
        ctx = ProcessorContext.create(config, InMemoryDeclarations([_marker_type(attribute=None)]))
        assert ctx.receiver_declared is False
        assert ctx.resolve_receiver(AnnotationMirror(METHOD_MARKER, {"hasReceiver": True})) is None

    def test_explicit_value_wins(self):
        ctx = ProcessorContext(CLASS_MARKER, METHOD_MARKER, receiver_default=False)
        assert ctx.resolve_receiver(AnnotationMirror(METHOD_MARKER, {"hasReceiver": True})) is True

    def test_non_boolean_value_unresolvable(self):
        ctx = ProcessorContext(CLASS_MARKER, METHOD_MARKER, receiver_default=False)
        mirror = AnnotationMirror(METHOD_MARKER, {"hasReceiver": "Flags.RECEIVER"})
        assert ctx.resolve_receiver(mirror) is None

    def test_values_with_defaults(self):
        ctx = ProcessorContext(CLASS_MARKER, METHOD_MARKER, receiver_default=False)
        values = ctx.element_values_with_defaults(AnnotationMirror(METHOD_MARKER, {"methodName": "x"}))
        assert values == {"hasReceiver": False, "methodName": "x"}


# ═══════════════════════════════════════════════════════════════════
#  Discovery / extraction
# ═══════════════════════════════════════════════════════════════════


class TestCollect:
    def test_collects_marked_methods_only(self, config):
        decls = InMemoryDeclarations([
            _marker_type(),
            _owner(_method("bar"), _method("helper", marked=False)),
        ])
        requests = SubstitutionProcessor(config).collect(decls)

        assert [r.method_name for r in requests] == ["bar"]

    def test_unmarked_class_ignored(self, config):
        decls = InMemoryDeclarations([_marker_type(), _owner(_method("bar"), marked=False)])
        assert SubstitutionProcessor(config).collect(decls) == []

    def test_request_fields(self, config):
        decls = InMemoryDeclarations([
            _marker_type(),
            _owner(_method("baz", receiver=True, params=("int", "int"), returns="int")),
        ])
        (request,) = SubstitutionProcessor(config).collect(decls)

        assert request.owner == "com.example.Foo"
        assert request.method_name == "baz"
        assert request.parameter_types == ("int", "int")
        assert request.has_receiver is True
        assert request.is_void is False
        assert request.origin == "Foo.java:10"

    def test_void_detection_is_textual(self, config):
        decls = InMemoryDeclarations([
            _marker_type(),
            _owner(_method("a", returns="void"), _method("b", returns="Void")),
        ])
        requests = SubstitutionProcessor(config).collect(decls)
        assert [r.is_void for r in requests] == [True, False]

    def test_type_parameter_source(self):
        config = GeneratorConfig(parameter_source=ParameterSource.TYPE_PARAMETERS)
        decls = InMemoryDeclarations([
            _marker_type(),
            _owner(_method("gen", params=("T", "java.util.List<U>"), type_params=("T", "U"))),
        ])
        (request,) = SubstitutionProcessor(config).collect(decls)
        assert request.parameter_types == ("T", "U")

    def test_nested_class_discovered(self, config):
        inner = _owner(_method("run"), name="Inner", pkg="com.example")
        inner = TypeElement(
            kind=ElementKind.CLASS,
            simple_name="Inner",
            annotations=inner.annotations,
            qualified_name="com.example.Outer.Inner",
            package="com.example",
            enclosed=inner.enclosed,
        )
        outer = _owner(inner, name="Outer", marked=False)
        (request,) = SubstitutionProcessor(config).collect(InMemoryDeclarations([_marker_type(), outer]))

        assert request.owner == "com.example.Outer.Inner"
        assert request.class_name == "Inner_run"

    def test_unresolvable_receiver_skipped(self):
        """No attribute written, no default anywhere → skipped, reported, no exception."""
        processor = SubstitutionProcessor(GeneratorConfig())
        requests = processor.collect(InMemoryDeclarations([_owner(_method("bar"))]))

        assert requests == []
        (skipped,) = processor.report.skipped
        assert skipped.owner == "com.example.Foo"
        assert skipped.method_name == "bar"
        assert "hasReceiver" in skipped.reason
        assert processor.report.warnings

    def test_class_marker_on_interface_asserts(self, config):
        decls = InMemoryDeclarations([_owner(_method("bar"), kind=ElementKind.INTERFACE)])
        with pytest.raises(AssertionError):
            SubstitutionProcessor(config).collect(decls)

    def test_method_marker_on_field_asserts(self, config):
        field_element = VariableElement(
            kind=ElementKind.FIELD,
            simple_name="x",
            annotations=(AnnotationMirror(METHOD_MARKER),),
            type="int",
        )
        decls = InMemoryDeclarations([_marker_type(), _owner(field_element)])
        with pytest.raises(AssertionError):
            SubstitutionProcessor(config).collect(decls)


# ═══════════════════════════════════════════════════════════════════
#  Rounds and emission
# ═══════════════════════════════════════════════════════════════════


class TestProcess:
    def test_process_emits_files(self, config, tmp_path: Path):
        decls = InMemoryDeclarations([_marker_type(), _owner(_method("bar"), _method("baz", receiver=True))])
        processor = SubstitutionProcessor(config, filer=Filer(tmp_path))

        claimed = processor.process(RoundEnvironment(declarations=decls))

        assert claimed is False
        out = tmp_path / "com" / "oracle" / "truffle" / "espresso" / "substitutions"
        assert (out / "Foo_bar.java").is_file()
        assert (out / "Foo_baz.java").is_file()
        assert [u.class_name for u in processor.report.generated] == ["Foo_bar", "Foo_baz"]

    def test_final_round_does_nothing(self, config, tmp_path: Path):
        decls = InMemoryDeclarations([_marker_type(), _owner(_method("bar"))])
        processor = SubstitutionProcessor(config, filer=Filer(tmp_path))

        assert processor.process(RoundEnvironment(declarations=decls, processing_over=True)) is False
        assert processor.report.rounds == 0
        assert processor.report.generated == []
        assert not any(tmp_path.iterdir())

    def test_skipped_member_emits_nothing(self, tmp_path: Path):
        processor = SubstitutionProcessor(GeneratorConfig(), filer=Filer(tmp_path))
        processor.process(RoundEnvironment(declarations=InMemoryDeclarations([_owner(_method("bar"))])))

        assert processor.report.generated == []
        assert not any(tmp_path.rglob("*.java"))

    def test_overload_collision_first_wins(self, config, tmp_path: Path):
        decls = InMemoryDeclarations([
            _marker_type(),
            _owner(_method("bar"), _method("bar", params=("int",))),
        ])
        processor = SubstitutionProcessor(config, filer=Filer(tmp_path))
        processor.process(RoundEnvironment(declarations=decls))

        assert len(processor.report.generated) == 1
        (failure,) = processor.report.failed
        assert failure.qualified_name.endswith(".Foo_bar")
        written = next(tmp_path.rglob("Foo_bar.java")).read_text()
        assert "Foo.bar();" in written

    def test_io_failure_is_reported_not_raised(self, config, tmp_path: Path):
        blocker = tmp_path / "out"
        blocker.write_text("not a directory")
        decls = InMemoryDeclarations([_marker_type(), _owner(_method("bar"), _method("qux"))])
        processor = SubstitutionProcessor(config, filer=Filer(blocker))

        processor.process(RoundEnvironment(declarations=decls))

        assert processor.report.generated == []
        assert len(processor.report.failed) == 2

    def test_without_filer_renders_only(self, config):
        decls = InMemoryDeclarations([_marker_type(), _owner(_method("bar"))])
        processor = SubstitutionProcessor(config)
        processor.process(RoundEnvironment(declarations=decls))
        assert [u.class_name for u in processor.report.generated] == ["Foo_bar"]

    def test_supported_annotation_types(self, config):
        assert SubstitutionProcessor(config).supported_annotation_types() == {CLASS_MARKER}

    def test_report_to_dict(self, config):
        decls = InMemoryDeclarations([_marker_type(), _owner(_method("bar"))])
        processor = SubstitutionProcessor(config)
        processor.process(RoundEnvironment(declarations=decls))
        data = processor.report.to_dict()

        assert data["rounds"] == 1
        assert data["requests"] == 1
        assert data["generated"] == ["com.oracle.truffle.espresso.substitutions.Foo_bar"]
        assert data["skipped"] == []
