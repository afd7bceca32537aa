"""
Declaration model — the read-only view of Java sources the processor sees.

Produced by a front end (see ``subgen.core.frontend``) and consumed by
discovery and extraction.  Mirrors the small slice of a compiler's
element model the generator needs: element kinds, annotation mirrors
with their explicit values, and the textual form of types.

All types are frozen; sequences are tuples.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ElementKind(str, Enum):
    """Kind of a declared element."""

    CLASS = "class"
    INTERFACE = "interface"
    ENUM = "enum"
    RECORD = "record"
    ANNOTATION_TYPE = "annotation_type"
    METHOD = "method"
    CONSTRUCTOR = "constructor"
    FIELD = "field"

    @property
    def is_type(self) -> bool:
        return self in _TYPE_KINDS


_TYPE_KINDS = frozenset({
    ElementKind.CLASS,
    ElementKind.INTERFACE,
    ElementKind.ENUM,
    ElementKind.RECORD,
    ElementKind.ANNOTATION_TYPE,
})

# Attribute values as found in source.  Literals become bool/int/str;
# anything else is kept as raw expression text (a str).
AnnotationValue = bool | int | str


@dataclass(frozen=True)
class SourcePosition:
    """Where an element was declared."""

    path: str
    line: int

    def __str__(self) -> str:
        return f"{self.path}:{self.line}"


@dataclass(frozen=True)
class AnnotationMirror:
    """An annotation as applied to an element.

    Attributes:
        annotation_type: Resolved qualified name of the annotation type.
        values:          Explicitly written attribute values only.
                         Defaults are resolved by the processor.
    """

    annotation_type: str
    values: dict[str, AnnotationValue] = field(default_factory=dict)

    @property
    def simple_name(self) -> str:
        return self.annotation_type.rsplit(".", 1)[-1]


@dataclass(frozen=True)
class Element:
    """Base for every declared element."""

    kind: ElementKind
    simple_name: str
    annotations: tuple[AnnotationMirror, ...] = ()
    position: SourcePosition | None = None

    def get_annotation(self, annotation_type: str) -> AnnotationMirror | None:
        """Return the mirror for ``annotation_type``, or None."""
        for mirror in self.annotations:
            if mirror.annotation_type == annotation_type:
                return mirror
        return None


@dataclass(frozen=True)
class ExecutableElement(Element):
    """A method or constructor."""

    return_type: str = "void"
    parameter_types: tuple[str, ...] = ()
    type_parameters: tuple[str, ...] = ()


@dataclass(frozen=True)
class VariableElement(Element):
    """A field (one per declarator)."""

    type: str = ""


@dataclass(frozen=True)
class TypeElement(Element):
    """A class, interface, enum, record or annotation type."""

    qualified_name: str = ""
    package: str = ""
    enclosed: tuple[Element, ...] = ()

    def nested_types(self) -> list[TypeElement]:
        return [e for e in self.enclosed if isinstance(e, TypeElement)]


@dataclass(frozen=True)
class AnnotationAttribute:
    """One attribute declared on an annotation type (``boolean x() default y;``)."""

    name: str
    type: str
    default: AnnotationValue | None = None


@dataclass(frozen=True)
class AnnotationTypeElement(TypeElement):
    """An ``@interface`` declaration with its attribute declarations."""

    attributes: tuple[AnnotationAttribute, ...] = ()

    def get_attribute(self, name: str) -> AnnotationAttribute | None:
        for attr in self.attributes:
            if attr.name == name:
                return attr
        return None
