"""
Declaration source — the narrow interface between a front end and the processor.

The processor never touches a parse tree.  It asks a declaration source
for two things only:

    annotated_types(marker)   every type element carrying ``marker``
    annotation_type(name)     an annotation type declaration, if known

Members, parameter types, return types and annotation values are read
off the returned elements.  ``InMemoryDeclarations`` backs tests and
callers that build the model by hand.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Protocol, runtime_checkable

from subgen.core.models.declarations import AnnotationTypeElement, TypeElement


@runtime_checkable
class DeclarationSource(Protocol):
    """Read-only view of the declarations visible to a round."""

    def annotated_types(self, marker: str) -> list[TypeElement]:
        ...

    def annotation_type(self, qualified_name: str) -> AnnotationTypeElement | None:
        ...


def walk_types(types: Iterable[TypeElement]) -> Iterator[TypeElement]:
    """Yield every type element, nested ones included, in declaration order."""
    for element in types:
        yield element
        yield from walk_types(element.nested_types())


class InMemoryDeclarations:
    """A declaration source over an explicit list of top-level types."""

    def __init__(self, types: Iterable[TypeElement] = ()) -> None:
        self._types = list(types)

    @property
    def types(self) -> list[TypeElement]:
        return list(self._types)

    def annotated_types(self, marker: str) -> list[TypeElement]:
        return [t for t in walk_types(self._types) if t.get_annotation(marker) is not None]

    def annotation_type(self, qualified_name: str) -> AnnotationTypeElement | None:
        for element in walk_types(self._types):
            if isinstance(element, AnnotationTypeElement) and element.qualified_name == qualified_name:
                return element
        return None
