"""
Front ends — turn sources into the declaration model.

    from subgen.core.frontend import JavaSourceModel, InMemoryDeclarations
"""

from subgen.core.frontend.base import DeclarationSource, InMemoryDeclarations, walk_types
from subgen.core.frontend.java_source import CompilationUnit, JavaSourceModel

__all__ = [
    "CompilationUnit",
    "DeclarationSource",
    "InMemoryDeclarations",
    "JavaSourceModel",
    "walk_types",
]
