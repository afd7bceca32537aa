"""
Generated unit model — produced by rendering, consumed by emission.
"""

from __future__ import annotations

from pydantic import BaseModel


class GeneratedUnit(BaseModel):
    """One compilation unit produced by the substitutor generator.

    Attributes:
        class_name:     Simple name of the generated class.
        qualified_name: Fully-qualified name inside the substitution package.
        content:        Full source text.
        owner:          Qualified name of the class holding the substituted method.
        method_name:    Name of the substituted method.
        origin:         ``path:line`` of the originating method, if known.
    """

    class_name: str
    qualified_name: str
    content: str
    owner: str = ""
    method_name: str = ""
    origin: str = ""

    @property
    def relative_path(self) -> str:
        """Path of the source file relative to the output root."""
        return self.qualified_name.replace(".", "/") + ".java"
