"""
Substitution request model — one per annotated substitution method.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


def substitutor_class_name(class_name: str, method_name: str) -> str:
    """Name of the generated class: ``<OwningClass>_<methodName>``."""
    return f"{class_name}_{method_name}"


class SubstitutionRequest(BaseModel):
    """Everything rendering needs to know about one substitution.

    Attributes:
        owner:           Fully-qualified name of the owning class.
        method_name:     Name of the substituted static method.
        parameter_types: Declared parameter types, in order.
        has_receiver:    Whether ``args[0]`` is a receiver prepended to the call.
        is_void:         Whether the method returns ``void``.
        origin:          ``path:line`` of the method, for traceability.
    """

    model_config = ConfigDict(frozen=True)

    owner: str
    method_name: str
    parameter_types: tuple[str, ...] = ()
    has_receiver: bool = False
    is_void: bool = False
    origin: str = ""

    @property
    def owner_simple_name(self) -> str:
        return self.owner.rsplit(".", 1)[-1]

    @property
    def class_name(self) -> str:
        return substitutor_class_name(self.owner_simple_name, self.method_name)

    @property
    def argument_count(self) -> int:
        """Number of ``argN`` locals bound in ``invoke``."""
        return len(self.parameter_types) + (1 if self.has_receiver else 0)
