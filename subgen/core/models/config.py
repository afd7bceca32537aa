"""
Generator configuration model — loaded from substitutions.yml.

Every key is optional.  Marker and runtime type names default to the
Espresso substitution package, so an empty file (or no file) gives the
stock Espresso layout.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, model_validator

DEFAULT_SUBSTITUTION_PACKAGE = "com.oracle.truffle.espresso.substitutions"
DEFAULT_RECEIVER_TYPE = "com.oracle.truffle.espresso.runtime.StaticObject"


class ParameterSource(str, Enum):
    """Where extraction reads the substituted call's parameter types from."""

    VALUE = "value"                      # declared value-parameter types
    TYPE_PARAMETERS = "type_parameters"  # generic type-parameter names


class GeneratorConfig(BaseModel):
    """Configuration for one generator run.

    Paths are kept as written; they are resolved against the config
    file's directory by the use cases.
    """

    source_roots: list[str] = Field(default_factory=lambda: ["src"])
    output_dir: str = "build/generated/sources/substitutions"

    substitution_package: str = DEFAULT_SUBSTITUTION_PACKAGE
    class_marker: str = ""
    method_marker: str = ""
    receiver_attribute: str = "hasReceiver"
    receiver_default: bool | None = None

    receiver_type: str = DEFAULT_RECEIVER_TYPE
    substitutor_type: str = ""

    parameter_source: ParameterSource = ParameterSource.VALUE
    license_header_file: str | None = None
    manifest: bool = True

    @model_validator(mode="after")
    def _derive_package_names(self) -> GeneratorConfig:
        # An empty package means the default package: bare type names
        prefix = f"{self.substitution_package}." if self.substitution_package else ""
        if not self.class_marker:
            self.class_marker = f"{prefix}EspressoSubstitutions"
        if not self.method_marker:
            self.method_marker = f"{prefix}Substitution"
        if not self.substitutor_type:
            self.substitutor_type = f"{prefix}Substitutor"
        return self

    @property
    def runtime_imports(self) -> list[str]:
        """Fixed imports every generated unit carries."""
        return [self.receiver_type, self.substitutor_type]
