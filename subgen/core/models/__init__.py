"""
Domain models — declarations, requests, generated units, configuration.

All models are re-exported here for convenient access:

    from subgen.core.models import SubstitutionRequest, GeneratedUnit, GeneratorConfig
"""

from subgen.core.models.config import GeneratorConfig, ParameterSource
from subgen.core.models.declarations import (
    AnnotationAttribute,
    AnnotationMirror,
    AnnotationTypeElement,
    Element,
    ElementKind,
    ExecutableElement,
    SourcePosition,
    TypeElement,
    VariableElement,
)
from subgen.core.models.substitution import SubstitutionRequest, substitutor_class_name
from subgen.core.models.template import GeneratedUnit

__all__ = [
    # config.py
    "GeneratorConfig",
    "ParameterSource",
    # declarations.py
    "AnnotationAttribute",
    "AnnotationMirror",
    "AnnotationTypeElement",
    "Element",
    "ElementKind",
    "ExecutableElement",
    "SourcePosition",
    "TypeElement",
    "VariableElement",
    # substitution.py
    "SubstitutionRequest",
    "substitutor_class_name",
    # template.py
    "GeneratedUnit",
]
