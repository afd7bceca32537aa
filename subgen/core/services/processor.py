"""
Substitution processor — discovery, extraction and the round loop.

    Discovery   classes carrying the class marker, and their members
                carrying the method marker
    Extraction  method → SubstitutionRequest (receiver flag resolved
                with annotation defaults)
    Rendering   generators.substitutor
    Emission    Filer

Nothing here raises for bad input.  Members whose receiver flag cannot
be resolved are skipped; units the filer rejects are dropped.  Both are
logged and recorded in the ``ProcessorReport``.  A class marker on a
non-class, or a method marker on a non-method, is a programming error
and trips an assertion.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field

from subgen.core.frontend.base import DeclarationSource
from subgen.core.models.config import GeneratorConfig, ParameterSource
from subgen.core.models.declarations import (
    AnnotationMirror,
    AnnotationValue,
    ElementKind,
    ExecutableElement,
    TypeElement,
)
from subgen.core.models.substitution import SubstitutionRequest
from subgen.core.models.template import GeneratedUnit
from subgen.core.services.filer import Filer
from subgen.core.services.generators.substitutor import LICENSE_HEADER, render_substitutor

logger = logging.getLogger(__name__)

VOID = "void"


# ── Context ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class ProcessorContext:
    """Resolved marker handles, built once per run.

    Attributes:
        class_marker:       Qualified name of the container annotation.
        method_marker:      Qualified name of the per-method annotation.
        receiver_attribute: Boolean attribute on the method marker.
        receiver_declared:  False when the method marker type is known and
                            lacks the attribute; every member is then skipped.
        receiver_default:   Value used when the attribute is not written.
        parameter_source:   Which parameter list extraction reads.
    """

    class_marker: str
    method_marker: str
    receiver_attribute: str = "hasReceiver"
    receiver_declared: bool = True
    receiver_default: bool | None = None
    parameter_source: ParameterSource = ParameterSource.VALUE

    @classmethod
    def create(cls, config: GeneratorConfig, declarations: DeclarationSource) -> ProcessorContext:
        """Resolve the method marker's receiver attribute against the sources.

        If the marker type is declared in the sources its attribute
        default wins; otherwise ``config.receiver_default`` is used.
        """
        declared = True
        default: bool | None = config.receiver_default

        marker_type = declarations.annotation_type(config.method_marker)
        if marker_type is not None:
            attribute = marker_type.get_attribute(config.receiver_attribute)
            declared = attribute is not None
            default = attribute.default if attribute is not None and isinstance(attribute.default, bool) else None
            if not declared:
                logger.warning(
                    "@%s declares no '%s' attribute — no substitutions can be generated",
                    marker_type.simple_name,
                    config.receiver_attribute,
                )

        return cls(
            class_marker=config.class_marker,
            method_marker=config.method_marker,
            receiver_attribute=config.receiver_attribute,
            receiver_declared=declared,
            receiver_default=default,
            parameter_source=config.parameter_source,
        )

    def element_values_with_defaults(self, mirror: AnnotationMirror) -> dict[str, AnnotationValue]:
        """Explicit values of ``mirror`` plus the receiver default, if any."""
        values: dict[str, AnnotationValue] = {}
        if self.receiver_declared and self.receiver_default is not None:
            values[self.receiver_attribute] = self.receiver_default
        values.update(mirror.values)
        return values

    def resolve_receiver(self, mirror: AnnotationMirror) -> bool | None:
        """The receiver flag for ``mirror``, or None when it cannot be resolved."""
        if not self.receiver_declared:
            return None
        value = self.element_values_with_defaults(mirror).get(self.receiver_attribute)
        return value if isinstance(value, bool) else None


# ── Rounds and reports ──────────────────────────────────────────


@dataclass
class RoundEnvironment:
    """Declarations visible to one round."""

    declarations: DeclarationSource
    processing_over: bool = False


@dataclass
class SkippedMember:
    """A method carrying the method marker that produced no request."""

    owner: str
    method_name: str
    reason: str
    origin: str = ""

    def to_dict(self) -> dict:
        return {
            "owner": self.owner,
            "method": self.method_name,
            "reason": self.reason,
            "origin": self.origin,
        }


@dataclass
class EmissionFailure:
    """A rendered unit the filer did not accept."""

    qualified_name: str
    error: str
    origin: str = ""

    def to_dict(self) -> dict:
        return {
            "qualified_name": self.qualified_name,
            "error": self.error,
            "origin": self.origin,
        }


@dataclass
class ProcessorReport:
    """Everything that happened across the rounds of one run."""

    requests: list[SubstitutionRequest] = field(default_factory=list)
    generated: list[GeneratedUnit] = field(default_factory=list)
    skipped: list[SkippedMember] = field(default_factory=list)
    failed: list[EmissionFailure] = field(default_factory=list)
    rounds: int = 0

    @property
    def warnings(self) -> list[str]:
        messages = [
            f"{s.owner}.{s.method_name}: {s.reason}" + (f" ({s.origin})" if s.origin else "")
            for s in self.skipped
        ]
        messages.extend(f"{f.qualified_name}: {f.error}" for f in self.failed)
        return messages

    def to_dict(self) -> dict:
        return {
            "rounds": self.rounds,
            "requests": len(self.requests),
            "generated": [u.qualified_name for u in self.generated],
            "skipped": [s.to_dict() for s in self.skipped],
            "failed": [f.to_dict() for f in self.failed],
        }


# ── Processor ───────────────────────────────────────────────────


class SubstitutionProcessor:
    """Generates one substitutor per ``@Substitution`` method.

    Args:
        config:         Marker names, packages and runtime types.
        filer:          Where units go.  None renders without emitting.
        context:        Pre-resolved marker handles.  Built from the first
                        round's declarations when omitted.
        license_header: Comment block for every generated unit.
    """

    def __init__(
        self,
        config: GeneratorConfig,
        filer: Filer | None = None,
        context: ProcessorContext | None = None,
        license_header: str = LICENSE_HEADER,
    ) -> None:
        self.config = config
        self.filer = filer
        self.context = context
        self.license_header = license_header
        self.report = ProcessorReport()

    def supported_annotation_types(self) -> set[str]:
        return {self.config.class_marker}

    # ── Round entry point ───────────────────────────────────────

    def process(self, round_env: RoundEnvironment) -> bool:
        """Run one round.  Never claims the markers, so always returns False."""
        if round_env.processing_over:
            return False

        self.report.rounds += 1
        context = self._context_for(round_env.declarations)

        for request in self.collect(round_env.declarations, context):
            unit = render_substitutor(request, self.config, self.license_header)
            if self._emit(unit):
                self.report.generated.append(unit)
        return False

    # ── Discovery / extraction ──────────────────────────────────

    def collect(
        self,
        declarations: DeclarationSource,
        context: ProcessorContext | None = None,
    ) -> list[SubstitutionRequest]:
        """Discover and extract every request, recording skips in the report."""
        context = context or self._context_for(declarations)
        requests: list[SubstitutionRequest] = []
        for owner, method, mirror in self.discover(declarations, context):
            request = self.extract(owner, method, mirror, context)
            if request is not None:
                requests.append(request)
        self.report.requests.extend(requests)
        return requests

    def discover(
        self,
        declarations: DeclarationSource,
        context: ProcessorContext,
    ) -> Iterator[tuple[TypeElement, ExecutableElement, AnnotationMirror]]:
        """Yield ``(owner, method, method marker)`` for every annotated method."""
        for owner in declarations.annotated_types(context.class_marker):
            assert owner.kind == ElementKind.CLASS, (
                f"@{context.class_marker} on {owner.kind.value} {owner.qualified_name}"
            )
            for member in owner.enclosed:
                mirror = member.get_annotation(context.method_marker)
                if mirror is None:
                    continue
                assert member.kind == ElementKind.METHOD and isinstance(member, ExecutableElement), (
                    f"@{context.method_marker} on {member.kind.value} {owner.qualified_name}.{member.simple_name}"
                )
                yield owner, member, mirror

    def extract(
        self,
        owner: TypeElement,
        method: ExecutableElement,
        mirror: AnnotationMirror,
        context: ProcessorContext,
    ) -> SubstitutionRequest | None:
        """Build the request for one method, or None if its marker is incomplete."""
        origin = str(method.position) if method.position else ""
        has_receiver = context.resolve_receiver(mirror)
        if has_receiver is None:
            reason = f"no resolvable boolean '{context.receiver_attribute}' on @{mirror.simple_name}"
            logger.warning("Skipping %s.%s: %s", owner.qualified_name, method.simple_name, reason)
            self.report.skipped.append(
                SkippedMember(
                    owner=owner.qualified_name,
                    method_name=method.simple_name,
                    reason=reason,
                    origin=origin,
                )
            )
            return None

        if context.parameter_source == ParameterSource.TYPE_PARAMETERS:
            parameter_types = method.type_parameters
        else:
            parameter_types = method.parameter_types

        return SubstitutionRequest(
            owner=owner.qualified_name,
            method_name=method.simple_name,
            parameter_types=parameter_types,
            has_receiver=has_receiver,
            is_void=method.return_type == VOID,
            origin=origin,
        )

    # ── Internals ───────────────────────────────────────────────

    def _context_for(self, declarations: DeclarationSource) -> ProcessorContext:
        if self.context is None:
            self.context = ProcessorContext.create(self.config, declarations)
        return self.context

    def _emit(self, unit: GeneratedUnit) -> bool:
        if self.filer is None:
            return True
        try:
            self.filer.create_source_file(unit)
        except OSError as e:
            logger.warning("Could not emit %s: %s", unit.qualified_name, e)
            self.report.failed.append(
                EmissionFailure(qualified_name=unit.qualified_name, error=str(e), origin=unit.origin)
            )
            return False
        return True
